"""Tests for public market data and admin endpoints."""

from decimal import Decimal

import pytest

from simtrader.errors import InvalidStockPrice
from simtrader.services import market


class TestStocks:
    """Tests for GET /api/v1/stocks and /api/v1/stocks/{symbol}."""

    @pytest.mark.asyncio
    async def test_list_empty(self, test_client):
        response = await test_client.get("/api/v1/stocks")
        assert response.status_code == 200
        assert response.json() == {"stocks": []}

    @pytest.mark.asyncio
    async def test_list_ordered_by_symbol(self, test_client, stock, stock_no_sector):
        response = await test_client.get("/api/v1/stocks")
        stocks = response.json()["stocks"]
        assert [s["symbol"] for s in stocks] == ["MISC", "TECH"]
        assert stocks[0]["sector_name"] is None
        assert stocks[1]["sector_name"] == "Technology"

    @pytest.mark.asyncio
    async def test_get_by_symbol_case_insensitive(self, test_client, stock):
        response = await test_client.get("/api/v1/stocks/tech")
        assert response.status_code == 200
        data = response.json()
        assert data["symbol"] == "TECH"
        assert Decimal(data["current_price"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_unknown_symbol(self, test_client):
        response = await test_client.get("/api/v1/stocks/NOPE")
        assert response.status_code == 404
        assert "NOPE" in response.json()["detail"]


class TestSectors:

    @pytest.mark.asyncio
    async def test_create_and_list(self, test_client):
        for name in ("Energy", "Consumer"):
            response = await test_client.post("/admin/sectors", json={"name": name})
            assert response.status_code == 201

        response = await test_client.get("/api/v1/sectors")
        assert [s["name"] for s in response.json()["sectors"]] == ["Consumer", "Energy"]

    @pytest.mark.asyncio
    async def test_duplicate_sector(self, test_client, sector):
        response = await test_client.post("/admin/sectors", json={"name": "Technology"})
        assert response.status_code == 409


class TestAdminStocks:

    @pytest.mark.asyncio
    async def test_create_stock(self, test_client, sector):
        response = await test_client.post(
            "/admin/stocks",
            json={
                "symbol": "new",
                "company_name": "New Co",
                "sector_id": sector.id,
                "current_price": "12.34",
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["symbol"] == "NEW"
        assert data["sector_id"] == sector.id

    @pytest.mark.asyncio
    async def test_duplicate_symbol(self, test_client, stock):
        response = await test_client.post(
            "/admin/stocks",
            json={"symbol": "TECH", "company_name": "Again", "current_price": "1.00"},
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_unknown_sector(self, test_client):
        response = await test_client.post(
            "/admin/stocks",
            json={"symbol": "X", "company_name": "X", "sector_id": 42, "current_price": "1.00"},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_non_positive_price(self, test_client):
        response = await test_client.post(
            "/admin/stocks",
            json={"symbol": "X", "company_name": "X", "current_price": "0"},
        )
        assert response.status_code == 422


class TestPriceUpdate:
    """Tests for PUT /admin/stocks/{id}/price."""

    @pytest.mark.asyncio
    async def test_day_change(self, test_client, stock):
        response = await test_client.put(
            f"/admin/stocks/{stock.id}/price", json={"price": "105.50"}
        )
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["current_price"]) == Decimal("105.50")
        assert Decimal(data["day_change"]) == Decimal("5.50")
        assert Decimal(data["day_change_percent"]) == Decimal("5.50")
        assert data["alerts_triggered"] == 0

    @pytest.mark.asyncio
    async def test_unknown_stock(self, test_client):
        response = await test_client.put("/admin/stocks/999/price", json={"price": "1.00"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_sub_cent_price_rejected(self, test_client, stock):
        response = await test_client.put(
            f"/admin/stocks/{stock.id}/price", json={"price": "0.004"}
        )
        assert response.status_code == 422

        response = await test_client.get("/api/v1/stocks/TECH")
        assert Decimal(response.json()["current_price"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_service_rejects_price_rounding_to_zero(self, test_session, stock):
        with pytest.raises(InvalidStockPrice):
            await market.update_stock_price(test_session, stock.id, Decimal("0.004"))

        await test_session.refresh(stock)
        assert stock.current_price == Decimal("100.00")


class TestAccounts:
    """Tests for /admin/accounts."""

    @pytest.mark.asyncio
    async def test_create_account_default_balance(self, test_client):
        response = await test_client.post(
            "/admin/accounts",
            json={"account_id": "new1", "username": "newbie", "email": "new@example.com"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["api_key"].startswith("sk_")
        assert Decimal(data["cash_balance"]) == Decimal("10000.00")

        account = await test_client.get(
            "/api/v1/account", headers={"X-API-Key": data["api_key"]}
        )
        assert account.status_code == 200
        assert account.json()["username"] == "newbie"

    @pytest.mark.asyncio
    async def test_create_account_with_cash(self, test_client):
        response = await test_client.post(
            "/admin/accounts",
            json={
                "account_id": "rich",
                "username": "rich",
                "email": "rich@example.com",
                "initial_cash": "250000.00",
                "risk_tolerance": "Aggressive",
            },
        )
        assert Decimal(response.json()["cash_balance"]) == Decimal("250000.00")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"account_id": "trader1", "username": "other", "email": "other@example.com"},
            {"account_id": "other", "username": "trader1", "email": "other@example.com"},
            {"account_id": "other", "username": "other", "email": "trader1@example.com"},
        ],
    )
    async def test_duplicates_conflict(self, test_client, trader_account, payload):
        response = await test_client.post("/admin/accounts", json=payload)
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_list_accounts(self, test_client, trader_account):
        response = await test_client.get("/admin/accounts")
        assert response.status_code == 200
        assert [a["account_id"] for a in response.json()] == ["trader1"]


class TestSampleData:

    @pytest.mark.asyncio
    async def test_load_once(self, test_client):
        response = await test_client.post("/admin/sample-data")
        assert response.status_code == 200
        assert response.json() == {"sectors_created": 5, "stocks_created": 5}

        response = await test_client.post("/admin/sample-data")
        assert response.json() == {"sectors_created": 0, "stocks_created": 0}

        stocks = (await test_client.get("/api/v1/stocks")).json()["stocks"]
        assert [s["symbol"] for s in stocks] == ["AAPL", "GOOGL", "JNJ", "JPM", "MSFT"]


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_version(self, test_client):
        response = await test_client.get("/api/version")
        assert response.json()["api_version"] == "v1"
