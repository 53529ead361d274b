"""Tests for portfolio API endpoints."""

from decimal import Decimal

import pytest


async def place_buy(client, headers, stock_id, quantity):
    response = await client.post(
        "/api/v1/orders",
        headers=headers,
        json={"stock_id": stock_id, "side": "BUY", "quantity": quantity},
    )
    assert response.status_code == 201
    return response.json()


class TestPortfolioHoldings:

    @pytest.mark.asyncio
    async def test_requires_auth(self, test_client):
        response = await test_client.get("/api/v1/portfolio")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_empty(self, test_client, auth_headers):
        response = await test_client.get("/api/v1/portfolio", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["holdings"] == []

    @pytest.mark.asyncio
    async def test_holdings_with_pnl(self, test_client, auth_headers, stock):
        await place_buy(test_client, auth_headers, stock.id, 10)
        await test_client.put(f"/admin/stocks/{stock.id}/price", json={"price": "125.00"})

        response = await test_client.get("/api/v1/portfolio", headers=auth_headers)
        holdings = response.json()["holdings"]
        assert len(holdings) == 1
        h = holdings[0]
        assert h["symbol"] == "TECH"
        assert h["sector_name"] == "Technology"
        assert h["quantity_owned"] == 10
        assert Decimal(h["current_value"]) == Decimal("1250.00")
        assert Decimal(h["unrealized_gain_loss"]) == Decimal("250.00")
        assert Decimal(h["unrealized_gain_loss_percent"]) == Decimal("25.00")

    @pytest.mark.asyncio
    async def test_single_holding(self, test_client, auth_headers, stock):
        response = await test_client.get(
            f"/api/v1/portfolio/holdings/{stock.id}", headers=auth_headers
        )
        assert response.status_code == 404

        await place_buy(test_client, auth_headers, stock.id, 2)
        response = await test_client.get(
            f"/api/v1/portfolio/holdings/{stock.id}", headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["quantity_owned"] == 2


class TestPortfolioSummary:

    @pytest.mark.asyncio
    async def test_zero_holdings(self, test_client, auth_headers):
        response = await test_client.get("/api/v1/portfolio/summary", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["holdings_count"] == 0
        assert Decimal(data["total_value"]) == 0
        assert Decimal(data["total_gain_loss_percent"]) == 0

    @pytest.mark.asyncio
    async def test_summary(self, test_client, auth_headers, stock):
        await place_buy(test_client, auth_headers, stock.id, 10)
        await test_client.put(f"/admin/stocks/{stock.id}/price", json={"price": "90.00"})

        response = await test_client.get("/api/v1/portfolio/summary", headers=auth_headers)
        data = response.json()
        assert data["holdings_count"] == 1
        assert Decimal(data["cash_balance"]) == Decimal("9000.00")
        assert Decimal(data["total_value"]) == Decimal("900.00")
        assert Decimal(data["total_invested"]) == Decimal("1000.00")
        assert Decimal(data["total_gain_loss"]) == Decimal("-100.00")
        assert Decimal(data["total_gain_loss_percent"]) == Decimal("-10.00")


class TestSectorAllocation:

    @pytest.mark.asyncio
    async def test_sector_allocation(self, test_client, auth_headers, stock, stock_no_sector):
        await place_buy(test_client, auth_headers, stock.id, 3)
        await place_buy(test_client, auth_headers, stock_no_sector.id, 3)

        response = await test_client.get(
            "/api/v1/portfolio/sector-allocation", headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["sector_name"] == "Technology"
        assert Decimal(data[0]["sector_value"]) == Decimal("300.00")
        assert data[0]["stock_count"] == 1
