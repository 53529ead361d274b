"""Tests for watchlist and price alerts."""

from decimal import Decimal

import pytest

from simtrader.errors import Conflict, InstrumentNotFound, NotFound
from simtrader.models import AlertType
from simtrader.services import market, watchlist


class TestWatchlistService:

    @pytest.mark.asyncio
    async def test_add_and_list(self, test_session, trader_account, stock, stock_no_sector):
        account, _ = trader_account
        await watchlist.add_to_watchlist(test_session, account.id, stock.id, notes="long term")
        await watchlist.add_to_watchlist(test_session, account.id, stock_no_sector.id)

        entries = await watchlist.get_watchlist(test_session, account.id)
        assert [e.symbol for e in entries] == ["MISC", "TECH"]
        assert entries[1].item.notes == "long term"
        assert entries[1].current_price == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_already_watched(self, test_session, trader_account, stock):
        account, _ = trader_account
        await watchlist.add_to_watchlist(test_session, account.id, stock.id)
        with pytest.raises(Conflict):
            await watchlist.add_to_watchlist(test_session, account.id, stock.id)

    @pytest.mark.asyncio
    async def test_unknown_stock(self, test_session, trader_account):
        account, _ = trader_account
        with pytest.raises(InstrumentNotFound):
            await watchlist.add_to_watchlist(test_session, account.id, 999)

    @pytest.mark.asyncio
    async def test_remove(self, test_session, trader_account, stock):
        account, _ = trader_account
        await watchlist.add_to_watchlist(test_session, account.id, stock.id)
        await watchlist.remove_from_watchlist(test_session, account.id, stock.id)
        assert await watchlist.get_watchlist(test_session, account.id) == []

        with pytest.raises(NotFound):
            await watchlist.remove_from_watchlist(test_session, account.id, stock.id)


class TestAlertService:

    @pytest.mark.asyncio
    async def test_price_update_triggers_matching_alerts(
        self, test_session, trader_account, stock
    ):
        account, _ = trader_account
        above = await watchlist.create_alert(
            test_session, account.id, stock.id, AlertType.PRICE_ABOVE, Decimal("110.00")
        )
        below = await watchlist.create_alert(
            test_session, account.id, stock.id, AlertType.PRICE_BELOW, Decimal("90.00")
        )

        _, triggered = await market.update_stock_price(test_session, stock.id, Decimal("110.00"))
        assert [a.id for a in triggered] == [above.id]

        await test_session.refresh(above)
        await test_session.refresh(below)
        assert above.is_triggered is True
        assert above.triggered_at is not None
        assert above.is_active is False
        assert below.is_active is True

    @pytest.mark.asyncio
    async def test_triggered_alert_fires_once(self, test_session, trader_account, stock):
        account, _ = trader_account
        await watchlist.create_alert(
            test_session, account.id, stock.id, AlertType.PRICE_BELOW, Decimal("95.00")
        )
        _, first = await market.update_stock_price(test_session, stock.id, Decimal("94.00"))
        _, second = await market.update_stock_price(test_session, stock.id, Decimal("93.00"))
        assert len(first) == 1
        assert second == []

    @pytest.mark.asyncio
    async def test_toggle(self, test_session, trader_account, stock):
        account, _ = trader_account
        alert = await watchlist.create_alert(
            test_session, account.id, stock.id, AlertType.PRICE_ABOVE, Decimal("200.00")
        )
        alert = await watchlist.toggle_alert(test_session, account.id, alert.id)
        assert alert.is_active is False
        alert = await watchlist.toggle_alert(test_session, account.id, alert.id)
        assert alert.is_active is True
        assert alert.triggered_at is None

    @pytest.mark.asyncio
    async def test_other_accounts_alert_not_found(
        self, test_session, trader_account, account_factory, stock
    ):
        account, _ = trader_account
        other, _ = await account_factory("trader2")
        alert = await watchlist.create_alert(
            test_session, account.id, stock.id, AlertType.PRICE_ABOVE, Decimal("200.00")
        )
        with pytest.raises(NotFound):
            await watchlist.delete_alert(test_session, other.id, alert.id)
        with pytest.raises(NotFound):
            await watchlist.toggle_alert(test_session, other.id, alert.id)


class TestWatchlistApi:

    @pytest.mark.asyncio
    async def test_watchlist_flow(self, test_client, auth_headers, stock):
        response = await test_client.post(
            "/api/v1/watchlist",
            headers=auth_headers,
            json={"stock_id": stock.id, "alert_price_high": "120.00"},
        )
        assert response.status_code == 201

        response = await test_client.post(
            "/api/v1/watchlist", headers=auth_headers, json={"stock_id": stock.id}
        )
        assert response.status_code == 409

        response = await test_client.get("/api/v1/watchlist", headers=auth_headers)
        items = response.json()["items"]
        assert len(items) == 1
        assert items[0]["symbol"] == "TECH"
        assert Decimal(items[0]["alert_price_high"]) == Decimal("120.00")

        response = await test_client.delete(
            f"/api/v1/watchlist/{stock.id}", headers=auth_headers
        )
        assert response.status_code == 200
        response = await test_client.delete(
            f"/api/v1/watchlist/{stock.id}", headers=auth_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_add_unknown_stock(self, test_client, auth_headers):
        response = await test_client.post(
            "/api/v1/watchlist", headers=auth_headers, json={"stock_id": 999}
        )
        assert response.status_code == 404


class TestAlertApi:

    @pytest.mark.asyncio
    async def test_alert_flow(self, test_client, auth_headers, stock):
        response = await test_client.post(
            "/api/v1/alerts",
            headers=auth_headers,
            json={
                "stock_id": stock.id,
                "alert_type": "PRICE_ABOVE",
                "target_value": "101.00",
                "message": "breakout",
            },
        )
        assert response.status_code == 201
        alert_id = response.json()["id"]
        assert response.json()["is_active"] is True

        await test_client.put(f"/admin/stocks/{stock.id}/price", json={"price": "102.00"})

        response = await test_client.get("/api/v1/alerts", headers=auth_headers)
        alerts = response.json()["alerts"]
        assert alerts[0]["id"] == alert_id
        assert alerts[0]["is_triggered"] is True
        assert Decimal(alerts[0]["current_price"]) == Decimal("102.00")

        response = await test_client.post(
            f"/api/v1/alerts/{alert_id}/toggle", headers=auth_headers
        )
        assert response.json()["is_active"] is True

        response = await test_client.delete(f"/api/v1/alerts/{alert_id}", headers=auth_headers)
        assert response.status_code == 200
        response = await test_client.delete(f"/api/v1/alerts/{alert_id}", headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_target(self, test_client, auth_headers, stock):
        response = await test_client.post(
            "/api/v1/alerts",
            headers=auth_headers,
            json={"stock_id": stock.id, "alert_type": "PRICE_ABOVE", "target_value": "0"},
        )
        assert response.status_code == 422
