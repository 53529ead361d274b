"""Tests for the portfolio service."""

from decimal import Decimal

import pytest
import pytest_asyncio

from simtrader.errors import AccountNotFound
from simtrader.models import OrderSide, OrderType, Sector, Stock
from simtrader.services import market, portfolio, trading


@pytest_asyncio.fixture
async def health_stock(test_session):
    """A Healthcare stock priced at 20.00."""
    sector = Sector(name="Healthcare")
    test_session.add(sector)
    await test_session.flush()
    stock = Stock(
        symbol="MED",
        company_name="Medical Co",
        sector_id=sector.id,
        current_price=Decimal("20.00"),
    )
    test_session.add(stock)
    await test_session.commit()
    await test_session.refresh(stock)
    return stock


async def buy(session, account_id, stock_id, quantity, price=None):
    return await trading.execute_order(
        session,
        account_id,
        stock_id,
        OrderSide.BUY,
        OrderType.LIMIT if price is not None else OrderType.MARKET,
        quantity,
        limit_price=price,
    )


class TestGetHoldingsWithPnL:
    """Tests for get_holdings_with_pnl."""

    @pytest.mark.asyncio
    async def test_empty_holdings(self, test_session, trader_account):
        """Returns empty list when no holdings."""
        account, _ = trader_account
        holdings = await portfolio.get_holdings_with_pnl(test_session, account.id)
        assert holdings == []

    @pytest.mark.asyncio
    async def test_holding_with_price_move(self, test_session, trader_account, stock):
        """P/L follows the stock's current price."""
        account, _ = trader_account
        await buy(test_session, account.id, stock.id, 50)
        await market.update_stock_price(test_session, stock.id, Decimal("120.00"))

        holdings = await portfolio.get_holdings_with_pnl(test_session, account.id)

        assert len(holdings) == 1
        h = holdings[0]
        assert h.symbol == "TECH"
        assert h.company_name == "Tech Corp"
        assert h.sector_name == "Technology"
        assert h.quantity_owned == 50
        assert h.total_invested == Decimal("5000.00")
        assert h.current_price == Decimal("120.00")
        assert h.current_value == Decimal("6000.00")  # 50 * 120
        assert h.unrealized_gain_loss == Decimal("1000.00")  # 6000 - 5000
        assert h.unrealized_gain_loss_percent == Decimal("20.00")  # 1000/5000 * 100

    @pytest.mark.asyncio
    async def test_ordered_by_total_invested(
        self, test_session, trader_account, stock, health_stock
    ):
        account, _ = trader_account
        await buy(test_session, account.id, health_stock.id, 10)  # 200.00
        await buy(test_session, account.id, stock.id, 5)  # 500.00

        holdings = await portfolio.get_holdings_with_pnl(test_session, account.id)
        assert [h.symbol for h in holdings] == ["TECH", "MED"]

    @pytest.mark.asyncio
    async def test_single_holding(self, test_session, trader_account, stock):
        account, _ = trader_account
        assert await portfolio.get_holding_with_pnl(test_session, account.id, stock.id) is None

        await buy(test_session, account.id, stock.id, 2)
        h = await portfolio.get_holding_with_pnl(test_session, account.id, stock.id)
        assert h.quantity_owned == 2
        assert h.current_value == Decimal("200.00")


class TestGetPortfolioSummary:
    """Tests for get_portfolio_summary."""

    @pytest.mark.asyncio
    async def test_account_not_found(self, test_session):
        with pytest.raises(AccountNotFound):
            await portfolio.get_portfolio_summary(test_session, "unknown")

    @pytest.mark.asyncio
    async def test_zero_holdings(self, test_session, trader_account):
        """An account without holdings gets zeros."""
        account, _ = trader_account
        summary = await portfolio.get_portfolio_summary(test_session, account.id)

        assert summary.account_id == account.id
        assert summary.cash_balance == Decimal("10000.00")
        assert summary.total_value == Decimal("0")
        assert summary.total_invested == Decimal("0")
        assert summary.total_gain_loss == Decimal("0")
        assert summary.total_gain_loss_percent == Decimal("0")
        assert summary.holdings_count == 0

    @pytest.mark.asyncio
    async def test_totals_across_holdings(
        self, test_session, trader_account, stock, health_stock
    ):
        account, _ = trader_account
        await buy(test_session, account.id, stock.id, 10)  # 1000.00
        await buy(test_session, account.id, health_stock.id, 50)  # 1000.00
        await market.update_stock_price(test_session, stock.id, Decimal("110.00"))
        await market.update_stock_price(test_session, health_stock.id, Decimal("19.00"))

        summary = await portfolio.get_portfolio_summary(test_session, account.id)

        assert summary.holdings_count == 2
        assert summary.cash_balance == Decimal("8000.00")
        assert summary.total_value == Decimal("2050.00")  # 1100 + 950
        assert summary.total_invested == Decimal("2000.00")
        assert summary.total_gain_loss == Decimal("50.00")
        assert summary.total_gain_loss_percent == Decimal("2.50")

    @pytest.mark.asyncio
    async def test_loss_percent_is_negative(self, test_session, trader_account, stock):
        account, _ = trader_account
        await buy(test_session, account.id, stock.id, 3)
        await market.update_stock_price(test_session, stock.id, Decimal("66.67"))

        summary = await portfolio.get_portfolio_summary(test_session, account.id)
        assert summary.total_value == Decimal("200.01")
        assert summary.total_gain_loss == Decimal("-99.99")
        assert summary.total_gain_loss_percent == Decimal("-33.33")


class TestGetSectorAllocation:
    """Tests for get_sector_allocation."""

    @pytest.mark.asyncio
    async def test_empty(self, test_session, trader_account):
        account, _ = trader_account
        assert await portfolio.get_sector_allocation(test_session, account.id) == []

    @pytest.mark.asyncio
    async def test_grouped_and_ordered_by_value(
        self, test_session, trader_account, stock, health_stock, sector
    ):
        account, _ = trader_account
        other_tech = Stock(
            symbol="SOFT",
            company_name="Soft Inc",
            sector_id=sector.id,
            current_price=Decimal("10.00"),
        )
        test_session.add(other_tech)
        await test_session.commit()
        await test_session.refresh(other_tech)

        await buy(test_session, account.id, stock.id, 5)  # 500.00 Technology
        await buy(test_session, account.id, other_tech.id, 10)  # 100.00 Technology
        await buy(test_session, account.id, health_stock.id, 40)  # 800.00 Healthcare

        allocations = await portfolio.get_sector_allocation(test_session, account.id)

        assert [(a.sector_name, a.sector_value, a.stock_count) for a in allocations] == [
            ("Healthcare", Decimal("800.00"), 1),
            ("Technology", Decimal("600.00"), 2),
        ]

    @pytest.mark.asyncio
    async def test_stocks_without_sector_excluded(
        self, test_session, trader_account, stock, stock_no_sector
    ):
        account, _ = trader_account
        await buy(test_session, account.id, stock.id, 1)
        await buy(test_session, account.id, stock_no_sector.id, 1)

        allocations = await portfolio.get_sector_allocation(test_session, account.id)
        assert [a.sector_name for a in allocations] == ["Technology"]

        summary = await portfolio.get_portfolio_summary(test_session, account.id)
        assert summary.holdings_count == 2
