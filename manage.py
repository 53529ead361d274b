#!/usr/bin/env python3
"""
Management script for the trading simulator.

Usage (via API):
    python manage.py stocks load [-f simtrader/data/sample_market.yaml] [--base-url http://localhost:8000]
    python manage.py stocks show [--base-url http://localhost:8000]
    python manage.py accounts create ACCOUNT_ID USERNAME EMAIL [--cash 10000]

Usage (direct DB access):
    python manage.py db seed [-f simtrader/data/sample_market.yaml]
    python manage.py db stocks
    python manage.py db clear
    python manage.py db status
"""

import asyncio
from pathlib import Path

import click
import httpx
from sqlalchemy import func, select

from simtrader.database import AsyncSessionLocal, Base, engine, init_db
from simtrader.models import (
    Account,
    Competition,
    Holding,
    Order,
    Sector,
    Stock,
    Subscription,
    Transaction,
    WatchlistItem,
)
from simtrader.seed import DEFAULT_SAMPLE_FILE, load_yaml, seed_market


DEFAULT_BASE_URL = "http://localhost:8000"


# ============================================================================
# Direct database operations (internal)
# ============================================================================


async def _clear_db():
    """Drop and recreate all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _db_seed(filepath: Path):
    """Load a sample market file directly to DB."""
    market = load_yaml(filepath)
    async with AsyncSessionLocal() as session:
        return await seed_market(session, market)


async def _db_show_stocks():
    """Get all stocks with sector names from DB."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Stock, Sector.name)
            .outerjoin(Sector, Stock.sector_id == Sector.id)
            .order_by(Stock.symbol)
        )
        return [(stock, sector) for stock, sector in result.all()]


async def _count_records():
    """Count records in each table."""
    async with AsyncSessionLocal() as session:
        counts = {}
        for model, name in [
            (Sector, "sectors"),
            (Stock, "stocks"),
            (Account, "accounts"),
            (Holding, "holdings"),
            (Order, "orders"),
            (Transaction, "transactions"),
            (WatchlistItem, "watchlists"),
            (Competition, "competitions"),
            (Subscription, "subscriptions"),
        ]:
            counts[name] = await session.scalar(select(func.count()).select_from(model))
        return counts


# ============================================================================
# API operations
# ============================================================================


def _api_load_market(filepath: Path, base_url: str):
    """Create the file's sectors and stocks via API."""
    market = load_yaml(filepath)

    loaded = 0
    skipped = 0
    errors = 0

    with httpx.Client(base_url=base_url, timeout=30) as client:
        for sector in market.sectors:
            response = client.post("/admin/sectors", json=sector.model_dump(mode="json"))
            if response.status_code not in (201, 409):
                response.raise_for_status()

        response = client.get("/api/v1/sectors")
        response.raise_for_status()
        sector_ids = {s["name"]: s["id"] for s in response.json()["sectors"]}

        for stock in market.stocks:
            payload = stock.model_dump(
                mode="json",
                exclude={"sector", "day_change", "day_change_percent"},
                exclude_none=True,
            )
            if stock.sector:
                payload["sector_id"] = sector_ids[stock.sector]
            response = client.post("/admin/stocks", json=payload)

            if response.status_code == 201:
                loaded += 1
                click.echo(f"  Loaded {stock.symbol}: {stock.company_name}")
            elif response.status_code == 409:
                skipped += 1
                click.echo(f"  Skipped {stock.symbol} (already exists)")
            else:
                errors += 1
                error_detail = response.json().get("detail", response.text)
                click.echo(f"  Error {stock.symbol}: {error_detail}", err=True)

    return loaded, skipped, errors


def _api_show_stocks(base_url: str):
    """Get stocks via API."""
    with httpx.Client(base_url=base_url, timeout=30) as client:
        response = client.get("/api/v1/stocks")
        if response.status_code == 404:
            raise click.ClickException(
                f"Endpoint not found. Is the SimTrader API running at {base_url}?"
            )
        response.raise_for_status()
        return response.json()["stocks"]


def _api_create_account(base_url: str, payload: dict):
    with httpx.Client(base_url=base_url, timeout=30) as client:
        response = client.post("/admin/accounts", json=payload)
        if response.status_code == 409:
            raise click.ClickException(response.json()["detail"])
        response.raise_for_status()
        return response.json()


def _connect_error(base_url: str):
    click.echo(f"\nError: Could not connect to {base_url}", err=True)
    click.echo("Is the server running? Start it with: uvicorn simtrader.main:app", err=True)
    raise SystemExit(1)


def _print_stock_table(rows):
    click.echo(f"\n{'Symbol':<8} {'Company':<30} {'Sector':<14} {'Price':>10}")
    click.echo("-" * 65)
    for symbol, company, sector, price in rows:
        click.echo(f"{symbol:<8} {company:<30} {sector or '-':<14} {price:>10}")
    click.echo(f"\nTotal: {len(rows)} stocks")


# ============================================================================
# CLI: Main group
# ============================================================================


@click.group()
def cli():
    """SimTrader management commands."""
    pass


# ============================================================================
# CLI: stocks (via API)
# ============================================================================


@cli.group()
def stocks():
    """Manage stocks (via API)."""
    pass


@stocks.command("load")
@click.option(
    "--file", "-f",
    default=str(DEFAULT_SAMPLE_FILE),
    type=click.Path(exists=True),
    help="YAML file with sectors and stocks",
)
@click.option(
    "--base-url", "-u",
    default=DEFAULT_BASE_URL,
    help=f"API base URL (default: {DEFAULT_BASE_URL})",
)
def stocks_load(file, base_url):
    """Load sectors and stocks from a YAML file via API."""
    click.echo(f"Loading stocks from {file} via {base_url}...")

    try:
        loaded, skipped, errors = _api_load_market(Path(file), base_url)
    except httpx.ConnectError:
        _connect_error(base_url)
    click.echo(f"\nDone: {loaded} loaded, {skipped} skipped, {errors} errors")


@stocks.command("show")
@click.option(
    "--base-url", "-u",
    default=DEFAULT_BASE_URL,
    help=f"API base URL (default: {DEFAULT_BASE_URL})",
)
def stocks_show(base_url):
    """Show all stocks via API."""
    try:
        stock_list = _api_show_stocks(base_url)
    except httpx.ConnectError:
        _connect_error(base_url)

    if not stock_list:
        click.echo("No stocks found.")
        return

    _print_stock_table(
        [
            (s["symbol"], s["company_name"], s["sector_name"], s["current_price"])
            for s in stock_list
        ]
    )


# ============================================================================
# CLI: accounts (via API)
# ============================================================================


@cli.group()
def accounts():
    """Manage trader accounts (via API)."""
    pass


@accounts.command("create")
@click.argument("account_id")
@click.argument("username")
@click.argument("email")
@click.option("--cash", type=str, default=None, help="Initial cash balance")
@click.option(
    "--base-url", "-u",
    default=DEFAULT_BASE_URL,
    help=f"API base URL (default: {DEFAULT_BASE_URL})",
)
def accounts_create(account_id, username, email, cash, base_url):
    """Create a trader account and print its API key."""
    payload = {"account_id": account_id, "username": username, "email": email}
    if cash is not None:
        payload["initial_cash"] = cash

    try:
        account = _api_create_account(base_url, payload)
    except httpx.ConnectError:
        _connect_error(base_url)

    click.echo(f"Created {account['account_id']} with {account['cash_balance']} cash")
    click.echo(f"API key: {account['api_key']}")


# ============================================================================
# CLI: db (direct database access)
# ============================================================================


@cli.group()
def db():
    """Direct database management (bypasses API)."""
    pass


@db.command("clear")
@click.confirmation_option(prompt="Are you sure you want to clear all data?")
def db_clear():
    """Clear all data from the database (destructive!)."""
    click.echo("Clearing database...")
    asyncio.run(_clear_db())
    click.echo("Database cleared and tables recreated.")


@db.command("status")
def db_status():
    """Show database status and record counts."""

    async def run():
        await init_db()
        return await _count_records()

    counts = asyncio.run(run())

    click.echo("\nDatabase Status:")
    click.echo("-" * 30)
    for table, count in counts.items():
        click.echo(f"  {table:<15} {count:>10,}")
    click.echo("-" * 30)
    click.echo(f"  {'Total':<15} {sum(counts.values()):>10,}")


@db.command("seed")
@click.option(
    "--file", "-f",
    default=str(DEFAULT_SAMPLE_FILE),
    type=click.Path(exists=True),
    help="YAML file with sectors and stocks",
)
def db_seed(file):
    """Load sample sectors and stocks directly to database.

    Does nothing if any stock already exists.
    """
    click.echo(f"Seeding from {file} (direct DB)...")

    async def run():
        await init_db()
        return await _db_seed(Path(file))

    sectors, stock_count = asyncio.run(run())
    if not stock_count:
        click.echo("Stocks already present, nothing loaded.")
        return
    click.echo(f"\nDone: {sectors} sectors, {stock_count} stocks")


@db.command("stocks")
def db_stocks():
    """Show all stocks from database."""

    async def run():
        await init_db()
        return await _db_show_stocks()

    rows = asyncio.run(run())

    if not rows:
        click.echo("No stocks found.")
        return

    _print_stock_table([(s.symbol, s.company_name, sector, s.current_price) for s, sector in rows])


if __name__ == "__main__":
    cli()
