"""Sample market data: YAML schema, loader and database seeding."""

import logging
from decimal import Decimal
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from simtrader.models import Sector, Stock

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_FILE = Path(__file__).parent / "data" / "sample_market.yaml"


class SeedSector(BaseModel):
    """Sector definition in a sample market file."""

    name: str = Field(..., min_length=1, max_length=50)
    description: str | None = None
    performance_ytd: Decimal | None = None


class SeedStock(BaseModel):
    """Stock definition in a sample market file."""

    symbol: str = Field(..., min_length=1, max_length=10)
    company_name: str = Field(..., min_length=1, max_length=100)
    sector: str | None = Field(default=None, description="Sector name")
    current_price: Decimal = Field(..., gt=0)
    market_cap: int | None = None
    volume: int | None = None
    day_change: Decimal | None = None
    day_change_percent: Decimal | None = None
    pe_ratio: Decimal | None = None
    dividend_yield: Decimal | None = None
    year_high: Decimal | None = None
    year_low: Decimal | None = None

    @field_validator("symbol")
    @classmethod
    def symbol_uppercase(cls, v: str) -> str:
        return v.upper()


class SampleMarket(BaseModel):
    """Complete sample market."""

    sectors: list[SeedSector] = Field(default_factory=list)
    stocks: list[SeedStock] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_stock_sectors(self) -> "SampleMarket":
        sector_names = {s.name for s in self.sectors}
        for stock in self.stocks:
            if stock.sector is not None and stock.sector not in sector_names:
                raise ValueError(
                    f"Stock '{stock.symbol}' references unknown sector '{stock.sector}'"
                )
        return self


def load_yaml(path: Path = DEFAULT_SAMPLE_FILE) -> SampleMarket:
    """Load and validate a sample market file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    return SampleMarket.model_validate(data or {})


async def seed_market(session: AsyncSession, market: SampleMarket) -> tuple[int, int]:
    """Insert the sample sectors and stocks.

    Does nothing if any stock already exists. Sectors that already exist
    by name are reused.

    Returns:
        Tuple of (sectors created, stocks created)
    """
    existing = await session.execute(select(Stock.id).limit(1))
    if existing.scalar_one_or_none() is not None:
        return 0, 0

    result = await session.execute(select(Sector))
    sectors = {s.name: s for s in result.scalars()}

    sectors_created = 0
    for data in market.sectors:
        if data.name in sectors:
            continue
        sector = Sector(
            name=data.name,
            description=data.description,
            performance_ytd=data.performance_ytd,
        )
        session.add(sector)
        sectors[data.name] = sector
        sectors_created += 1
    await session.flush()  # Assign sector IDs before linking stocks

    for data in market.stocks:
        session.add(
            Stock(
                **data.model_dump(exclude={"sector"}),
                sector_id=sectors[data.sector].id if data.sector else None,
            )
        )

    await session.commit()
    logger.info(
        "Sample data initialized",
        extra={"sectors": sectors_created, "stocks": len(market.stocks)},
    )
    return sectors_created, len(market.stocks)
