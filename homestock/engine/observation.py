"""
Homestock - Price Observation & Result Types

Value types shared by the range filter, history projector and stats
aggregator. Money is Decimal end to end; "no data" is None, never zero.

Raw store rows enter through parse_observations(), which drops rows with an
unknown platform tag or an unparseable price/date and logs a warning for
each. A partial statistics view beats a failed request.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from homestock.config import Platform
from homestock.exceptions import MalformedObservation

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


class PriceObservation(BaseModel):
    """One recorded price for one item, on one platform, on one day."""

    model_config = ConfigDict(frozen=True)

    platform: Platform
    price: Decimal = Field(..., gt=0, description="Observed price, exact decimal")
    recorded_at: date = Field(..., description="Calendar date, time-of-day dropped")

    @field_validator("price", mode="before")
    @classmethod
    def parse_decimal(cls, v: Any) -> Decimal:
        """Convert via str() so float inputs keep their printed value."""
        if v is None or v == "":
            raise ValueError("price is missing")
        if isinstance(v, Decimal):
            price = v
        else:
            try:
                price = Decimal(str(v))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"price {v!r} is not a number") from e
        if not price.is_finite():
            raise ValueError(f"price {v!r} is not finite")
        return price

    @field_validator("recorded_at", mode="before")
    @classmethod
    def truncate_to_date(cls, v: Any) -> date:
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, date):
            return v
        if isinstance(v, str):
            # Date part of an ISO date or timestamp; anything else after it is junk
            if v[10:] and v[10] not in ("T", " "):
                raise ValueError(f"recorded_at {v!r} is not an ISO date")
            try:
                return date.fromisoformat(v[:10])
            except ValueError as e:
                raise ValueError(f"recorded_at {v!r} is not an ISO date") from e
        raise ValueError(f"recorded_at {v!r} is not a date")


def parse_observation(row: Mapping[str, Any]) -> PriceObservation:
    """
    Validate one raw store row.

    Raises:
        MalformedObservation: unknown platform, or price/date that cannot be parsed.
    """
    try:
        return PriceObservation.model_validate(dict(row))
    except ValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise MalformedObservation(reasons, row) from e


def parse_observations(rows: Iterable[Mapping[str, Any]]) -> list[PriceObservation]:
    """Validate raw rows, skipping malformed ones. Input order is preserved."""
    observations: list[PriceObservation] = []
    skipped = 0
    for row in rows:
        try:
            observations.append(parse_observation(row))
        except MalformedObservation as e:
            skipped += 1
            logger.warning(
                "observation_skipped_malformed",
                reason=e.message,
                row=e.details.get("row"),
            )

    if skipped:
        logger.info(
            "observations_parsed",
            accepted=len(observations),
            skipped=skipped,
        )
    return observations


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class HistoryPoint(BaseModel):
    """One date of the multi-platform price chart. Unobserved platforms stay None."""

    date: str = Field(..., description="ISO 8601 date, YYYY-MM-DD")
    jd: Decimal | None = None
    tmall: Decimal | None = None
    pdd: Decimal | None = None

    def price_for(self, platform: Platform) -> Decimal | None:
        return getattr(self, platform.value)

    def set_price(self, platform: Platform, price: Decimal) -> None:
        setattr(self, platform.value, price)


class PlatformStats(BaseModel):
    """Aggregates for one platform. All three are None when there is no data."""

    max: Decimal | None = None
    min: Decimal | None = None
    avg1y: Decimal | None = None


class PriceStats(BaseModel):
    """One PlatformStats per Platform member."""

    jd: PlatformStats = Field(default_factory=PlatformStats)
    tmall: PlatformStats = Field(default_factory=PlatformStats)
    pdd: PlatformStats = Field(default_factory=PlatformStats)

    def for_platform(self, platform: Platform) -> PlatformStats:
        return getattr(self, platform.value)


class PriceStatsResult(BaseModel):
    """Response of the price statistics query. Never cached or persisted."""

    history: list[HistoryPoint] = Field(default_factory=list)
    stats: PriceStats = Field(default_factory=PriceStats)
