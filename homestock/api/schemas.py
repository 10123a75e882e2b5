"""
Homestock — HTTP Wire Models

Request bodies and the JSON projection of PriceStatsResult. Prices cross the
wire as JSON numbers; unset history values are omitted, unset stats are null.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from homestock.config import Platform, PriceRange, settings
from homestock.engine.observation import PlatformStats, PriceStatsResult


class PriceStatsRequest(BaseModel):
    """Body of POST /get_price_stats. item_id is checked by the query, not here."""

    item_id: str | None = Field(default=None, description="Item primary key")
    range: PriceRange = Field(default=settings.DEFAULT_PRICE_RANGE)


class PriceFetchResponse(BaseModel):
    """Body returned by POST /fetch_prices."""

    success: bool = True
    items_checked: int = 0
    prices_saved: int = 0


class ErrorResponse(BaseModel):
    error: str


def _number(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def _stats_body(stats: PlatformStats) -> dict[str, float | None]:
    return {
        "max": _number(stats.max),
        "min": _number(stats.min),
        "avg1y": _number(stats.avg1y),
    }


def price_stats_body(result: PriceStatsResult) -> dict[str, Any]:
    """JSON-ready dict with stable key order, so identical results serialize identically."""
    history: list[dict[str, Any]] = []
    for point in result.history:
        entry: dict[str, Any] = {"date": point.date}
        for platform in Platform:
            price = point.price_for(platform)
            if price is not None:
                entry[platform.value] = float(price)
        history.append(entry)

    return {
        "history": history,
        "stats": {
            platform.value: _stats_body(result.stats.for_platform(platform))
            for platform in Platform
        },
    }
