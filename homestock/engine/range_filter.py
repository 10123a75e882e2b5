"""
Homestock - Range Filter

Restricts an item's observations to the caller's requested range before the
history projection. "1y" is a calendar window: today minus PRICE_WINDOW_DAYS
days, inclusive, so time-of-day never moves the boundary.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timedelta, timezone

from homestock.config import PriceRange, settings
from homestock.engine.observation import PriceObservation


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def window_cutoff(today: date | None = None, window_days: int | None = None) -> date:
    """First date (inclusive) of the trailing window ending at ``today``."""
    today = today if today is not None else utc_today()
    days = window_days if window_days is not None else settings.PRICE_WINDOW_DAYS
    return today - timedelta(days=days)


def filter_by_range(
    observations: Sequence[PriceObservation],
    price_range: PriceRange,
    today: date | None = None,
) -> list[PriceObservation]:
    """
    Return the observations that fall inside ``price_range``.

    Args:
        observations: Full observation set for one item, any order.
        price_range: ALL returns the input unchanged; ONE_YEAR keeps
            observations with recorded_at >= window_cutoff(today).
        today: Override for the current UTC date (tests).

    Returns:
        A new list in the input order.
    """
    if price_range is PriceRange.ALL:
        return list(observations)
    if price_range is PriceRange.ONE_YEAR:
        cutoff = window_cutoff(today)
        return [o for o in observations if o.recorded_at >= cutoff]
    raise ValueError(f"Unknown price range: {price_range!r}")
