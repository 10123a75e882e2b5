"""
Homestock - Per-Platform Price Statistics

For each platform:
    max / min: extremes over the observations inside the requested range.
    avg1y:     unweighted mean over the trailing PRICE_WINDOW_DAYS window,
               always taken from the full observation set, so range="all"
               still reports a trailing average.

Sums are accumulated as Decimal and divided in the default Decimal context;
the mean is not rounded. Platforms without data keep None.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal

import structlog

from homestock.config import Platform, PriceRange
from homestock.engine.observation import PlatformStats, PriceObservation, PriceStats
from homestock.engine.range_filter import filter_by_range, utc_today, window_cutoff

logger = structlog.get_logger(__name__)

def _mean(prices: Sequence[Decimal]) -> Decimal | None:
    if not prices:
        return None
    total = sum(prices, Decimal("0"))
    return total / len(prices)


def _platform_stats(
    platform: Platform,
    in_range: Sequence[PriceObservation],
    in_window: Sequence[PriceObservation],
) -> PlatformStats:
    range_prices = [o.price for o in in_range if o.platform is platform]
    window_prices = [o.price for o in in_window if o.platform is platform]

    return PlatformStats(
        max=max(range_prices) if range_prices else None,
        min=min(range_prices) if range_prices else None,
        avg1y=_mean(window_prices),
    )


def compute_stats(
    observations: Sequence[PriceObservation],
    price_range: PriceRange = PriceRange.ALL,
    today: date | None = None,
) -> PriceStats:
    """
    Compute max/min/avg1y for every platform.

    Args:
        observations: Full, unfiltered observation set for one item.
        price_range: Range applied to max/min only.
        today: Override for the current UTC date (tests).

    Returns:
        PriceStats with one entry per Platform member.
    """
    today = today if today is not None else utc_today()
    cutoff = window_cutoff(today)

    in_range = filter_by_range(observations, price_range, today)
    in_window = [o for o in observations if o.recorded_at >= cutoff]

    stats = PriceStats(
        **{p.value: _platform_stats(p, in_range, in_window) for p in Platform}
    )

    logger.debug(
        "price_stats_calculated",
        price_range=price_range.value,
        observations=len(observations),
        in_range=len(in_range),
        in_window=len(in_window),
        window_cutoff=cutoff.isoformat(),
    )
    return stats
