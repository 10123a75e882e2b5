"""
Homestock - Price History Projector

Folds a flat observation list into one HistoryPoint per calendar date for the
multi-platform price chart.

Algorithm:
    1. Walk observations in input order, keyed by ISO date string.
    2. Set the observed platform's value on that date's point. A repeated
       (platform, date) pair overwrites, so the later row wins.
    3. Sort points ascending by date string (ISO order == chronological).

Platforms missing on a date stay None. There is no forward-fill.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from homestock.engine.observation import HistoryPoint, PriceObservation

logger = structlog.get_logger(__name__)


def build_history(observations: Sequence[PriceObservation]) -> list[HistoryPoint]:
    """
    Project observations onto a sparse per-date series.

    Args:
        observations: Range-filtered observations for one item, any order.

    Returns:
        HistoryPoints strictly ascending by date, one per distinct date.
    """
    points: dict[str, HistoryPoint] = {}
    overwritten = 0

    for obs in observations:
        key = obs.recorded_at.isoformat()
        point = points.get(key)
        if point is None:
            point = HistoryPoint(date=key)
            points[key] = point
        elif point.price_for(obs.platform) is not None:
            overwritten += 1
        point.set_price(obs.platform, obs.price)

    if overwritten:
        # Store enforces one row per (item, platform, date); duplicates mean a bad feed.
        logger.warning(
            "history_duplicate_observations",
            overwritten=overwritten,
        )

    history = [points[key] for key in sorted(points)]

    logger.debug(
        "history_built",
        observations=len(observations),
        points=len(history),
    )
    return history
