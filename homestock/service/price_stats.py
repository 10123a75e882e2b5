"""
Homestock — Price Statistics Query

Single entry point behind POST /get_price_stats.

Algorithm:
    1. Reject an empty item id before touching the store.
    2. Read every observation for the item (one query, no retry).
    3. Drop malformed rows (logged, never fatal).
    4. History: range filter, then project per date.
    5. Stats: aggregate over the unfiltered set; only max/min honour the range.

Ownership of the item is enforced by the auth layer in front of this service.
"""

from __future__ import annotations

from datetime import date

import structlog
from sqlalchemy.exc import SQLAlchemyError

from homestock.config import PriceRange
from homestock.engine.history import build_history
from homestock.engine.observation import PriceStatsResult, parse_observations
from homestock.engine.range_filter import filter_by_range, utc_today
from homestock.engine.stats import compute_stats
from homestock.exceptions import MissingIdentifier, UpstreamUnavailable
from homestock.store.observations import ObservationStore

logger = structlog.get_logger(__name__)


async def get_price_stats(
    item_id: str | None,
    price_range: PriceRange,
    store: ObservationStore,
    today: date | None = None,
) -> PriceStatsResult:
    """
    Build the price chart history and per-platform statistics for one item.

    Args:
        item_id: Item primary key. Must be non-empty.
        price_range: Range for the history and for max/min.
        store: Observation store to read from.
        today: Override for the current UTC date (tests).

    Returns:
        PriceStatsResult computed fresh from the store's current contents.

    Raises:
        MissingIdentifier: item_id is empty or blank.
        UpstreamUnavailable: the store read failed.
    """
    if not item_id or not item_id.strip():
        raise MissingIdentifier("item_id")

    today = today if today is not None else utc_today()

    try:
        rows = await store.fetch_observations(item_id)
    except (SQLAlchemyError, OSError) as e:
        logger.error(
            "price_stats_store_read_failed",
            item_id=item_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise UpstreamUnavailable(e) from e

    observations = parse_observations(rows)

    history = build_history(filter_by_range(observations, price_range, today))
    stats = compute_stats(observations, price_range, today)

    logger.info(
        "price_stats_served",
        item_id=item_id,
        price_range=price_range.value,
        rows_found=len(rows),
        history_points=len(history),
    )
    return PriceStatsResult(history=history, stats=stats)
