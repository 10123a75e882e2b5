"""
Homestock - Observation Store

Async access to item_price_history. The stats query only reads; the daily
fetch job is the only writer and upserts one row per
(item_id, platform, recorded_at), so a same-day refetch overwrites.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

import structlog
from sqlalchemy import DATE, DECIMAL, String, bindparam, or_, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from homestock.models.item import Item
from homestock.models.price_history import ItemPriceHistory

logger = structlog.get_logger(__name__)

_UPSERT_OBSERVATION = text("""
    INSERT INTO item_price_history (id, item_id, platform, price, recorded_at)
    VALUES (:id, :item_id, :platform, :price, :recorded_at)
    ON CONFLICT (item_id, platform, recorded_at) DO UPDATE SET
        price = EXCLUDED.price
""").bindparams(
    bindparam("id", type_=String),
    bindparam("item_id", type_=String),
    bindparam("platform", type_=String),
    bindparam("price", type_=DECIMAL(10, 2)),
    bindparam("recorded_at", type_=DATE),
)


class ObservationStore:
    """
    Reads and upserts price observations through an async session factory.

    Usage:
        store = ObservationStore(session_factory)
        rows = await store.fetch_observations(item_id)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def fetch_observations(
        self,
        item_id: str,
        since: date | None = None,
    ) -> list[dict[str, Any]]:
        """
        Select (platform, price, recorded_at) for one item, ascending by date.

        Rows are returned raw; validation happens in engine.parse_observations.
        Database errors propagate to the caller unchanged.

        Args:
            item_id: Item primary key.
            since: Optional inclusive lower bound on recorded_at.
        """
        stmt = select(
            ItemPriceHistory.platform,
            ItemPriceHistory.price,
            ItemPriceHistory.recorded_at,
        ).where(ItemPriceHistory.item_id == item_id)
        if since is not None:
            stmt = stmt.where(ItemPriceHistory.recorded_at >= since)
        stmt = stmt.order_by(ItemPriceHistory.recorded_at.asc())

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = [dict(row) for row in result.mappings().all()]

        logger.debug(
            "observations_fetched",
            item_id=item_id,
            since=since.isoformat() if since else None,
            rows_found=len(rows),
        )
        return rows

    async def upsert_observations(
        self,
        prices: Sequence[Mapping[str, Any]],
        recorded_at: date,
    ) -> int:
        """
        Upsert one observation per (item_id, platform) for ``recorded_at``.

        Args:
            prices: Mappings with item_id, platform and price keys.
            recorded_at: Calendar date stamped on every row.

        Returns:
            Number of rows written.
        """
        if not prices:
            return 0

        async with self._session_factory() as session:
            for price in prices:
                platform = price["platform"]
                await session.execute(
                    _UPSERT_OBSERVATION,
                    {
                        "id": str(uuid.uuid4()),
                        "item_id": price["item_id"],
                        "platform": getattr(platform, "value", platform),
                        "price": price["price"],
                        "recorded_at": recorded_at,
                    },
                )
            await session.commit()

        logger.info(
            "observations_upserted",
            count=len(prices),
            recorded_at=recorded_at.isoformat(),
        )
        return len(prices)

    async def list_priced_items(self) -> list[Item]:
        """Items with at least one platform SKU bound."""
        stmt = select(Item).where(
            or_(
                Item.jd_sku.is_not(None),
                Item.tmall_sku.is_not(None),
                Item.pdd_sku.is_not(None),
            )
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            items = list(result.scalars().all())

        logger.debug("priced_items_listed", count=len(items))
        return items
