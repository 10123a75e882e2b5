"""
Homestock — Item Price History Model

One price snapshot per item, per platform, per calendar day. The daily
fetch job upserts on (item_id, platform, recorded_at), so a second fetch on
the same day overwrites the first. Read by store/observations.py to feed the
price statistics engine.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import DATE, DECIMAL, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from homestock.models.base import Base


class ItemPriceHistory(Base):
    """
    Daily price observation for one item on one platform.

    ``platform`` is stored as a plain string; rows carrying a value outside
    the Platform enum are skipped when read, not rejected by the database.

    Index: (item_id, recorded_at) supports the ascending per-item scan.
    """

    __tablename__ = "item_price_history"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="UUID primary key",
    )
    item_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
    )
    platform: Mapped[str] = mapped_column(
        String,
        nullable=False,
        comment="Platform tag: 'jd', 'tmall', 'pdd'",
    )
    price: Mapped[Decimal] = mapped_column(
        DECIMAL(10, 2),
        nullable=False,
        comment="Observed price in CNY",
    )
    recorded_at: Mapped[date] = mapped_column(
        DATE,
        nullable=False,
        comment="Calendar date (UTC) the price was observed",
    )

    __table_args__ = (
        UniqueConstraint(
            "item_id",
            "platform",
            "recorded_at",
            name="uq_item_price_history_item_platform_date",
        ),
        Index("ix_item_price_history_item_recorded", "item_id", "recorded_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ItemPriceHistory item_id={self.item_id!r} platform={self.platform!r} "
            f"price={self.price} at={self.recorded_at}>"
        )
