"""
Homestock — Item Model

One tracked household/retail item owned by a user. Item CRUD and ownership
checks belong to the managed backend; this service only reads items to find
the platform SKUs the daily price fetch should poll.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import INTEGER, TIMESTAMP, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from homestock.config import Platform
from homestock.models.base import Base


class Item(Base):
    """
    A user's inventory item with optional per-platform SKU bindings.

    An item with no bound SKU is never polled and therefore never gains
    price history.
    """

    __tablename__ = "items"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="UUID primary key",
    )
    owner_id: Mapped[str] = mapped_column(
        String,
        nullable=False,
        comment="Auth user id of the owner",
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    spec: Mapped[str | None] = mapped_column(
        String, nullable=True, comment="Free-form size/variant description"
    )
    quantity: Mapped[int] = mapped_column(INTEGER, nullable=False, default=1)
    barcode: Mapped[str | None] = mapped_column(String, nullable=True)
    image_url: Mapped[str | None] = mapped_column(
        String, nullable=True, comment="Public URL of the item photo in object storage"
    )

    jd_sku: Mapped[str | None] = mapped_column(String, nullable=True)
    tmall_sku: Mapped[str | None] = mapped_column(String, nullable=True)
    pdd_sku: Mapped[str | None] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        Index("ix_items_owner", "owner_id"),
    )

    def sku_for(self, platform: Platform) -> str | None:
        """Return the SKU bound for ``platform``, or None when unbound."""
        if platform is Platform.JD:
            return self.jd_sku
        if platform is Platform.TMALL:
            return self.tmall_sku
        if platform is Platform.PDD:
            return self.pdd_sku
        raise ValueError(f"Unknown platform: {platform!r}")

    def __repr__(self) -> str:
        return (
            f"<Item id={self.id!r} name={self.name!r} jd={self.jd_sku!r} "
            f"tmall={self.tmall_sku!r} pdd={self.pdd_sku!r}>"
        )
