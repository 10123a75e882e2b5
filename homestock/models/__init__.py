"""
Models package — export all SQLAlchemy models.
"""

from homestock.models.base import Base
from homestock.models.item import Item
from homestock.models.price_history import ItemPriceHistory

__all__ = ["Base", "Item", "ItemPriceHistory"]
