"""
Homestock — Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- In-memory aiosqlite database with the items + item_price_history tables
- Observation store bound to that database
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from homestock.models.base import Base
from homestock.models.item import Item
from homestock.store.observations import ObservationStore


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

pytest_plugins = ("pytest_asyncio",)


@pytest.fixture
def today() -> date:
    """Fixed "today" so trailing-window boundaries are deterministic."""
    return date(2024, 6, 1)


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    In-memory SQLite engine with all tables created.

    StaticPool keeps one connection so every session sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def store(session_factory: async_sessionmaker[AsyncSession]) -> ObservationStore:
    return ObservationStore(session_factory)


@pytest_asyncio.fixture
async def item(session_factory: async_sessionmaker[AsyncSession]) -> Item:
    """One item with only a JD SKU bound."""
    async with session_factory() as session:
        row = Item(owner_id="user-1", name="Olive oil", spec="1L", jd_sku="100012043978")
        session.add(row)
        await session.commit()
    return row
