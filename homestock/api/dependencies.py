"""
Dependency providers for FastAPI route handlers.

The engine is created once per process from settings.DATABASE_URL. Tests
override get_session_factory / get_observation_store through
app.dependency_overrides.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from homestock.config import settings
from homestock.store.observations import ObservationStore


@lru_cache
def get_engine() -> AsyncEngine:
    return create_async_engine(
        settings.DATABASE_URL,
        echo=False,
        pool_pre_ping=True,
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_observation_store(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ObservationStore:
    return ObservationStore(session_factory)
