"""
Price statistics and price fetch endpoints.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from homestock.api.dependencies import get_observation_store, get_session_factory
from homestock.api.schemas import (
    ErrorResponse,
    PriceFetchResponse,
    PriceStatsRequest,
    price_stats_body,
)
from homestock.exceptions import UpstreamUnavailable
from homestock.pipeline.price_fetch import run_price_fetch
from homestock.service.price_stats import get_price_stats
from homestock.store.observations import ObservationStore

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["prices"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post("/get_price_stats", responses=_ERROR_RESPONSES)
async def post_price_stats(
    body: PriceStatsRequest,
    store: ObservationStore = Depends(get_observation_store),
) -> JSONResponse:
    """Price chart history plus max/min/avg1y per platform for one item."""
    result = await get_price_stats(body.item_id, body.range, store)
    return JSONResponse(content=price_stats_body(result))


@router.post("/fetch_prices", response_model=PriceFetchResponse, responses=_ERROR_RESPONSES)
async def post_fetch_prices(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> PriceFetchResponse:
    """Run the daily price fetch now. Invoked by the external cron trigger."""
    try:
        summary = await run_price_fetch(session_factory)
    except (SQLAlchemyError, OSError) as e:
        logger.error(
            "fetch_prices_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise UpstreamUnavailable(e) from e

    return PriceFetchResponse(
        success=True,
        items_checked=summary.items_checked,
        prices_saved=summary.prices_saved,
    )


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
