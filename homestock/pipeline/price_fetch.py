"""
Homestock — Daily Platform Price Fetch

For every item with at least one bound platform SKU, fetch the current price
per (item, platform, sku) and upsert one observation per
(item, platform, today). Same-day reruns overwrite.

JD exposes a keyless price endpoint (p.3.cn). Tmall and PDD have no public
keyless endpoint; their fetchers return None until a scraper or partner API
is wired in. A failed or empty lookup never aborts the run; the SKU is just
skipped for the day.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
import structlog
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from homestock.config import Platform, settings
from homestock.engine.range_filter import utc_today
from homestock.models.item import Item
from homestock.store.observations import ObservationStore

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class PriceRequest(BaseModel):
    """One SKU to price for one item on one platform."""

    item_id: str
    platform: Platform
    sku: str


class FetchedPrice(BaseModel):
    """A successful price lookup, ready to be stored as an observation."""

    item_id: str
    platform: Platform
    price: Decimal = Field(..., gt=0)


class PriceFetchSummary(BaseModel):
    """Outcome of one fetch run, returned by POST /fetch_prices."""

    items_checked: int = 0
    prices_saved: int = 0


def build_price_requests(items: Sequence[Item]) -> list[PriceRequest]:
    """One request per bound SKU per item. Blank SKUs count as unbound."""
    requests: list[PriceRequest] = []
    for item in items:
        for platform in Platform:
            sku = item.sku_for(platform)
            if sku and sku.strip():
                requests.append(
                    PriceRequest(item_id=item.id, platform=platform, sku=sku.strip())
                )
    return requests


# ---------------------------------------------------------------------------
# Platform client
# ---------------------------------------------------------------------------


class PlatformPriceClient:
    """
    Async price lookup across JD, Tmall and PDD.

    Usage:
        async with PlatformPriceClient() as client:
            price = await client.fetch_price(request)
    """

    def __init__(self, timeout: float | None = None):
        self._timeout = timeout if timeout is not None else settings.PRICE_FETCH_TIMEOUT_SECONDS
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> PlatformPriceClient:
        self._client = httpx.AsyncClient(
            headers={"User-Agent": settings.FETCH_USER_AGENT},
            timeout=self._timeout,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    async def fetch_jd_price(self, sku: str) -> Decimal | None:
        """
        Current JD price for ``sku`` from the public p.3.cn endpoint.

        Accepts SKUs with or without the ``J_`` prefix. Returns None on any
        HTTP error, malformed payload or non-positive price.
        """
        assert self._client is not None, "Client not initialized. Use 'async with'."

        clean_sku = sku.removeprefix("J_")
        if not clean_sku:
            return None

        try:
            response = await self._client.get(
                settings.JD_PRICE_API_URL,
                params={"skuIds": f"J_{clean_sku}"},
                headers={"Referer": settings.JD_REFERER},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "jd_price_http_error",
                sku=clean_sku,
                status_code=e.response.status_code,
            )
            return None
        except (httpx.RequestError, ValueError) as e:
            logger.warning(
                "jd_price_request_error",
                sku=clean_sku,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
            logger.warning("jd_price_unexpected_payload", sku=clean_sku)
            return None

        raw = payload[0].get("p")
        if not raw:
            return None
        try:
            price = Decimal(str(raw))
        except InvalidOperation:
            logger.warning("jd_price_unparseable", sku=clean_sku, raw=raw)
            return None

        if not price.is_finite() or price <= 0:
            # JD reports -1 for delisted SKUs
            return None
        return price

    async def fetch_tmall_price(self, sku: str) -> Decimal | None:
        # No keyless Tmall endpoint; plug a detail-page scraper in here.
        return None

    async def fetch_pdd_price(self, sku: str) -> Decimal | None:
        # No keyless PDD endpoint; plug the open-platform API in here.
        return None

    async def fetch_price(self, request: PriceRequest) -> FetchedPrice | None:
        """Dispatch to the platform fetcher. Returns None when no price is available."""
        if request.platform is Platform.JD:
            price = await self.fetch_jd_price(request.sku)
        elif request.platform is Platform.TMALL:
            price = await self.fetch_tmall_price(request.sku)
        elif request.platform is Platform.PDD:
            price = await self.fetch_pdd_price(request.sku)
        else:
            raise ValueError(f"Unknown platform: {request.platform!r}")

        if price is None:
            logger.debug(
                "platform_price_unavailable",
                item_id=request.item_id,
                platform=request.platform.value,
                sku=request.sku,
            )
            return None
        return FetchedPrice(item_id=request.item_id, platform=request.platform, price=price)


# ---------------------------------------------------------------------------
# Job
# ---------------------------------------------------------------------------


async def run_price_fetch(
    session_factory: async_sessionmaker[AsyncSession],
    client: PlatformPriceClient | None = None,
    today: date | None = None,
) -> PriceFetchSummary:
    """
    Fetch today's price for every bound SKU and upsert the observations.

    Lookups run sequentially to stay polite to the platforms. Store errors
    propagate; the scheduler logs them and retries on its next cycle.

    Args:
        session_factory: Async SQLAlchemy session factory.
        client: Price client override (tests). Must already be entered.
        today: Override for the observation date (tests).

    Returns:
        PriceFetchSummary with request and saved-row counts.
    """
    store = ObservationStore(session_factory)
    recorded_at = today if today is not None else utc_today()

    items = await store.list_priced_items()
    requests = build_price_requests(items)

    logger.info(
        "price_fetch_start",
        items=len(items),
        requests=len(requests),
        recorded_at=recorded_at.isoformat(),
    )

    fetched: list[FetchedPrice] = []
    if client is not None:
        fetched = await _fetch_all(client, requests)
    else:
        async with PlatformPriceClient() as own_client:
            fetched = await _fetch_all(own_client, requests)

    saved = await store.upsert_observations(
        [p.model_dump() for p in fetched],
        recorded_at,
    )

    summary = PriceFetchSummary(items_checked=len(requests), prices_saved=saved)
    logger.info(
        "price_fetch_complete",
        items_checked=summary.items_checked,
        prices_saved=summary.prices_saved,
    )
    return summary


async def _fetch_all(
    client: PlatformPriceClient,
    requests: Sequence[PriceRequest],
) -> list[FetchedPrice]:
    results: list[FetchedPrice] = []
    for request in requests:
        fetched = await client.fetch_price(request)
        if fetched is not None:
            results.append(fetched)
    return results
