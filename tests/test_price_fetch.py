"""Tests for pipeline/price_fetch.py: platform price lookups and the daily fetch job."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import httpx
import pytest
import respx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from homestock.config import Platform, settings
from homestock.models.item import Item
from homestock.pipeline.price_fetch import (
    PlatformPriceClient,
    PriceRequest,
    build_price_requests,
    run_price_fetch,
)
from homestock.store.observations import ObservationStore

JD_URL = settings.JD_PRICE_API_URL


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------


def test_build_price_requests_one_per_bound_sku() -> None:
    items = [
        Item(id="a", owner_id="u", name="Oil", jd_sku="100", pdd_sku="200"),
        Item(id="b", owner_id="u", name="Rice", tmall_sku="  300  "),
        Item(id="c", owner_id="u", name="Mug", jd_sku="", tmall_sku="   "),
    ]
    requests = build_price_requests(items)

    assert requests == [
        PriceRequest(item_id="a", platform=Platform.JD, sku="100"),
        PriceRequest(item_id="a", platform=Platform.PDD, sku="200"),
        PriceRequest(item_id="b", platform=Platform.TMALL, sku="300"),
    ]


# ---------------------------------------------------------------------------
# JD lookup
# ---------------------------------------------------------------------------


class TestFetchJdPrice:

    @pytest.mark.asyncio
    async def test_happy_path(self) -> None:
        with respx.mock:
            route = respx.get(JD_URL).mock(
                return_value=httpx.Response(200, json=[{"id": "J_100", "p": "59.90"}])
            )
            async with PlatformPriceClient() as client:
                price = await client.fetch_jd_price("100")

        assert price == Decimal("59.90")
        assert route.calls.last.request.url.params["skuIds"] == "J_100"
        assert route.calls.last.request.headers["Referer"] == settings.JD_REFERER

    @pytest.mark.asyncio
    async def test_prefixed_sku_not_double_prefixed(self) -> None:
        with respx.mock:
            route = respx.get(JD_URL).mock(
                return_value=httpx.Response(200, json=[{"p": "1.00"}])
            )
            async with PlatformPriceClient() as client:
                await client.fetch_jd_price("J_100")

        assert route.calls.last.request.url.params["skuIds"] == "J_100"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [[{"p": "-1.00"}], [{"p": "0"}], [{}], [], {"error": "x"}, [{"p": "abc"}]],
    )
    async def test_unusable_payload_returns_none(self, payload: object) -> None:
        with respx.mock:
            respx.get(JD_URL).mock(return_value=httpx.Response(200, json=payload))
            async with PlatformPriceClient() as client:
                assert await client.fetch_jd_price("100") is None

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self) -> None:
        with respx.mock:
            respx.get(JD_URL).mock(return_value=httpx.Response(503))
            async with PlatformPriceClient() as client:
                assert await client.fetch_jd_price("100") is None

    @pytest.mark.asyncio
    async def test_network_error_returns_none(self) -> None:
        with respx.mock:
            respx.get(JD_URL).mock(side_effect=httpx.ConnectError("refused"))
            async with PlatformPriceClient() as client:
                assert await client.fetch_jd_price("100") is None

    @pytest.mark.asyncio
    async def test_empty_sku_skips_request(self) -> None:
        with respx.mock(assert_all_called=False):
            route = respx.get(JD_URL)
            async with PlatformPriceClient() as client:
                assert await client.fetch_jd_price("J_") is None
        assert route.call_count == 0


@pytest.mark.asyncio
async def test_tmall_and_pdd_have_no_price_source() -> None:
    async with PlatformPriceClient() as client:
        assert await client.fetch_price(PriceRequest(item_id="a", platform=Platform.TMALL, sku="1")) is None
        assert await client.fetch_price(PriceRequest(item_id="a", platform=Platform.PDD, sku="1")) is None


# ---------------------------------------------------------------------------
# Daily job
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_run_price_fetch_upserts_todays_prices(
    session_factory: async_sessionmaker[AsyncSession],
    store: ObservationStore,
    item: Item,
) -> None:
    async with session_factory() as session:
        session.add(Item(owner_id="user-1", name="Unbound"))
        session.add(Item(owner_id="user-1", name="Tmall only", tmall_sku="555"))
        await session.commit()

    day = date(2024, 6, 1)
    with respx.mock:
        respx.get(JD_URL).mock(return_value=httpx.Response(200, json=[{"p": "45.50"}]))
        async with PlatformPriceClient() as client:
            summary = await run_price_fetch(session_factory, client=client, today=day)

    assert summary.items_checked == 2
    assert summary.prices_saved == 1
    rows = await store.fetch_observations(item.id)
    assert rows == [{"platform": "jd", "price": Decimal("45.50"), "recorded_at": day}]


@pytest.mark.asyncio
async def test_run_price_fetch_twice_same_day_overwrites(
    session_factory: async_sessionmaker[AsyncSession],
    store: ObservationStore,
    item: Item,
) -> None:
    day = date(2024, 6, 1)
    with respx.mock:
        respx.get(JD_URL).mock(
            side_effect=[
                httpx.Response(200, json=[{"p": "45.50"}]),
                httpx.Response(200, json=[{"p": "39.90"}]),
            ]
        )
        async with PlatformPriceClient() as client:
            await run_price_fetch(session_factory, client=client, today=day)
            await run_price_fetch(session_factory, client=client, today=day)

    rows = await store.fetch_observations(item.id)
    assert len(rows) == 1
    assert rows[0]["price"] == Decimal("39.90")


@pytest.mark.asyncio
async def test_run_price_fetch_with_no_items(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    with respx.mock:
        async with PlatformPriceClient() as client:
            summary = await run_price_fetch(session_factory, client=client, today=date(2024, 6, 1))

    assert summary.items_checked == 0
    assert summary.prices_saved == 0
