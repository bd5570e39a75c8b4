"""Shared test fixtures for campus wrapped tests."""

import asyncio
from typing import Any

import httpx
import pytest

from campus_wrapped.config import Config, DataConfig
from campus_wrapped.resolver import PoiResolver

BASE_URL = "https://wrapped.test/"
STATS_PATH = "/data/pois.json"
REVERSE_PATH = "/data/short-links-reverse.json"


def make_record(poi_id: str, college_name: str, **stats: Any) -> dict[str, Any]:
    base = {
        "favourite_dish": "biryani",
        "largest_order_value": 2500,
        "unofficial_favorite_restaurant": "Behrouz Biryani",
        "official_12am_craving": "maggi",
        "max_orders_in_a_week": 14,
        "max_pizzas_single_day": 40,
        "max_biryanis_single_day": 95,
    }
    base.update(stats)
    return {"poi_id": poi_id, "college_name": college_name, "stats": base}


STORE = {
    "abc123": make_record("abc123", "X Institute"),
    "ABC999": make_record("ABC999", "Upper Case College", favourite_dish="dosa"),
    "kiit-bbsr": make_record("kiit-bbsr", "KIIT", largest_order_value=18450),
}

REVERSE = {
    "xy9": "abc123",
    "k1t": "kiit-bbsr",
    "gone": "no-such-poi",
}


class FakeSite:
    """Static host stand-in for httpx.MockTransport, recording requested paths."""

    def __init__(
        self,
        documents: dict[str, Any],
        statuses: dict[str, int] | None = None,
        broken: set[str] | None = None,
    ) -> None:
        self.documents = documents
        self.statuses = statuses or {}
        self.broken = broken or set()
        self.requests: list[str] = []

    def count(self, path: str) -> int:
        return self.requests.count(path)

    def respond(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(path)
        if path in self.broken:
            raise httpx.ConnectError("connection refused", request=request)
        if path in self.statuses:
            return httpx.Response(self.statuses[path])
        if path not in self.documents:
            return httpx.Response(404)
        doc = self.documents[path]
        if isinstance(doc, str):
            return httpx.Response(200, text=doc)
        return httpx.Response(200, json=doc)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        # Yield so concurrent requests actually overlap
        await asyncio.sleep(0.01)
        return self.respond(request)


@pytest.fixture()
def config(tmp_path):
    return Config(data=DataConfig(base_url=BASE_URL, public_dir=str(tmp_path / "public")))


@pytest.fixture()
def site():
    return FakeSite({STATS_PATH: STORE, REVERSE_PATH: REVERSE})


@pytest.fixture()
def with_resolver(config):
    """Run fn(resolver) against a FakeSite inside a fresh event loop."""

    def run(site: FakeSite, fn):
        async def go():
            async with httpx.AsyncClient(transport=httpx.MockTransport(site.handler)) as client:
                resolver = PoiResolver.from_config(config, client)
                return await fn(resolver)

        return asyncio.run(go())

    return run
