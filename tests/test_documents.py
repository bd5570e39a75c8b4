"""Tests for lazily fetched document caches."""

import asyncio
import json

import httpx
import pytest

from campus_wrapped.documents import DocumentCache, file_fetcher, http_fetcher
from campus_wrapped.errors import DocumentFetchError, StatsStoreUnavailable

from conftest import FakeSite


def _run_http(site: FakeSite, fn, error_cls=DocumentFetchError):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(site.handler)) as client:
            cache = DocumentCache("https://wrapped.test/doc.json", http_fetcher(client), error_cls=error_cls)
            return await fn(cache)

    return asyncio.run(go())


class TestHttpDocumentCache:
    def test_fetches_and_caches(self):
        site = FakeSite({"/doc.json": {"a": 1}})

        async def go(cache):
            first = await cache.get()
            second = await cache.get()
            return first, second, cache.loaded, cache.fetch_count

        first, second, loaded, fetches = _run_http(site, go)
        assert first == second == {"a": 1}
        assert loaded
        assert fetches == 1
        assert site.count("/doc.json") == 1

    def test_concurrent_gets_share_inflight_fetch(self):
        site = FakeSite({"/doc.json": {"a": 1}})

        async def go(cache):
            return await asyncio.gather(*(cache.get() for _ in range(5)))

        results = _run_http(site, go)
        assert all(r == {"a": 1} for r in results)
        assert site.count("/doc.json") == 1

    def test_404_raises_fetch_error(self):
        site = FakeSite({})

        async def go(cache):
            return await cache.get()

        with pytest.raises(DocumentFetchError, match="HTTP 404"):
            _run_http(site, go)

    def test_error_class_is_configurable(self):
        site = FakeSite({}, broken={"/doc.json"})

        async def go(cache):
            return await cache.get()

        with pytest.raises(StatsStoreUnavailable, match="ConnectError"):
            _run_http(site, go, error_cls=StatsStoreUnavailable)

    def test_non_object_document_rejected(self):
        site = FakeSite({"/doc.json": [1, 2, 3]})

        async def go(cache):
            return await cache.get()

        with pytest.raises(DocumentFetchError, match="expected a JSON object"):
            _run_http(site, go)

    def test_concurrent_failure_reaches_every_caller_then_retries(self):
        site = FakeSite({"/doc.json": {"a": 1}}, statuses={"/doc.json": 500})

        async def go(cache):
            results = await asyncio.gather(cache.get(), cache.get(), return_exceptions=True)
            site.statuses.clear()
            return results, await cache.get()

        results, retried = _run_http(site, go)
        assert all(isinstance(r, DocumentFetchError) for r in results)
        assert retried == {"a": 1}
        assert site.count("/doc.json") == 2


class TestFileFetcher:
    def test_reads_relative_to_root(self, tmp_path):
        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "pois.json").write_text(json.dumps({"x": {"poi_id": "x"}}))
        cache = DocumentCache("data/pois.json", file_fetcher(tmp_path))
        assert asyncio.run(cache.get()) == {"x": {"poi_id": "x"}}

    def test_missing_file_raises(self, tmp_path):
        cache = DocumentCache("data/pois.json", file_fetcher(tmp_path))
        with pytest.raises(DocumentFetchError):
            asyncio.run(cache.get())

    def test_invalid_json_raises(self, tmp_path):
        (tmp_path / "bad.json").write_text("{oops")
        cache = DocumentCache("bad.json", file_fetcher(tmp_path))
        with pytest.raises(DocumentFetchError, match="invalid JSON"):
            asyncio.run(cache.get())


class TestCancellationAndUnexpectedErrors:
    def test_cancelled_caller_leaves_shared_fetch_running(self):
        site = FakeSite({"/doc.json": {"a": 1}})

        async def go(cache):
            first = asyncio.ensure_future(cache.get())
            second = asyncio.ensure_future(cache.get())
            await asyncio.sleep(0)
            first.cancel()
            results = await asyncio.gather(first, second, return_exceptions=True)
            return results, await cache.get()

        (first, second), later = _run_http(site, go)
        assert isinstance(first, asyncio.CancelledError)
        assert second == {"a": 1}
        assert later == {"a": 1}
        assert site.count("/doc.json") == 1

    def test_timeout_around_get_does_not_poison_cache(self):
        site = FakeSite({"/doc.json": {"a": 1}})

        async def go(cache):
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(cache.get(), timeout=0.001)
            return await cache.get()

        assert _run_http(site, go) == {"a": 1}
        assert site.count("/doc.json") == 1

    def test_unexpected_fetcher_error_is_wrapped_then_retried(self):
        calls = []

        async def fetch(location):
            calls.append(location)
            if len(calls) == 1:
                raise RuntimeError("client has been closed")
            return {"a": 1}

        cache = DocumentCache("data/pois.json", fetch, error_cls=StatsStoreUnavailable)
        with pytest.raises(StatsStoreUnavailable, match="RuntimeError: client has been closed"):
            asyncio.run(cache.get())
        assert asyncio.run(cache.get()) == {"a": 1}
        assert len(calls) == 2
