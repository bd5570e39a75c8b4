"""Tests for share-link lookup."""

import asyncio

import httpx

from campus_wrapped.share import ShareLinks, share_text

from conftest import FakeSite

MASKED_PATH = "/data/masked-links.json"
SHORT_PATH = "/data/short-links.json"

SHORT_LINKS = {
    "abc123": {
        "shortUrl": "https://is.gd/xy9",
        "longUrl": "https://wrapped.test/#/abc123",
        "collegeName": "X Institute",
        "createdAt": "2025-12-01T10:00:00+00:00",
    },
    "broken": {"longUrl": "https://wrapped.test/#/broken"},
}


def _run(site: FakeSite, config, fn):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(site.handler)) as client:
            return await fn(ShareLinks.from_config(config, client))

    return asyncio.run(go())


class TestShareLinks:
    def test_masked_link_preferred(self, config):
        site = FakeSite({MASKED_PATH: {"abc123": "https://tinyurl.com/xinst"}})
        url = _run(site, config, lambda s: s.share_url("abc123", "https://wrapped.test/abc123"))
        assert url == "https://tinyurl.com/xinst"

    def test_falls_back_to_current_url(self, config):
        site = FakeSite({MASKED_PATH: {}})
        url = _run(site, config, lambda s: s.share_url("abc123", "https://wrapped.test/abc123"))
        assert url == "https://wrapped.test/abc123"

    def test_missing_masked_document(self, config):
        site = FakeSite({})
        url = _run(site, config, lambda s: s.share_url("abc123", "https://wrapped.test/abc123"))
        assert url == "https://wrapped.test/abc123"

    def test_masked_document_cached(self, config):
        site = FakeSite({MASKED_PATH: {"a": "https://t/a", "b": "https://t/b"}})

        async def go(share):
            return [await share.masked_link("a"), await share.masked_link("b")]

        assert _run(site, config, go) == ["https://t/a", "https://t/b"]
        assert site.count(MASKED_PATH) == 1

    def test_short_url(self, config):
        site = FakeSite({SHORT_PATH: SHORT_LINKS})
        assert _run(site, config, lambda s: s.short_url("abc123")) == "https://is.gd/xy9"

    def test_short_url_missing_or_malformed(self, config):
        site = FakeSite({SHORT_PATH: SHORT_LINKS})

        async def go(share):
            return await share.short_url("nope"), await share.short_url("broken"), await share.short_url("")

        assert _run(site, config, go) == (None, None, None)

    def test_short_links_unavailable(self, config):
        site = FakeSite({}, broken={SHORT_PATH})
        assert _run(site, config, lambda s: s.short_url("abc123")) is None


def test_share_text():
    text = share_text("KIIT")
    assert text["title"] == "KIIT Campus Wrapped"
    assert text["text"] == "Check out KIIT's Campus Wrapped!"
