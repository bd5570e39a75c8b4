"""Lazily fetched, session-lifetime cached JSON documents.

Each published document (pois.json, short-links-reverse.json, ...) gets one
DocumentCache. The first get() starts a fetch task; concurrent callers await
that same task, so a document is requested at most once per cache unless the
fetch fails, in which case the slot is cleared and a later call retries.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import httpx

from campus_wrapped.errors import DocumentFetchError

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[dict[str, Any]]]


def http_fetcher(client: httpx.AsyncClient) -> Fetcher:
    """Fetch documents over HTTP GET with the given client."""

    async def fetch(url: str) -> dict[str, Any]:
        try:
            response = await client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise DocumentFetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise DocumentFetchError(url, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise DocumentFetchError(url, f"invalid JSON: {e}") from e
        return data

    return fetch


def file_fetcher(root: Path) -> Fetcher:
    """Read documents from a local directory (e.g. the built public/ dir)."""

    async def fetch(path: str) -> dict[str, Any]:
        full = root / path.lstrip("/")
        try:
            return json.loads(full.read_text(encoding="utf-8"))
        except OSError as e:
            raise DocumentFetchError(str(full), str(e)) from e
        except ValueError as e:
            raise DocumentFetchError(str(full), f"invalid JSON: {e}") from e

    return fetch


class DocumentCache:
    """One cache slot for one JSON object document."""

    def __init__(
        self,
        location: str,
        fetch: Fetcher,
        error_cls: type[DocumentFetchError] = DocumentFetchError,
    ) -> None:
        self.location = location
        self._fetch = fetch
        self._error_cls = error_cls
        self._value: dict[str, Any] | None = None
        self._inflight: asyncio.Task | None = None
        self.fetch_count = 0

    @property
    def loaded(self) -> bool:
        return self._value is not None

    async def get(self) -> dict[str, Any]:
        """Return the cached document, fetching it on first use.

        The shared fetch is shielded: a caller that is cancelled stops
        waiting, but the fetch keeps going for everyone else.
        """
        if self._value is not None:
            return self._value

        if self._inflight is None:
            task = asyncio.ensure_future(self._load())
            task.add_done_callback(self._release)
            self._inflight = task
        return await asyncio.shield(self._inflight)

    def _release(self, task: asyncio.Task) -> None:
        # Success is kept in _value; a failed or cancelled fetch frees the slot.
        if self._inflight is task:
            self._inflight = None

    async def _load(self) -> dict[str, Any]:
        self.fetch_count += 1
        logger.debug("Fetching %s (attempt %d)", self.location, self.fetch_count)
        try:
            data = await self._fetch(self.location)
        except DocumentFetchError as e:
            raise self._error_cls(e.url, e.reason) from e
        except Exception as e:
            raise self._error_cls(self.location, f"{type(e).__name__}: {e}") from e

        if not isinstance(data, dict):
            raise self._error_cls(self.location, f"expected a JSON object, got {type(data).__name__}")

        logger.info("Loaded %s (%d entries)", self.location, len(data))
        self._value = data
        return data
