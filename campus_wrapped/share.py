"""Share-link lookup for the outro share button."""

import logging

import httpx
from pydantic import ValidationError

from campus_wrapped.config import Config
from campus_wrapped.documents import DocumentCache, http_fetcher
from campus_wrapped.errors import DocumentFetchError
from campus_wrapped.models import ShortLink

logger = logging.getLogger(__name__)


class ShareLinks:
    """Masked and short links per POI. Missing documents mean no link."""

    def __init__(self, masked: DocumentCache, short: DocumentCache) -> None:
        self.masked = masked
        self.short = short

    @classmethod
    def from_config(cls, config: Config, client: httpx.AsyncClient) -> "ShareLinks":
        fetch = http_fetcher(client)
        return cls(
            masked=DocumentCache(config.data.url_for(config.data.masked_links_path), fetch),
            short=DocumentCache(config.data.url_for(config.data.short_links_path), fetch),
        )

    async def masked_link(self, poi_id: str) -> str | None:
        try:
            links = await self.masked.get()
        except DocumentFetchError as e:
            logger.warning("Masked links file not available: %s", e)
            return None
        link = links.get(poi_id)
        return link if isinstance(link, str) and link else None

    async def short_url(self, poi_id: str) -> str | None:
        if not poi_id:
            return None
        try:
            links = await self.short.get()
        except DocumentFetchError as e:
            logger.warning("Failed to load short links mapping: %s", e)
            return None
        entry = links.get(poi_id)
        if entry is None:
            return None
        try:
            return ShortLink.model_validate(entry).short_url
        except ValidationError:
            logger.warning("Malformed short link entry for %s", poi_id)
            return None

    async def share_url(self, poi_id: str, current_url: str) -> str:
        """Masked link if one was generated, otherwise the page URL."""
        return await self.masked_link(poi_id) or current_url


def share_text(college_name: str) -> dict[str, str]:
    """Title and text for the native share sheet."""
    return {
        "title": f"{college_name} Campus Wrapped",
        "text": f"Check out {college_name}'s Campus Wrapped!",
    }
