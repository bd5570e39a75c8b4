"""Share-link generation through free URL shorteners.

- short links: is.gd per POI, resumable, plus the short code → POI id
  reverse map the resolver reads
- masked links: tinyurl with v.gd as backup, for the links column of the
  campus spreadsheet
"""

import csv
import json
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import httpx

from campus_wrapped.config import ShortenerConfig
from campus_wrapped.errors import ShortenerError
from campus_wrapped.models import ShortLink, StatRecord

logger = logging.getLogger(__name__)


# --- Shorteners ---


class Shortener(Protocol):
    name: str

    def shorten(self, long_url: str) -> str:
        """Return the short URL; raise ShortenerError on failure."""
        ...


class GdShortener:
    """is.gd / v.gd JSON API (same interface, different host)."""

    def __init__(self, client: httpx.Client, endpoint: str, name: str = "is.gd") -> None:
        self.client = client
        self.endpoint = endpoint
        self.name = name

    def shorten(self, long_url: str) -> str:
        try:
            response = self.client.get(self.endpoint, params={"format": "json", "url": long_url})
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ShortenerError(f"{self.name}: {e}") from e
        short = data.get("shorturl") if isinstance(data, dict) else None
        if not short:
            message = data.get("errormessage") if isinstance(data, dict) else None
            raise ShortenerError(f"{self.name}: {message or 'Unknown error'}")
        return short


class TinyUrlShortener:
    """tinyurl.com plain-text API."""

    name = "tinyurl"

    def __init__(self, client: httpx.Client, endpoint: str) -> None:
        self.client = client
        self.endpoint = endpoint

    def shorten(self, long_url: str) -> str:
        try:
            response = self.client.get(self.endpoint, params={"url": long_url})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ShortenerError(f"{self.name}: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ShortenerError(f"{self.name}: {e}") from e
        short = response.text.strip()
        if not short.startswith("http"):
            raise ShortenerError(f"{self.name}: Invalid response {short[:60]!r}")
        return short


def shorten_with_fallback(shorteners: Iterable[Shortener], long_url: str) -> str | None:
    """First successful short URL from shorteners, in order."""
    for shortener in shorteners:
        try:
            return shortener.shorten(long_url)
        except ShortenerError as e:
            logger.warning("Error shortening %s: %s", long_url, e)
    return None


# --- Short links (is.gd, per POI) ---


@dataclass
class GenerationResult:
    total: int = 0
    created: int = 0
    skipped: int = 0
    errors: int = 0

    def __repr__(self) -> str:
        return (
            f"GenerationResult(total={self.total}, created={self.created}, "
            f"skipped={self.skipped}, errors={self.errors})"
        )


def long_url_for(base_url: str, poi_id: str) -> str:
    return f"{base_url.rstrip('/')}/#/{poi_id}"


def load_short_links(path: Path) -> dict[str, ShortLink]:
    """Existing short-links.json, or empty if missing/unreadable."""
    if not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return {poi_id: ShortLink.model_validate(entry) for poi_id, entry in raw.items()}
    except (ValueError, AttributeError) as e:
        logger.warning("Starting fresh, could not read %s: %s", path, e)
        return {}


def save_short_links(links: dict[str, ShortLink], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {poi_id: link.model_dump(by_alias=True, exclude_none=True) for poi_id, link in links.items()}
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def build_reverse_map(links: dict[str, ShortLink]) -> dict[str, str]:
    """short code → POI id. A code seen twice keeps the later POI."""
    return {link.short_code: poi_id for poi_id, link in links.items() if link.short_url}


def generate_short_links(
    records: dict[str, StatRecord],
    shortener: Shortener,
    output_path: Path,
    reverse_path: Path,
    base_url: str,
    config: ShortenerConfig | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> GenerationResult:
    """Create a short URL for every POI that does not have one yet.

    Progress is written to output_path every checkpoint_every successes so an
    interrupted run can be resumed. The reverse map is rebuilt at the end.
    """
    config = config or ShortenerConfig()
    links = load_short_links(output_path)
    if links:
        logger.info("Loaded %d existing short links", len(links))

    result = GenerationResult(total=len(records))
    poi_ids = list(records)

    for i, poi_id in enumerate(poi_ids):
        if poi_id in links:
            logger.debug("[%d/%d] Skipped %s, already exists", i + 1, len(poi_ids), poi_id)
            result.skipped += 1
            continue

        record = records[poi_id]
        long_url = long_url_for(base_url, poi_id)
        logger.info("[%d/%d] Creating short URL for %s", i + 1, len(poi_ids), record.college_name)

        try:
            short_url = shortener.shorten(long_url)
        except ShortenerError as e:
            logger.warning("Failed to create short URL for %s: %s", poi_id, e)
            result.errors += 1
        else:
            links[poi_id] = ShortLink(
                short_url=short_url,
                long_url=long_url,
                college_name=record.college_name,
                created_at=datetime.now(timezone.utc).isoformat(),
            )
            result.created += 1
            if result.created % config.checkpoint_every == 0:
                save_short_links(links, output_path)
                logger.info("Progress saved (%d successful)", result.created)

        if i < len(poi_ids) - 1:
            sleep(config.delay_seconds)

    save_short_links(links, output_path)
    reverse = build_reverse_map(links)
    reverse_path.parent.mkdir(parents=True, exist_ok=True)
    reverse_path.write_text(json.dumps(reverse, indent=2), encoding="utf-8")
    logger.info("Short links: %r; reverse mapping saved to %s", result, reverse_path)
    return result


def export_short_links_csv(links: dict[str, ShortLink], output_path: Path) -> int:
    """Write College Name,POI ID,Short URL,Full URL. Returns row count."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    rows = 0
    with output_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["College Name", "POI ID", "Short URL", "Full URL"])
        for poi_id, link in links.items():
            if not link.short_url:
                continue
            writer.writerow([link.college_name or "Unknown", poi_id, link.short_url, link.long_url])
            rows += 1
    logger.info("Generated CSV with %d short links: %s", rows, output_path)
    return rows


# --- Masked links (tinyurl → v.gd, from the campus sheet) ---


COL_POI_ID = "POI Id"
COL_WEBLINK = "Weblink"
COL_MASKED = "Masked Weblink"


def generate_masked_links(
    csv_path: Path,
    shorteners: list[Shortener],
    csv_out: Path,
    json_out: Path,
    config: ShortenerConfig | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, str]:
    """Mask each row's Weblink; write the sheet with a Masked Weblink column
    and the POI id → masked link JSON the share button reads.

    When every shortener fails the original link is kept.
    """
    config = config or ShortenerConfig()
    with csv_path.open(newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        fieldnames = list(reader.fieldnames or [])
        rows = list(reader)

    if COL_POI_ID not in fieldnames or COL_WEBLINK not in fieldnames:
        raise ValueError(f"Required columns {COL_POI_ID!r} and {COL_WEBLINK!r} not found in {csv_path}")

    masked: dict[str, str] = {}
    logger.info("Processing %d campuses", len(rows))
    for i, row in enumerate(rows):
        poi_id = (row.get(COL_POI_ID) or "").strip()
        weblink = (row.get(COL_WEBLINK) or "").strip()
        if not poi_id or not weblink:
            logger.warning("Skipping row %d: missing POI ID or Weblink", i + 2)
            row[COL_MASKED] = ""
            continue

        link = shorten_with_fallback(shorteners, weblink)
        if link is None:
            logger.warning("All shorteners failed for %s, using original URL", weblink)
            link = weblink
        masked[poi_id] = link
        row[COL_MASKED] = link
        sleep(config.masked_delay_seconds)

    csv_out.parent.mkdir(parents=True, exist_ok=True)
    with csv_out.open("w", newline="", encoding="utf-8") as f:
        if COL_MASKED not in fieldnames:
            fieldnames.append(COL_MASKED)
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)

    json_out.parent.mkdir(parents=True, exist_ok=True)
    json_out.write_text(json.dumps(masked, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Masked %d links; mapping saved to %s", len(masked), json_out)
    return masked
