"""POI resolver — maps a URL identifier to the campus record to display.

Resolution order for a raw identifier:

1. strip whitespace; empty input goes straight to the default record
2. short code → POI id via the reverse map (failures mean "no mapping")
3. each strategy in FALLBACK_STRATEGIES against the statistics store
4. the bundled default record, or MINIMAL_DEFAULT if that cannot be read
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from campus_wrapped.config import Config
from campus_wrapped.documents import DocumentCache, http_fetcher
from campus_wrapped.errors import DocumentFetchError, StatsStoreUnavailable
from campus_wrapped.models import CampusStats, ResolverState, StatRecord

logger = logging.getLogger(__name__)

DEFAULT_RECORD_PATH = Path(__file__).parent / "data" / "campus.json"

MINIMAL_DEFAULT = StatRecord(
    poi_id="default",
    college_name="Campus",
    stats=CampusStats(
        favourite_dish="biryani",
        largest_order_value=0,
        unofficial_favorite_restaurant="",
        official_12am_craving="burger",
        max_orders_in_a_week=0,
        max_pizzas_single_day=0,
        max_biryanis_single_day=0,
    ),
)

Store = Mapping[str, StatRecord]
Strategy = Callable[[Store, str], StatRecord | None]


# --- Fallback strategies ---


def exact_match(store: Store, poi_id: str) -> StatRecord | None:
    return store.get(poi_id)


def case_insensitive_match(store: Store, poi_id: str) -> StatRecord | None:
    """First key in store order whose lowercase form equals poi_id's."""
    wanted = poi_id.lower()
    for key, record in store.items():
        if key.lower() == wanted:
            return record
    return None


FALLBACK_STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("exact", exact_match),
    ("case_insensitive", case_insensitive_match),
)


# --- Default record ---


def load_default_record(path: Path = DEFAULT_RECORD_PATH) -> StatRecord:
    """Load the bundled default campus. Never raises."""
    try:
        return StatRecord.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("Error loading default data from %s: %s", path, e)
        return MINIMAL_DEFAULT


def parse_store(raw: dict[str, Any]) -> dict[str, StatRecord]:
    """Validate raw pois.json entries, keeping the document's key order.

    Malformed entries are dropped so that lookups for them degrade to the
    default record.
    """
    store: dict[str, StatRecord] = {}
    for key, value in raw.items():
        try:
            record = StatRecord.model_validate(value)
        except ValidationError as e:
            logger.warning("Skipping malformed POI %s: %s", key, e.error_count())
            continue
        if record.poi_id != key:
            logger.warning("POI key %r does not match record poi_id %r", key, record.poi_id)
        store[key] = record
    return store


# --- Resolver ---


class PoiResolver:
    """Resolves POI ids and short codes to StatRecords.

    Holds the two session-lifetime caches (statistics store and short-code
    reverse map). Construct one per application instance and pass it to
    whatever needs to resolve ids.
    """

    def __init__(
        self,
        stats: DocumentCache,
        reverse_map: DocumentCache,
        default_record: StatRecord | None = None,
        strategies: tuple[tuple[str, Strategy], ...] = FALLBACK_STRATEGIES,
    ) -> None:
        self.stats = stats
        self.reverse_map = reverse_map
        self.strategies = strategies
        self.state = ResolverState.UNINITIALIZED
        self._default_record = default_record
        self._store: dict[str, StatRecord] | None = None

    @classmethod
    def from_config(cls, config: Config, client: httpx.AsyncClient) -> "PoiResolver":
        fetch = http_fetcher(client)
        return cls(
            stats=DocumentCache(
                config.data.url_for(config.data.stats_path), fetch,
                error_cls=StatsStoreUnavailable,
            ),
            reverse_map=DocumentCache(config.data.url_for(config.data.reverse_map_path), fetch),
        )

    @property
    def default_record(self) -> StatRecord:
        if self._default_record is None:
            self._default_record = load_default_record()
        return self._default_record

    async def lookup_short_code(self, code: str) -> str | None:
        """Map a short code to its POI id. Failures read as "not found"."""
        try:
            reverse = await self.reverse_map.get()
        except DocumentFetchError as e:
            logger.warning("Failed to load reverse mapping: %s", e)
            return None
        poi_id = reverse.get(code)
        return poi_id if isinstance(poi_id, str) and poi_id else None

    async def load_store(self) -> dict[str, StatRecord]:
        """Return the validated statistics store.

        Raises:
            StatsStoreUnavailable: pois.json could not be fetched or decoded.
        """
        raw = await self.stats.get()
        if self._store is None:
            self._store = parse_store(raw)
        return self._store

    async def resolve(self, raw_id: str | None) -> StatRecord:
        """Resolve a raw URL identifier to the record to display.

        Raises:
            StatsStoreUnavailable: only when the statistics store fails to
                load. Use resolve_or_default() where no error may surface.
        """
        poi_id = (raw_id or "").strip()
        if not poi_id:
            logger.debug("No POI id given, using default data")
            self.state = ResolverState.DEFAULTED
            return self.default_record

        self.state = ResolverState.LOADING
        # Both documents are independent; start them together.
        mapped, store = await asyncio.gather(
            self.lookup_short_code(poi_id),
            self.load_store(),
        )
        if mapped:
            logger.debug("Short code %s -> POI %s", poi_id, mapped)
            poi_id = mapped

        for name, strategy in self.strategies:
            record = strategy(store, poi_id)
            if record is not None:
                logger.debug("Resolved %s via %s", poi_id, name)
                self.state = ResolverState.RESOLVED
                return record

        logger.warning("POI %s not found, using default data", poi_id)
        self.state = ResolverState.DEFAULTED
        return self.default_record

    async def resolve_or_default(self, raw_id: str | None) -> StatRecord:
        """resolve(), with a statistics store failure absorbed into the default."""
        try:
            return await self.resolve(raw_id)
        except StatsStoreUnavailable as e:
            logger.error("Error loading POI data: %s", e)
            self.state = ResolverState.DEFAULTED
            return self.default_record
