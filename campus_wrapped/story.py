"""The wrapped story: fixed screen sequence and tap navigation."""

import logging
from dataclasses import dataclass

from campus_wrapped.config import StoryConfig
from campus_wrapped.models import Screen, ScreenType, StatRecord

logger = logging.getLogger(__name__)


def format_inr(value: int) -> str:
    """Rupee amount with Indian digit grouping: 123456 -> ₹1,23,456."""
    digits = str(abs(int(value)))
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    sign = "-" if value < 0 else ""
    return f"₹{sign}{','.join(groups + [tail])}"


def build_story(record: StatRecord) -> list[Screen]:
    """Intro, the seven stat screens in display order, outro."""
    s = record.stats
    name = record.college_name

    def stat(stat_type: str, title: str, value: str | int, subtitle: str, fmt: str | None = None) -> Screen:
        display = format_inr(value) if fmt == "currency" else str(value)
        return Screen(
            type=ScreenType.STAT, stat_type=stat_type, title=title,
            value=value, display_value=display, subtitle=subtitle, format=fmt,
        )

    return [
        Screen(type=ScreenType.INTRO, title=name),
        stat("favourite_dish", "Your campus runs on", s.favourite_dish,
             "When in doubt, order a Biryani!"),
        stat("largest_order_value", f"Someone at {name} said:", s.largest_order_value,
             "One order. Infinite courage.", fmt="currency"),
        stat("restaurant", f"The unofficial mess of {name}:", s.unofficial_favorite_restaurant,
             "Loyalty stronger than attendance."),
        stat("12am_craving", "At 12:00 AM…", s.official_12am_craving,
             "Hunger doesn't respect curfew"),
        stat("max_orders", "One student.", s.max_orders_in_a_week, "Consistency is key."),
        stat("pizzas", "One day.", s.max_pizzas_single_day, "The oven never rested."),
        stat("biryanis", "Biryani domination:", s.max_biryanis_single_day, "History was cooked"),
        Screen(type=ScreenType.OUTRO, title=name),
    ]


@dataclass
class TapResult:
    index: int
    moved: bool
    unlock_audio: bool = False


class StoryNavigator:
    """Manual tap navigation: left half goes back, right half forward.

    Any tap on the intro advances and asks for audio to be unlocked, since
    that tap is the first user gesture.
    """

    def __init__(self, screens: list[Screen], config: StoryConfig | None = None) -> None:
        if not screens:
            raise ValueError("Story needs at least one screen")
        self.screens = screens
        self.config = config or StoryConfig()
        self.current = 0
        self._last_tap_ms: int | None = None
        self._last_tap_screen = 0

    @property
    def screen(self) -> Screen:
        return self.screens[self.current]

    @property
    def at_end(self) -> bool:
        return self.current == len(self.screens) - 1

    def _debounced(self, now_ms: int) -> bool:
        if self._last_tap_ms is None:
            return False
        elapsed = now_ms - self._last_tap_ms
        if elapsed < self.config.tap_debounce_ms:
            return True
        return self._last_tap_screen == self.current and elapsed < self.config.same_screen_guard_ms

    def tap(self, x: float, width: float, now_ms: int) -> TapResult:
        if self._debounced(now_ms):
            return TapResult(self.current, moved=False)
        self._last_tap_ms = now_ms
        self._last_tap_screen = self.current

        before = self.current
        unlock = False
        if self.screen.type is ScreenType.INTRO:
            unlock = True
            self.current = min(self.current + 1, len(self.screens) - 1)
        elif x < width / 2:
            self.current = max(self.current - 1, 0)
        else:
            self.current = min(self.current + 1, len(self.screens) - 1)

        if self.current != before:
            logger.debug("Screen %d -> %d", before, self.current)
        return TapResult(self.current, moved=self.current != before, unlock_audio=unlock)

    def replay(self) -> None:
        self.current = 0
        self._last_tap_ms = None
        self._last_tap_screen = 0
