"""Pydantic models for campus wrapped."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ResolverState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    RESOLVED = "resolved"
    DEFAULTED = "defaulted"


class ScreenType(str, Enum):
    INTRO = "intro"
    STAT = "stat"
    OUTRO = "outro"


# --- Statistics records (what comes out of pois.json) ---


class CampusStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    favourite_dish: str = ""
    largest_order_value: int = Field(default=0, ge=0)
    unofficial_favorite_restaurant: str = ""
    official_12am_craving: str = ""
    max_orders_in_a_week: int = Field(default=0, ge=0)
    max_pizzas_single_day: int = Field(default=0, ge=0)
    max_biryanis_single_day: int = Field(default=0, ge=0)


class StatRecord(BaseModel):
    """One campus's statistics snapshot."""
    model_config = ConfigDict(frozen=True)

    poi_id: str
    college_name: str
    stats: CampusStats


# --- Link documents (what datagen writes) ---


class ShortLink(BaseModel):
    """Forward short-link entry, keyed by POI id in short-links.json."""
    model_config = ConfigDict(populate_by_name=True)

    short_url: str = Field(alias="shortUrl")
    long_url: str = Field(alias="longUrl")
    college_name: str | None = Field(default=None, alias="collegeName")
    created_at: str | None = Field(default=None, alias="createdAt")

    @property
    def short_code(self) -> str:
        return self.short_url.rstrip("/").split("/")[-1]


# --- Story screens ---


class Screen(BaseModel):
    type: ScreenType
    stat_type: str | None = None
    title: str = ""
    value: str | int | None = None
    display_value: str = ""
    subtitle: str = ""
    format: str | None = None  # 'currency' for rupee amounts
