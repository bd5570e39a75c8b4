"""Configuration loading for campus wrapped."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class DataConfig(BaseModel):
    base_url: str = "https://f20230152.github.io/CAMPUS-WORKING-FINAL/"
    base_path: str = "/CAMPUS-WORKING-FINAL/"
    stats_path: str = "data/pois.json"
    reverse_map_path: str = "data/short-links-reverse.json"
    short_links_path: str = "data/short-links.json"
    masked_links_path: str = "data/masked-links.json"
    public_dir: str = "public"

    def url_for(self, path: str) -> str:
        """Join a document path onto base_url."""
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")


class ShortenerConfig(BaseModel):
    isgd_endpoint: str = "https://is.gd/create.php"
    vgd_endpoint: str = "https://v.gd/create.php"
    tinyurl_endpoint: str = "https://tinyurl.com/api-create.php"
    delay_seconds: float = 2.0
    masked_delay_seconds: float = 0.2
    checkpoint_every: int = 10


class AudioConfig(BaseModel):
    default_volume: float = 0.4
    gesture_events: list[str] = Field(default_factory=lambda: [
        "click", "touchstart", "keydown",
    ])
    intro_volume_factor: float = 0.7
    stat_volume_min_factor: float = 0.85


class StoryConfig(BaseModel):
    tap_debounce_ms: int = 300
    same_screen_guard_ms: int = 500
    intro_ms: int = 4000
    stat_ms: int = 5500
    outro_ms: int = 4000


class Config(BaseModel):
    data: DataConfig = Field(default_factory=DataConfig)
    shortener: ShortenerConfig = Field(default_factory=ShortenerConfig)
    audio: AudioConfig = Field(default_factory=AudioConfig)
    story: StoryConfig = Field(default_factory=StoryConfig)

    @property
    def resolved_public_dir(self) -> Path:
        """Resolve public_dir relative to project root."""
        p = Path(self.data.public_dir)
        if p.is_absolute():
            return p
        return _project_root() / p

    def public_file(self, path: str) -> Path:
        return self.resolved_public_dir / path


def _project_root() -> Path:
    """Return the campus wrapped project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file. Falls back to defaults if file missing.

    CAMPUS_WRAPPED_BASE_URL and CAMPUS_WRAPPED_BASE_PATH override the
    corresponding data settings after the file is read.
    """
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    raw: dict[str, Any] = {}
    if config_path.exists():
        raw = yaml.safe_load(config_path.read_text()) or {}
    config = Config(**raw)

    base_url = os.environ.get("CAMPUS_WRAPPED_BASE_URL")
    if base_url:
        config.data.base_url = base_url
    base_path = os.environ.get("CAMPUS_WRAPPED_BASE_PATH")
    if base_path:
        config.data.base_path = base_path

    return config
