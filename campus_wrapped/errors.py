"""Exception types for campus wrapped."""


class CampusWrappedError(Exception):
    """Base class for all campus wrapped errors."""


class DocumentFetchError(CampusWrappedError):
    """A published JSON document could not be fetched or decoded."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to load {url}: {reason}")
        self.url = url
        self.reason = reason


class StatsStoreUnavailable(DocumentFetchError):
    """The primary statistics store (pois.json) failed to load."""


class ShortenerError(CampusWrappedError):
    """A URL shortening service refused or failed a request."""


class PlaybackError(CampusWrappedError):
    """The audio element refused or failed to start playback.

    ``reason`` carries the browser's error name, e.g. ``NotAllowedError``
    when autoplay policy blocked a play() outside a user gesture.
    """

    def __init__(self, reason: str, message: str = "") -> None:
        super().__init__(message or reason)
        self.reason = reason
