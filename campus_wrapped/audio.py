"""Gesture-gated background music.

Browsers only allow audio to start from inside a user gesture. The state
here tracks whether a gesture has happened, whether music is playing, and
whether a play request arrived too early and is waiting for that gesture.

The transition functions are pure: they take an AudioState and return the
next state plus the action the caller should perform. AudioUnlockCoordinator
applies them to a Player.
"""

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol

from campus_wrapped.config import AudioConfig
from campus_wrapped.errors import PlaybackError

logger = logging.getLogger(__name__)

NOT_ALLOWED = "NotAllowedError"


class AudioAction(str, Enum):
    NONE = "none"
    DEFER = "defer"
    PLAY = "play"


@dataclass(frozen=True)
class AudioState:
    user_interacted: bool = False
    is_playing: bool = False
    pending_play: bool = False


# --- Transitions ---


def request_play(state: AudioState) -> tuple[AudioState, AudioAction]:
    if state.is_playing:
        return state, AudioAction.NONE
    if not state.user_interacted:
        return replace(state, pending_play=True), AudioAction.DEFER
    return state, AudioAction.PLAY


def resume(state: AudioState) -> tuple[AudioState, AudioAction]:
    """First gesture: mark interaction and release a deferred play."""
    state = replace(state, user_interacted=True)
    if state.pending_play:
        return replace(state, pending_play=False), AudioAction.PLAY
    return state, AudioAction.NONE


def playback_started(state: AudioState) -> AudioState:
    return replace(state, is_playing=True)


def playback_failed(state: AudioState, reason: str) -> AudioState:
    """Record a failed play().

    An autoplay refusal re-arms pending_play so the next gesture retries.
    """
    state = replace(state, is_playing=False)
    if reason == NOT_ALLOWED:
        state = replace(state, pending_play=True)
    return state


def clamp_volume(volume: float) -> float:
    return max(0.0, min(1.0, volume))


def screen_volume(
    screen_index: int,
    total_screens: int,
    target: float,
    muted: bool = False,
    config: AudioConfig | None = None,
    rng: random.Random | None = None,
) -> float:
    """Volume for a screen: quieter intro, slight variation on stat screens."""
    if muted:
        return 0.0
    config = config or AudioConfig()
    if screen_index == 0:
        return clamp_volume(target * config.intro_volume_factor)
    if screen_index < total_screens - 1:
        rng = rng or random.Random()
        low = config.stat_volume_min_factor
        return clamp_volume(target * rng.uniform(low, 1.0))
    return clamp_volume(target)


# --- Driver ---


class Player(Protocol):
    def play(self) -> None:
        """Start playback; raise PlaybackError if refused."""
        ...

    def set_volume(self, volume: float) -> None:
        ...


class AudioUnlockCoordinator:
    """Applies the audio transitions to a concrete Player.

    Playback is never paused by the coordinator; only volume changes once
    music is running.
    """

    def __init__(self, player: Player, config: AudioConfig | None = None) -> None:
        self.player = player
        self.config = config or AudioConfig()
        self.state = AudioState()
        self.volume = self.config.default_volume
        self.muted = False

    @property
    def is_playing(self) -> bool:
        return self.state.is_playing

    def request_play(self) -> AudioAction:
        self.state, action = request_play(self.state)
        if action is AudioAction.DEFER:
            logger.debug("Audio playback deferred until user interaction")
        self._apply(action)
        return action

    def resume(self) -> AudioAction:
        self.state, action = resume(self.state)
        self._apply(action)
        return action

    def on_gesture(self, event_type: str) -> bool:
        """Feed a DOM event type; returns True if it counted as a gesture."""
        if event_type not in self.config.gesture_events:
            return False
        self.resume()
        return True

    def on_screen_change(self, screen_index: int, total_screens: int, rng: random.Random | None = None) -> float:
        """Keep music going across screens and retarget the volume."""
        if not self.state.user_interacted:
            return self.volume
        if not self.state.is_playing:
            self.request_play()
        level = screen_volume(
            screen_index, total_screens, self.volume,
            muted=self.muted, config=self.config, rng=rng,
        )
        self.player.set_volume(level)
        return level

    def set_volume(self, volume: float) -> None:
        self.volume = clamp_volume(volume)
        self.player.set_volume(0.0 if self.muted else self.volume)

    def toggle_mute(self) -> bool:
        self.muted = not self.muted
        self.player.set_volume(0.0 if self.muted else self.volume)
        return self.muted

    def _apply(self, action: AudioAction) -> None:
        if action is not AudioAction.PLAY:
            return
        try:
            self.player.play()
        except PlaybackError as e:
            logger.warning("Error playing background music: %s", e.reason)
            self.state = playback_failed(self.state, e.reason)
            return
        self.state = playback_started(self.state)
        logger.info("Background music started playing")
