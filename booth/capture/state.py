"""Capture choreography states and the single transition function.

    Idle -> CountingDown(n) ... CountingDown(1) -> Capturing(1) -> Pausing(1)
         -> Capturing(2) -> Pausing(2) -> Capturing(3) -> Done

Any state may end in Failed(reason) instead; Done and Failed are terminal.
"""

from dataclasses import dataclass
from typing import Union

from booth.config import settings


@dataclass(frozen=True)
class CaptureConfig:
    countdown_from: int = 5
    shot_count: int = 3
    tick_seconds: float = 1.0
    shot_delay_seconds: float = 1.0
    retry_seconds: float = 1.0
    jpeg_quality: int = 90

    @classmethod
    def from_settings(cls) -> "CaptureConfig":
        return cls(
            countdown_from=settings.countdown_from,
            shot_count=settings.shot_count,
            tick_seconds=settings.countdown_tick_seconds,
            shot_delay_seconds=settings.shot_delay_seconds,
            retry_seconds=settings.camera_retry_seconds,
            jpeg_quality=settings.jpeg_quality,
        )


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class CountingDown:
    remaining: int


@dataclass(frozen=True)
class Capturing:
    index: int  # 1-based


@dataclass(frozen=True)
class Pausing:
    index: int  # shot just taken


@dataclass(frozen=True)
class Done:
    pass


@dataclass(frozen=True)
class Failed:
    reason: str


CaptureState = Union[Idle, CountingDown, Capturing, Pausing, Done, Failed]


def next_state(state: CaptureState, config: CaptureConfig) -> CaptureState:
    """Advance the choreography by one step on the success path."""
    if isinstance(state, Idle):
        if config.countdown_from >= 1:
            return CountingDown(config.countdown_from)
        return Capturing(1)
    if isinstance(state, CountingDown):
        if state.remaining > 1:
            return CountingDown(state.remaining - 1)
        return Capturing(1)
    if isinstance(state, Capturing):
        if state.index < config.shot_count:
            return Pausing(state.index)
        return Done()
    if isinstance(state, Pausing):
        return Capturing(state.index + 1)
    raise ValueError(f"No transition out of terminal state {state!r}")
