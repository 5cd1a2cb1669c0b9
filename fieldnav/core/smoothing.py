"""Debounced moving-average smoothing of the bearing/heading delta.

Raw deltas jitter with the compass and can arrive faster than a pointer
should move. The smoother rate-limits ingestion, averages the last few
accepted samples and only publishes a new value once it has moved past a
small deadband.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .types import Alignment

BUFFER_SIZE = 5
MIN_INTERVAL_S = 0.1
DEADBAND_DEG = 2.0

ALIGNED_MAX_DEG = 10.0
ADJUST_MAX_DEG = 45.0


@dataclass(frozen=True, slots=True)
class SmoothingState:
    buffer: Tuple[float, ...] = ()
    smoothed: Optional[float] = None
    last_emitted: Optional[float] = None

    @property
    def mean(self) -> Optional[float]:
        if not self.buffer:
            return None
        return sum(self.buffer) / len(self.buffer)


EMPTY = SmoothingState()


def step_smoothing(
    state: SmoothingState,
    raw_delta: Optional[float],
    now: float,
    buffer_size: int = BUFFER_SIZE,
    min_interval_s: float = MIN_INTERVAL_S,
    deadband_deg: float = DEADBAND_DEG,
) -> Tuple[SmoothingState, Optional[float]]:
    """Feed one raw delta taken at monotonic time ``now`` (seconds).

    Returns the new state and the value emitted on this step, or None when
    the visible smoothed value did not change. A None ``raw_delta`` clears
    everything.
    """
    if raw_delta is None:
        return EMPTY, None

    # interval counts from the last emission, not the last buffered sample
    if state.last_emitted is not None and now - state.last_emitted < min_interval_s:
        return state, None

    buffer = (state.buffer + (float(raw_delta),))[-buffer_size:]
    held = SmoothingState(buffer=buffer, smoothed=state.smoothed, last_emitted=state.last_emitted)
    average = held.mean

    if state.smoothed is None or abs(average - state.smoothed) >= deadband_deg:
        return SmoothingState(buffer=buffer, smoothed=average, last_emitted=now), average
    return held, None


def classify_alignment(smoothed_delta: Optional[float]) -> Alignment:
    if smoothed_delta is None:
        return Alignment.WAITING
    d = abs(smoothed_delta)
    if d <= ALIGNED_MAX_DEG:
        return Alignment.ALIGNED
    if d <= ADJUST_MAX_DEG:
        return Alignment.ADJUST
    return Alignment.OFF


# (pointer color index, ring opacity) for each alignment class
_CUES = {
    Alignment.ALIGNED: (0, 0.4),
    Alignment.ADJUST: (1, 0.3),
    Alignment.OFF: (2, 0.2),
    Alignment.WAITING: (3, 0.0),
}


def alignment_cue(alignment: Alignment) -> Tuple[int, float]:
    """Color index and ring opacity driving the directional indicator."""
    return _CUES[alignment]


class HeadingSmoother:
    """Owns a SmoothingState; thin stateful wrapper around step_smoothing."""

    def __init__(
        self,
        buffer_size: int = BUFFER_SIZE,
        min_interval_s: float = MIN_INTERVAL_S,
        deadband_deg: float = DEADBAND_DEG,
    ):
        if buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        if min_interval_s < 0 or deadband_deg < 0:
            raise ValueError("min_interval_s and deadband_deg must be non-negative")
        self.buffer_size = int(buffer_size)
        self.min_interval_s = float(min_interval_s)
        self.deadband_deg = float(deadband_deg)
        self._state = EMPTY

    @property
    def state(self) -> SmoothingState:
        return self._state

    @property
    def value(self) -> Optional[float]:
        return self._state.smoothed

    def update(self, raw_delta: Optional[float], now: float) -> Optional[float]:
        self._state, emitted = step_smoothing(
            self._state, raw_delta, now, self.buffer_size, self.min_interval_s, self.deadband_deg
        )
        return emitted

    def reset(self) -> None:
        self._state = EMPTY
