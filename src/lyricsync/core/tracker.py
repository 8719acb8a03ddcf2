"""Extrapolated playback position between infrequent polls.

The tracker is either Idle (frozen) or Advancing (growing at wall-clock
rate). Each snapshot re-seeds the wall-clock reference; the estimate itself
is only replaced when it has drifted past the tolerance, so small polling
jitter never makes the highlighted line jump backwards.
"""

import time
from enum import Enum
from typing import Callable, Optional

from .. import config
from ..utils.logging import get_logger
from .models import PlaybackSnapshot, TrackedPosition

logger = get_logger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class TrackerState(str, Enum):
    IDLE = "idle"
    ADVANCING = "advancing"


class PlaybackTracker:
    """Client-side playback clock re-anchored by PlaybackSnapshots."""

    def __init__(
        self,
        drift_tolerance_ms: int = config.DRIFT_TOLERANCE_MS,
        clock: Callable[[], float] = monotonic_ms,
    ):
        self.drift_tolerance_ms = drift_tolerance_ms
        self._clock = clock
        self.position = TrackedPosition()

    def now(self) -> float:
        return self._clock()

    @property
    def state(self) -> TrackerState:
        return TrackerState.ADVANCING if self.position.is_playing else TrackerState.IDLE

    @property
    def estimated_ms(self) -> float:
        return self.position.estimated_ms

    def observe(self, snapshot: PlaybackSnapshot, now: Optional[float] = None) -> bool:
        """Apply a snapshot; returns True if the estimate was re-anchored."""
        now = self.now() if now is None else now
        pos = self.position
        reanchored = False
        if abs(pos.estimated_ms - snapshot.position_ms) > self.drift_tolerance_ms:
            logger.debug(
                f"Re-anchoring {pos.estimated_ms:.0f}ms -> {snapshot.position_ms}ms"
            )
            pos.estimated_ms = float(snapshot.position_ms)
            reanchored = True
        pos.is_playing = snapshot.is_playing
        pos.last_observed_ms = now
        return reanchored

    def tick(self, now: Optional[float] = None) -> float:
        """Advance by wall-clock time since the last reference point."""
        now = self.now() if now is None else now
        pos = self.position
        if pos.is_playing:
            if pos.last_observed_ms is not None:
                pos.estimated_ms += max(now - pos.last_observed_ms, 0.0)
            pos.last_observed_ms = now
        return pos.estimated_ms

    def reset(self) -> None:
        """No active track: back to zero and Idle."""
        self.position = TrackedPosition()
