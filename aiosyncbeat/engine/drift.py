"""Drift correction of a listener against the host playback cursor."""

from __future__ import annotations

from dataclasses import dataclass

from aiosyncbeat.models import DriverState, PlaybackCursor

_ACTIVE_STATES = frozenset({DriverState.PLAYING, DriverState.BUFFERING})


@dataclass(slots=True, frozen=True)
class DriftCorrection:
    """Driver calls needed to bring a listener back in line with the host."""

    expected: float
    """Host position interpolated to the time of the check."""
    drift: float
    """Absolute difference between the local and the expected position."""
    play: bool = False
    pause: bool = False
    seek_to: float | None = None

    @property
    def needed(self) -> bool:
        """Return True if any driver call is required."""
        return self.play or self.pause or self.seek_to is not None


def evaluate_drift(
    cursor: PlaybackCursor,
    driver_state: DriverState,
    actual: float,
    now: float,
    threshold: float,
) -> DriftCorrection:
    """
    Compare the local driver with the host cursor at wall clock ``now``.

    The host position always wins: a seek is requested when the local position deviates
    by strictly more than ``threshold`` seconds.
    """
    expected = cursor.expected_position(now)
    drift = abs(actual - expected)
    play = cursor.is_playing and driver_state not in _ACTIVE_STATES
    pause = not cursor.is_playing and driver_state is DriverState.PLAYING
    return DriftCorrection(
        expected=expected,
        drift=drift,
        play=play,
        pause=pause,
        seek_to=expected if drift > threshold else None,
    )
