"""Tests for listener drift evaluation."""

import pytest

from aiosyncbeat.engine import evaluate_drift
from aiosyncbeat.models import DriverState, PlaybackCursor

T = 1_000.0
THRESHOLD = 2.0

PLAYING = PlaybackCursor(
    is_playing=True, current_track_id="t1", position_seconds=10.0, observed_at=T
)


def test_drift_at_threshold_is_tolerated() -> None:
    correction = evaluate_drift(PLAYING, DriverState.PLAYING, 13.0, T + 1, THRESHOLD)

    assert correction.expected == 11.0
    assert correction.drift == pytest.approx(2.0)
    assert correction.seek_to is None
    assert not correction.needed


def test_drift_above_threshold_seeks_to_expected() -> None:
    correction = evaluate_drift(PLAYING, DriverState.PLAYING, 13.1, T + 1, THRESHOLD)

    assert correction.drift == pytest.approx(2.1)
    assert correction.seek_to == pytest.approx(11.0)


def test_seek_uses_time_of_check() -> None:
    correction = evaluate_drift(PLAYING, DriverState.PLAYING, 13.2, T + 1.1, THRESHOLD)

    assert correction.seek_to == pytest.approx(11.1)


def test_listener_behind_host() -> None:
    correction = evaluate_drift(PLAYING, DriverState.PLAYING, 5.0, T + 1, THRESHOLD)

    assert correction.seek_to == pytest.approx(11.0)


def test_play_when_host_plays() -> None:
    for state in (DriverState.UNSTARTED, DriverState.PAUSED, DriverState.ENDED):
        correction = evaluate_drift(PLAYING, state, 11.0, T + 1, THRESHOLD)
        assert correction.play
        assert not correction.pause


def test_buffering_counts_as_playing() -> None:
    correction = evaluate_drift(PLAYING, DriverState.BUFFERING, 11.0, T + 1, THRESHOLD)

    assert not correction.needed


def test_pause_when_host_paused() -> None:
    paused = PlaybackCursor(
        is_playing=False, current_track_id="t1", position_seconds=10.0, observed_at=T
    )

    correction = evaluate_drift(paused, DriverState.PLAYING, 10.5, T + 30, THRESHOLD)

    assert correction.pause
    assert not correction.play
    assert correction.expected == 10.0
    assert correction.seek_to is None


def test_paused_listener_stays_paused() -> None:
    paused = PlaybackCursor(
        is_playing=False, current_track_id="t1", position_seconds=10.0, observed_at=T
    )

    correction = evaluate_drift(paused, DriverState.PAUSED, 10.0, T + 30, THRESHOLD)

    assert not correction.needed
