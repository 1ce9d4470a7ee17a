"""Listener role: follows the playback state of the host."""

from __future__ import annotations

import logging

from aiosyncbeat.models import PlaybackCursor, UpdateQueuePayload

from .base import SyncRole
from .drift import DriftCorrection, evaluate_drift

logger = logging.getLogger(__name__)


class ListenerRole(SyncRole):
    """
    Read-only side of the room with respect to playback.

    The cursor is only ever overwritten from SYNC_PLAYBACK messages. A periodic drift
    check keeps the local driver within the configured threshold of the position the
    host cursor interpolates to, since that position advances between messages too.
    """

    @property
    def tick_interval(self) -> float:
        """Return the drift check period."""
        return self._room.config.drift_check_interval

    def tick(self) -> None:
        """Run a drift correction."""
        self.correct_drift()

    def _on_sync_playback(self, cursor: PlaybackCursor) -> None:
        self._room.state.overwrite_cursor(cursor)
        logger.debug(
            "Cursor updated: playing=%s track=%s position=%.2f",
            cursor.is_playing,
            cursor.current_track_id,
            cursor.position_seconds,
        )
        self.correct_drift()

    def _on_update_queue(self, payload: UpdateQueuePayload) -> None:
        super()._on_update_queue(payload)
        # The cursor may point at a track that only arrived with this queue.
        self.correct_drift()

    def correct_drift(self) -> DriftCorrection | None:
        """
        Bring the local driver in line with the host cursor.

        Returns the applied correction, or None when the current track is not rendered
        by the local driver.
        """
        state = self._room.state
        adapter = self._room.adapter
        adapter.load(state.current_track())
        if not adapter.interactive:
            return None
        driver_state = adapter.state()
        if driver_state is None:
            return None

        cursor = state.cursor
        now = self._room.now()
        actual = adapter.position(fallback=cursor.expected_position(now))
        correction = evaluate_drift(
            cursor, driver_state, actual, now, self._room.config.drift_threshold
        )
        if correction.play:
            adapter.play()
        elif correction.pause:
            adapter.pause()
        if correction.seek_to is not None:
            logger.info(
                "Drift of %.2fs detected, seeking from %.2f to %.2f",
                correction.drift,
                actual,
                correction.seek_to,
            )
            adapter.seek(correction.seek_to)
        return correction
