"""Playback driver boundary and the adapter the sync engine drives it through."""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from aiosyncbeat.models import DriverState, Platform, Track

logger = logging.getLogger(__name__)

StateListener = Callable[[DriverState], None]


class PlaybackDriver(ABC):
    """
    Interface of the media player rendering the current track.

    Implementations wrap an external player widget. All calls are synchronous and
    fire-and-forget; state changes are reported back through listeners registered with
    add_state_listener().
    """

    def __init__(self) -> None:
        """Initialize the listener registry."""
        self._state_listeners: list[StateListener] = []

    @abstractmethod
    def get_position(self) -> float:
        """Return the playback position in seconds."""

    @abstractmethod
    def get_state(self) -> DriverState:
        """Return the current player state."""

    @abstractmethod
    def play(self) -> None:
        """Start or resume playback."""

    @abstractmethod
    def pause(self) -> None:
        """Pause playback."""

    @abstractmethod
    def seek(self, seconds: float) -> None:
        """Jump to ``seconds`` in the loaded track."""

    @abstractmethod
    def load(self, track: Track | None) -> None:
        """Cue ``track`` without starting it, or unload when None."""

    def supports(self, track: Track) -> bool:
        """Return True if this driver can render ``track`` in place."""
        return track.platform is Platform.YOUTUBE

    def add_state_listener(self, callback: StateListener) -> Callable[[], None]:
        """
        Register a callback invoked on every state change.

        Returns a function to remove the listener.
        """
        self._state_listeners.append(callback)
        return lambda: self._state_listeners.remove(callback)

    def _notify_state(self, state: DriverState) -> None:
        for callback in list(self._state_listeners):
            try:
                callback(state)
            except Exception:
                logger.exception("Error in driver state listener %s", callback)


class PlaybackAdapter:
    """
    Guards every call into a PlaybackDriver.

    Tracks the driver cannot render are kept as the loaded track but every control call
    becomes a no-op for them, the user is expected to open the link instead. Failures of
    the driver are logged and suppressed so the protocol never depends on them.
    """

    def __init__(self, driver: PlaybackDriver) -> None:
        """Wrap ``driver``."""
        self._driver = driver
        self._track: Track | None = None
        self._interactive = False

    @property
    def driver(self) -> PlaybackDriver:
        """Return the wrapped driver."""
        return self._driver

    @property
    def track(self) -> Track | None:
        """Return the loaded track."""
        return self._track

    @property
    def interactive(self) -> bool:
        """Return True if the loaded track is rendered by the driver."""
        return self._track is not None and self._interactive

    def load(self, track: Track | None) -> None:
        """Load ``track`` unless it is already loaded."""
        current_id = self._track.id if self._track is not None else None
        new_id = track.id if track is not None else None
        if current_id == new_id:
            return
        interactive = bool(track is not None and self._call("supports", track))
        if track is None:
            logger.debug("Unloading playback driver")
        elif interactive:
            logger.info("Loading track %s (%s)", track.id, track.title)
        else:
            logger.info("Track %s (%s) is link-out only", track.id, track.platform.value)
        try:
            self._driver.load(track if interactive else None)
        except Exception:
            # Nothing counts as loaded so the next correction retries.
            logger.warning("Playback driver call load failed", exc_info=True)
            self._track = None
            self._interactive = False
            return
        self._track = track
        self._interactive = interactive

    def unload(self) -> None:
        """Unload the current track."""
        self.load(None)

    def position(self, fallback: float) -> float:
        """Return the driver position, or ``fallback`` when it cannot be read."""
        if not self.interactive:
            return fallback
        position = self._call("get_position")
        if position is None:
            return fallback
        return float(position)

    def state(self) -> DriverState | None:
        """Return the driver state, or None when it cannot be read."""
        if not self.interactive:
            return None
        state = self._call("get_state")
        return state if isinstance(state, DriverState) else None

    def play(self) -> None:
        """Start playback of the loaded track."""
        if self.interactive:
            self._call("play")

    def pause(self) -> None:
        """Pause playback of the loaded track."""
        if self.interactive:
            self._call("pause")

    def seek(self, seconds: float) -> None:
        """Seek the loaded track to ``seconds``."""
        if self.interactive:
            self._call("seek", seconds)

    def _call(self, name: str, *args: Any) -> Any:
        try:
            return getattr(self._driver, name)(*args)
        except Exception:
            logger.warning("Playback driver call %s failed", name, exc_info=True)
            return None


class SimulatedPlaybackDriver(PlaybackDriver):
    """
    Clock driven stand-in for a media widget.

    Renders every platform. When a loop is given, the driver reports ENDED once the
    track duration (or ``default_duration``) has been played.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        clock: Callable[[], float] = time.monotonic,
        default_duration: float | None = None,
    ) -> None:
        """Create a new simulated driver."""
        super().__init__()
        self._loop = loop
        self._clock = clock
        self._default_duration = default_duration
        self._track: Track | None = None
        self._state = DriverState.UNSTARTED
        self._anchor_position = 0.0
        self._anchor_time = 0.0
        self._end_handle: asyncio.TimerHandle | None = None

    @property
    def track(self) -> Track | None:
        """Return the loaded track."""
        return self._track

    @property
    def duration(self) -> float | None:
        """Return the length of the loaded track, if known."""
        if self._track is None:
            return None
        if self._track.duration_seconds:
            return self._track.duration_seconds
        return self._default_duration

    def supports(self, track: Track) -> bool:
        """Return True, every platform is simulated."""
        return True

    def get_position(self) -> float:
        """Return the playback position in seconds."""
        position = self._anchor_position
        if self._state is DriverState.PLAYING:
            position += self._clock() - self._anchor_time
        duration = self.duration
        if duration is not None:
            position = min(position, duration)
        return position

    def get_state(self) -> DriverState:
        """Return the current player state."""
        return self._state

    def load(self, track: Track | None) -> None:
        """Cue ``track`` at position zero."""
        self._cancel_end()
        self._track = track
        self._anchor_position = 0.0
        self._anchor_time = self._clock()
        self._set_state(DriverState.UNSTARTED)

    def play(self) -> None:
        """Start or resume playback."""
        if self._track is None or self._state is DriverState.PLAYING:
            return
        if self._state is DriverState.ENDED:
            self._anchor_position = 0.0
        self._anchor_time = self._clock()
        self._set_state(DriverState.PLAYING)
        self._schedule_end()

    def pause(self) -> None:
        """Pause playback."""
        if self._state is not DriverState.PLAYING:
            return
        self._anchor_position = self.get_position()
        self._anchor_time = self._clock()
        self._cancel_end()
        self._set_state(DriverState.PAUSED)

    def seek(self, seconds: float) -> None:
        """Jump to ``seconds`` in the loaded track."""
        if self._track is None:
            return
        position = max(0.0, seconds)
        duration = self.duration
        if duration is not None:
            position = min(position, duration)
        self._anchor_position = position
        self._anchor_time = self._clock()
        if self._state is DriverState.PLAYING:
            self._schedule_end()

    def _set_state(self, state: DriverState) -> None:
        if state is self._state:
            return
        self._state = state
        self._notify_state(state)

    def _schedule_end(self) -> None:
        self._cancel_end()
        duration = self.duration
        if self._loop is None or duration is None:
            return
        remaining = max(0.0, duration - self.get_position())
        self._end_handle = self._loop.call_later(remaining, self._handle_end)

    def _cancel_end(self) -> None:
        if self._end_handle is not None:
            self._end_handle.cancel()
            self._end_handle = None

    def _handle_end(self) -> None:
        self._end_handle = None
        duration = self.duration
        self._anchor_position = duration if duration is not None else self.get_position()
        self._anchor_time = self._clock()
        self._set_state(DriverState.ENDED)
