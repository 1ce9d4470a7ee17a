"""Tunable timings of a syncbeat room."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_DRIFT_THRESHOLD = 2.0
DEFAULT_DRIFT_CHECK_INTERVAL = 1.0
DEFAULT_HOST_BROADCAST_INTERVAL = 2.0
DEFAULT_JOIN_DELAY = 0.5


@dataclass(slots=True)
class RoomConfig:
    """Timing configuration shared by host and listener roles."""

    drift_threshold: float = DEFAULT_DRIFT_THRESHOLD
    """Seconds a listener may deviate from the host before it seeks."""
    drift_check_interval: float = DEFAULT_DRIFT_CHECK_INTERVAL
    """Seconds between two drift corrections on a listener."""
    host_broadcast_interval: float = DEFAULT_HOST_BROADCAST_INTERVAL
    """Seconds between two cursor re-broadcasts of a playing host."""
    join_delay: float = DEFAULT_JOIN_DELAY
    """Seconds a joiner waits after subscribing before it announces itself."""

    def __post_init__(self) -> None:
        """Validate the provided timings."""
        if self.drift_threshold <= 0:
            raise ValueError("drift_threshold must be positive")
        if self.drift_check_interval <= 0:
            raise ValueError("drift_check_interval must be positive")
        if self.host_broadcast_interval <= 0:
            raise ValueError("host_broadcast_interval must be positive")
        if self.join_delay < 0:
            raise ValueError("join_delay must not be negative")
