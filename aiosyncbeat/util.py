"""Utility methods."""

import random
import uuid


def new_id() -> str:
    """Return a random identifier for members and tracks."""
    return uuid.uuid4().hex[:12]


def new_room_code() -> str:
    """Return a random four digit room code."""
    return str(random.randint(1000, 9999))  # noqa: S311
