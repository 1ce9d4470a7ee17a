"""Conversion of room messages to and from the transport payload format."""

from __future__ import annotations

import logging
from typing import Any

import orjson

from aiosyncbeat.models import MessageType, RoomMessage

logger = logging.getLogger(__name__)

_KNOWN_TYPES = frozenset(member.value for member in MessageType)


def encode_message(message: RoomMessage) -> str:
    """Serialize ``message`` to a JSON string."""
    return message.to_json()


def decode_message(data: str | bytes) -> RoomMessage | None:
    """
    Parse a transport payload into a room message.

    Returns None for payloads that are not valid JSON objects, carry an unknown ``type``
    or do not match the shape of their type. Such payloads are never fatal.
    """
    try:
        raw: Any = orjson.loads(data)
    except orjson.JSONDecodeError:
        logger.debug("Ignoring payload that is not JSON: %r", data)
        return None

    if not isinstance(raw, dict):
        logger.debug("Ignoring payload that is not an object: %r", data)
        return None

    message_type = raw.get("type")
    if not isinstance(message_type, str) or message_type not in _KNOWN_TYPES:
        logger.debug("Ignoring message of unknown type %r", message_type)
        return None

    try:
        return RoomMessage.from_dict(raw)
    except Exception:
        logger.debug("Ignoring malformed %s message: %r", message_type, data, exc_info=True)
        return None
