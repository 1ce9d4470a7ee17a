"""Classification of track URLs into display metadata.

Resolution only looks at the URL string, it never performs network requests. A URL
that cannot be parsed resolves to a generic descriptor so adding a track never fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from yarl import URL

from aiosyncbeat.models import Platform

logger = logging.getLogger(__name__)

DEFAULT_THUMBNAIL = "https://picsum.photos/200"
SPOTIFY_THUMBNAIL = (
    "https://upload.wikimedia.org/wikipedia/commons/1/19/Spotify_logo_without_text.svg"
)
YOUTUBE_THUMBNAIL = "https://img.youtube.com/vi/{video_id}/0.jpg"

_PLATFORM_MARKERS: tuple[tuple[Platform, tuple[str, ...]], ...] = (
    (Platform.YOUTUBE, ("youtube.com", "youtu.be")),
    (Platform.SPOTIFY, ("spotify.com",)),
    (Platform.SOUNDCLOUD, ("soundcloud.com",)),
)


@dataclass(slots=True, frozen=True)
class TrackDescriptor:
    """Display metadata of a track URL."""

    platform: Platform
    title: str
    thumbnail_ref: str
    duration_seconds: float | None = None


def detect_platform(url: str) -> Platform:
    """Return the platform a URL belongs to."""
    for platform, markers in _PLATFORM_MARKERS:
        if any(marker in url for marker in markers):
            return platform
    return Platform.GENERIC


def youtube_video_id(url: str) -> str | None:
    """Extract the video id of a YouTube URL, if it has one."""
    try:
        parsed = URL(url)
    except (TypeError, ValueError):
        logger.debug("Could not parse YouTube URL %r", url)
        return None
    if "youtu.be" in url:
        return parsed.name or None
    return parsed.query.get("v") or None


def resolve_track(url: str) -> TrackDescriptor:
    """Resolve ``url`` into a descriptor. Never raises for malformed input."""
    platform = detect_platform(url)
    if platform is Platform.YOUTUBE:
        video_id = youtube_video_id(url)
        if video_id is None:
            return TrackDescriptor(
                platform=platform,
                title=f"YouTube Video ({url[-11:]})",
                thumbnail_ref=DEFAULT_THUMBNAIL,
            )
        return TrackDescriptor(
            platform=platform,
            title=f"YouTube Track {video_id}",
            thumbnail_ref=YOUTUBE_THUMBNAIL.format(video_id=video_id),
        )
    if platform is Platform.SPOTIFY:
        return TrackDescriptor(
            platform=platform, title="Spotify Track", thumbnail_ref=SPOTIFY_THUMBNAIL
        )
    return TrackDescriptor(platform=platform, title="External Link", thumbnail_ref=DEFAULT_THUMBNAIL)
