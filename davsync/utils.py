"""Utility functions for davsync."""

import posixpath
from datetime import datetime, timezone
from typing import Optional

# =============================================================================
# Constants
# =============================================================================

# Well-known remote location of the sync metadata blob
DEFAULT_METADATA_PATH: str = "/.syncmetadata"

# Capacity of the event channel between the engine and its consumer
DEFAULT_CHANNEL_CAPACITY: int = 100

# Request timeout for WebDAV calls (seconds)
DEFAULT_TIMEOUT: float = 30.0


# =============================================================================
# Timestamp utilities
# =============================================================================


def timestamp_to_utc(timestamp: float) -> datetime:
    """Convert a Unix timestamp to a timezone-aware UTC datetime.

    Args:
        timestamp: Seconds since the epoch (e.g. ``os.stat().st_mtime``)

    Returns:
        datetime in UTC
    """
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def parse_iso_timestamp(timestamp_str: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp into a UTC datetime.

    Naive values are assumed to be UTC.

    Args:
        timestamp_str: ISO format timestamp string

    Returns:
        datetime in UTC or None if parsing fails
    """
    if not timestamp_str:
        return None

    if timestamp_str.endswith("Z"):
        timestamp_str = timestamp_str[:-1] + "+00:00"

    try:
        dt = datetime.fromisoformat(timestamp_str)
    except (ValueError, TypeError):
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# =============================================================================
# Remote path utilities
# =============================================================================


def normalize_remote_path(path: str) -> str:
    """Normalize a remote path to an absolute POSIX path.

    Examples:
        >>> normalize_remote_path("docs//a.txt")
        '/docs/a.txt'
        >>> normalize_remote_path("/docs/../b.txt")
        '/b.txt'
    """
    normalized = posixpath.normpath("/" + path.strip())
    # normpath keeps a leading double slash as-is
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def remote_parent_segments(path: str) -> list[str]:
    """Return every intermediate directory of a remote path, root first.

    Each entry carries a trailing slash, as WebDAV collections expect.

    Examples:
        >>> remote_parent_segments("/a/b/c.txt")
        ['/a/', '/a/b/']
        >>> remote_parent_segments("/c.txt")
        []
    """
    parent = posixpath.dirname(normalize_remote_path(path))
    segments: list[str] = []
    current = "/"
    for part in parent.split("/"):
        if not part:
            continue
        current = f"{current}{part}/"
        segments.append(current)
    return segments


def is_valid_remote_path(path: str) -> bool:
    """Check that a remote path can be used as a WebDAV resource path."""
    if not path or not path.strip():
        return False
    if "\x00" in path or "\\" in path:
        return False
    return normalize_remote_path(path) != "/"
