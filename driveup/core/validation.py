"""Input validation helpers for driveup."""

from __future__ import annotations

import math
from typing import Any
from urllib.parse import urlparse

from driveup.core.exceptions import (
    InvalidChunkSizeError,
    InvalidURLError,
    ValidationError,
)

# Graph requires every non-final chunk to be a multiple of 320 KiB
CHUNK_ALIGNMENT = 320 * 1024

CONFLICT_BEHAVIORS = ("fail", "ignore", "rename", "replace")


def validate_server_url(url: str) -> str:
    """Validate and normalize an API base URL.

    Args:
        url: URL to validate.

    Returns:
        URL stripped of whitespace and trailing slashes.

    Raises:
        InvalidURLError: If the URL is empty or malformed.
    """
    if not url or not isinstance(url, str):
        raise InvalidURLError(str(url), "URL is required")

    url = url.strip().rstrip("/")
    parsed = urlparse(url)

    if not parsed.scheme:
        raise InvalidURLError(url, "URL must include scheme (https://)")
    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError(url, f"Unsupported scheme: {parsed.scheme}")
    if not parsed.netloc:
        raise InvalidURLError(url, "URL must include hostname")

    return url


def validate_chunk_size(chunk_size: Any) -> int:
    """Validate an upload chunk size.

    Args:
        chunk_size: Chunk size in bytes.

    Returns:
        The chunk size as an int.

    Raises:
        InvalidChunkSizeError: If not a positive multiple of 320 KiB.
    """
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int):
        raise InvalidChunkSizeError(chunk_size)
    if chunk_size <= 0 or chunk_size % CHUNK_ALIGNMENT:
        raise InvalidChunkSizeError(chunk_size)
    return chunk_size


def validate_timeout(timeout: Any, field: str = "timeout") -> float:
    """Validate a positive timeout in seconds."""
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise ValidationError(f"Invalid {field}: {timeout!r}", field=field, value=timeout)
    if not math.isfinite(timeout) or timeout <= 0:
        raise ValidationError(f"{field} must be a positive number of seconds", field=field, value=timeout)
    return timeout


def validate_conflict_behavior(behavior: str) -> str:
    """Validate a directory conflict behavior name."""
    if behavior not in CONFLICT_BEHAVIORS:
        raise ValidationError(
            f"Invalid directory_conflict_behavior: {behavior} "
            f"(expected one of {', '.join(CONFLICT_BEHAVIORS)})",
            field="directory_conflict_behavior",
            value=behavior,
        )
    return behavior


def validate_drive_path(path: str) -> str:
    """Normalize a drive-relative path.

    Leading and trailing slashes are removed. Empty segments and parent
    references are rejected.

    Raises:
        ValidationError: If the path contains ``..`` or empty segments.
    """
    if path is None:
        raise ValidationError("Path is required", field="path")
    path = path.strip().strip("/")
    if not path:
        return ""
    for part in path.split("/"):
        if part in ("", ".."):
            raise ValidationError(f"Invalid drive path: {path}", field="path", value=path)
    return path
