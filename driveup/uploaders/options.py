"""Immutable options for the chunked upload engine."""

from __future__ import annotations

from dataclasses import dataclass

from driveup.core.validation import (
    validate_chunk_size,
    validate_conflict_behavior,
    validate_timeout,
)
from driveup.uploaders.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DIRECTORY_CONFLICT_BEHAVIOR,
    DEFAULT_REQUEST_TIMEOUT,
)


@dataclass(frozen=True)
class UploadOptions:
    """Options shared by the orchestrator and transmitter of one engine.

    All fields are validated on construction, so an invalid chunk size fails
    before any request is issued.

    Attributes:
        chunk_size: Bytes per chunk; a positive multiple of 320 KiB.
        request_timeout: Timeout in seconds for each chunk PUT.
        directory_conflict_behavior: One of fail, ignore, rename, replace.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    directory_conflict_behavior: str = DEFAULT_DIRECTORY_CONFLICT_BEHAVIOR

    def __post_init__(self) -> None:
        validate_chunk_size(self.chunk_size)
        validate_timeout(self.request_timeout, field="request_timeout")
        validate_conflict_behavior(self.directory_conflict_behavior)
