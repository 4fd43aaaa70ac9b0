"""Chunked upload engine for driveup.

- Chunk sources expose a payload as 320 KiB-aligned byte ranges
- The negotiator creates an upload session for a drive path
- The transmitter sends one chunk and owns its retry/backoff decisions
- The orchestrator drives a whole upload from session to created item

These are internal implementation details. Use `DriveService` from
`driveup.services.drive` as the public API.
"""

from driveup.uploaders.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
    MAX_BACKOFF_ATTEMPTS,
    SIMPLE_UPLOAD_LIMIT,
)
from driveup.uploaders.options import UploadOptions
from driveup.uploaders.orchestrator import TransferState, UploadOrchestrator
from driveup.uploaders.session import UploadSessionNegotiator
from driveup.uploaders.source import BytesChunkSource, Chunk, ChunkSource, StreamChunkSource
from driveup.uploaders.transmitter import (
    ChunkTransmitter,
    Outcome,
    OutcomeKind,
    classify_response,
    parse_retry_after,
)

__all__ = [
    # Constants
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_REQUEST_TIMEOUT",
    "MAX_BACKOFF_ATTEMPTS",
    "SIMPLE_UPLOAD_LIMIT",
    # Options
    "UploadOptions",
    # Sources
    "Chunk",
    "ChunkSource",
    "StreamChunkSource",
    "BytesChunkSource",
    # Protocol
    "UploadSessionNegotiator",
    "ChunkTransmitter",
    "Outcome",
    "OutcomeKind",
    "classify_response",
    "parse_retry_after",
    "UploadOrchestrator",
    "TransferState",
]
