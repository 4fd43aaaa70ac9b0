"""Shared constants for the chunked upload engine.

Chunk sizes must be multiples of 320 KiB; the Graph upload service rejects
misaligned ranges on every chunk except the last one.
"""

from driveup.core.timeouts import DEFAULT_REQUEST_TIMEOUT_SECONDS
from driveup.core.validation import CHUNK_ALIGNMENT

# =============================================================================
# Chunking
# =============================================================================

# 10 x 320 KiB
DEFAULT_CHUNK_SIZE = CHUNK_ALIGNMENT * 10

# HTTP timeout for a single chunk PUT
DEFAULT_REQUEST_TIMEOUT = DEFAULT_REQUEST_TIMEOUT_SECONDS

# Payloads above this size go through an upload session instead of one PUT
SIMPLE_UPLOAD_LIMIT = 4 * 1024 * 1024

# =============================================================================
# Retry
# =============================================================================

# Backoff retries allowed for server errors on one chunk
MAX_BACKOFF_ATTEMPTS = 10

# Base for the 2^attempt backoff delay (seconds)
BACKOFF_BASE = 2

# Wait used when a 429 response has no usable Retry-After header
DEFAULT_RETRY_AFTER_SECONDS = 1

# Directory conflict behavior when none is configured
DEFAULT_DIRECTORY_CONFLICT_BEHAVIOR = "ignore"
