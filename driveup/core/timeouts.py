"""Shared timeout defaults."""

# Metadata calls against the Graph API
DEFAULT_HTTP_TIMEOUT_SECONDS = 30

# Individual chunk PUTs; raise for larger chunks or higher latency
DEFAULT_REQUEST_TIMEOUT_SECONDS = 90
