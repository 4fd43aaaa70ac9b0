"""Core modules for driveup."""

from driveup.core.client import GraphClient
from driveup.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile
from driveup.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    CopyFailedError,
    DriveUpError,
    MoveFailedError,
    NameConflictError,
    NetworkError,
    OperationError,
    ReadFailedError,
    ResourceNotFoundError,
    RetryExhaustedError,
    SessionExpiredError,
    SessionNegotiationError,
    TransportError,
    UnexpectedStatusError,
    UploadError,
    ValidationError,
    WriteFailedError,
)
from driveup.core.logging import LogContext, get_logger, setup_logging
from driveup.core.output import (
    OutputFormat,
    console,
    print_error,
    print_json,
    print_output,
    print_success,
    print_table,
    print_warning,
)
from driveup.core.validation import (
    validate_chunk_size,
    validate_conflict_behavior,
    validate_drive_path,
    validate_server_url,
    validate_timeout,
)

__all__ = [
    # Exceptions
    "DriveUpError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "TransportError",
    "ResourceNotFoundError",
    "ValidationError",
    "OperationError",
    "UploadError",
    "SessionNegotiationError",
    "SessionExpiredError",
    "NameConflictError",
    "RetryExhaustedError",
    "UnexpectedStatusError",
    "WriteFailedError",
    "ReadFailedError",
    "MoveFailedError",
    "CopyFailedError",
    # Validation
    "validate_server_url",
    "validate_chunk_size",
    "validate_timeout",
    "validate_conflict_behavior",
    "validate_drive_path",
    # Config
    "Config",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Client
    "GraphClient",
    # Output
    "OutputFormat",
    "print_output",
    "print_table",
    "print_json",
    "print_error",
    "print_warning",
    "print_success",
    "console",
    # Logging
    "get_logger",
    "setup_logging",
    "LogContext",
]
