"""Exception hierarchy for driveup.

Provides typed exceptions for different failure modes with clear error messages.
"""

from __future__ import annotations

from typing import Any


class DriveUpError(Exception):
    """Base exception for all driveup errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(DriveUpError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(DriveUpError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


class InvalidChunkSizeError(ValidationError):
    """Chunk size is not a positive multiple of the 320 KiB alignment."""

    def __init__(self, chunk_size: Any):
        super().__init__(
            f"Invalid chunk size: {chunk_size} (must be a positive multiple of 320 KiB)",
            field="chunk_size",
            value=chunk_size,
        )
        self.chunk_size = chunk_size


# =============================================================================
# Connection Errors
# =============================================================================


class ConnectionError(DriveUpError):
    """Base class for connection-related errors."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message, details)
        self.url = url


class NetworkError(ConnectionError):
    """Network-level error (DNS, TCP, TLS)."""

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Network error connecting to {url}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, url)
        self.cause = cause


class ServerUnreachableError(ConnectionError):
    """Server is not reachable."""

    def __init__(self, url: str):
        super().__init__(f"Server unreachable: {url}", url)


class TransportError(ConnectionError):
    """A request failed at the transport level (connect, read, write, timeout)."""

    def __init__(self, url: str, cause: Exception):
        super().__init__(f"Transport error talking to {url}: {cause}", url)
        self.cause = cause


class RequestFailedError(ConnectionError):
    """API request returned a non-retryable error status."""

    def __init__(self, method: str, path: str, status_code: int, body: str = ""):
        msg = f"{method} {path} failed with HTTP {status_code}"
        if body:
            msg = f"{msg}: {body[:200]}"
        super().__init__(msg)
        self.details["status_code"] = status_code
        self.method = method
        self.path = path
        self.status_code = status_code


class ClientRetryExhaustedError(ConnectionError):
    """All API client retry attempts failed."""

    def __init__(self, operation: str, attempts: int, last_error: Exception | None = None):
        msg = f"Operation '{operation}' failed after {attempts} attempts"
        if last_error:
            msg = f"{msg}: {last_error}"
        super().__init__(msg)
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(DriveUpError):
    """Authentication failed."""

    def __init__(self, url: str | None = None, reason: str = ""):
        msg = "Authentication failed"
        if url:
            msg = f"{msg} for {url}"
        if reason:
            msg = f"{msg}: {reason}"
        details = {"url": url} if url else {}
        super().__init__(msg, details)
        self.url = url
        self.reason = reason


class PermissionDeniedError(AuthenticationError):
    """User lacks permission for the requested operation."""

    def __init__(self, resource: str, operation: str = "access"):
        super().__init__(reason=f"Permission denied to {operation} {resource}")
        self.resource = resource
        self.operation = operation


# =============================================================================
# Resource Errors
# =============================================================================


class ResourceError(DriveUpError):
    """Error related to drive items."""

    def __init__(
        self,
        message: str,
        resource_type: str | None = None,
        resource_id: str | None = None,
    ):
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class ResourceNotFoundError(ResourceError):
    """Requested drive item does not exist."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            resource_type,
            resource_id,
        )


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(DriveUpError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class UploadError(OperationError):
    """Error during a chunked upload."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        full_details = details or {}
        if file_path:
            full_details["file"] = file_path
        super().__init__("upload", message, full_details)
        self.file_path = file_path


class SessionNegotiationError(UploadError):
    """Upload session could not be created for the target path."""

    def __init__(self, path: str, reason: str, cause: Exception | None = None):
        super().__init__(f"Failed to create upload session: {reason}", path)
        self.reason = reason
        self.cause = cause


class SessionExpiredError(UploadError):
    """Upload URL has expired; a new session must be created."""

    def __init__(self, upload_url: str | None = None):
        super().__init__("Upload URL has expired, please create new upload session")
        self.upload_url = upload_url


class NameConflictError(UploadError):
    """An item with the same name already exists at the destination."""

    def __init__(self, path: str | None = None):
        super().__init__(
            "File name conflict. A file with the same name already exists at target destination",
            path,
        )


class RetryExhaustedError(UploadError):
    """Server errors persisted through every backoff attempt for a chunk."""

    def __init__(self, attempts: int, content_range: str | None = None):
        details = {"content_range": content_range} if content_range else None
        super().__init__(f"Upload failed after {attempts} attempts", details=details)
        self.attempts = attempts


class UnexpectedStatusError(UploadError):
    """Chunk response carried a status code the protocol does not expect."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message, details={"status_code": status_code})
        self.status_code = status_code


class WriteFailedError(OperationError):
    """Writing to a drive location failed."""

    def __init__(self, location: str, cause: Exception | None = None):
        msg = f"Unable to write file at location: {location}"
        if cause is not None:
            msg = f"{msg}. {cause}"
        super().__init__("write", msg, {"location": location})
        self.location = location
        self.cause = cause


class ReadFailedError(OperationError):
    """Reading a drive file failed."""

    def __init__(self, location: str, cause: Exception | None = None):
        msg = f"Unable to read file at location: {location}"
        if cause is not None:
            msg = f"{msg}. {cause}"
        super().__init__("read", msg, {"location": location})
        self.location = location
        self.cause = cause


class MoveFailedError(OperationError):
    """Moving or copying a drive item failed."""

    verb = "move"

    def __init__(self, source: str, destination: str, cause: Exception | None = None):
        msg = f"Unable to {self.verb} item from {source} to {destination}"
        if cause is not None:
            msg = f"{msg}. {cause}"
        super().__init__(self.verb, msg, {"source": source, "destination": destination})
        self.source = source
        self.destination = destination
        self.cause = cause


class CopyFailedError(MoveFailedError):
    """Copying a drive item failed."""

    verb = "copy"
