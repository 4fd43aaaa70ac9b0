"""driveup - chunked uploads to Microsoft Graph drives.

This package provides a client library and command-line interface for
writing files to OneDrive and SharePoint document libraries:
- Resumable upload sessions with 320 KiB-aligned chunks
- Per-chunk retry with Retry-After and exponential backoff
- Folder creation, item lookup and listing
"""

__version__ = "0.1.0"

from driveup.core.client import GraphClient
from driveup.core.config import Config, Profile
from driveup.core.exceptions import (
    ConfigurationError,
    DriveUpError,
    ReadFailedError,
    UploadError,
    ValidationError,
    WriteFailedError,
)
from driveup.services.drive import DriveService
from driveup.uploaders.options import UploadOptions

__all__ = [
    "__version__",
    "GraphClient",
    "Config",
    "Profile",
    "DriveService",
    "UploadOptions",
    "DriveUpError",
    "ConfigurationError",
    "UploadError",
    "ReadFailedError",
    "ValidationError",
    "WriteFailedError",
]
