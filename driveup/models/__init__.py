"""Data models for driveup.

Provides Pydantic models for Graph drive resources and upload progress tracking.
"""

from __future__ import annotations

from .base import BaseModel
from .drive_item import DriveItem, FileFacet, FolderFacet, ItemReference
from .progress import UploadPhase, UploadProgress
from .upload_session import UploadSession

__all__ = [
    # Base
    "BaseModel",
    # Resources
    "DriveItem",
    "FileFacet",
    "FolderFacet",
    "ItemReference",
    "UploadSession",
    # Progress
    "UploadPhase",
    "UploadProgress",
]
