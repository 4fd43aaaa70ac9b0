"""Service layer for driveup.

Provides service classes that encapsulate Graph drive operations.
"""

from __future__ import annotations

from .base import BaseService
from .drive import DriveService

__all__ = [
    "BaseService",
    "DriveService",
]
