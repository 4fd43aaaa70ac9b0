"""Progress models for chunked uploads."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UploadPhase(Enum):
    """Upload phases reported to progress callbacks."""

    NEGOTIATING = "negotiating"
    TRANSMITTING = "transmitting"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class UploadProgress:
    """Snapshot of one upload's transfer state."""

    phase: UploadPhase
    path: str
    bytes_sent: int = 0
    total_bytes: int = 0
    chunks_sent: int = 0
    message: str = ""

    @property
    def percent(self) -> float:
        """Calculate bytes completion percentage."""
        if self.total_bytes == 0:
            return 100.0 if self.phase == UploadPhase.COMPLETE else 0.0
        return (self.bytes_sent / self.total_bytes) * 100

    @property
    def is_complete(self) -> bool:
        return self.phase == UploadPhase.COMPLETE

    @property
    def has_errors(self) -> bool:
        return self.phase == UploadPhase.ERROR
