"""Drive item model (files and folders)."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from .base import BaseModel


class FileFacet(BaseModel):
    """Present on items that are files."""

    mime_type: Optional[str] = Field(None, alias="mimeType")
    hashes: Optional[dict[str, Any]] = None


class FolderFacet(BaseModel):
    """Present on items that are folders."""

    child_count: Optional[int] = Field(None, alias="childCount")


class ItemReference(BaseModel):
    """Reference to the parent of an item."""

    drive_id: Optional[str] = Field(None, alias="driveId")
    id: Optional[str] = None
    path: Optional[str] = None


class DriveItem(BaseModel):
    """A file or folder stored in a drive."""

    id: str
    name: Optional[str] = None
    size: Optional[int] = None
    created_date_time: Optional[datetime] = Field(None, alias="createdDateTime")
    last_modified_date_time: Optional[datetime] = Field(None, alias="lastModifiedDateTime")
    web_url: Optional[str] = Field(None, alias="webUrl")
    download_url: Optional[str] = Field(None, alias="@microsoft.graph.downloadUrl")
    file: Optional[FileFacet] = None
    folder: Optional[FolderFacet] = None
    parent_reference: Optional[ItemReference] = Field(None, alias="parentReference")

    @classmethod
    def table_columns(cls) -> list[str]:
        """Return columns for table output."""
        return ["name", "type", "size_display", "last_modified", "id"]

    @property
    def is_file(self) -> bool:
        return self.file is not None

    @property
    def is_folder(self) -> bool:
        return self.folder is not None

    @property
    def mime_type(self) -> Optional[str]:
        return self.file.mime_type if self.file else None

    @property
    def path(self) -> Optional[str]:
        """Drive-relative path, with the ``/drive/root:`` prefix removed."""
        if not self.parent_reference or self.parent_reference.path is None:
            return None
        parent = self.parent_reference.path.split("root:", 1)[-1]
        return f"{parent.rstrip('/')}/{self.name}"

    @property
    def size_display(self) -> str:
        """Return human-readable size."""
        if self.size is None:
            return ""
        size = float(self.size)
        for unit in ["B", "KB", "MB", "GB", "TB"]:
            if size < 1024:
                return f"{size:.1f} {unit}"
            size /= 1024
        return f"{size:.1f} PB"

    def to_row(self, columns: list[str] | None = None) -> dict[str, str]:
        """Convert to row for table output."""
        cols = columns or self.table_columns()
        data = self.to_dict()
        data["type"] = "folder" if self.is_folder else "file"
        data["size_display"] = self.size_display
        if self.last_modified_date_time:
            data["last_modified"] = self.last_modified_date_time.isoformat()
        return {col: str(data.get(col, "")) for col in cols}
