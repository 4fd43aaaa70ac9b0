"""Drive service: item lookup, folders, reads, moves and file writes.

Small payloads are written with a single PUT; anything above
``SIMPLE_UPLOAD_LIMIT`` goes through a chunked upload session.
"""

from __future__ import annotations

import logging
import posixpath
import time
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO, Optional
from urllib.parse import quote

import httpx

from driveup.core.exceptions import (
    CopyFailedError,
    DriveUpError,
    MoveFailedError,
    OperationError,
    ReadFailedError,
    RequestFailedError,
    ResourceNotFoundError,
    TransportError,
    ValidationError,
    WriteFailedError,
)
from driveup.core.validation import validate_drive_path
from driveup.models.drive_item import DriveItem
from driveup.models.progress import UploadProgress
from driveup.uploaders.constants import SIMPLE_UPLOAD_LIMIT
from driveup.uploaders.options import UploadOptions
from driveup.uploaders.orchestrator import UploadOrchestrator
from driveup.uploaders.session import UploadSessionNegotiator
from driveup.uploaders.source import BytesChunkSource, ChunkSource, StreamChunkSource
from driveup.uploaders.transmitter import ChunkTransmitter

from .base import BaseService

if TYPE_CHECKING:
    from driveup.core.client import GraphClient

logger = logging.getLogger(__name__)

ROOT_ALIASES = ("", ".")


class DriveService(BaseService):
    """Service for one drive.

    Args:
        client: Graph API client.
        drive_id: Drive identifier.
        options: Upload engine options; defaults apply when omitted.
        sleep: Wait function used between chunk retries.
    """

    def __init__(
        self,
        client: "GraphClient",
        drive_id: str,
        options: Optional[UploadOptions] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(client)
        self.drive_id = drive_id
        self.options = options or UploadOptions()
        self.sleep = sleep

    # =========================================================================
    # Paths
    # =========================================================================

    @property
    def root_url(self) -> str:
        return f"/drives/{self.drive_id}/root"

    def url_to_path(self, path: str) -> str:
        """API URL addressing the item at a drive-relative path."""
        path = path.strip("/")
        if path in ROOT_ALIASES:
            return self.root_url
        return f"{self.root_url}:/{quote(path)}"

    def children_url(self, path: str) -> str:
        """API URL of the children collection of a folder."""
        if path.strip("/") in ROOT_ALIASES:
            return f"{self.root_url}/children"
        return f"{self.url_to_path(path)}:/children"

    # =========================================================================
    # Lookup
    # =========================================================================

    def get_item(self, path: str) -> DriveItem:
        """Get metadata for the item at ``path``.

        Raises:
            ResourceNotFoundError: If nothing exists at ``path``.
        """
        return DriveItem.model_validate(self._get(self.url_to_path(path)))

    def file_exists(self, path: str) -> bool:
        try:
            return self.get_item(path).is_file
        except ResourceNotFoundError:
            return False

    def directory_exists(self, path: str) -> bool:
        try:
            return self.get_item(path).is_folder
        except ResourceNotFoundError:
            return False

    def list_children(self, directory: str = "", deep: bool = False) -> list[DriveItem]:
        """List the items inside ``directory``.

        Args:
            directory: Drive-relative folder path; the root by default.
            deep: Also list the contents of every nested folder.

        Returns:
            Direct children first, then the contents of nested folders.
        """
        rows = self._paginate(self.children_url(directory))
        items = [DriveItem.model_validate(row) for row in rows]
        if not deep:
            return items

        folders = [item for item in items if item.is_folder]
        while folders:
            folder = folders.pop()
            rows = self._paginate(f"/drives/{self.drive_id}/items/{folder.id}/children")
            children = [DriveItem.model_validate(row) for row in rows]
            items.extend(children)
            folders.extend(child for child in children if child.is_folder)
        return items

    def delete(self, path: str) -> bool:
        """Delete the file or folder at ``path``."""
        path = validate_drive_path(path)
        if not path:
            raise OperationError("delete", "Refusing to delete the drive root")
        return self._delete(self.url_to_path(path))

    def delete_directory(self, path: str) -> bool:
        """Delete a folder and everything in it.

        Raises:
            OperationError: If ``path`` is not a folder.
        """
        if not self.get_item(path).is_folder:
            raise OperationError("delete", f"Not a directory: {path}", {"path": path})
        return self.delete(path)

    # =========================================================================
    # Folders
    # =========================================================================

    def create_directory(self, path: str) -> Optional[DriveItem]:
        """Create a folder.

        With the ``ignore`` conflict behavior an existing folder is left
        alone and None is returned.

        Raises:
            OperationError: If the folder cannot be created.
        """
        path = validate_drive_path(path)
        behavior = self.options.directory_conflict_behavior
        if behavior == "ignore" and self.directory_exists(path):
            return None

        parent, name = posixpath.split(path)
        body: dict[str, Any] = {"name": name, "folder": {}}
        if behavior != "ignore":
            body["@microsoft.graph.conflictBehavior"] = behavior

        try:
            data = self._post(self.children_url(parent), json=body)
        except DriveUpError as e:
            raise OperationError(
                "create_directory", f"Unable to create directory: {e}", {"path": path}
            ) from e

        logger.info("Created directory %s", path)
        return DriveItem.model_validate(data) if isinstance(data, dict) else None

    def ensure_directory(self, path: str) -> None:
        """Create ``path`` and any missing parent folders."""
        path = validate_drive_path(path)
        if not path or self.directory_exists(path):
            return
        parent = posixpath.dirname(path)
        if parent:
            self.ensure_directory(parent)
        self.create_directory(path)

    def _target_path(self, path: str) -> str:
        path = validate_drive_path(path)
        if not path:
            raise ValidationError("A file path is required", field="path")
        return path

    def _ensure_parent(self, path: str) -> None:
        if "/" in path:
            self.ensure_directory(posixpath.dirname(path))

    # =========================================================================
    # Writes
    # =========================================================================

    def write(
        self,
        path: str,
        contents: bytes,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None,
    ) -> DriveItem:
        """Write ``contents`` to ``path``, creating parent folders.

        Raises:
            WriteFailedError: On any failure.
        """
        if len(contents) > SIMPLE_UPLOAD_LIMIT:
            return self.upload(path, BytesChunkSource(contents), progress_callback)

        try:
            path = self._target_path(path)
            self._ensure_parent(path)
            data = self._put(
                f"{self.url_to_path(path)}:/content",
                content=contents,
                headers={"Content-Type": "application/octet-stream"},
            )
            return DriveItem.model_validate(data)
        except DriveUpError as e:
            raise WriteFailedError(path, e) from e
        except ValueError as e:
            raise WriteFailedError(path, OperationError("write", str(e))) from e

    def write_stream(
        self,
        path: str,
        stream: BinaryIO,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None,
    ) -> DriveItem:
        """Upload a binary stream to ``path`` through an upload session."""
        return self.upload(path, StreamChunkSource(stream), progress_callback)

    def upload_file(
        self,
        local_path: Path,
        path: str,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None,
    ) -> DriveItem:
        """Upload a local file to ``path``.

        Raises:
            FileNotFoundError: If ``local_path`` does not exist.
            WriteFailedError: On any upload failure.
        """
        if not local_path.is_file():
            raise FileNotFoundError(f"File not found: {local_path}")

        if local_path.stat().st_size <= SIMPLE_UPLOAD_LIMIT:
            return self.write(path, local_path.read_bytes(), progress_callback)

        with open(local_path, "rb") as f:
            return self.write_stream(path, f, progress_callback)

    def upload(
        self,
        path: str,
        source: ChunkSource,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None,
    ) -> DriveItem:
        """Upload a chunk source to ``path`` through an upload session.

        Raises:
            WriteFailedError: On any failure; the remote session is abandoned.
        """
        try:
            path = self._target_path(path)
            self._ensure_parent(path)
        except DriveUpError as e:
            raise WriteFailedError(path, e) from e

        with self.client.transfer_client(self.options.request_timeout) as http:
            orchestrator = UploadOrchestrator(
                UploadSessionNegotiator(self.client, self.drive_id),
                ChunkTransmitter(http, self.options, sleep=self.sleep),
                self.options,
            )
            return orchestrator.upload(path, source, progress_callback)

    # =========================================================================
    # Reads
    # =========================================================================

    def _readable_item(self, path: str) -> tuple[str, DriveItem]:
        try:
            path = self._target_path(path)
            item = self.get_item(path)
        except DriveUpError as e:
            raise ReadFailedError(path, e) from e
        if not item.is_file:
            raise ReadFailedError(path, OperationError("read", "Drive item is not a file"))
        if not item.download_url:
            raise ReadFailedError(path, OperationError("read", "Drive item has no download URL"))
        return path, item

    def read(self, path: str) -> bytes:
        """Return the contents of the file at ``path``.

        Raises:
            ReadFailedError: On any failure.
        """
        return b"".join(self.read_stream(path))

    def read_stream(self, path: str) -> Iterator[bytes]:
        """Stream the contents of the file at ``path``.

        The item is looked up immediately; the content is fetched from its
        pre-authorised download URL as the iterator is consumed.

        Raises:
            ReadFailedError: On any failure, during lookup or iteration.
        """
        path, item = self._readable_item(path)
        return self._download(path, str(item.download_url))

    def _download(self, path: str, url: str) -> Iterator[bytes]:
        try:
            with self.client.transfer_client(self.options.request_timeout) as http:
                with http.stream("GET", url) as resp:
                    if resp.is_error:
                        raise RequestFailedError("GET", path, resp.status_code)
                    yield from resp.iter_bytes()
        except httpx.TransportError as e:
            raise ReadFailedError(path, TransportError(url, e)) from e
        except DriveUpError as e:
            raise ReadFailedError(path, e) from e

    def download_file(self, path: str, local_path: Path) -> int:
        """Download the file at ``path`` to ``local_path``.

        Returns:
            Number of bytes written.

        Raises:
            ReadFailedError: On any failure; a partial local file is removed.
        """
        written = 0
        try:
            with open(local_path, "wb") as f:
                for block in self.read_stream(path):
                    f.write(block)
                    written += len(block)
        except ReadFailedError:
            local_path.unlink(missing_ok=True)
            raise
        logger.info("Downloaded %s (%d bytes)", path, written)
        return written

    # =========================================================================
    # Move / Copy
    # =========================================================================

    def _relocation(self, destination: str) -> dict[str, Any]:
        destination = self._target_path(destination)
        parent, name = posixpath.split(destination)
        return {
            "parentReference": {"driveId": self.drive_id, "id": self.get_item(parent).id},
            "name": name,
        }

    def move(self, source: str, destination: str) -> DriveItem:
        """Move or rename an item.

        The destination folder must already exist.

        Raises:
            MoveFailedError: On any failure.
        """
        try:
            source_path = self._target_path(source)
            body = self._relocation(destination)
            data = self._patch(self.url_to_path(source_path), json=body)
            return DriveItem.model_validate(data)
        except (DriveUpError, ValueError) as e:
            raise MoveFailedError(source, destination, e) from e

    def copy(self, source: str, destination: str) -> Optional[str]:
        """Start copying an item.

        Copies run asynchronously on the server.

        Returns:
            URL of the copy monitor, when the server provides one.

        Raises:
            CopyFailedError: If the copy could not be started.
        """
        try:
            source_path = self._target_path(source)
            body = self._relocation(destination)
            resp = self.client.post(f"{self.url_to_path(source_path)}:/copy", json=body)
        except DriveUpError as e:
            raise CopyFailedError(source, destination, e) from e
        logger.info("Copy of %s to %s accepted", source, destination)
        return resp.headers.get("Location")
