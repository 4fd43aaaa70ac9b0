"""Pytest configuration and fixtures for driveup tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Generator
from unittest.mock import MagicMock

import httpx
import pytest

from driveup.models.upload_session import UploadSession

UPLOAD_URL = "https://upload.example.org/session/abc"

SAMPLE_ITEM = {
    "id": "01ABCDEF",
    "name": "report.bin",
    "size": 1048576,
    "createdDateTime": "2026-01-01T10:00:00Z",
    "lastModifiedDateTime": "2026-01-02T10:00:00Z",
    "webUrl": "https://example.sharepoint.com/report.bin",
    "file": {"mimeType": "application/octet-stream"},
    "parentReference": {"driveId": "drive-1", "id": "PARENT", "path": "/drive/root:/docs"},
}


def make_response(
    status_code: int,
    json: Any | None = None,
    headers: dict[str, str] | None = None,
    method: str = "PUT",
    url: str = UPLOAD_URL,
) -> httpx.Response:
    """Build a real httpx.Response bound to a request."""
    req = httpx.Request(method, url)
    if json is not None:
        return httpx.Response(status_code, request=req, json=json, headers=headers)
    return httpx.Response(status_code, request=req, headers=headers)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def session() -> UploadSession:
    """Negotiated upload session."""
    return UploadSession(upload_url=UPLOAD_URL)


@pytest.fixture
def mock_http() -> MagicMock:
    """Stand-in for the unauthenticated chunk httpx.Client."""
    return MagicMock(spec=httpx.Client)


@pytest.fixture
def sleeps() -> list[float]:
    """Recorded retry delays."""
    return []


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: work
output_format: table

profiles:
  work:
    drive_id: b!work-drive
    timeout: 45
    chunk_size: 655360
    request_timeout: 120
    directory_conflict_behavior: rename

  personal:
    drive_id: b!personal-drive
"""
