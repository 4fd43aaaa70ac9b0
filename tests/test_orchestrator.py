"""Tests for the upload orchestrator."""

from __future__ import annotations

import math
import re
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest
from conftest import SAMPLE_ITEM, UPLOAD_URL, make_response

from driveup.core.exceptions import (
    InvalidChunkSizeError,
    NameConflictError,
    RetryExhaustedError,
    SessionExpiredError,
    SessionNegotiationError,
    TransportError,
    UnexpectedStatusError,
    UploadError,
    WriteFailedError,
)
from driveup.models.progress import UploadPhase, UploadProgress
from driveup.models.upload_session import UploadSession
from driveup.uploaders.options import UploadOptions
from driveup.uploaders.orchestrator import UploadOrchestrator
from driveup.uploaders.source import BytesChunkSource, Chunk
from driveup.uploaders.transmitter import ChunkTransmitter

KIB320 = 320 * 1024
RANGE_RE = re.compile(r"bytes (\d+)-(\d+)/(\d+)")


def _server(url: str, **kwargs: Any) -> httpx.Response:
    """Well-behaved session: 202 for middle chunks, 201 for the final one."""
    content_range = kwargs["headers"]["Content-Range"]
    if content_range == "bytes */0":
        return make_response(201, json=SAMPLE_ITEM)
    _, last, total = map(int, RANGE_RE.match(content_range).groups())  # type: ignore[union-attr]
    if last == total - 1:
        return make_response(201, json=SAMPLE_ITEM)
    return make_response(202)


def _ranges(mock_http: MagicMock) -> list[str]:
    return [call.kwargs["headers"]["Content-Range"] for call in mock_http.put.call_args_list]


@pytest.fixture
def negotiator() -> MagicMock:
    negotiator = MagicMock()
    negotiator.negotiate.return_value = UploadSession(upload_url=UPLOAD_URL)
    return negotiator


def _orchestrator(
    negotiator: MagicMock,
    mock_http: MagicMock,
    sleeps: list[float],
    chunk_size: int = KIB320,
) -> UploadOrchestrator:
    options = UploadOptions(chunk_size=chunk_size)
    transmitter = ChunkTransmitter(mock_http, options, sleep=sleeps.append)
    return UploadOrchestrator(negotiator, transmitter, options)


# =============================================================================
# Chunk accounting
# =============================================================================


class TestChunkAccounting:
    """Byte-range accounting over whole uploads."""

    @pytest.mark.parametrize(
        "total_size",
        [1, KIB320 - 1, KIB320, KIB320 + 1, 3 * KIB320, 3 * KIB320 + 17],
    )
    def test_chunk_count_and_final_bound(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
        total_size: int,
    ) -> None:
        mock_http.put.side_effect = _server
        orchestrator = _orchestrator(negotiator, mock_http, sleeps)

        item = orchestrator.upload("docs/report.bin", BytesChunkSource(b"\1" * total_size))

        assert item.id == SAMPLE_ITEM["id"]
        ranges = _ranges(mock_http)
        assert len(ranges) == math.ceil(total_size / KIB320)

        bounds = [int(RANGE_RE.match(r).group(2)) for r in ranges]  # type: ignore[union-attr]
        assert bounds[-1] == total_size - 1
        assert all(bound < total_size - 1 for bound in bounds[:-1])

    def test_ranges_are_contiguous(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
    ) -> None:
        mock_http.put.side_effect = _server
        total = 2 * (2 * KIB320) + 10
        orchestrator = _orchestrator(negotiator, mock_http, sleeps, chunk_size=2 * KIB320)

        orchestrator.upload("a.bin", BytesChunkSource(b"\0" * total))

        assert _ranges(mock_http) == [
            f"bytes 0-{2 * KIB320 - 1}/{total}",
            f"bytes {2 * KIB320}-{4 * KIB320 - 1}/{total}",
            f"bytes {4 * KIB320}-{total - 1}/{total}",
        ]

    def test_empty_payload_sends_one_empty_request(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
    ) -> None:
        mock_http.put.side_effect = _server
        orchestrator = _orchestrator(negotiator, mock_http, sleeps)

        item = orchestrator.upload("empty.txt", BytesChunkSource(b""))

        assert item.id == SAMPLE_ITEM["id"]
        assert mock_http.put.call_count == 1
        assert mock_http.put.call_args.kwargs["content"] == b""

    def test_negotiates_once_for_target_path(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
    ) -> None:
        mock_http.put.side_effect = _server
        orchestrator = _orchestrator(negotiator, mock_http, sleeps)

        orchestrator.upload("docs/report.bin", BytesChunkSource(b"\0" * (KIB320 * 2)))

        negotiator.negotiate.assert_called_once_with("docs/report.bin")


class TestOptionsValidation:
    """Engine options are validated before any request."""

    @pytest.mark.parametrize("chunk_size", [0, -KIB320, 1000, KIB320 + 1, 1.5 * KIB320])
    def test_misaligned_chunk_size_rejected(self, chunk_size: Any) -> None:
        with pytest.raises(InvalidChunkSizeError):
            UploadOptions(chunk_size=chunk_size)

    def test_defaults(self) -> None:
        options = UploadOptions()
        assert options.chunk_size == 3200 * 1024
        assert options.request_timeout == 90
        assert options.directory_conflict_behavior == "ignore"


# =============================================================================
# Failures
# =============================================================================


class TestFailures:
    """Failures abort the upload and surface as WriteFailedError."""

    def test_expired_session_mid_transfer(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
    ) -> None:
        mock_http.put.side_effect = [make_response(202), make_response(404)]
        orchestrator = _orchestrator(negotiator, mock_http, sleeps)

        with pytest.raises(WriteFailedError) as excinfo:
            orchestrator.upload("big.bin", BytesChunkSource(b"\0" * (KIB320 * 4)))

        assert isinstance(excinfo.value.cause, SessionExpiredError)
        assert excinfo.value.location == "big.bin"
        assert mock_http.put.call_count == 2

    def test_conflict_on_final_chunk(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
    ) -> None:
        mock_http.put.side_effect = [make_response(202), make_response(409)]
        orchestrator = _orchestrator(negotiator, mock_http, sleeps)

        with pytest.raises(WriteFailedError) as excinfo:
            orchestrator.upload("dup.bin", BytesChunkSource(b"\0" * (KIB320 + 5)))

        assert isinstance(excinfo.value.cause, NameConflictError)

    def test_conflict_on_middle_chunk_is_unexpected(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
    ) -> None:
        mock_http.put.side_effect = [make_response(409)]
        orchestrator = _orchestrator(negotiator, mock_http, sleeps)

        with pytest.raises(WriteFailedError) as excinfo:
            orchestrator.upload("dup.bin", BytesChunkSource(b"\0" * (KIB320 * 3)))

        cause = excinfo.value.cause
        assert isinstance(cause, UnexpectedStatusError)
        assert cause.status_code == 409
        assert mock_http.put.call_count == 1

    def test_retry_budget_exhausted(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
    ) -> None:
        mock_http.put.side_effect = [make_response(500) for _ in range(20)]
        orchestrator = _orchestrator(negotiator, mock_http, sleeps)

        with pytest.raises(WriteFailedError) as excinfo:
            orchestrator.upload("flaky.bin", BytesChunkSource(b"\0" * 10))

        cause = excinfo.value.cause
        assert isinstance(cause, RetryExhaustedError)
        assert cause.attempts == 10
        assert mock_http.put.call_count == 11

    def test_backoff_then_final_success(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
    ) -> None:
        mock_http.put.side_effect = [
            make_response(500),
            make_response(500),
            make_response(201, json=SAMPLE_ITEM),
        ]
        orchestrator = _orchestrator(negotiator, mock_http, sleeps)

        item = orchestrator.upload("small.bin", BytesChunkSource(b"\0" * 10))

        assert sleeps == [1, 2]
        assert item.name == "report.bin"

    def test_negotiation_failure_sends_no_chunks(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
    ) -> None:
        negotiator.negotiate.side_effect = SessionNegotiationError("x.bin", "HTTP 400")
        orchestrator = _orchestrator(negotiator, mock_http, sleeps)

        with pytest.raises(WriteFailedError) as excinfo:
            orchestrator.upload("x.bin", BytesChunkSource(b"\0" * 10))

        assert isinstance(excinfo.value.cause, SessionNegotiationError)
        mock_http.put.assert_not_called()

    def test_transport_error_surfaces_with_path(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
    ) -> None:
        mock_http.put.side_effect = httpx.ConnectError("refused")
        orchestrator = _orchestrator(negotiator, mock_http, sleeps)

        with pytest.raises(WriteFailedError) as excinfo:
            orchestrator.upload("x.bin", BytesChunkSource(b"\0" * 10))

        assert excinfo.value.location == "x.bin"
        assert isinstance(excinfo.value.cause, TransportError)
        assert isinstance(excinfo.value.cause.cause, httpx.ConnectError)

    def test_source_shorter_than_declared(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
    ) -> None:
        source = MagicMock()
        source.total_size = KIB320 * 2
        source.iter_chunks.return_value = iter([Chunk(offset=0, data=b"\0" * KIB320)])
        mock_http.put.side_effect = _server
        orchestrator = _orchestrator(negotiator, mock_http, sleeps)

        with pytest.raises(WriteFailedError) as excinfo:
            orchestrator.upload("short.bin", source)

        assert isinstance(excinfo.value.cause, UploadError)
        assert "before declared size" in str(excinfo.value.cause)

    def test_source_longer_than_declared_is_not_sent(
        self,
        negotiator: MagicMock,
        mock_http: MagicMock,
        sleeps: list[float],
    ) -> None:
        source = MagicMock()
        source.total_size = 10
        source.iter_chunks.return_value = iter([Chunk(offset=0, data=b"\0" * 20)])
        orchestrator = _orchestrator(negotiator, mock_http, sleeps)

        with pytest.raises(WriteFailedError):
            orchestrator.upload("long.bin", source)

        mock_http.put.assert_not_called()


# =============================================================================
# Progress
# =============================================================================


def test_progress_callback_reports_each_chunk(
    negotiator: MagicMock,
    mock_http: MagicMock,
    sleeps: list[float],
) -> None:
    mock_http.put.side_effect = _server
    orchestrator = _orchestrator(negotiator, mock_http, sleeps)
    updates: list[UploadProgress] = []

    orchestrator.upload("p.bin", BytesChunkSource(b"\0" * (KIB320 * 2 + 1)), updates.append)

    phases = [u.phase for u in updates]
    assert phases == [
        UploadPhase.NEGOTIATING,
        UploadPhase.TRANSMITTING,
        UploadPhase.TRANSMITTING,
        UploadPhase.COMPLETE,
    ]
    assert [u.bytes_sent for u in updates] == [0, KIB320, 2 * KIB320, 2 * KIB320 + 1]
    assert updates[-1].percent == 100.0


def test_progress_callback_reports_error(
    negotiator: MagicMock,
    mock_http: MagicMock,
    sleeps: list[float],
) -> None:
    mock_http.put.side_effect = [make_response(404)]
    orchestrator = _orchestrator(negotiator, mock_http, sleeps)
    updates: list[UploadProgress] = []

    with pytest.raises(WriteFailedError):
        orchestrator.upload("p.bin", BytesChunkSource(b"\0" * 10), updates.append)

    assert updates[-1].phase is UploadPhase.ERROR
    assert updates[-1].has_errors
