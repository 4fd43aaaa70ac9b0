"""Chunked upload orchestration.

Drives a chunk source through the transmitter in order:

    Negotiating -> Transmitting(offset) -> Transmitting(next) | Succeeded | Failed

Chunks are strictly sequential; the remote session only accepts byte ranges
in order. Nothing here is shared between uploads, so independent uploads may
run on separate threads with their own orchestrator calls.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from driveup.core.exceptions import (
    DriveUpError,
    NameConflictError,
    RetryExhaustedError,
    SessionExpiredError,
    UnexpectedStatusError,
    UploadError,
    WriteFailedError,
)
from driveup.core.logging import LogContext
from driveup.models.drive_item import DriveItem
from driveup.models.progress import UploadPhase, UploadProgress
from driveup.models.upload_session import UploadSession
from driveup.uploaders.constants import MAX_BACKOFF_ATTEMPTS
from driveup.uploaders.options import UploadOptions
from driveup.uploaders.source import Chunk, ChunkSource
from driveup.uploaders.transmitter import ChunkTransmitter, Outcome, OutcomeKind

if TYPE_CHECKING:
    from driveup.uploaders.session import UploadSessionNegotiator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[UploadProgress], None]


@dataclass
class TransferState:
    """Byte accounting for one upload."""

    total_size: int
    next_offset: int = 0
    chunks_sent: int = 0

    def advance(self, chunk: Chunk) -> None:
        self.next_offset += chunk.length
        self.chunks_sent += 1


def _outcome_error(
    outcome: Outcome,
    session: UploadSession,
    path: str,
    chunk: Chunk,
    total_size: int,
) -> UploadError:
    if outcome.kind is OutcomeKind.EXPIRED:
        return SessionExpiredError(session.upload_url)
    if outcome.kind is OutcomeKind.CONFLICT:
        return NameConflictError(path)
    if outcome.exhausted:
        return RetryExhaustedError(MAX_BACKOFF_ATTEMPTS, chunk.content_range(total_size))
    return UnexpectedStatusError(outcome.message, outcome.status_code)


class UploadOrchestrator:
    """Uploads a chunk source to a drive path through an upload session.

    Args:
        negotiator: Creates the upload session for a path.
        transmitter: Sends individual chunks.
        options: Engine options; must be the transmitter's options too.
    """

    def __init__(
        self,
        negotiator: "UploadSessionNegotiator",
        transmitter: ChunkTransmitter,
        options: UploadOptions,
    ) -> None:
        self.negotiator = negotiator
        self.transmitter = transmitter
        self.options = options

    def _chunks(self, source: ChunkSource) -> Iterator[Chunk]:
        emitted = False
        for chunk in source.iter_chunks(self.options.chunk_size):
            emitted = True
            yield chunk
        if not emitted and source.total_size == 0:
            # An empty payload still needs one final request to complete the session
            yield Chunk(offset=0, data=b"")

    def upload(
        self,
        path: str,
        source: ChunkSource,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> DriveItem:
        """Upload ``source`` to ``path``.

        Args:
            path: Drive-relative target path.
            source: Payload to upload.
            progress_callback: Called after each accepted chunk and on
                completion or failure.

        Returns:
            The created drive item.

        Raises:
            WriteFailedError: Wrapping the cause of any failure; partial
                progress on the remote session is abandoned.
        """
        state = TransferState(total_size=source.total_size)

        def report(phase: UploadPhase, message: str = "") -> None:
            if progress_callback:
                progress_callback(
                    UploadProgress(
                        phase=phase,
                        path=path,
                        bytes_sent=state.next_offset,
                        total_bytes=state.total_size,
                        chunks_sent=state.chunks_sent,
                        message=message,
                    )
                )

        with LogContext("upload", logger, path=path, size=state.total_size) as ctx:
            try:
                report(UploadPhase.NEGOTIATING)
                session = self.negotiator.negotiate(path)
                item = self._transmit(path, session, source, state, ctx, report)
            except DriveUpError as e:
                report(UploadPhase.ERROR, str(e))
                raise WriteFailedError(path, e) from e

            report(UploadPhase.COMPLETE)
            return item

    def _transmit(
        self,
        path: str,
        session: UploadSession,
        source: ChunkSource,
        state: TransferState,
        ctx: LogContext,
        report: Callable[..., None],
    ) -> DriveItem:
        for chunk in self._chunks(source):
            if chunk.offset != state.next_offset:
                raise UploadError(
                    f"Chunk offset {chunk.offset} does not follow {state.next_offset}", path
                )
            if chunk.last > state.total_size - 1:
                raise UploadError(
                    f"Source yielded more than the declared {state.total_size} bytes", path
                )

            outcome = self.transmitter.send(session, chunk, state.total_size)

            if outcome.kind is OutcomeKind.SUCCESS and outcome.item is not None:
                state.advance(chunk)
                ctx.debug("final chunk %s accepted", chunk.content_range(state.total_size))
                return outcome.item
            if outcome.kind is not OutcomeKind.CONTINUE:
                raise _outcome_error(outcome, session, path, chunk, state.total_size)

            state.advance(chunk)
            ctx.debug("chunk %s accepted", chunk.content_range(state.total_size))
            report(UploadPhase.TRANSMITTING)

        raise UploadError(
            f"Source ended at byte {state.next_offset} before declared size {state.total_size}",
            path,
        )
