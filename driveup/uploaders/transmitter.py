"""Chunk transmission and the per-chunk retry/backoff state machine.

Each chunk is sent as one ``PUT`` to the session URL. The response status,
together with whether the chunk ends the file, decides its outcome:

======  =======  ============================================================
status  final    outcome
======  =======  ============================================================
404     any      EXPIRED - session must be renegotiated by the caller
429     any      RETRY_AFTER - wait ``Retry-After`` seconds, resend (unbounded)
>=500   any      RETRY_BACKOFF - wait ``2**attempt`` seconds, resend (bounded)
409     yes      CONFLICT - name already exists at destination
200/1   yes      SUCCESS - body is the created item
202     no       CONTINUE - chunk accepted
other   any      FATAL
======  =======  ============================================================

429 retries are not counted against the backoff budget.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from driveup.core.exceptions import TransportError, UploadError
from driveup.models.drive_item import DriveItem
from driveup.models.upload_session import UploadSession
from driveup.uploaders.constants import (
    BACKOFF_BASE,
    DEFAULT_RETRY_AFTER_SECONDS,
    MAX_BACKOFF_ATTEMPTS,
)
from driveup.uploaders.options import UploadOptions
from driveup.uploaders.source import Chunk

logger = logging.getLogger(__name__)


# =============================================================================
# Outcomes
# =============================================================================


class OutcomeKind(Enum):
    CONTINUE = "continue"
    RETRY_AFTER = "retry_after"
    RETRY_BACKOFF = "retry_backoff"
    SUCCESS = "success"
    CONFLICT = "conflict"
    EXPIRED = "expired"
    FATAL = "fatal"


@dataclass(frozen=True)
class Outcome:
    """Disposition of one chunk response."""

    kind: OutcomeKind
    status_code: int
    delay: float = 0.0
    item: Optional[DriveItem] = None
    message: str = ""
    exhausted: bool = False

    @property
    def is_retry(self) -> bool:
        return self.kind in (OutcomeKind.RETRY_AFTER, OutcomeKind.RETRY_BACKOFF)


def parse_retry_after(value: str | None) -> float:
    """Seconds to wait from a ``Retry-After`` header value.

    Missing, non-numeric, non-finite or negative values fall back to the
    default.
    """
    if value is None:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        seconds = float(value.strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS
    if not math.isfinite(seconds) or seconds < 0:
        return DEFAULT_RETRY_AFTER_SECONDS
    return seconds


def classify_response(response: httpx.Response, is_final: bool) -> Outcome:
    """Classify one chunk response.

    Backoff accounting is left to the caller; a 5xx always classifies as
    RETRY_BACKOFF here.

    Args:
        response: Response to the chunk PUT.
        is_final: Whether the chunk covers the last byte of the file.

    Returns:
        The outcome for this response.

    Raises:
        UploadError: If a success response body is not a drive item.
    """
    status = response.status_code

    if status == 404:
        return Outcome(OutcomeKind.EXPIRED, status)
    if status == 429:
        delay = parse_retry_after(response.headers.get("Retry-After"))
        return Outcome(OutcomeKind.RETRY_AFTER, status, delay=delay)
    if status >= 500:
        return Outcome(OutcomeKind.RETRY_BACKOFF, status)

    if is_final:
        if status == 409:
            return Outcome(OutcomeKind.CONFLICT, status)
        if status in (200, 201):
            try:
                item = DriveItem.model_validate(response.json())
            except (ValueError, PydanticValidationError) as e:
                raise UploadError(
                    f"Final chunk accepted but response is not a drive item: {e}",
                    details={"status_code": status},
                ) from e
            return Outcome(OutcomeKind.SUCCESS, status, item=item)
        return Outcome(
            OutcomeKind.FATAL,
            status,
            message=f"unknown error on final chunk, status={status}",
        )

    if status == 202:
        return Outcome(OutcomeKind.CONTINUE, status)
    return Outcome(
        OutcomeKind.FATAL,
        status,
        message=f"unknown error on chunk upload, status={status}",
    )


# =============================================================================
# ChunkTransmitter
# =============================================================================


class ChunkTransmitter:
    """Sends chunks to an upload session, retrying until a final disposition.

    Args:
        http: Client used for chunk PUTs; must not carry Authorization.
        options: Engine options (request timeout).
        sleep: Blocking wait function, in seconds.
    """

    def __init__(
        self,
        http: httpx.Client,
        options: UploadOptions,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.http = http
        self.options = options
        self.sleep = sleep

    def _put(self, session: UploadSession, chunk: Chunk, total_size: int) -> httpx.Response:
        headers = {
            "Content-Range": chunk.content_range(total_size),
            "Content-Length": str(chunk.length),
        }
        try:
            return self.http.put(
                session.upload_url,
                content=chunk.data,
                headers=headers,
                timeout=self.options.request_timeout,
            )
        except httpx.TransportError as e:
            raise TransportError(session.upload_url, e) from e

    def send(self, session: UploadSession, chunk: Chunk, total_size: int) -> Outcome:
        """Transmit one chunk and return its final outcome.

        Retry outcomes are handled here by waiting and re-sending the same
        byte range; only the latest response is classified. The returned
        outcome is never a retry.

        Args:
            session: Negotiated upload session.
            chunk: Chunk to send.
            total_size: Size of the whole payload.

        Returns:
            CONTINUE, SUCCESS, CONFLICT, EXPIRED or FATAL.

        Raises:
            TransportError: If a request fails at the network level.
        """
        is_final = chunk.is_final(total_size)
        attempt = 0

        while True:
            response = self._put(session, chunk, total_size)
            outcome = classify_response(response, is_final)

            if outcome.kind is OutcomeKind.RETRY_AFTER:
                logger.warning(
                    "Throttled on %s, retrying in %ss",
                    chunk.content_range(total_size),
                    outcome.delay,
                )
                self.sleep(outcome.delay)
                continue

            if outcome.kind is OutcomeKind.RETRY_BACKOFF:
                if attempt >= MAX_BACKOFF_ATTEMPTS:
                    return Outcome(
                        OutcomeKind.FATAL,
                        outcome.status_code,
                        message=f"upload failed after {MAX_BACKOFF_ATTEMPTS} attempts",
                        exhausted=True,
                    )
                delay = BACKOFF_BASE**attempt
                logger.warning(
                    "HTTP %s on %s, retry %d in %ss",
                    outcome.status_code,
                    chunk.content_range(total_size),
                    attempt + 1,
                    delay,
                )
                self.sleep(delay)
                attempt += 1
                continue

            return outcome
