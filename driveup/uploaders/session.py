"""Upload session negotiation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import quote

from pydantic import ValidationError as PydanticValidationError

from driveup.core.exceptions import DriveUpError, SessionNegotiationError
from driveup.models.upload_session import UploadSession

if TYPE_CHECKING:
    from driveup.core.client import GraphClient

logger = logging.getLogger(__name__)


class UploadSessionNegotiator:
    """Obtains upload session URLs for drive paths.

    One request per call, with no retries of its own or of the API
    client; a failure here is fatal to the upload that asked for it.
    """

    def __init__(self, client: "GraphClient", drive_id: str) -> None:
        self.client = client
        self.drive_id = drive_id

    def session_url(self, path: str) -> str:
        return f"/drives/{self.drive_id}/items/root:/{quote(path)}:/createUploadSession"

    def negotiate(self, path: str) -> UploadSession:
        """Create an upload session for ``path``.

        Args:
            path: Drive-relative target path, without leading slash.

        Returns:
            The negotiated session.

        Raises:
            SessionNegotiationError: If the request fails or the response
                carries no upload URL.
        """
        try:
            resp = self.client.post(self.session_url(path), max_retries=0)
        except DriveUpError as e:
            raise SessionNegotiationError(path, str(e), e) from e

        try:
            session = UploadSession.model_validate(resp.json())
        except (ValueError, PydanticValidationError) as e:
            raise SessionNegotiationError(path, "response has no upload URL", e) from e

        logger.debug("Negotiated upload session for %s", path)
        return session
