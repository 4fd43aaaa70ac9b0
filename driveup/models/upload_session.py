"""Upload session returned by ``createUploadSession``."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from .base import BaseModel


class UploadSession(BaseModel):
    """Remote-issued handle scoping a sequence of chunk PUTs to one item."""

    model_config = ConfigDict(frozen=True)

    upload_url: str = Field(..., alias="uploadUrl", min_length=1)
    expiration_date_time: Optional[datetime] = Field(None, alias="expirationDateTime")
