from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

FORMATS = ("jpeg", "png", "gif")

ImageFormat = Literal["jpeg", "png", "gif"]


class Metadata(BaseModel):
    """Server-side snapshot of a hosted image."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    url: str
    https_url: str = Field(..., alias="httpsURL")
    time_created: datetime = Field(..., alias="timeCreated")
    is_claimed: bool = Field(False, alias="isClaimed")
    is_private: bool = Field(False, alias="isPrivate")
    filename: str
    format: ImageFormat
    size: int = Field(..., ge=0)  # bytes
    height: int = Field(..., ge=0)
    width: int = Field(..., ge=0)
