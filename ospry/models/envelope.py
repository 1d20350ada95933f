from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .metadata import Metadata


class APIErrorBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    http_status_code: int = Field(0, alias="httpStatusCode")
    cause: str = ""
    message: str = ""


class Envelope(BaseModel):
    """Every api response is wrapped in ``{"metadata": ..., "error": ...}``."""

    metadata: Metadata | None = None
    error: APIErrorBody | None = None
