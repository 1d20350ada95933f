from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class RenderOpts(BaseModel):
    """Options for rendering (and optionally signing) an image url.

    ``None`` means unset: no format override, no size constraint, or no
    signature when ``time_expired`` is left out.
    """

    model_config = ConfigDict(frozen=True)

    format: str | None = None
    max_height: int | None = None
    max_width: int | None = None
    time_expired: datetime | None = None
