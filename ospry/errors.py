"""Exceptions raised by the ospry client."""
from __future__ import annotations


class OspryError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str):
        super().__init__(f"ospry: {message}")
        self.message = message


class URLParseError(OspryError, ValueError):
    """Raised when a url, or a rendering option embedded in one, can't be parsed."""


class RenderOptsError(OspryError, ValueError):
    """Raised when rendering options hold an invalid value."""


class OspryAPIError(OspryError):
    """Raised when the ospry api answers with an error envelope or a bad status."""

    def __init__(self, http_status_code: int, cause: str, message: str):
        super().__init__(message)
        self.http_status_code = http_status_code
        self.cause = cause

    def __repr__(self) -> str:
        return (
            f"OspryAPIError(http_status_code={self.http_status_code!r}, "
            f"cause={self.cause!r}, message={self.message!r})"
        )
