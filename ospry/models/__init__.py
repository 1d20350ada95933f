from .envelope import APIErrorBody, Envelope
from .metadata import FORMATS, ImageFormat, Metadata
from .render_opts import RenderOpts

__all__ = [
    "APIErrorBody",
    "Envelope",
    "FORMATS",
    "ImageFormat",
    "Metadata",
    "RenderOpts",
]
