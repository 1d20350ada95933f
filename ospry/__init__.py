"""Client for the ospry image hosting api (https://ospry.io).

Server-side calls use the secret key::

    config = OspryConfig(key="sk-test-********")
    async with OspryClient(config) as client:
        metadata = await client.claim(image_id)
        metadata = await client.make_private(image_id)

Private images are viewed through signed urls that stop working once
``time_expired`` has passed::

    url = format_url(metadata.url, RenderOpts(time_expired=expires_in(300)), config)
"""
from ospry.config import OspryConfig, Settings, get_settings
from ospry.errors import OspryAPIError, OspryError, RenderOptsError, URLParseError
from ospry.models import FORMATS, Metadata, RenderOpts
from ospry.services.client import OspryClient
from ospry.services.urls import build, expires_in, format_url, normalize
from ospry.utils.signing import sign

__all__ = [
    "FORMATS",
    "Metadata",
    "OspryAPIError",
    "OspryClient",
    "OspryConfig",
    "OspryError",
    "RenderOpts",
    "RenderOptsError",
    "Settings",
    "URLParseError",
    "build",
    "expires_in",
    "format_url",
    "get_settings",
    "normalize",
    "sign",
]
