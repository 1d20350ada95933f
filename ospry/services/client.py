"""ospry REST api wrapper.

Provides async helpers for uploading images and reading or changing
their metadata. Every call is a single request authenticated with the
api key as basic-auth username (empty password), and every answer is the
``{"metadata": ..., "error": ...}`` envelope.
"""
from __future__ import annotations

import io
import logging
import warnings
from typing import Any, BinaryIO
from urllib.parse import quote

import httpx
from PIL import Image
from pydantic import ValidationError

from ospry.config import OspryConfig
from ospry.errors import OspryAPIError
from ospry.models import Envelope, Metadata, RenderOpts
from ospry.services.urls import format_url

logger = logging.getLogger(__name__)

# The server only needs a content type that says "image data" (as
# opposed to multipart/form-data); it doesn't have to match the image.
_DEFAULT_CONTENT_TYPE = "image/jpeg"


class OspryClient:
    """Minimal async client for the ospry image api."""

    def __init__(self, config: OspryConfig, *, http_client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._base_url = config.server_url.rstrip("/")
        self._auth = httpx.BasicAuth(config.key, "")
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout)

    @property
    def config(self) -> OspryConfig:
        return self._config

    async def __aenter__(self) -> "OspryClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def upload(self, filename: str, data: bytes | bytearray | memoryview | BinaryIO, *, is_private: bool = False) -> Metadata:
        """Upload an image. It is claimed right away when the client uses the secret key."""

        body = bytes(data) if isinstance(data, (bytes, bytearray, memoryview)) else data.read()
        params = {"filename": filename, "isPrivate": "true" if is_private else "false"}
        resp = await self._request(
            "POST",
            "/images",
            params=params,
            content=body,
            content_type=_sniff_content_type(body),
        )
        return self._parse_metadata(resp)

    async def upload_public(self, filename: str, data: bytes | bytearray | memoryview | BinaryIO) -> Metadata:
        return await self.upload(filename, data, is_private=False)

    async def upload_private(self, filename: str, data: bytes | bytearray | memoryview | BinaryIO) -> Metadata:
        return await self.upload(filename, data, is_private=True)

    async def get_metadata(self, image_id: str) -> Metadata:
        resp = await self._request("GET", _image_path(image_id))
        return self._parse_metadata(resp)

    async def claim(self, image_id: str) -> Metadata:
        """Claim an image uploaded client-side so it doesn't expire."""

        return await self._put(image_id, {"isClaimed": True})

    async def set_private(self, image_id: str, is_private: bool) -> Metadata:
        """Change visibility. Private images need a signed url to be viewed."""

        return await self._put(image_id, {"isPrivate": is_private})

    async def make_private(self, image_id: str) -> Metadata:
        return await self.set_private(image_id, True)

    async def make_public(self, image_id: str) -> Metadata:
        return await self.set_private(image_id, False)

    async def delete(self, image_id: str) -> None:
        """Delete an image; fetching it afterwards results in a 404."""

        resp = await self._request("DELETE", _image_path(image_id))
        self._parse_envelope(resp)

    def format_url(self, url: str, opts: RenderOpts | None = None) -> str:
        return format_url(url, opts, self._config)

    async def download(self, url: str, opts: RenderOpts | None = None) -> bytes:
        """Fetch image bytes, rendered with *opts* when given."""

        target = self.format_url(url, opts)
        logger.debug("GET image %s", url)
        resp = await self._client.get(target, follow_redirects=True)
        if resp.status_code != 200:
            raise OspryAPIError(resp.status_code, "download", "download resulted in non-200 status")
        return resp.content

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _put(self, image_id: str, payload: dict[str, Any]) -> Metadata:
        resp = await self._request("PUT", _image_path(image_id), json_body=payload)
        return self._parse_metadata(resp)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        content: bytes | None = None,
        content_type: str = "application/json",
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        logger.debug("%s %s -> %s", method, url, json_body if json_body is not None else params)
        return await self._client.request(
            method,
            url,
            params=params,
            json=json_body,
            content=content,
            headers={"Content-Type": content_type},
            auth=self._auth,
        )

    def _parse_envelope(self, resp: httpx.Response) -> Envelope:
        try:
            envelope = Envelope.model_validate_json(resp.content) if resp.content else Envelope()
        except ValidationError as exc:
            if resp.is_error:
                raise OspryAPIError(resp.status_code, "", resp.text or resp.reason_phrase) from exc
            raise OspryAPIError(resp.status_code, "malformed-response", f"unexpected response body: {exc}") from exc
        if envelope.error is not None:
            err = envelope.error
            logger.warning("ospry api error %s (%s): %s", err.http_status_code, err.cause, err.message)
            raise OspryAPIError(err.http_status_code or resp.status_code, err.cause, err.message)
        if resp.is_error:
            raise OspryAPIError(resp.status_code, "", resp.text or resp.reason_phrase)
        return envelope

    def _parse_metadata(self, resp: httpx.Response) -> Metadata:
        envelope = self._parse_envelope(resp)
        if envelope.metadata is None:
            raise OspryAPIError(resp.status_code, "malformed-response", "response carried no metadata")
        return envelope.metadata


def _image_path(image_id: str) -> str:
    return f"/images/{quote(image_id, safe='')}"


def _sniff_content_type(data: bytes) -> str:
    # Only the header is read; pixel limits don't apply to a sniff.
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", Image.DecompressionBombWarning)
            with Image.open(io.BytesIO(data)) as img:
                return Image.MIME.get(img.format, _DEFAULT_CONTENT_TYPE)
    except (OSError, Image.DecompressionBombError):
        return _DEFAULT_CONTENT_TYPE
