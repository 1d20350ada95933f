"""Demo endpoints: upload, list, claim and change visibility of images."""
from __future__ import annotations

import html
import json
import logging
from string import Template

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from ospry.config import Settings
from ospry.errors import OspryError
from ospry.handlers.dependencies import get_app_settings, get_ospry_client, get_store
from ospry.models import RenderOpts
from ospry.services.client import OspryClient
from ospry.services.store import MetadataStore
from ospry.services.urls import expires_in

router = APIRouter()
logger = logging.getLogger(__name__)

_INDEX = Template(
    """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>ospry demo</title>
</head>
<body data-public-key="$public_key">
  <form action="/images" method="post" enctype="multipart/form-data">
    <input type="file" name="file" multiple>
    <button type="submit">Upload (private)</button>
  </form>
  <form action="/images" method="post">
    <input type="hidden" name="method" value="DELETE">
    <button type="submit">Delete all</button>
  </form>
  <form action="/make-private" method="post"><button type="submit">Make private</button></form>
  <form action="/make-public" method="post"><button type="submit">Make public</button></form>
  <div id="images"></div>
  <script>
    var publicUrls = $public_urls;
    var privateUrls = $private_urls;
    var container = document.getElementById("images");
    privateUrls.forEach(function (url, i) {
      var img = document.createElement("img");
      img.src = url;
      img.title = publicUrls[i];
      container.appendChild(img);
    });
  </script>
</body>
</html>
"""
)


class ClaimRequest(BaseModel):
    id: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _script_json(value: object) -> str:
    return json.dumps(value).replace("</", "<\\/")


def _signed_url(client: OspryClient, url: str, settings: Settings) -> str:
    return client.format_url(url, RenderOpts(time_expired=expires_in(settings.signed_url_ttl_seconds)))


def _back_to_images(request: Request) -> RedirectResponse:
    return RedirectResponse(str(request.url_for("images")), status_code=status.HTTP_303_SEE_OTHER)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/")
async def get_root(request: Request):
    return RedirectResponse(str(request.url_for("images")), status_code=status.HTTP_301_MOVED_PERMANENTLY)


@router.get("/images", name="images", response_class=HTMLResponse)
async def get_images(
    client: OspryClient = Depends(get_ospry_client),
    store: MetadataStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    public_urls: list[str] = []
    private_urls: list[str] = []
    for metadata in store.snapshot():
        try:
            private_urls.append(_signed_url(client, metadata.url, settings))
        except OspryError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        public_urls.append(metadata.url)
    page = _INDEX.substitute(
        public_key=html.escape(settings.ospry_public_key),
        public_urls=_script_json(public_urls),
        private_urls=_script_json(private_urls),
    )
    return HTMLResponse(page)


@router.post("/images")
async def post_images(
    request: Request,
    client: OspryClient = Depends(get_ospry_client),
    store: MetadataStore = Depends(get_store),
):
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        if form.get("method") == "DELETE":
            return await _delete_images(request, client, store)
    if not content_type.startswith("multipart/form-data"):
        raise HTTPException(status_code=400, detail="Expected a multipart/form-data upload")

    form = await request.form()
    for part in form.getlist("file"):
        if not isinstance(part, UploadFile):
            continue
        data = await part.read()
        try:
            metadata = await client.upload_private(part.filename or "upload", data)
        except (OspryError, httpx.HTTPError) as exc:
            logger.error("Upload of %s failed: %s", part.filename, exc)
            continue
        store.insert(metadata)
        logger.info("Uploaded %s as %s", part.filename, metadata.id)
    return _back_to_images(request)


async def _delete_images(request: Request, client: OspryClient, store: MetadataStore) -> RedirectResponse:
    for metadata in store.snapshot():
        try:
            await client.delete(metadata.id)
        except (OspryError, httpx.HTTPError) as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        store.delete(metadata.id)
        logger.info("Deleted %s", metadata.id)
    return _back_to_images(request)


@router.post("/make-private")
async def post_make_private(
    request: Request,
    client: OspryClient = Depends(get_ospry_client),
    store: MetadataStore = Depends(get_store),
):
    return await _set_visibility(request, client, store, is_private=True)


@router.post("/make-public")
async def post_make_public(
    request: Request,
    client: OspryClient = Depends(get_ospry_client),
    store: MetadataStore = Depends(get_store),
):
    return await _set_visibility(request, client, store, is_private=False)


async def _set_visibility(
    request: Request, client: OspryClient, store: MetadataStore, *, is_private: bool
) -> RedirectResponse:
    for metadata in store.snapshot():
        try:
            updated = await client.set_private(metadata.id, is_private)
        except (OspryError, httpx.HTTPError) as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        store.insert(updated)
    return _back_to_images(request)


@router.post("/claim")
async def post_claim(
    body: ClaimRequest,
    client: OspryClient = Depends(get_ospry_client),
    store: MetadataStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """Claim an image uploaded from the browser and hand back a signed url."""

    try:
        metadata = await client.claim(body.id)
        store.insert(metadata)
        private_url = _signed_url(client, metadata.url, settings)
    except (OspryError, httpx.HTTPError) as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    logger.info("Claimed %s", metadata.id)
    return {"privateUrl": private_url}
