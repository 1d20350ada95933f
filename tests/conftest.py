import base64
import json
import os
import sys
from pathlib import Path

import httpx
import pytest

# Ensure project root is on sys.path so 'ospry' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("OSPRY_SECRET_KEY", "sk-test-secret")
os.environ.setdefault("OSPRY_PUBLIC_KEY", "pk-test-public")

SECRET_KEY = os.environ["OSPRY_SECRET_KEY"]


class FakeOspryAPI:
    """Just enough of api.ospry.io/v1 to exercise the client."""

    def __init__(self, key: str = SECRET_KEY) -> None:
        self.auth_header = "Basic " + base64.b64encode(f"{key}:".encode()).decode()
        self.images: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self.image_bytes = b"\x89PNG fake image bytes"
        self.unreachable = False

    def add_image(self, filename: str = "foo.png", *, is_private: bool = False, is_claimed: bool = True, size: int = 0) -> dict:
        image_id = f"img{len(self.images) + 1}"
        metadata = {
            "id": image_id,
            "url": f"http://foo.ospry.io/{image_id}/{filename}",
            "httpsURL": f"https://foo.ospry.io/{image_id}/{filename}",
            "timeCreated": "2024-05-01T12:00:00Z",
            "isClaimed": is_claimed,
            "isPrivate": is_private,
            "filename": filename,
            "format": "png",
            "size": size,
            "height": 4,
            "width": 4,
        }
        self.images[image_id] = metadata
        return metadata

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if request.url.host != "api.ospry.io" or not request.url.path.startswith("/v1/"):
            # image download
            return httpx.Response(200, content=self.image_bytes)
        if request.headers.get("Authorization") != self.auth_header:
            return self._error(401, "unauthorized", "invalid api key")

        parts = request.url.path.split("/")[2:]
        if parts == ["images"] and request.method == "POST":
            metadata = self.add_image(
                request.url.params["filename"],
                is_private=request.url.params["isPrivate"] == "true",
                size=len(request.content),
            )
            return self._ok(metadata)
        if len(parts) == 2 and parts[0] == "images":
            metadata = self.images.get(parts[1])
            if metadata is None:
                return self._error(404, "not-found", "image not found")
            if request.method == "GET":
                return self._ok(metadata)
            if request.method == "PUT":
                metadata.update(json.loads(request.content))
                return self._ok(metadata)
            if request.method == "DELETE":
                del self.images[parts[1]]
                return self._ok(None)
        return self._error(405, "method-not-allowed", "unsupported request")

    @staticmethod
    def _ok(metadata: dict | None) -> httpx.Response:
        return httpx.Response(200, json={"metadata": metadata, "error": None})

    @staticmethod
    def _error(status: int, cause: str, message: str) -> httpx.Response:
        body = {"metadata": None, "error": {"httpStatusCode": status, "cause": cause, "message": message}}
        return httpx.Response(status, json=body)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def config():
    from ospry.config import OspryConfig

    return OspryConfig(key=SECRET_KEY)


@pytest.fixture()
def fake_api() -> FakeOspryAPI:
    return FakeOspryAPI()


@pytest.fixture()
def ospry_client(fake_api, config):
    from ospry.services.client import OspryClient

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))
    return OspryClient(config, http_client=http_client)


@pytest.fixture()
def store():
    from ospry.services.store import InMemoryMetadataStore

    return InMemoryMetadataStore()


@pytest.fixture()
def client(ospry_client, store):
    from fastapi.testclient import TestClient

    # lazy import after env configured
    from ospry.handlers.dependencies import get_ospry_client, get_store
    from ospry.main import create_app

    app = create_app()
    app.dependency_overrides[get_ospry_client] = lambda: ospry_client
    app.dependency_overrides[get_store] = lambda: store
    return TestClient(app)
