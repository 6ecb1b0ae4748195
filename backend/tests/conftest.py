import os
import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from share_relay.core.config import get_settings
from share_relay.services import storage as storage_service
from share_relay.services.registry import ShareRegistry
from share_relay.services.relay import RelayService

BLOB_HOST = "blobs.test"
UNREACHABLE_HOST = "unreachable.test"


class FakeBlobStore(storage_service.BaseStorageService):
    """Keeps uploaded bytes in memory and hands out https://blobs.test URLs."""

    def __init__(self) -> None:
        super().__init__()
        self.blobs: dict[str, bytes] = {}
        self.uploads: list[tuple[str, str | None]] = []
        self.fail = False

    async def store(self, data, filename, content_type):
        if self.fail:
            raise RuntimeError("provider rejected the upload")
        key = self.generate_upload_key(filename)
        self.blobs[key] = data
        self.uploads.append((filename, content_type))
        return f"https://{BLOB_HOST}/{key}"


def make_upstream_handler(blob_store: FakeBlobStore):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == UNREACHABLE_HOST:
            raise httpx.ConnectError("connection refused", request=request)
        data = blob_store.blobs.get(request.url.path.lstrip("/"))
        if data is None:
            return httpx.Response(404, content=b"missing")
        return httpx.Response(200, content=data, headers={"Content-Type": "text/plain"})

    return handler


@pytest.fixture(scope="session", autouse=True)
def configure_environment():
    os.environ["ENV"] = "test"
    os.environ["LOG_LEVEL"] = "DEBUG"
    os.environ["STORAGE_BACKEND"] = "cloudinary"
    os.environ["CLOUD_NAME"] = "test-cloud"
    os.environ["API_KEY"] = "test-key"
    os.environ["API_SECRET"] = "test-secret"
    os.environ.pop("SEED_RECORDS", None)
    os.environ.pop("MAX_UPLOAD_BYTES", None)
    get_settings.cache_clear()
    storage_service.reset_storage_service()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def registry() -> ShareRegistry:
    return ShareRegistry()


@pytest_asyncio.fixture
async def relay(registry, blob_store):
    transport = httpx.MockTransport(make_upstream_handler(blob_store))
    async with httpx.AsyncClient(transport=transport) as http_client:
        yield RelayService(registry, blob_store, http_client)


@pytest.fixture
def app_instance(configure_environment, registry, relay):
    from share_relay.main import create_app

    app = create_app(registry)
    # Setup state for tests, mimicking lifespan events
    app.state.relay_service = relay
    return app


@pytest_asyncio.fixture
async def client(app_instance):
    transport = ASGITransport(app=app_instance)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
