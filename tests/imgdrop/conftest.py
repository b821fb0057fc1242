"""Shared pytest fixtures for imgdrop tests."""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

# Add src to sys.path for imports
src_path = Path(__file__).parent.parent.parent / "src"
if str(src_path.resolve()) not in sys.path:
    sys.path.insert(0, str(src_path.resolve()))

import pytest
from fastapi.testclient import TestClient

from imgdrop.api.server import create_app
from imgdrop.gateway import StorageGateway
from imgdrop.models.config import ServerConfig
from imgdrop.pipeline import UploadPipeline
from tests.imgdrop.mocks import MockObjectStore


@pytest.fixture
def mock_store() -> MockObjectStore:
    """Return a MockObjectStore with default config."""
    return MockObjectStore()


@pytest.fixture
def signed_gateway(mock_store: MockObjectStore) -> StorageGateway:
    """Gateway without a public base URL (signed URLs)."""
    return StorageGateway(mock_store)


@pytest.fixture
def pipeline(signed_gateway: StorageGateway) -> UploadPipeline:
    return UploadPipeline(signed_gateway)


@pytest.fixture
def make_client() -> Callable[..., TestClient]:
    """Build a TestClient around a store, optional public base URL and server config."""

    def _make(
        store: MockObjectStore,
        *,
        public_base_url: str | None = None,
        server_config: ServerConfig | None = None,
    ) -> TestClient:
        gateway = StorageGateway(store, public_base_url=public_base_url)
        app = create_app(UploadPipeline(gateway), server_config)
        return TestClient(app, raise_server_exceptions=False)

    return _make
