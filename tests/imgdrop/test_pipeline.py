"""Tests for the upload orchestrator."""

from __future__ import annotations

import re

import pytest

from imgdrop import content_type
from imgdrop.errors import (
    InvalidFolder,
    InvalidPayload,
    StorageSignError,
    StorageWriteError,
    UploadFailed,
)
from imgdrop.gateway import StorageGateway
from imgdrop.pipeline import UploadPipeline
from tests.imgdrop.mocks import MockObjectStore

PNG_DATA_URI = "data:image/png;base64,iVBORw0KGgo="
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestUploadHappyPath:
    @pytest.mark.asyncio
    async def test_stores_decoded_bytes_and_returns_signed_url(
        self, pipeline: UploadPipeline, mock_store: MockObjectStore
    ) -> None:
        # Given: A pipeline over a mock store without a public base URL
        # When: Uploading a PNG data URI
        result = await pipeline.upload(PNG_DATA_URI)

        # Then: The bytes were written once with the declared content type
        assert mock_store.put_count == 1
        assert mock_store.objects[result.key] == (PNG_SIGNATURE, "image/png")
        assert re.fullmatch(r"[A-Z0-9]{8}-[A-Z0-9]{6}\.png", result.key)
        assert result.size == len(PNG_SIGNATURE)
        assert result.content_type == "image/png"
        assert result.url.startswith(f"https://signed.example/{result.key}")

    @pytest.mark.asyncio
    async def test_public_base_url_and_folder(self, mock_store: MockObjectStore) -> None:
        pipeline = UploadPipeline(
            StorageGateway(mock_store, public_base_url="https://pub.example.dev")
        )

        result = await pipeline.upload("data:image/webp;base64,AA==", folder="profiles/")

        assert result.key.startswith("profiles/")
        assert result.key.endswith(".webp")
        assert result.url == f"https://pub.example.dev/{result.key}"
        assert mock_store.presign_count == 0

    @pytest.mark.asyncio
    async def test_disallowed_type_keeps_content_type_but_uses_png_suffix(
        self, pipeline: UploadPipeline, mock_store: MockObjectStore
    ) -> None:
        result = await pipeline.upload("data:text/html;base64,PGgxPg==")

        assert result.key.endswith(".png")
        assert result.content_type == "text/html"
        assert mock_store.objects[result.key][1] == "text/html"

    @pytest.mark.asyncio
    async def test_plain_base64_uses_octet_stream(
        self, pipeline: UploadPipeline, mock_store: MockObjectStore
    ) -> None:
        result = await pipeline.upload("iVBORw0KGgo=")

        assert result.content_type == "application/octet-stream"
        assert result.key.endswith(".png")


class TestUploadFailures:
    @pytest.mark.asyncio
    async def test_invalid_encoding_performs_no_storage_call(
        self, pipeline: UploadPipeline, mock_store: MockObjectStore
    ) -> None:
        with pytest.raises(InvalidPayload, match="invalid encoding"):
            await pipeline.upload("not-base64-@@@")

        assert mock_store.put_count == 0

    @pytest.mark.asyncio
    async def test_traversal_folder_performs_no_storage_call(
        self, pipeline: UploadPipeline, mock_store: MockObjectStore
    ) -> None:
        with pytest.raises(InvalidFolder):
            await pipeline.upload(PNG_DATA_URI, folder="../secrets")

        assert mock_store.put_count == 0

    @pytest.mark.asyncio
    async def test_storage_write_error_surfaces_backend_message(self) -> None:
        store = MockObjectStore(simulate_failure=True, failure_message="Access Denied")
        pipeline = UploadPipeline(StorageGateway(store))

        with pytest.raises(StorageWriteError, match="Access Denied"):
            await pipeline.upload(PNG_DATA_URI)

        assert store.presign_count == 0

    @pytest.mark.asyncio
    async def test_sign_failure_leaves_stored_object_in_place(self) -> None:
        # Given: A store whose presign fails after a successful write
        store = MockObjectStore(simulate_sign_failure=True)
        pipeline = UploadPipeline(StorageGateway(store))

        # When: Uploading
        with pytest.raises(StorageSignError) as exc_info:
            await pipeline.upload(PNG_DATA_URI)

        # Then: The object is not rolled back
        assert list(store.objects) == [exc_info.value.key]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped_with_stage(
        self, pipeline: UploadPipeline, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _boom(declared_type: str) -> tuple[str, str]:
            raise KeyError(declared_type)

        monkeypatch.setattr(content_type, "resolve", _boom)

        with pytest.raises(UploadFailed) as exc_info:
            await pipeline.upload(PNG_DATA_URI)

        assert str(exc_info.value) == "Upload failed"
        assert exc_info.value.stage == "decoded"
        assert isinstance(exc_info.value.__cause__, KeyError)
