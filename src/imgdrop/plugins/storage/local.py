"""Local filesystem object store."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path, PurePosixPath

from imgdrop.errors import StorageSignError, StorageWriteError
from imgdrop.interfaces import ObjectStore
from imgdrop.models.config import LocalStorageConfig
from imgdrop.plugins.registry import storage_plugin

logger = logging.getLogger(__name__)


@storage_plugin(name="local")
class LocalObjectStore(ObjectStore):
    """Local object store for development and tests.

    Objects are written to a temp file and renamed into place so readers never
    observe a partial write. Signed URLs are plain `file://` URIs.
    """

    config_cls = LocalStorageConfig

    @classmethod
    def create(cls, config: LocalStorageConfig) -> ObjectStore:
        return cls(config)

    def __init__(self, config: LocalStorageConfig) -> None:
        self.root = Path(config.root).expanduser().resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self._shutdown_called = False
        logger.info("LocalObjectStore initialized: root=%s", self.root)

    async def put_object(self, key: str, data: bytes, content_type: str) -> None:
        self._ensure_open()
        try:
            dest = self._full_dest_path(key)
            await asyncio.to_thread(self._write_atomic, dest, data)
        except (OSError, ValueError) as exc:
            raise StorageWriteError(key, str(exc), cause=exc) from exc
        logger.debug("Stored %s (%d bytes, %s)", dest, len(data), content_type)

    async def presign_get(self, key: str, expires_in: int) -> str:
        _ = expires_in
        self._ensure_open()
        try:
            return self._full_dest_path(key).as_uri()
        except ValueError as exc:
            raise StorageSignError(key, str(exc), cause=exc) from exc

    async def shutdown(self, timeout: float | None = None) -> None:
        _ = timeout
        self._shutdown_called = True

    def _ensure_open(self) -> None:
        if self._shutdown_called:
            raise RuntimeError("Storage has been shut down")

    def _write_atomic(self, dest: Path, data: bytes) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=".upload-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, dest)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _full_dest_path(self, key: str) -> Path:
        cleaned = str(key).lstrip("/")
        if not cleaned or "\\" in cleaned:
            raise ValueError(f"Invalid key: {key}")
        path = PurePosixPath(cleaned)
        if path.is_absolute() or ".." in path.parts:
            raise ValueError(f"Invalid key: {key}")
        return self.root.joinpath(*path.parts)
