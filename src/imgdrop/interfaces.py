"""Interface definitions for imgdrop components."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ObjectStore(ABC):
    """Key-addressed binary store (S3-compatible capability)."""

    @abstractmethod
    async def put_object(self, key: str, data: bytes, content_type: str) -> None:
        """Write a single object under `key`.

        Implementation notes:
        - MUST be async (use asyncio.to_thread for blocking SDKs)
        - Must not leave a partially written object visible to readers
        - Raises StorageWriteError with the backend's message on failure
        """
        raise NotImplementedError

    @abstractmethod
    async def presign_get(self, key: str, expires_in: int) -> str:
        """Return a time-limited URL granting read access to `key`.

        Raises StorageSignError on failure.
        """
        raise NotImplementedError

    @abstractmethod
    async def shutdown(self, timeout: float | None = None) -> None:
        """Release client resources. Later writes raise RuntimeError."""
        raise NotImplementedError
