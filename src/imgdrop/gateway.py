"""Storage gateway: object writes and retrieval URL policy."""

from __future__ import annotations

import logging
from urllib.parse import quote

from imgdrop.errors import StorageSignError, StorageWriteError
from imgdrop.interfaces import ObjectStore
from imgdrop.models.config import DEFAULT_SIGNED_URL_TTL_S, StorageConfig

logger = logging.getLogger(__name__)

# Characters JavaScript's encodeURIComponent leaves alone beyond quote()'s defaults.
_SEGMENT_SAFE = "!'()*"


def join_url(base: str, key: str) -> str:
    """Join a public base URL and a key, percent-encoding each key segment."""
    encoded_key = "/".join(quote(segment, safe=_SEGMENT_SAFE) for segment in key.split("/"))
    return f"{base.rstrip('/')}/{encoded_key}"


class StorageGateway:
    """Writes objects and resolves a URL for them.

    With a public base URL the URL is built locally; otherwise a signed GET
    URL is requested from the store.
    """

    def __init__(
        self,
        store: ObjectStore,
        *,
        public_base_url: str | None = None,
        signed_url_ttl_s: int = DEFAULT_SIGNED_URL_TTL_S,
    ) -> None:
        self._store = store
        self._public_base_url = public_base_url or None
        self._signed_url_ttl_s = signed_url_ttl_s

    @classmethod
    def from_config(cls, store: ObjectStore, config: StorageConfig) -> StorageGateway:
        return cls(
            store,
            public_base_url=config.public_base_url,
            signed_url_ttl_s=config.signed_url_ttl_s,
        )

    @property
    def store(self) -> ObjectStore:
        return self._store

    @property
    def uses_public_urls(self) -> bool:
        return self._public_base_url is not None

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        """Write `data` under `key`.

        Raises:
            StorageWriteError: If the store fails for any reason
        """
        try:
            await self._store.put_object(key, data, content_type)
        except StorageWriteError:
            raise
        except Exception as exc:
            raise StorageWriteError(key, str(exc) or type(exc).__name__, cause=exc) from exc

    async def resolve_url(self, key: str) -> str:
        """Return a retrieval URL for `key`.

        Raises:
            StorageSignError: If presigning fails
        """
        if self._public_base_url is not None:
            return join_url(self._public_base_url, key)

        try:
            return await self._store.presign_get(key, self._signed_url_ttl_s)
        except StorageSignError:
            raise
        except Exception as exc:
            raise StorageSignError(key, str(exc) or type(exc).__name__, cause=exc) from exc
