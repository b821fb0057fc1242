"""Cloudflare R2 / S3-compatible object store backend."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from imgdrop.errors import StorageSignError, StorageWriteError
from imgdrop.interfaces import ObjectStore
from imgdrop.models.config import R2StorageConfig
from imgdrop.plugins.registry import storage_plugin

logger = logging.getLogger(__name__)


@storage_plugin(name="r2")
class R2ObjectStore(ObjectStore):
    """S3-compatible object store using boto3.

    Defaults target Cloudflare R2 (`https://<account>.r2.cloudflarestorage.com`,
    region `auto`, path-style addressing). Any S3-compatible service works by
    setting `endpoint_url`.

    boto3 clients are blocking; every call runs in a worker thread.
    """

    config_cls = R2StorageConfig

    @classmethod
    def create(cls, config: R2StorageConfig) -> ObjectStore:
        return cls(config)

    def __init__(self, config: R2StorageConfig) -> None:
        self.bucket = config.bucket
        self.endpoint_url = config.resolved_endpoint_url
        self.client = self._create_client(config)
        self._shutdown_called = False

        if not config.verify_tls:
            logger.warning("TLS verification disabled for %s (development only)", self.endpoint_url)
        logger.info("R2ObjectStore initialized: endpoint=%s bucket=%s", self.endpoint_url, self.bucket)

    def _create_client(self, config: R2StorageConfig) -> Any:
        return boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            region_name=config.region,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            verify=config.verify_tls,
            config=BotoConfig(signature_version="s3v4", s3={"addressing_style": "path"}),
        )

    async def put_object(self, key: str, data: bytes, content_type: str) -> None:
        """Upload bytes with a single PutObject (atomic on the store side)."""
        self._ensure_open()
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            message = _backend_message(exc)
            logger.error("PutObject failed for s3://%s/%s: %s", self.bucket, key, message)
            raise StorageWriteError(key, message, cause=exc) from exc
        logger.debug("Uploaded s3://%s/%s (%d bytes)", self.bucket, key, len(data))

    async def presign_get(self, key: str, expires_in: int) -> str:
        """Presign a GetObject request for `key`."""
        self._ensure_open()
        try:
            return await asyncio.to_thread(
                self.client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as exc:
            message = _backend_message(exc)
            logger.error("Presign failed for s3://%s/%s: %s", self.bucket, key, message)
            raise StorageSignError(key, message, cause=exc) from exc

    async def shutdown(self, timeout: float | None = None) -> None:
        """Cleanup resources."""
        _ = timeout
        if self._shutdown_called:
            return

        self._shutdown_called = True
        close = getattr(self.client, "close", None)
        if callable(close):
            await asyncio.to_thread(close)
        logger.info("R2ObjectStore closed")

    def _ensure_open(self) -> None:
        if self._shutdown_called:
            raise RuntimeError("Storage has been shut down")


def _backend_message(exc: Exception) -> str:
    """Prefer the service's own error message over the botocore wrapper text."""
    response = getattr(exc, "response", None)
    if isinstance(response, dict):
        error = response.get("Error", {})
        message = error.get("Message")
        if message:
            return str(message)
    return str(exc)
