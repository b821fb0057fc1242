"""Upload orchestration: decode, resolve type, assign key, store, resolve URL."""

from __future__ import annotations

import logging
from enum import StrEnum

from imgdrop import content_type, keys, payload
from imgdrop.errors import StorageSignError, UploadFailed, UploadPipelineError
from imgdrop.gateway import StorageGateway
from imgdrop.models.upload import UploadResult

logger = logging.getLogger(__name__)


class UploadStage(StrEnum):
    """Last stage a request completed inside the pipeline."""

    RECEIVED = "received"
    DECODED = "decoded"
    TYPE_RESOLVED = "type_resolved"
    KEY_ASSIGNED = "key_assigned"
    STORED = "stored"
    URL_RESOLVED = "url_resolved"


class UploadPipeline:
    """Runs one upload per call; holds no per-request state.

    Failures short-circuit. An object already written is never deleted when
    a later stage fails.
    """

    def __init__(self, gateway: StorageGateway) -> None:
        self._gateway = gateway

    @property
    def gateway(self) -> StorageGateway:
        return self._gateway

    async def upload(self, encoded: str, folder: str = "") -> UploadResult:
        """Store an inline-encoded image and return its descriptor.

        Raises:
            UploadPipelineError: InvalidPayload/InvalidFolder for bad input,
                StorageWriteError/StorageSignError for backend failures,
                UploadFailed for anything unexpected
        """
        stage = UploadStage.RECEIVED
        key: str | None = None
        try:
            decoded = payload.decode(encoded)
            stage = UploadStage.DECODED

            resolved_type, extension = content_type.resolve(decoded.declared_type)
            stage = UploadStage.TYPE_RESOLVED

            key = keys.generate_key(folder, extension)
            stage = UploadStage.KEY_ASSIGNED

            await self._gateway.put(key, decoded.data, resolved_type)
            stage = UploadStage.STORED

            url = await self._gateway.resolve_url(key)
            stage = UploadStage.URL_RESOLVED
        except StorageSignError:
            logger.warning("Object stored but URL resolution failed; leaving %s in place", key)
            raise
        except UploadPipelineError as exc:
            logger.info("Upload rejected at stage=%s: %s", exc.stage, exc)
            raise
        except Exception as exc:
            logger.exception("Unexpected upload failure after stage=%s", stage)
            raise UploadFailed(stage.value, exc) from exc

        result = UploadResult(key=key, url=url, content_type=resolved_type, size=decoded.size)
        logger.info(
            "Upload stored: key=%s size=%d content_type=%s",
            result.key,
            result.size,
            result.content_type,
        )
        return result
