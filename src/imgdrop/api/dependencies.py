"""FastAPI dependency helpers."""

from __future__ import annotations

from typing import cast

from fastapi import Request, status

from imgdrop.api.errors import RequestRejected
from imgdrop.pipeline import UploadPipeline


async def get_pipeline(request: Request) -> UploadPipeline:
    """Get the UploadPipeline instance from app state."""
    pipeline = cast("UploadPipeline | None", getattr(request.app.state, "pipeline", None))
    if pipeline is None:
        raise RequestRejected(
            "Application not initialized",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return pipeline
