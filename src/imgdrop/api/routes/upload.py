"""Image upload endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, ConfigDict, Field

from imgdrop.api.dependencies import get_pipeline
from imgdrop.api.errors import FailureEnvelope, RequestRejected
from imgdrop.models.upload import UploadRequest, UploadResult
from imgdrop.pipeline import UploadPipeline

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)

MISSING_PAYLOAD_ERROR = "Missing 'imageBase64'"


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    key: str
    url: str
    content_type: str = Field(alias="contentType")
    size: int

    @classmethod
    def from_result(cls, result: UploadResult) -> UploadResponse:
        return cls(
            key=result.key,
            url=result.url,
            content_type=result.content_type,
            size=result.size,
        )


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": FailureEnvelope}, 413: {"model": FailureEnvelope}},
)
async def upload_image(
    body: UploadRequest | None = Body(default=None),
    pipeline: UploadPipeline = Depends(get_pipeline),
) -> UploadResponse:
    """Store a base64 or data-URI image and return where to fetch it."""
    if body is None or not body.image_base64:
        raise RequestRejected(MISSING_PAYLOAD_ERROR)

    result = await pipeline.upload(body.image_base64, body.folder or "")
    return UploadResponse.from_result(result)
