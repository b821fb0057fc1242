"""Upload request and result models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UploadRequest(BaseModel):
    """Inbound upload body.

    `image_base64` is optional at the model level so a missing field is
    reported with the same message as an empty one.
    """

    model_config = ConfigDict(populate_by_name=True)

    image_base64: str | None = Field(default=None, alias="imageBase64")
    folder: str | None = ""


class DecodedPayload(BaseModel):
    """Raw bytes recovered from an inline payload."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    declared_type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)


class UploadResult(BaseModel):
    """Descriptor of a stored object, returned once per successful upload."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str
    url: str
    content_type: str = Field(alias="contentType")
    size: int
