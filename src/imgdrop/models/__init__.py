"""imgdrop data models."""

from imgdrop.models.config import (
    Config,
    LocalStorageConfig,
    R2StorageConfig,
    ServerConfig,
    StorageConfig,
)
from imgdrop.models.upload import DecodedPayload, UploadRequest, UploadResult

__all__ = [
    "Config",
    "DecodedPayload",
    "LocalStorageConfig",
    "R2StorageConfig",
    "ServerConfig",
    "StorageConfig",
    "UploadRequest",
    "UploadResult",
]
