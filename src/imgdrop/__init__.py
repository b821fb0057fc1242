"""imgdrop: inline image upload gateway for S3-compatible object stores."""

__version__ = "0.1.0"

# Export commonly used types
from imgdrop.errors import (
    InvalidPayload,
    StorageSignError,
    StorageWriteError,
    UploadPipelineError,
)
from imgdrop.models.upload import DecodedPayload, UploadResult

__all__ = [
    "DecodedPayload",
    "InvalidPayload",
    "StorageSignError",
    "StorageWriteError",
    "UploadPipelineError",
    "UploadResult",
    "__version__",
]
