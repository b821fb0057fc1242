"""Error hierarchy for imgdrop upload pipeline stages."""

from __future__ import annotations


class UploadPipelineError(Exception):
    """Base exception for all upload pipeline errors.

    Preserves the underlying failure via exception chaining so handlers can
    log the original stack while responding with the short message.
    """

    def __init__(self, message: str, stage: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.cause = cause
        self.__cause__ = cause


class InvalidPayload(UploadPipelineError):
    """Inline payload is missing, empty or not valid base64."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message, stage="decode", cause=cause)


class InvalidFolder(InvalidPayload):
    """Caller-supplied folder cannot be used as a key prefix."""

    def __init__(self, folder: str) -> None:
        super().__init__(f"Invalid folder: {folder!r}")
        self.stage = "key"
        self.folder = folder


class StorageWriteError(UploadPipelineError):
    """Object store rejected or failed the write."""

    def __init__(self, key: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(message, stage="store", cause=cause)
        self.key = key


class StorageSignError(UploadPipelineError):
    """Object store could not produce a signed retrieval URL."""

    def __init__(self, key: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(message, stage="url", cause=cause)
        self.key = key


class UploadFailed(UploadPipelineError):
    """Unexpected failure caught at the orchestration boundary."""

    def __init__(self, stage: str, cause: Exception) -> None:
        super().__init__("Upload failed", stage=stage, cause=cause)
