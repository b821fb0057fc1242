"""Configuration models for the upload gateway."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_MAX_BODY_BYTES = 25 * 1024 * 1024
DEFAULT_SIGNED_URL_TTL_S = 3600


class R2StorageConfig(BaseModel):
    """Cloudflare R2 (or any S3-compatible) object store settings."""

    model_config = ConfigDict(frozen=True)

    access_key_id: str
    secret_access_key: str
    bucket: str
    account_id: str | None = None
    endpoint_url: str | None = None
    region: str = "auto"
    verify_tls: bool = True

    @model_validator(mode="after")
    def _require_endpoint(self) -> R2StorageConfig:
        if not (self.account_id or self.endpoint_url):
            raise ValueError("storage.r2.account_id or storage.r2.endpoint_url required")
        return self

    @property
    def resolved_endpoint_url(self) -> str:
        if self.endpoint_url:
            return self.endpoint_url.rstrip("/")
        return f"https://{self.account_id}.r2.cloudflarestorage.com"


class LocalStorageConfig(BaseModel):
    """Local filesystem storage configuration."""

    model_config = ConfigDict(frozen=True)

    root: str = "./storage"


class StorageConfig(BaseModel):
    """Storage backend selection and URL policy.

    Note: Backend names are validated against the plugin registry at load time,
    so third-party backends registered via entry points keep their own section.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    backend: str = "r2"
    r2: R2StorageConfig | None = None
    local: LocalStorageConfig | None = None
    public_base_url: str | None = None
    signed_url_ttl_s: int = Field(default=DEFAULT_SIGNED_URL_TTL_S, gt=0)

    @field_validator("backend", mode="before")
    @classmethod
    def _normalize_backend(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("public_base_url", mode="before")
    @classmethod
    def _blank_base_url_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _validate_builtin_backends(self) -> StorageConfig:
        match self.backend:
            case "r2":
                if self.r2 is None:
                    raise ValueError(
                        "storage.r2 is required when backend=r2. "
                        "Add 'storage.r2' section to your config."
                    )
            case "local":
                if self.local is None:
                    raise ValueError(
                        "storage.local is required when backend=local. "
                        "Add 'storage.local' section to your config."
                    )
            case _:
                pass
        return self

    def backend_config(self) -> BaseModel:
        """Return the section matching the selected backend."""
        specific = getattr(self, self.backend, None)
        if specific is None:
            raise ValueError(f"Missing 'storage.{self.backend}' config section")
        return specific


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=0, le=65535)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    max_body_bytes: int = Field(default=DEFAULT_MAX_BODY_BYTES, gt=0)


class Config(BaseModel):
    """Root configuration, built once at startup and passed explicitly."""

    model_config = ConfigDict(frozen=True)

    storage: StorageConfig
    server: ServerConfig = Field(default_factory=ServerConfig)
