from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from imgdrop.models.config import DEFAULT_MAX_BODY_BYTES, DEFAULT_SIGNED_URL_TTL_S

_REPO_DOTENV = Path(__file__).resolve().parents[3] / ".env"

REQUIRED_R2_ENV_VARS = (
    "R2_ACCESS_KEY_ID",
    "R2_SECRET_ACCESS_KEY",
    "R2_ACCOUNT_ID",
    "R2_BUCKET",
)


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", _REPO_DOTENV),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    r2_access_key_id: str | None = None
    r2_secret_access_key: str | None = None
    r2_account_id: str | None = None
    r2_bucket: str | None = None
    r2_public_base_url: str | None = None
    r2_endpoint_url: str | None = None  # overrides https://<account>.r2.cloudflarestorage.com
    r2_verify_tls: bool = True

    storage_backend: str = "r2"
    local_storage_root: str = "./storage"
    signed_url_ttl_s: int = DEFAULT_SIGNED_URL_TTL_S

    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: str = "*"  # comma-separated
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES

    @field_validator("storage_backend")
    @classmethod
    def _normalize_backend(cls, value: str) -> str:
        return str(value).lower()

    def missing_r2_vars(self) -> list[str]:
        """Names of required R2 variables that are unset or empty."""
        values = {
            "R2_ACCESS_KEY_ID": self.r2_access_key_id,
            "R2_SECRET_ACCESS_KEY": self.r2_secret_access_key,
            "R2_ACCOUNT_ID": self.r2_account_id or self.r2_endpoint_url,
            "R2_BUCKET": self.r2_bucket,
        }
        return [name for name in REQUIRED_R2_ENV_VARS if not values[name]]

    def to_config_dict(self) -> dict[str, Any]:
        storage: dict[str, Any] = {
            "backend": self.storage_backend,
            "public_base_url": self.r2_public_base_url,
            "signed_url_ttl_s": self.signed_url_ttl_s,
        }
        if self.storage_backend == "r2":
            storage["r2"] = {
                "access_key_id": self.r2_access_key_id,
                "secret_access_key": self.r2_secret_access_key,
                "account_id": self.r2_account_id,
                "endpoint_url": self.r2_endpoint_url,
                "bucket": self.r2_bucket,
                "verify_tls": self.r2_verify_tls,
            }
        elif self.storage_backend == "local":
            storage["local"] = {"root": self.local_storage_root}

        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        return {
            "storage": storage,
            "server": {
                "host": self.host,
                "port": self.port,
                "cors_origins": origins or ["*"],
                "max_body_bytes": self.max_body_bytes,
            },
        }
