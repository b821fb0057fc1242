"""Custom configuration validation helpers."""

from __future__ import annotations

from pydantic import ValidationError

from imgdrop.config.loader import ConfigError, ConfigErrorCode
from imgdrop.models.config import Config
from imgdrop.plugins.registry import get_storage_names, validate_storage


def validate_storage_backend(config: Config, valid_storage: list[str] | None = None) -> None:
    """Validate that the storage backend is registered and its section is valid.

    Raises:
        ConfigError: If the backend name is unknown or its config is invalid
    """
    if valid_storage is None:
        from imgdrop.plugins import discover_all_plugins

        discover_all_plugins()
        valid_storage = get_storage_names()

    backend = config.storage.backend
    if backend not in {name.lower() for name in valid_storage}:
        raise ConfigError(
            f"Unknown storage backend: {backend} (valid: {sorted(valid_storage)})",
            code=ConfigErrorCode.UNKNOWN_BACKEND,
        )

    try:
        validate_storage(backend, config.storage.backend_config())
    except (ValidationError, ValueError) as e:
        raise ConfigError(
            f"Invalid storage.{backend} config: {e}",
            code=ConfigErrorCode.BACKEND_INVALID,
            cause=e,
        ) from e


def validate_config(config: Config) -> None:
    """Run all post-model validation checks."""
    validate_storage_backend(config)
