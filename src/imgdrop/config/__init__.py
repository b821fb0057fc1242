"""Configuration loading and validation."""

from imgdrop.config.loader import (
    ConfigError,
    ConfigErrorCode,
    load_config,
    load_config_from_dict,
    load_config_from_env,
)
from imgdrop.config.settings import EnvSettings
from imgdrop.config.validation import validate_config, validate_storage_backend

__all__ = [
    "ConfigError",
    "ConfigErrorCode",
    "EnvSettings",
    "load_config",
    "load_config_from_dict",
    "load_config_from_env",
    "validate_config",
    "validate_storage_backend",
]
