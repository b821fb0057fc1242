"""Startup configuration: environment variables or a YAML file."""

from __future__ import annotations

import logging
import os
import stat
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from imgdrop.config.settings import EnvSettings
from imgdrop.models.config import Config

logger = logging.getLogger(__name__)

# Group/other permission bits; R2 secrets may live inline in the file.
_SHARED_MODE_BITS = 0o077


class ConfigErrorCode(str, Enum):
    """Why startup configuration was refused."""

    FILE_MISSING = "CONFIG_FILE_MISSING"
    BAD_YAML = "CONFIG_BAD_YAML"
    EMPTY = "CONFIG_EMPTY"
    NOT_A_MAPPING = "CONFIG_NOT_A_MAPPING"
    INVALID = "CONFIG_INVALID"
    UNKNOWN_BACKEND = "CONFIG_UNKNOWN_BACKEND"
    BACKEND_INVALID = "CONFIG_BACKEND_INVALID"
    R2_ENV_MISSING = "CONFIG_R2_ENV_MISSING"


class ConfigError(Exception):
    """Startup configuration could not be built."""

    def __init__(
        self,
        message: str,
        *,
        code: ConfigErrorCode = ConfigErrorCode.INVALID,
        path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.path = path
        self.__cause__ = cause


def load_config(path: Path | None = None) -> Config:
    """Build the gateway config from `path`, or from the environment when it is None.

    Raises:
        ConfigError: Missing/unreadable file, missing R2 variables, or invalid values
    """
    if path is None:
        return load_config_from_env()
    return _build(_read_mapping(path), source=path)


def load_config_from_env(settings: EnvSettings | None = None) -> Config:
    """Build the gateway config from `R2_*` and server environment variables."""
    env = settings if settings is not None else EnvSettings()
    if env.storage_backend == "r2" and (missing := env.missing_r2_vars()):
        raise ConfigError(
            f"Missing required R2 env vars: {', '.join(missing)}",
            code=ConfigErrorCode.R2_ENV_MISSING,
        )
    return _build(env.to_config_dict(), source=None)


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Build the gateway config from an already-parsed mapping."""
    return _build(data, source=None)


def _read_mapping(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"No config file at {path}", code=ConfigErrorCode.FILE_MISSING, path=path)
    _warn_if_shared(path)

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(
            f"{path} is not valid YAML: {exc}",
            code=ConfigErrorCode.BAD_YAML,
            path=path,
            cause=exc,
        ) from exc

    if raw is None:
        raise ConfigError(f"{path} has no settings", code=ConfigErrorCode.EMPTY, path=path)
    if not isinstance(raw, dict):
        raise ConfigError(
            f"{path} must contain a mapping at the top level, not {type(raw).__name__}",
            code=ConfigErrorCode.NOT_A_MAPPING,
            path=path,
        )
    return raw


def _build(data: dict[str, Any], *, source: Path | None) -> Config:
    try:
        config = Config.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(
            describe_validation_error(exc, source),
            code=ConfigErrorCode.INVALID,
            path=source,
            cause=exc,
        ) from exc

    from imgdrop.config.validation import validate_config

    validate_config(config)
    return config


def describe_validation_error(exc: ValidationError, source: Path | None = None) -> str:
    """One line per failing field, prefixed with where the values came from."""
    origin = str(source) if source is not None else "environment"
    lines = [f"Invalid configuration ({origin}):"]
    lines.extend(
        f"  {'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return "\n".join(lines)


def _warn_if_shared(path: Path) -> None:
    if os.name != "posix":
        return
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except OSError:
        return
    if mode & _SHARED_MODE_BITS:
        logger.warning(
            "Config file %s is readable by other users (mode %04o); R2 credentials should be chmod 600",
            path,
            mode,
        )
