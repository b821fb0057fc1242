"""Name → class registry for object store backends.

A backend is a class with a pydantic `config_cls` and a `create(config)`
classmethod. Its `storage.<name>` section is validated against `config_cls`
before `create` is called.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel

from imgdrop.interfaces import ObjectStore

logger = logging.getLogger(__name__)

BackendT = TypeVar("BackendT", bound=type)


class BackendFactory(Protocol):
    config_cls: type[BaseModel]

    @classmethod
    def create(cls, config: Any) -> ObjectStore: ...


class BackendRegistry:
    """Backends known to this process, keyed by lower-case name."""

    def __init__(self) -> None:
        self._backends: dict[str, type[BackendFactory]] = {}

    def register(self, name: str, backend: type[BackendFactory]) -> None:
        key = name.lower()
        if key in self._backends:
            raise ValueError(f"Storage backend {key!r} is already registered")
        self._backends[key] = backend
        logger.debug("Registered storage backend %s -> %s", key, backend.__name__)

    def names(self) -> list[str]:
        return sorted(self._backends)

    def config_for(self, name: str, section: Mapping[str, Any] | BaseModel) -> BaseModel:
        """Validate `section` against the backend's config model.

        Raises:
            ValueError: Unknown backend name
            pydantic.ValidationError: Section does not fit the model
        """
        backend = self._lookup(name)
        raw = section.model_dump() if isinstance(section, BaseModel) else dict(section)
        return backend.config_cls.model_validate(raw)

    def create(self, name: str, section: Mapping[str, Any] | BaseModel) -> ObjectStore:
        return self._lookup(name).create(self.config_for(name, section))

    def _lookup(self, name: str) -> type[BackendFactory]:
        try:
            return self._backends[name.lower()]
        except KeyError:
            known = ", ".join(self.names()) or "none"
            raise ValueError(f"Unknown storage backend {name!r} (registered: {known})") from None


STORAGE_REGISTRY = BackendRegistry()


def storage_plugin(name: str) -> Callable[[BackendT], BackendT]:
    """Class decorator registering an object store backend under `name`.

        @storage_plugin(name="r2")
        class R2ObjectStore(ObjectStore):
            config_cls = R2StorageConfig
            ...
    """

    def register(cls: BackendT) -> BackendT:
        for required in ("config_cls", "create"):
            if not hasattr(cls, required):
                raise TypeError(f"Storage backend {cls.__name__} must define {required!r}")
        STORAGE_REGISTRY.register(name, cls)
        return cls

    return register


def load_storage(name: str, config: Mapping[str, Any] | BaseModel) -> ObjectStore:
    """Validate `config` and create the named backend."""
    return STORAGE_REGISTRY.create(name, config)


def validate_storage(name: str, config: Mapping[str, Any] | BaseModel) -> BaseModel:
    """Validate `config` for the named backend without creating it."""
    return STORAGE_REGISTRY.config_for(name, config)


def get_storage_names() -> list[str]:
    return STORAGE_REGISTRY.names()
