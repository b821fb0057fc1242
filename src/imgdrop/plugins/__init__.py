"""Plugin discovery for object store backends."""

import importlib
import logging
import pkgutil
from importlib import metadata

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "imgdrop.plugins"


def discover_all_plugins() -> None:
    """Discover and register all object store backends (built-in and external).

    Backends register themselves with a decorator, so importing their
    modules is enough. External backends are found via entry points.
    """
    package = importlib.import_module("imgdrop.plugins.storage")
    for _, module_name, _ in pkgutil.iter_modules(package.__path__):
        if module_name.startswith("_"):
            continue
        try:
            importlib.import_module(f"imgdrop.plugins.storage.{module_name}")
        except Exception as exc:
            logger.error(
                "Failed to import built-in storage module %s: %s",
                module_name,
                exc,
                exc_info=True,
            )

    for point in metadata.entry_points(group=ENTRY_POINT_GROUP):
        try:
            importlib.import_module(point.module)
        except Exception as exc:
            logger.error(
                "Failed to load external plugin %s from %s: %s",
                point.name,
                point.module,
                exc,
                exc_info=True,
            )


__all__ = ["discover_all_plugins"]
