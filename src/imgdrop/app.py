"""Process wiring: config → object store → pipeline → HTTP server."""

from __future__ import annotations

import asyncio
import logging
import signal
from pathlib import Path

from imgdrop.api import APIServer, create_app
from imgdrop.config import load_config
from imgdrop.gateway import StorageGateway
from imgdrop.interfaces import ObjectStore
from imgdrop.models.config import Config
from imgdrop.pipeline import UploadPipeline
from imgdrop.plugins import discover_all_plugins
from imgdrop.plugins.registry import load_storage

logger = logging.getLogger(__name__)


def create_store(config: Config) -> ObjectStore:
    """Instantiate the configured object store backend."""
    discover_all_plugins()
    return load_storage(config.storage.backend, config.storage.backend_config())


def build_pipeline(config: Config, store: ObjectStore) -> UploadPipeline:
    """Assemble gateway and pipeline around an object store."""
    return UploadPipeline(StorageGateway.from_config(store, config.storage))


class Application:
    """Owns the object store, upload pipeline and HTTP server of one process."""

    def __init__(self, config_path: Path | None = None, *, config: Config | None = None) -> None:
        """Nothing is created until `run`.

        Args:
            config_path: YAML file to load; the environment is used when omitted
            config: Already-built config, used as-is
        """
        self.config_path = config_path
        self._config = config

        self._store: ObjectStore | None = None
        self._pipeline: UploadPipeline | None = None
        self._api_server: APIServer | None = None

        self._stop_requested = asyncio.Event()
        self._stopping = False

    async def run(self) -> None:
        """Serve uploads until SIGINT/SIGTERM or `request_stop`."""
        if self._config is None:
            self._config = load_config(self.config_path)
        logger.info("imgdrop starting, config from %s", self.config_path or "environment")

        self._create_components()
        self._install_signal_handlers()

        try:
            if self._api_server is not None:
                await self._api_server.start()
            await self._stop_requested.wait()
        finally:
            await self.shutdown()

    def _create_components(self) -> None:
        config = self.config

        self._store = create_store(config)
        self._pipeline = build_pipeline(config, self._store)
        logger.info(
            "Storage backend=%s urls=%s",
            config.storage.backend,
            "public" if self._pipeline.gateway.uses_public_urls else "signed",
        )

        self._api_server = APIServer(
            create_app(self._pipeline, config.server),
            config.server.host,
            config.server.port,
        )

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, self.request_stop, signum)

    def request_stop(self, signum: signal.Signals | None = None) -> None:
        """Make `run` return after a graceful shutdown."""
        reason = signum.name if signum is not None else "request"
        if self._stopping:
            logger.warning("Already stopping; ignoring %s", reason)
            return
        self._stopping = True
        logger.info("Stopping on %s", reason)
        self._stop_requested.set()

    async def shutdown(self) -> None:
        """Stop accepting uploads, then release the object store."""
        if self._api_server is not None:
            await self._api_server.stop()
        if self._store is not None:
            await self._store.shutdown()
        logger.info("imgdrop stopped")

    @property
    def config(self) -> Config:
        if self._config is None:
            raise RuntimeError("Configuration has not been loaded")
        return self._config

    @property
    def store(self) -> ObjectStore:
        if self._store is None:
            raise RuntimeError("Object store has not been created")
        return self._store

    @property
    def pipeline(self) -> UploadPipeline:
        if self._pipeline is None:
            raise RuntimeError("Pipeline has not been created")
        return self._pipeline
