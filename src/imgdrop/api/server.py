"""FastAPI app assembly and the in-process uvicorn runner."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Any, cast

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from imgdrop import __version__
from imgdrop.api.errors import register_exception_handlers
from imgdrop.api.middleware import (
    REQUEST_ID_HEADER,
    ContentSizeLimitMiddleware,
    RequestIdMiddleware,
)
from imgdrop.api.routes import register_routes
from imgdrop.models.config import ServerConfig
from imgdrop.pipeline import UploadPipeline

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]
CORS_MAX_AGE_S = 86400


def create_contract_app() -> FastAPI:
    """Routes and failure handlers only; no pipeline attached."""
    app = FastAPI(title="imgdrop", version=__version__)
    register_exception_handlers(app)
    register_routes(app)
    return app


def create_app(pipeline: UploadPipeline, server_config: ServerConfig | None = None) -> FastAPI:
    """Build the upload API around an assembled pipeline."""
    settings = server_config or ServerConfig()
    origins = list(settings.cors_origins)

    app = create_contract_app()
    app.state.pipeline = pipeline

    # Each add_middleware wraps the previous stack, so request ids are outermost.
    app.add_middleware(ContentSizeLimitMiddleware, max_content_size=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers refuse credentials with a wildcard origin.
        allow_credentials="*" not in origins,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        expose_headers=[REQUEST_ID_HEADER],
        max_age=CORS_MAX_AGE_S,
    )
    app.add_middleware(RequestIdMiddleware)
    return app


async def _until_started(server: uvicorn.Server, serving: asyncio.Task[None]) -> None:
    while not server.started:
        if serving.done():
            serving.result()
            raise RuntimeError("uvicorn exited before it finished starting")
        await asyncio.sleep(0.01)


class APIServer:
    """Runs uvicorn as a task on the application's event loop."""

    def __init__(
        self,
        app: FastAPI,
        host: str,
        port: int,
        *,
        startup_timeout_s: float = 5.0,
    ) -> None:
        self.app = app
        self.host = host
        self.port = port
        self.startup_timeout_s = startup_timeout_s
        self._uvicorn: uvicorn.Server | None = None
        self._serving: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._serving is not None and not self._serving.done()

    async def start(self) -> None:
        """Return once uvicorn is accepting connections.

        Raises:
            TimeoutError: uvicorn did not report startup in time
            Exception: Whatever uvicorn raised while binding
        """
        if self._serving is not None:
            return

        server = uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=self.host,
                port=self.port,
                loop="asyncio",
                access_log=False,
                log_config=None,
            )
        )
        # SIGINT/SIGTERM belong to Application.
        cast(Any, server).install_signal_handlers = False
        serving = asyncio.create_task(server.serve())

        try:
            await asyncio.wait_for(_until_started(server, serving), timeout=self.startup_timeout_s)
        except Exception as exc:
            server.should_exit = True
            with suppress(Exception):
                await serving
            if isinstance(exc, TimeoutError):
                raise TimeoutError(
                    f"uvicorn did not start on {self.host}:{self.port} "
                    f"within {self.startup_timeout_s}s"
                ) from exc
            raise

        self._uvicorn = server
        self._serving = serving
        logger.info("Upload server on http://%s:%d", self.host, self.port)

    async def stop(self) -> None:
        """Ask uvicorn to finish in-flight requests and exit."""
        if self._uvicorn is None or self._serving is None:
            return

        self._uvicorn.should_exit = True
        try:
            await self._serving
        except Exception:
            logger.exception("uvicorn exited with an error")
        finally:
            self._uvicorn = None
            self._serving = None
        logger.info("Upload server stopped")
