"""`{"ok": false, "error": ...}` responses for every failure path."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, cast

from fastapi import FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from imgdrop.errors import UploadPipelineError

logger = logging.getLogger(__name__)

INVALID_BODY_ERROR = "Invalid request body"
INTERNAL_ERROR = "Internal server error"


class FailureEnvelope(BaseModel):
    ok: bool = False
    error: str


class RequestRejected(Exception):
    """Raised by routes and dependencies to answer with a failure envelope."""

    def __init__(self, error: str, *, status_code: int = status.HTTP_400_BAD_REQUEST) -> None:
        super().__init__(error)
        self.status_code = status_code


class PayloadTooLarge(HTTPException):
    """Request body exceeded the configured ceiling."""

    def __init__(self, max_bytes: int) -> None:
        super().__init__(status_code=413, detail=f"Request body exceeds {max_bytes} bytes")


def failure(error: str, status_code: int, headers: Mapping[str, str] | None = None) -> JSONResponse:
    body = FailureEnvelope(error=error).model_dump(mode="json")
    return JSONResponse(body, status_code=status_code, headers=dict(headers) if headers else None)


def _http_error_text(detail: Any) -> str:
    # Starlette fills in the reason phrase when no detail is given.
    if isinstance(detail, dict):
        return str(detail.get("detail") or detail.get("error") or "Request failed")
    return str(detail)


async def _on_rejected(_: Request, exc: Exception) -> JSONResponse:
    rejected = cast(RequestRejected, exc)
    return failure(str(rejected), rejected.status_code)


async def _on_pipeline_error(_: Request, exc: Exception) -> JSONResponse:
    # Bad input and backend failures alike answer 400 with the stage's message.
    return failure(str(exc), status.HTTP_400_BAD_REQUEST)


async def _on_invalid_body(request: Request, exc: Exception) -> JSONResponse:
    logger.info("Rejected body on %s: %s", request.url.path, cast(RequestValidationError, exc).errors())
    return failure(INVALID_BODY_ERROR, status.HTTP_400_BAD_REQUEST)


async def _on_http_error(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    return failure(_http_error_text(http_exc.detail), http_exc.status_code, http_exc.headers)


async def _on_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path, exc_info=exc)
    return failure(INTERNAL_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """Route every exception the app can raise to a failure envelope."""
    app.add_exception_handler(RequestRejected, _on_rejected)
    app.add_exception_handler(UploadPipelineError, _on_pipeline_error)
    app.add_exception_handler(RequestValidationError, _on_invalid_body)
    # FastAPI's HTTPException subclasses Starlette's; one handler covers both.
    app.add_exception_handler(StarletteHTTPException, _on_http_error)
    app.add_exception_handler(Exception, _on_unexpected)
