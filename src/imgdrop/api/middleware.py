"""ASGI middleware: body size ceiling and request ids."""

from __future__ import annotations

import uuid

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from imgdrop.api.errors import PayloadTooLarge
from imgdrop.logging_setup import reset_request_id, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"


class ContentSizeLimitMiddleware:
    """Reject request bodies larger than `max_content_size` bytes.

    The limit is enforced while the body streams in, so chunked uploads
    without a Content-Length are covered too. The error is raised from
    `receive`, inside the route, where the app's exception handlers see it.
    """

    def __init__(self, app: ASGIApp, max_content_size: int) -> None:
        self.app = app
        self.max_content_size = max_content_size

    def receive_wrapper(self, receive: Receive) -> Receive:
        received = 0

        async def inner() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] != "http.request":
                return message
            received += len(message.get("body", b""))
            if received > self.max_content_size:
                raise PayloadTooLarge(self.max_content_size)
            return message

        return inner

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        await self.app(scope, self.receive_wrapper(receive), send)


class RequestIdMiddleware:
    """Tag each request with an id for logs and the `X-Request-ID` response header."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = uuid.uuid4().hex[:12]
        token = set_request_id(request_id)

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.append(REQUEST_ID_HEADER, request_id)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            reset_request_id(token)
