"""
HTTP Middleware
===============

ASGI middleware enforcing the request body size limit. The limit applies to
the bytes actually received, so chunked bodies without a Content-Length
header are capped too.
"""

from typing import Optional

from fastapi import HTTPException
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from html_renderer.config.settings import get_settings

REQUEST_TOO_LARGE = "request entity too large"


class BodySizeLimitMiddleware:
    """Reject request bodies larger than ``max_body_bytes`` with 413."""

    def __init__(self, app: ASGIApp, max_body_bytes: Optional[int] = None):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = self.max_body_bytes or get_settings().max_body_bytes

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                response = JSONResponse(
                    status_code=400, content={"error": "invalid content-length header"}
                )
                await response(scope, receive, send)
                return
            if declared > limit:
                response = JSONResponse(status_code=413, content={"error": REQUEST_TOO_LARGE})
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    # Raised while the route reads its body, handled as a normal HTTP error
                    raise HTTPException(status_code=413, detail=REQUEST_TOO_LARGE)
            return message

        await self.app(scope, limited_receive, send)
