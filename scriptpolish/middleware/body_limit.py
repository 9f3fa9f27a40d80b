"""
Request body size ceiling.

The declared Content-Length is checked up front; bodies without one
(chunked uploads) are counted as they are received.
"""

import structlog
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = structlog.get_logger(__name__)


class BodyTooLargeError(HTTPException):
    """Raised from the wrapped receive channel once the ceiling is passed."""

    def __init__(self):
        super().__init__(status_code=413, detail="Request body too large")


def _too_large() -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={"error": "Request body too large", "kind": "payload_too_large"},
    )


class BodySizeLimitMiddleware:
    """Rejects requests whose body exceeds max_bytes."""

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        headers = dict(scope.get("headers") or [])
        content_length = headers.get(b"content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                response = JSONResponse(
                    status_code=400,
                    content={"error": "Invalid Content-Length header", "kind": "bad_request"},
                )
                await response(scope, receive, send)
                return
            if declared > self.max_bytes:
                logger.warning("Request body too large", path=path, size=declared)
                await _too_large()(scope, receive, send)
                return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    logger.warning("Streamed request body too large", path=path, size=received)
                    raise BodyTooLargeError()
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except BodyTooLargeError:
            if response_started:
                raise
            await _too_large()(scope, receive, send)
