"""
Body-buffering gate. Runs before routing.

Opens the request's permission context and, for methods that conventionally carry a body
(POST/PUT/PATCH/DELETE) that is not a multipart upload, reads the whole body into the
context so body extractors can read it and the route handler still receives it intact.
GET/HEAD and file uploads are never buffered.

The body is buffered without a size bound unless max_body_bytes is set; production
deployments should set it.
"""
import logging
from typing import Optional

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from security.context import permission_context

logger = logging.getLogger(__name__)

METHODS_NEEDING_BODY = frozenset({"POST", "PUT", "PATCH", "DELETE"})
MULTIPART_CONTENT_TYPE_PREFIX = "multipart/"


def should_buffer_body(method: str, content_type: Optional[str]) -> bool:
    """Whether a request's body must be made re-readable for body extractors."""
    if (method or "").upper() not in METHODS_NEEDING_BODY:
        return False
    if content_type and content_type.strip().lower().startswith(MULTIPART_CONTENT_TYPE_PREFIX):
        return False
    return True


class BodyTooLargeError(Exception):
    pass


class BodyBufferingMiddleware:
    """Pure ASGI middleware; it must wrap `receive`, which BaseHTTPMiddleware cannot do."""

    def __init__(self, app: ASGIApp, max_body_bytes: int = 0):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        path = scope.get("path", "/")
        content_type = None
        for name, value in scope.get("headers", []):
            if name == b"content-type":
                content_type = value.decode("latin-1")
                break

        with permission_context(path) as context:
            if not should_buffer_body(method, content_type):
                if content_type and method.upper() in METHODS_NEEDING_BODY:
                    logger.info(f"[GATE] {method} {path} is a file upload, body not buffered")
                await self.app(scope, receive, send)
                return

            try:
                body, pending = await self._read_body(receive)
            except BodyTooLargeError:
                logger.warning(f"[GATE] {method} {path} body exceeds {self.max_body_bytes} bytes, rejecting")
                response = JSONResponse(
                    status_code=413,
                    content={"code": "413", "message": f"Request body exceeds {self.max_body_bytes} bytes"},
                )
                await response(scope, receive, send)
                return

            context.body = body
            context.body_buffered = True
            await self.app(scope, self._replay(body, pending, receive), send)

    async def _read_body(self, receive: Receive):
        chunks = []
        size = 0
        while True:
            message = await receive()
            if message["type"] != "http.request":
                # Client went away before the body completed; hand the message on
                return b"".join(chunks), message
            chunk = message.get("body", b"")
            size += len(chunk)
            if self.max_body_bytes and size > self.max_body_bytes:
                raise BodyTooLargeError()
            chunks.append(chunk)
            if not message.get("more_body", False):
                return b"".join(chunks), None

    @staticmethod
    def _replay(body: bytes, pending: Optional[Message], receive: Receive) -> Receive:
        delivered = False

        async def replay_receive() -> Message:
            nonlocal delivered
            if not delivered:
                delivered = True
                if pending is not None:
                    return pending
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        return replay_receive
