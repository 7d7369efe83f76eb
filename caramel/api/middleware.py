"""HTTP Middleware — security headers, body size limit, per-client rate limit.

Invariants:
    - Security headers are added to every response unless a route set them
    - Bodies above the limit get 413 whether the size is declared
      (Content-Length) or only known by counting (chunked transfer)
    - Requests under the rate-limited prefix consume quota; rejected ones get
      429 with Retry-After and never reach a route
    - Middleware answers with the same error envelope as the route handlers

Design Decisions:
    - Starlette BaseHTTPMiddleware where a concern only needs the request
      and response; the body limit is pure ASGI because it wraps receive
    - Stack order is declared once in main.create_app
    - Client key is request.client.host, already rewritten by the outer proxy
      headers middleware for trusted peers only
"""

import logging

from fastapi import Request
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from caramel.api.error_handlers import error_response
from caramel.core.errors import (
    InvalidRequestError, PayloadTooLargeError, RateLimitExceededError,
)
from caramel.core.rate_limit import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

SECURITY_HEADERS: dict[str, str] = {
    "Content-Security-Policy": (
        "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
        "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
        "object-src 'none';script-src 'self';script-src-attr 'none';"
        "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class BodySizeLimitMiddleware:
    """Pure ASGI: rejects over-limit bodies by declared or received size.

    With Content-Length the header decides (the server enforces the framing).
    Without it (chunked uploads) the body is read here, counted, and replayed
    to the app once it is known to fit.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None:
            try:
                size = int(declared)
            except ValueError:
                await error_response(
                    InvalidRequestError("Invalid Content-Length header"), True,
                )(scope, receive, send)
                return
            if size > self.max_bytes:
                await self._reject(scope, receive, send, size)
                return
            await self.app(scope, receive, send)
            return

        chunks: list[bytes] = []
        received = 0
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            chunk = message.get("body", b"")
            received += len(chunk)
            if received > self.max_bytes:
                await self._reject(scope, receive, send, received)
                return
            chunks.append(chunk)
            if not message.get("more_body", False):
                break

        await self.app(scope, _replay(b"".join(chunks), receive), send)

    async def _reject(
        self, scope: Scope, receive: Receive, send: Send, size: int,
    ) -> None:
        logger.warning(
            f"Rejected body of at least {size} bytes (limit {self.max_bytes})",
            extra={"path": scope.get("path"), "status_code": 413},
        )
        await error_response(
            PayloadTooLargeError(self.max_bytes), True,
        )(scope, receive, send)


def _replay(body: bytes, receive: Receive) -> Receive:
    """Hand the buffered body out once, then defer to the real channel."""
    delivered = False

    async def replay_receive() -> Message:
        nonlocal delivered
        if not delivered:
            delivered = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay_receive


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limiter: SlidingWindowRateLimiter,
        path_prefix: str = "/api",
    ):
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix.rstrip("/")

    def _is_limited(self, path: str) -> bool:
        return path == self.path_prefix or path.startswith(
            self.path_prefix + "/",
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        if not self._is_limited(request.url.path):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        decision = self.limiter.check(client)
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={
                    "client": client,
                    "path": request.url.path,
                    "status_code": 429,
                },
            )
            return error_response(
                RateLimitExceededError(decision.retry_after_seconds),
                True,
                headers={
                    "Retry-After": str(decision.retry_after_seconds),
                    "X-RateLimit-Limit": str(decision.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response
