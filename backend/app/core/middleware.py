"""
Vibe Coding Platform - HTTP Middleware
Request/Response logging, timing, context management and tenant host routing
"""

import time
from typing import Callable, Optional, Set
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import FileResponse, HTMLResponse, PlainTextResponse, Response
from starlette.types import ASGIApp, Receive, Scope, Send

from app.core.logging_config import (
    logger,
    set_request_id,
    set_user_id,
    set_project_id,
    generate_request_id,
)
from app.modules.preview.tenant_router import TenantRouter, render_placeholder


# Paths that should skip detailed logging (health checks, docs)
SKIP_LOGGING_PATHS: Set[str] = {
    "/health",
    "/favicon.ico",
    "/docs",
    "/redoc",
    "/openapi.json",
}

# Paths that use SSE/streaming and should not be buffered
STREAMING_PATHS: Set[str] = {
    "/api/v1/chat/stream",
}


def should_skip_logging(path: str) -> bool:
    """Check if path should skip detailed logging"""
    return path in SKIP_LOGGING_PATHS


def is_streaming_path(path: str) -> bool:
    """Check if path uses SSE/streaming responses"""
    for streaming_path in STREAMING_PATHS:
        if path.startswith(streaming_path):
            return True
    return False


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging HTTP requests and responses.

    Features:
    - Generates and tracks request IDs for correlation
    - Logs request method, path, status, and duration
    - Sets context variables for downstream logging
    - Adds X-Request-ID and X-Response-Time headers to responses
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)

        # Extract project_id from path if present
        path = request.url.path
        if "/projects/" in path:
            project_id = path.split("/projects/", 1)[1].split("/")[0]
            if project_id:
                set_project_id(project_id)

        skip_logging = should_skip_logging(path)
        is_streaming = is_streaming_path(path)

        start_time = time.perf_counter()

        if not skip_logging:
            client_ip = request.client.host if request.client else "unknown"
            logger.info(
                f"→ {request.method} {path}",
                extra={
                    "event_type": "http_request_start",
                    "http_method": request.method,
                    "http_path": path,
                    "client_ip": client_ip,
                    "user_agent": request.headers.get("user-agent", ""),
                }
            )

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

            if not skip_logging:
                logger.log_request(
                    request.method,
                    path,
                    response.status_code,
                    duration_ms,
                    is_streaming=is_streaming,
                )

            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"✗ {request.method} {path} - Exception ({duration_ms:.2f}ms): {type(exc).__name__}",
                exc_info=True,
                extra={
                    "event_type": "http_request_error",
                    "http_method": request.method,
                    "http_path": path,
                    "duration_ms": duration_ms,
                    "error_type": type(exc).__name__,
                    "error_message": str(exc),
                }
            )
            raise

        finally:
            set_request_id("")
            set_user_id("")
            set_project_id("")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to application responses.
    Tenant sites are answered before this runs, so they stay embeddable.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Frame-Options"] = "DENY"

        return response


class TenantRoutingMiddleware:
    """
    Pure ASGI middleware that answers tenant preview hosts.

    {project_id}.{PREVIEW_DOMAIN}/path is served straight from that project's
    root; a well-formed label without a root gets the "building" placeholder;
    any other host falls through to the application unchanged.

    NOTE: Uses pure ASGI instead of BaseHTTPMiddleware so static files stream
    without going through call_next.
    """

    ALLOWED_METHODS = ("GET", "HEAD")

    def __init__(self, app: ASGIApp, router: Optional[TenantRouter] = None):
        self.app = app
        self.router = router or TenantRouter()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        host = headers.get(b"host", b"").decode("latin-1")

        resolution = await run_in_threadpool(self.router.resolve, host)
        if resolution is None:
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "/")
        response = await self._respond(resolution, path, scope["method"].upper())

        logger.info(
            f"[TenantRouter] {scope['method']} {resolution.project_id}{path} -> {response.status_code}",
            extra={
                "event_type": "tenant_request",
                "tenant": resolution.project_id,
                "lifecycle": resolution.lifecycle.value,
                "http_path": path,
                "http_status": response.status_code,
            }
        )
        await response(scope, receive, send)

    async def _respond(self, resolution, path: str, method: str) -> Response:
        if method not in self.ALLOWED_METHODS:
            return PlainTextResponse(
                "Method Not Allowed", status_code=405, headers={"Allow": ", ".join(self.ALLOWED_METHODS)}
            )

        if self.router.wants_placeholder(resolution, path):
            return HTMLResponse(
                render_placeholder(resolution.project_id),
                status_code=200,
                headers={"Cache-Control": "no-store", "X-Tenant-Status": "building"},
            )

        target = await run_in_threadpool(self.router.resolve_file, resolution, path)
        if target is None:
            return PlainTextResponse("Not Found", status_code=404)

        # Generated files change between requests while the agent is working
        return FileResponse(target, headers={"Cache-Control": "no-cache"})


__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "TenantRoutingMiddleware",
    "should_skip_logging",
    "is_streaming_path",
    "SKIP_LOGGING_PATHS",
    "STREAMING_PATHS",
]
