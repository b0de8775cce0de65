import logging
import re
import time
import uuid
from typing import Optional, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .application.ports.rate_limiter import RateLimiter
from .core.config import settings
from .db.session import engine
from .exceptions import create_error_response
from .infrastructure.audit import SqlAuditLogger
from .infrastructure.rate_limit import get_rate_limiter
from .utils import get_client_ip

logger = logging.getLogger(__name__)

UNLOGGED_PATHS = ("/health",)

UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)

# Checked in order against the request path
PATH_ACTIONS = (
    ("login", "LOGIN"),
    ("logout", "LOGOUT"),
    ("signup", "SIGNUP"),
    ("refresh", "REFRESH_TOKEN"),
    ("mfa", "MFA_VERIFY"),
)
METHOD_ACTIONS = {
    "GET": "VIEW",
    "POST": "CREATE",
    "PUT": "UPDATE",
    "PATCH": "UPDATE",
    "DELETE": "DELETE",
}


def determine_action(method: str, path: str) -> str:
    lowered = path.lower()
    for marker, action in PATH_ACTIONS:
        if marker in lowered:
            return action
    return METHOD_ACTIONS.get(method.upper(), "UNKNOWN")


def extract_resource(path: str) -> Tuple[Optional[str], Optional[str]]:
    """``/api/v1/<type>/<id>`` to ``(type, id)``; the id only when it is a UUID."""
    parts = [p for p in path.split("/") if p]
    resource_type = parts[2] if len(parts) > 2 else None
    resource_id = parts[3] if len(parts) > 3 and UUID_PATTERN.match(parts[3]) else None
    return resource_type, resource_id


class AuditMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and records API calls in the audit trail."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        if request.url.path.startswith(settings.API_PREFIX) and request.method != "OPTIONS":
            duration_ms = int((time.time() - start_time) * 1000)
            await run_in_threadpool(self._record, request, response.status_code, duration_ms)
        return response

    def _record(self, request: Request, status_code: int, duration_ms: int) -> None:
        resource_type, resource_id = extract_resource(request.url.path)
        failed = status_code >= 400
        try:
            with Session(engine) as session:
                SqlAuditLogger(session).log(
                    determine_action(request.method, request.url.path),
                    user_id=getattr(request.state, "user_id", None),
                    resource_type=resource_type,
                    resource_id=resource_id,
                    ip_address=get_client_ip(request),
                    user_agent=request.headers.get("user-agent"),
                    request_id=request.state.request_id,
                    status="failure" if failed else "success",
                    error_message=f"HTTP {status_code}" if failed else None,
                    metadata={
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": status_code,
                        "duration_ms": duration_ms,
                    },
                )
        except Exception as e:
            logger.error(f"Audit logging failed for {request.url.path}: {e}")


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, limiter: Optional[RateLimiter] = None):
        super().__init__(app)
        self._limiter = limiter
        self.max_requests = settings.RATE_LIMIT_MAX_REQUESTS
        self.window_seconds = settings.RATE_LIMIT_WINDOW_SEC

    @property
    def limiter(self) -> RateLimiter:
        if self._limiter is None:
            self._limiter = get_rate_limiter()
        return self._limiter

    async def dispatch(self, request: Request, call_next):
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        client_ip = get_client_ip(request)
        allowed = await run_in_threadpool(self.limiter.allow, f"global:{client_ip}", self.max_requests, self.window_seconds)
        if not allowed:
            logger.warning(f"Rate limit exceeded for IP: {client_ip}")
            return JSONResponse(
                status_code=429,
                content=create_error_response(
                    "Too many requests from this IP, please try again later",
                    429,
                    getattr(request.state, "request_id", None),
                    retry_after=self.window_seconds,
                ),
                headers={"Retry-After": str(self.window_seconds)},
            )
        return await call_next(request)


class SecurityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'self'; frame-ancestors 'none'"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(self), camera=(self)"
        if request.url.path.startswith(settings.API_PREFIX):
            # Responses may carry PHI
            response.headers["Cache-Control"] = "no-store"

        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            f"{request.method} {request.url.path} {response.status_code} in {duration:.3f}s "
            f"from {get_client_ip(request)} [{getattr(request.state, 'request_id', '-')}]"
        )
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {e}", exc_info=True)
            message = f"Internal server error: {e}" if settings.DEBUG and not settings.is_production else "Internal server error"
            return JSONResponse(
                status_code=500,
                content=create_error_response(message, 500, getattr(request.state, "request_id", None)),
            )


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                size = int(content_length)
            except ValueError:
                return JSONResponse(status_code=400, content=create_error_response("Invalid Content-Length header", 400))
            if size > settings.MAX_REQUEST_SIZE:
                return JSONResponse(
                    status_code=413,
                    content=create_error_response("Request entity too large", 413, getattr(request.state, "request_id", None)),
                )
        return await call_next(request)
