import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES = {
    400: "Bad request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Resource not found",
    409: "Resource conflict",
    413: "Request entity too large",
    422: "Validation failed",
    429: "Too many requests",
    500: "Internal server error",
}


class APIException(HTTPException):
    """Domain error carrying an HTTP status and optional extra envelope fields."""

    def __init__(self, status_code: int, detail: Optional[str] = None, **extra: Any):
        super().__init__(status_code=status_code, detail=detail or DEFAULT_MESSAGES.get(status_code, "Error"))
        self.extra = extra


def create_error_response(error_message: str, status_code: int = 400, request_id: Optional[str] = None, **extra: Any) -> dict:
    """Create a standardized error response"""
    body = {
        "success": False,
        "error": error_message,
    }
    if request_id:
        body["request_id"] = request_id
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def create_success_response(data: Any, **extra: Any) -> dict:
    """Create a standardized success response"""
    body = {
        "success": True,
        "data": data,
    }
    body.update(extra)
    return body


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def _error_json(request: Request, status_code: int, message: str, headers: Optional[Dict[str, str]] = None, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=create_error_response(message, status_code, _request_id(request), **extra),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # HTTPBearer answers 403 "Not authenticated" when the header is missing
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return _error_json(request, 401, "No authentication token provided")

    if exc.status_code == 404 and exc.detail in (None, "Not Found"):
        return _error_json(request, 404, DEFAULT_MESSAGES[404], path=request.url.path)

    extra = getattr(exc, "extra", {}) or {}
    message = exc.detail if isinstance(exc.detail, str) else DEFAULT_MESSAGES.get(exc.status_code, "Error")
    if exc.status_code >= 500 and settings.is_production:
        message = DEFAULT_MESSAGES[500]
    return _error_json(request, exc.status_code, message, headers=getattr(exc, "headers", None), **extra)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({
            "field": ".".join(loc) or None,
            "message": err.get("msg"),
            "type": err.get("type"),
        })
    return _error_json(request, 422, DEFAULT_MESSAGES[422], validation_errors=errors)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return _error_json(request, 409, "Resource already exists")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
