"""
Centralized exception handling for DressGenius backend.
Provides consistent error responses across all endpoints.
"""
import logging
import traceback
from typing import Any, Dict, Optional
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# Custom Exception Classes
# =============================================================================

class DressGeniusException(Exception):
    """Base exception for DressGenius application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(message)


class NotFoundError(DressGeniusException):
    """Resource not found (also used to mask records owned by another user)."""

    def __init__(self, message: str = "Not found."):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND",
        )


class ValidationError(DressGeniusException):
    """Input validation failed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="VALIDATION_ERROR",
            details={"field": field} if field else {}
        )


class AuthenticationError(DressGeniusException):
    """Authentication failed."""

    def __init__(self, message: str = "Unauthenticated."):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTHENTICATION_ERROR"
        )


class ConflictError(DressGeniusException):
    """Request conflicts with an existing record."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="CONFLICT"
        )


class RateLimitError(DressGeniusException):
    """Rate limit or upstream quota exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded. Please try again later.",
        retry_after: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = {"retry_after": retry_after}
        merged.update(details or {})
        self.retry_after = retry_after
        super().__init__(
            message=message,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error_code="RATE_LIMIT_ERROR",
            details=merged
        )


class TurnLimitError(DressGeniusException):
    """Chat session has used all of its turns."""

    def __init__(self, turns_used: int, turns_max: int, message: Optional[str] = None):
        super().__init__(
            message=message or f"This chat has reached the {turns_max}-turn limit.",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error_code="TURN_LIMIT_REACHED",
            details={"turns_used": turns_used, "turns_max": turns_max}
        )


class ExternalServiceError(DressGeniusException):
    """External service (Gemini, Cloudinary, etc.) failed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="EXTERNAL_SERVICE_ERROR",
            details=details
        )


# =============================================================================
# Error Response Model
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response format."""
    success: bool = False
    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None


# =============================================================================
# Exception Handlers for FastAPI
# =============================================================================

async def dressgenius_exception_handler(request: Request, exc: DressGeniusException) -> JSONResponse:
    """Handle DressGenius custom exceptions."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(f"DressGeniusException: {exc.error_code} - {exc.message}", extra={"details": exc.details})

    headers = None
    retry_after = exc.details.get("retry_after") if exc.details else None
    if exc.status_code == status.HTTP_429_TOO_MANY_REQUESTS and retry_after:
        headers = {"Retry-After": str(retry_after)}

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error_code=exc.error_code,
            message=exc.message,
            details=exc.details if exc.details else None
        ).model_dump(exclude_none=True, mode="json"),
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTPExceptions with consistent format."""
    error_code = "HTTP_ERROR"
    if exc.status_code == 400:
        error_code = "BAD_REQUEST"
    elif exc.status_code == 401:
        error_code = "UNAUTHORIZED"
    elif exc.status_code == 403:
        error_code = "FORBIDDEN"
    elif exc.status_code == 404:
        error_code = "NOT_FOUND"
    elif exc.status_code == 422:
        error_code = "VALIDATION_ERROR"
    elif exc.status_code >= 500:
        error_code = "SERVER_ERROR"

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error_code=error_code,
            message=str(exc.detail)
        ).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as 422 with field-level messages."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})

    first = errors[0]["message"] if errors else "The given data was invalid."
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error_code="VALIDATION_ERROR",
            message=first,
            details={"errors": errors}
        ).model_dump(exclude_none=True),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with logging."""
    # Log the full traceback for debugging
    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        exc_info=True,
        extra={"path": request.url.path, "method": request.method}
    )

    # In production, don't expose internal error details
    from dressgenius.config import settings
    is_dev = not settings.is_production

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error_code="INTERNAL_ERROR",
            message=str(exc) if is_dev else "An unexpected error occurred",
            details={"traceback": traceback.format_exc()} if is_dev else None
        ).model_dump(exclude_none=True)
    )


# =============================================================================
# Utility Functions
# =============================================================================

def safe_execute(func, *args, default=None, log_error: bool = True, **kwargs):
    """
    Safely execute a function and return default on error.
    Use for best-effort operations whose failure must never reach the user.
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        if log_error:
            logger.warning(f"safe_execute caught error in {getattr(func, '__name__', func)}: {e}")
        return default
