"""
Core module for DressGenius backend.
Contains exception handling and shared utilities.
"""
from .exceptions import (
    DressGeniusException,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    ConflictError,
    RateLimitError,
    TurnLimitError,
    ExternalServiceError,
    ErrorResponse,
    dressgenius_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
    safe_execute,
)

__all__ = [
    "DressGeniusException",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "ConflictError",
    "RateLimitError",
    "TurnLimitError",
    "ExternalServiceError",
    "ErrorResponse",
    "dressgenius_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "generic_exception_handler",
    "safe_execute",
]
