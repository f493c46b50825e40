from .exceptions import (
    AppError,
    InvalidRequest,
    Unauthorized,
    NotFound,
    Conflict,
    DuplicateOrderId,
    ConfigurationError,
    InternalError,
)
from .handlers import register_exception_handlers

__all__ = [
    "AppError",
    "InvalidRequest",
    "Unauthorized",
    "NotFound",
    "Conflict",
    "DuplicateOrderId",
    "ConfigurationError",
    "InternalError",
    "register_exception_handlers",
]
