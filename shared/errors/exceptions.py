"""
Error taxonomy shared by every service.

Each error carries the HTTP status it maps to and a message that is safe to
show to the client. Routers never build error responses by hand; they raise
one of these and the handlers in `handlers.py` render `{"message": ...}`.
"""


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(AppError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Conflict(AppError):
    status_code = 409
    default_message = "Resource already exists"


class DuplicateOrderId(Conflict):
    default_message = "Payment with this orderId already exists"


class ConfigurationError(AppError):
    status_code = 500
    default_message = "Service is not configured"


class InternalError(AppError):
    status_code = 500
    default_message = "Internal server error"
