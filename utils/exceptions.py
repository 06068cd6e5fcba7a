"""
Error kinds raised by the core components.
Each kind maps to one HTTP status; api/errors.py renders them
into the uniform error envelope.
"""
from __future__ import annotations


class APIError(Exception):
    status = 500
    error = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, hint: str | None = None, details: dict | None = None):
        self.message = message or self.default_message
        self.hint = hint
        self.details = details
        super().__init__(self.message)

    def headers(self) -> dict:
        return {}


class InvalidInput(APIError):
    status = 400
    error = "INVALID_INPUT"
    default_message = "Invalid input"


class Unauthorized(APIError):
    status = 401
    error = "UNAUTHORIZED"
    default_message = "Unauthorized request"


class SessionExpired(Unauthorized):
    default_message = "Session expired. Please login again."


class Forbidden(APIError):
    status = 403
    error = "FORBIDDEN"
    default_message = "Access denied"


class NotFound(APIError):
    status = 404
    error = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(APIError):
    status = 409
    error = "CONFLICT"
    default_message = "Resource already exists"


class RateLimited(APIError):
    status = 429
    error = "RATE_LIMITED"
    default_message = "Too many requests. Please try again later."

    def __init__(self, retry_after: int, message: str | None = None, hint: str | None = None):
        self.retry_after = max(0, int(retry_after))
        super().__init__(message, hint=hint)

    def headers(self) -> dict:
        return {"Retry-After": str(self.retry_after)}


class Internal(APIError):
    pass
