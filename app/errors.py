"""
Typed application errors.

Guard layers raise these; the exception handlers in main.py serialize every
one of them into the same ``{success, message, error}`` envelope.
"""

from fastapi import HTTPException


class AppError(HTTPException):
    """Base class for business errors that carry an HTTP status"""

    status_code = 500
    error = "Internal"

    def __init__(self, message: str, status_code: int | None = None, headers: dict | None = None):
        super().__init__(status_code=status_code or self.status_code, detail=message, headers=headers)
        self.message = message


class ValidationFailed(AppError):
    status_code = 400
    error = "ValidationError"


class NotFound(AppError):
    status_code = 404
    error = "NotFound"


class Forbidden(AppError):
    status_code = 403
    error = "Forbidden"


class InvalidState(AppError):
    status_code = 400
    error = "InvalidState"


class InvalidTransition(AppError):
    status_code = 400
    error = "InvalidTransition"


class Expired(AppError):
    status_code = 400
    error = "Expired"


class Conflict(AppError):
    status_code = 400
    error = "Conflict"


class Unauthorized(AppError):
    status_code = 401
    error = "Unauthorized"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})
