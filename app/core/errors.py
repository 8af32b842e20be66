"""
Domain errors raised by the service layer.

Each error carries the HTTP status the request boundary maps it to, so
routes can translate with a single ``except AppError``.
"""

from fastapi import HTTPException


class AppError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)

    @property
    def detail(self):
        return str(self)


class ValidationFailed(AppError):
    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: list[str], missing_fields: list[str] | None = None):
        super().__init__("; ".join(errors))
        self.errors = errors
        self.missing_fields = missing_fields or []

    @property
    def detail(self):
        return self.errors


class EventNotFound(AppError):
    status_code = 404
    message = "Event not found"


class EventCancelled(AppError):
    status_code = 400
    message = "Event is cancelled"


class EventFull(AppError):
    status_code = 400
    message = "Event is at full capacity"


class AlreadyRegistered(AppError):
    status_code = 409
    message = "You are already registered for this event"


class RegistrationBusy(AppError):
    """The per-event lock could not be acquired in time; safe to retry."""

    status_code = 503
    message = "Registration is busy, please try again"


class InvalidCredentials(AppError):
    status_code = 401
    message = "Invalid credentials"


class TokenInvalid(AppError):
    status_code = 401
    message = "Invalid or expired token"


class EmailTaken(AppError):
    status_code = 409
    message = "Admin with this email already exists"


class WeakPassword(AppError):
    status_code = 400
    message = "Password must be at least 8 characters"


class BadRequest(AppError):
    status_code = 400
    message = "Bad request"


def to_http(exc: AppError) -> HTTPException:
    """Translate a domain error into the HTTPException the API returns."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return HTTPException(status_code=exc.status_code, detail=exc.detail, headers=headers)
