from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base for errors that map onto an HTTP status and an error envelope.

    Subclasses set ``code``, ``status_code`` and ``default_message``. When
    ``expose`` is false the client only ever sees ``public_message``; the real
    message is kept for the logs.
    """

    code = "app_error"
    status_code = 400
    default_message = "Request failed"
    expose = True

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        return self.message if self.expose else self.default_message

    @property
    def public_details(self) -> dict[str, Any]:
        return self.details if self.expose else {}


class NotFoundError(AppError):
    code = "not_found"
    status_code = 404
    default_message = "Resource not found"


class UnauthorizedError(AppError):
    code = "unauthorized"
    status_code = 401
    default_message = "Unauthorized"


class ValidationAppError(AppError):
    code = "validation_error"
    status_code = 422
    default_message = "Validation failed"


class ConfigurationError(AppError):
    """Server-side misconfiguration, e.g. no usable model or a provider without credentials."""

    code = "internal_error"
    status_code = 500
    default_message = "Internal server error"
    expose = False


class UpstreamModelError(AppError):
    code = "ai_unavailable"
    status_code = 503
    default_message = "AI model is unavailable"
    expose = False
