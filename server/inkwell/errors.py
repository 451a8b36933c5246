# server/inkwell/errors.py

from typing import Any, Optional


class ApiError(Exception):
    """
    Base error raised by services and handlers.

    Registered error handlers turn it into the response envelope:
        {"success": false, "message": "...", "error": {"code": "...", "details": ...}}
    """

    status_code = 500
    code = "SERVER_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Any = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    @property
    def retryable(self) -> bool:
        return self.status_code >= 500


class ValidationError(ApiError):
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFound(ApiError):
    status_code = 404
    code = "NOT_FOUND"


class Conflict(ApiError):
    status_code = 409
    code = "CONFLICT"


class UpstreamError(ApiError):
    """Media host or database failed; the caller may retry."""

    status_code = 500
    code = "UPSTREAM_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, details: Any = None):
        details = dict(details or {})
        details.setdefault("retryable", True)
        super().__init__(message, code=code, details=details)


def invalid_id(resource: str = "resource") -> ValidationError:
    return ValidationError(f"Invalid {resource} ID format", code="INVALID_ID")
