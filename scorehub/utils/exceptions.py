from __future__ import annotations

from typing import Any, Optional

from scorehub.utils.error_codes import ErrorCode, ERROR_MESSAGES


def _normalize_error_code(value: ErrorCode | str | None) -> ErrorCode:
    if value is None:
        return ErrorCode.E010
    if isinstance(value, ErrorCode):
        return value
    try:
        return ErrorCode(str(value))
    except ValueError:
        return ErrorCode.E010


class ScoreHubException(Exception):
    """Base exception for ScoreHub.

    API response format is handled by the global exception handler.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        code: ErrorCode | str = ErrorCode.E010,
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ):
        normalized = _normalize_error_code(code)
        if message is None:
            message = ERROR_MESSAGES.get(normalized, ERROR_MESSAGES[ErrorCode.E010])

        self.message = message
        self.code = normalized.value
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": {"code": self.code, "message": self.message, "details": self.details}}


class NotFoundError(ScoreHubException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message or "Not found", code=ErrorCode.E001, details=details, status_code=404)


class DuplicateError(ScoreHubException):
    """Uniqueness violation. ``field`` names the conflicting field for inline messages."""

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        details: Optional[dict[str, Any]] = None,
    ):
        merged = dict(details or {})
        if field is not None:
            merged.setdefault("field", field)
        self.field = field
        super().__init__(message, code=ErrorCode.E002, details=merged, status_code=409)


class AuthorizationError(ScoreHubException):
    # The message is always generic so a caller cannot probe which resources exist.
    def __init__(self, *, details: Optional[dict[str, Any]] = None):
        super().__init__(ERROR_MESSAGES[ErrorCode.E003], code=ErrorCode.E003, details=details, status_code=403)


class ValidationError(ScoreHubException):
    def __init__(self, message: str | None = None, *, field: str | None = None, details: Optional[dict[str, Any]] = None):
        merged = dict(details or {})
        if field is not None:
            merged.setdefault("field", field)
        self.field = field
        super().__init__(message, code=ErrorCode.E004, details=merged, status_code=400)


class CodeSpaceExhaustedError(ScoreHubException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.E005, details=details, status_code=503)


class TransportError(ScoreHubException):
    """Backing store unreachable or rejected the call."""

    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.E006, details=details, status_code=503)


class UnauthorizedException(ScoreHubException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message or "Unauthorized", code=ErrorCode.E007, details=details, status_code=401)


class TooManyRequestsException(ScoreHubException):
    def __init__(self, message: str | None = None, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message or "Too many requests", code=ErrorCode.E008, details=details, status_code=429)
