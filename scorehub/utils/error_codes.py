from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Stable ScoreHub error codes carried in every error envelope."""

    E001 = "E001"  # Lookup: Referenced entity not found
    E002 = "E002"  # Conflict: Uniqueness violation
    E003 = "E003"  # Auth: Not permitted
    E004 = "E004"  # Validation: Invalid input
    E005 = "E005"  # Codes: Code space exhausted
    E006 = "E006"  # Store: Backing store unavailable
    E007 = "E007"  # Auth: Missing or invalid credentials
    E008 = "E008"  # Rate limit: Too many requests
    E010 = "E010"  # Internal: Internal error


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.E001: "Not found",
    ErrorCode.E002: "Already exists",
    ErrorCode.E003: "Not permitted",
    ErrorCode.E004: "Validation error",
    ErrorCode.E005: "Could not allocate a unique code",
    ErrorCode.E006: "Storage unavailable, please retry",
    ErrorCode.E007: "Unauthorized",
    ErrorCode.E008: "Too many requests",
    ErrorCode.E010: "Internal server error",
}
