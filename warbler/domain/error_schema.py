"""JSON schema for error serialization (documentation and type checking).

This module provides TypedDict definitions for the error serialization format
used by WarblerError.to_dict(), enabling type-safe handling of serialized
errors in CLI and API contexts.
"""

from __future__ import annotations

from typing import Any, TypedDict

__all__ = ["ErrorDict"]


class ErrorDict(TypedDict):
    """Type definition for serialized error dictionary.

    Attributes:
        error_type: Exception class name (e.g., 'ModelNotFoundError')
        message: Human-readable error message, safe to show to callers
        http_status: Status code the HTTP layer reports for this error
        context: Diagnostic context (paths, exit codes, captured stderr)
        suggestions: List of actionable suggestions for the operator
        timestamp: ISO 8601 timestamp when error occurred
        cause: Stringified original exception, or None

    Example:
        >>> def handle_error(error_dict: ErrorDict) -> None:
        ...     print(f"Error: {error_dict['message']}")
        ...     for suggestion in error_dict['suggestions']:
        ...         print(f"  - {suggestion}")
    """

    error_type: str
    """Exception class name (e.g., 'EngineExecutionError')."""

    message: str
    """Human-readable error message."""

    http_status: int
    """HTTP status code (400 for caller input, 500 for environment)."""

    context: dict[str, Any]
    """Diagnostic context. Logged, never returned over HTTP."""

    suggestions: list[str]
    """List of actionable suggestions."""

    timestamp: str
    """ISO 8601 timestamp when error occurred."""

    cause: str | None
    """Stringified original exception, if any."""
