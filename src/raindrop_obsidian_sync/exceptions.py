"""Centralized exception hierarchy for raindrop-obsidian-sync.

All custom exceptions inherit from RaindropSyncError, making it easy to catch
every sync-related error with a single except clause.

Exception Hierarchy:
    RaindropSyncError (base)
     ConfigurationError - Configuration loading/validation errors
        MissingCredentialError - No API token configured
     RaindropApiError - Remote service communication errors
     DocumentError - Local document errors
        DocumentFormatError - Malformed metadata header
        DocumentStoreError - Storage read/write/delete failures
     SyncError - Fatal reconciliation run errors

Usage Examples:
    try:
        await engine.run()
    except MissingCredentialError as e:
        console.print(e.message)
    except RaindropSyncError as e:
        logger.error("sync_failed", **e.to_dict())
"""

from typing import Any


class RaindropSyncError(Exception):
    """Base exception for all sync-related errors.

    Attributes:
        message: Human-readable error message
        suggestion: Optional suggestion for resolving the error
        error_code: Structured error code for machine-readable handling
        context: Additional context for debugging (e.g., ids, paths)
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.message = message
        self.suggestion = suggestion
        self.error_code = error_code
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with error code and suggestion if available."""
        parts = []
        if self.error_code:
            parts.append(f"[{self.error_code}] {self.message}")
        else:
            parts.append(self.message)
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "message": self.message,
            "error_code": self.error_code,
            "suggestion": self.suggestion,
            "context": self.context,
            "type": type(self).__name__,
        }


# Configuration Errors


class ConfigurationError(RaindropSyncError):
    """Configuration loading or validation errors.

    Raised when:
    - Config file is missing or malformed
    - Configuration values fail validation
    """


class MissingCredentialError(ConfigurationError):
    """No Raindrop API token is configured.

    This is a precondition failure: the requested operation is not attempted.
    """


# Remote Errors


class RaindropApiError(RaindropSyncError):
    """Raindrop API communication errors.

    Raised when:
    - The service responds with a non-success status
    - The request fails at the network level
    - The response body cannot be interpreted
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        suggestion: str | None = None,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.status_code = status_code
        super().__init__(
            message, suggestion=suggestion, error_code=error_code, context=context
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


# Document Errors


class DocumentError(RaindropSyncError):
    """Base class for local document errors."""


class DocumentFormatError(DocumentError):
    """Malformed metadata header.

    Raised when the header block is present but a line does not follow the
    ``key: value`` / ``  - item`` grammar, or a quoted value is unterminated.
    """


class DocumentStoreError(DocumentError):
    """Storage capability failures (read, write, delete, list)."""


# Sync Errors


class SyncError(RaindropSyncError):
    """Fatal reconciliation run errors.

    Raised when a run has to be aborted as a whole, e.g. because the full
    remote record set could not be fetched.
    """
