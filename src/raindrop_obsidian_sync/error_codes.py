"""Structured error codes for machine-readable error handling.

Error codes follow the format: {DOMAIN}-{CATEGORY}-{NUMBER}

Error Domains:
    CFG - Configuration errors
    API - Raindrop API errors
    DOC - Local document errors
    SYN - Reconciliation run errors

Usage:
    from raindrop_obsidian_sync.error_codes import ErrorCode

    logger.error(
        "bookmark_sync_failed",
        error_code=ErrorCode.SYN_ITEM_FAILED.value,
        raindrop_id=42,
    )
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Structured error codes for machine-readable handling."""

    # =========================================================================
    # Configuration Errors (CFG-xxx-xxx)
    # =========================================================================
    CFG_TOKEN_MISSING = "CFG-TOKEN-001"
    """No Raindrop API token configured."""

    CFG_FILE_INVALID = "CFG-FILE-001"
    """Config file could not be parsed."""

    CFG_VALUE_INVALID = "CFG-VALUE-001"
    """A configuration value failed validation."""

    # =========================================================================
    # API Errors (API-xxx-xxx)
    # =========================================================================
    API_STATUS = "API-STATUS-001"
    """Remote service answered with a non-success status."""

    API_NETWORK = "API-NET-001"
    """Request failed before a response was received."""

    API_PAYLOAD = "API-PAYLOAD-001"
    """Response body did not match the expected shape."""

    # =========================================================================
    # Document Errors (DOC-xxx-xxx)
    # =========================================================================
    DOC_HEADER_MALFORMED = "DOC-HEADER-001"
    """Metadata header violates the key/value grammar."""

    DOC_READ_FAILED = "DOC-READ-001"
    """Document could not be read from storage."""

    DOC_WRITE_FAILED = "DOC-WRITE-001"
    """Document could not be written to storage."""

    DOC_DELETE_FAILED = "DOC-DELETE-001"
    """Document or folder could not be deleted."""

    # =========================================================================
    # Sync Errors (SYN-xxx-xxx)
    # =========================================================================
    SYN_FETCH_FAILED = "SYN-FETCH-001"
    """Full-set fetch of collections or records failed; run aborted."""

    SYN_ITEM_FAILED = "SYN-ITEM-001"
    """Reconciliation of a single record failed."""

    SYN_PUSH_FAILED = "SYN-PUSH-001"
    """Pushing a local annotation back to the remote service failed."""

    SYN_COUNT_MISMATCH = "SYN-COUNT-001"
    """Processed total differs from fetched total."""


__all__ = ["ErrorCode"]
