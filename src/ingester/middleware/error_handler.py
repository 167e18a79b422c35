"""
Error handling middleware for the Ingester Service.

Converts domain exceptions to structured error information
with retry guidance for NATS message handling.
"""

import logging
from typing import Any

from ingester.logic.exceptions import (
    ExtractionError,
    IndexWriteError,
    IngesterError,
    PayloadDecodeError,
    PayloadFetchError,
    UnknownVerbError,
    ValidationError,
)

logger = logging.getLogger("search-ingester.error_handler")


async def handle_ingester_error(error: IngesterError) -> dict[str, Any]:
    """
    Handle Ingester errors and return structured error information.

    The core never retries; this decides whether NATS should redeliver
    the event (nak) or drop it (term).

    Args:
        error: The IngesterError to handle.

    Returns:
        Dictionary containing:
        - error_type: Exception class name
        - message: Human-readable error message
        - should_retry: Whether NATS should redeliver
        - retry_after: Optional delay before retry (seconds)
        - details: Additional error-specific details
    """
    error_info: dict[str, Any] = {
        "error_type": type(error).__name__,
        "message": error.message,
        "should_retry": False,
        "retry_after": None,
        "details": {},
    }

    # Terminal errors - don't retry
    if isinstance(error, ValidationError):
        logger.error(f"❌ Validation error: {error.message}")
        error_info["should_retry"] = False
        error_info["details"]["violations"] = [
            {"field": v.field, "message": v.message} for v in error.violations
        ]

    elif isinstance(error, UnknownVerbError):
        logger.error(f"❌ Unknown verb: {error.verb!r}")
        error_info["should_retry"] = False
        error_info["details"]["verb"] = error.verb

    elif isinstance(error, PayloadDecodeError):
        logger.error(f"❌ Undecodable event body from {error.source}")
        error_info["should_retry"] = False
        error_info["details"]["source"] = error.source

    elif isinstance(error, ExtractionError):
        logger.error(f"❌ Extraction error: {error.message}")
        error_info["should_retry"] = False
        error_info["details"]["document_id"] = error.document_id

    # Transient errors - should retry
    elif isinstance(error, PayloadFetchError):
        # Object may not be visible yet
        logger.warning(f"⚠️ Payload fetch failed: {error.bucket}/{error.key}")
        error_info["should_retry"] = True
        error_info["retry_after"] = 5.0
        error_info["details"]["bucket"] = error.bucket
        error_info["details"]["key"] = error.key

    elif isinstance(error, IndexWriteError):
        error_info["details"]["operation"] = error.operation
        error_info["details"]["index"] = error.index
        error_info["details"]["document_id"] = error.document_id
        error_info["details"]["status"] = error.status
        if error.is_not_found:
            logger.error(f"❌ Index {error.operation} target not found: {error.document_id}")
            error_info["should_retry"] = False
        else:
            logger.warning(f"⚠️ Index {error.operation} failed ({error.status})")
            error_info["should_retry"] = True
            error_info["retry_after"] = 10.0

    else:
        # Unknown IngesterError - retry by default
        logger.error(f"❌ Unknown ingester error: {error.message}")
        error_info["should_retry"] = True
        error_info["retry_after"] = 30.0

    return error_info
