"""
Domain exceptions for the Ingester Service.

All event-processing failures are represented as domain exceptions.
Middleware converts these to queue acknowledgment decisions.
"""

from dataclasses import dataclass
from typing import Any


class IngesterError(Exception):
    """
    Base exception for all Ingester service errors.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str) -> None:
        """
        Initialize IngesterError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class FieldViolation:
    """A single failed validation rule."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class PayloadFetchError(IngesterError):
    """
    Raised when an out-of-line payload cannot be read from object storage.

    Fatal for the event; the consumer decides whether to redeliver.
    """

    def __init__(self, bucket: str, key: str, reason: str) -> None:
        """
        Initialize PayloadFetchError.

        Args:
            bucket: Object storage bucket.
            key: Object key.
            reason: Reason the fetch failed.
        """
        self.bucket = bucket
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to fetch payload {bucket}/{key}: {reason}")


class PayloadDecodeError(IngesterError):
    """
    Raised when an event body is not valid JSON of the expected shape.

    Terminal error - the same bytes will never decode.
    """

    def __init__(self, source: str, reason: str) -> None:
        """
        Initialize PayloadDecodeError.

        Args:
            source: Where the body came from (message or bucket/key).
            reason: Decoder error description.
        """
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to decode event body from {source}: {reason}")


class ExtractionError(IngesterError):
    """
    Raised when text extraction from file bytes fails.

    Soft truncation at the extraction limit is not an error.
    """

    def __init__(self, reason: str, document_id: str | None = None) -> None:
        """
        Initialize ExtractionError.

        Args:
            reason: Reason for extraction failure.
            document_id: Optional document ID.
        """
        self.reason = reason
        self.document_id = document_id
        msg = f"Failed to extract content: {reason}"
        if document_id:
            msg = f"Failed to extract content for document {document_id}: {reason}"
        super().__init__(msg)


class ValidationError(IngesterError):
    """
    Raised when a document violates one or more validation rules.

    Carries every violation, not just the first.
    """

    def __init__(self, violations: list[FieldViolation]) -> None:
        """
        Initialize ValidationError.

        Args:
            violations: All failed rules for the document.
        """
        self.violations = list(violations)
        details = "; ".join(str(v) for v in self.violations)
        super().__init__(f"Validation error: {details}")

    @property
    def fields(self) -> list[str]:
        """Field paths that failed validation."""
        return [v.field for v in self.violations]


class IndexWriteError(IngesterError):
    """
    Raised when the search index rejects or fails a write.

    Attributes:
        operation: Gateway operation (upsert, delete, delete_by_parent_id).
        status: Status reported by the index, or the client error class.
        body: Response body or error detail from the index.
    """

    NOT_FOUND = "not_found"

    def __init__(
        self,
        operation: str,
        index: str,
        document_id: str,
        status: str,
        body: Any = None,
    ) -> None:
        """
        Initialize IndexWriteError.

        Args:
            operation: Gateway operation that failed.
            index: Target index name.
            document_id: Document (or parent) id of the write.
            status: Status reported by the index.
            body: Response body or error detail.
        """
        self.operation = operation
        self.index = index
        self.document_id = document_id
        self.status = status
        self.body = body
        super().__init__(
            f"Index {operation} of {document_id} in {index} returned "
            f"unexpected status ({status}): {body}"
        )

    @property
    def is_not_found(self) -> bool:
        """Whether the index reported the document as absent."""
        return self.status == self.NOT_FOUND


class UnknownVerbError(IngesterError):
    """
    Raised when an event carries a verb other than upsert or delete.

    Terminal error - the event can never be processed.
    """

    def __init__(self, verb: str | None) -> None:
        """
        Initialize UnknownVerbError.

        Args:
            verb: The unrecognised verb.
        """
        self.verb = verb
        super().__init__(f"Expected verb to be 'upsert' or 'delete' but got {verb!r}")
