"""
Pydantic models for the ingester queue wire format.

Field names on the wire are snake_case, except the out-of-line payload
location (``s3Bucket`` / ``s3Key``) which the producer sends in camelCase.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Verb(str, Enum):
    """Recognised event verbs."""

    UPSERT = "upsert"
    DELETE = "delete"

    @classmethod
    def parse(cls, value: str | None) -> "Verb | None":
        """
        Map a wire verb to a Verb.

        Args:
            value: Raw verb string from the event.

        Returns:
            Matching Verb, or None if the value is not recognised.
        """
        try:
            return cls(value)
        except ValueError:
            return None


class Keyword(BaseModel):
    """Controlled-vocabulary keyword, opaque to the ingester."""

    model_config = ConfigDict(extra="ignore")

    vocab: str | None = None
    value: str | None = None


class Document(BaseModel):
    """
    The indexable unit.

    ``content_truncated`` is derived on every upsert and ``file_base64``
    is consumed by extraction, so neither value from the wire survives
    an upsert.
    """

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    site: str | None = None
    title: str | None = None
    keywords: list[Keyword] = Field(default_factory=list)
    content: str | None = None
    content_truncated: str | None = None
    file_base64: str | None = None
    url: str | None = None
    data_type: str | None = None
    published: str | None = None
    parent_id: str | None = None
    parent_title: str | None = None

    def to_index_body(self) -> dict[str, Any]:
        """
        Build the JSON body written to the search index.

        Returns:
            Document fields without raw file bytes or unset values.
        """
        return self.model_dump(exclude={"file_base64"}, exclude_none=True)


class PayloadRef(BaseModel):
    """Location of an out-of-line event body in object storage."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str

    def __str__(self) -> str:
        return f"{self.bucket}/{self.key}"


class EventBody(BaseModel):
    """Shape of an out-of-line event body."""

    model_config = ConfigDict(extra="ignore")

    document: Document
    resources: list[Document] | None = None


class Event(BaseModel):
    """
    One unit of work consumed from the queue.

    ``verb`` is kept as the raw wire string so that an unknown verb is
    reported by the processor rather than rejected at decode time.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    index: str
    verb: str
    document: Document | None = None
    resources: list[Document] | None = None
    s3_bucket: str | None = Field(default=None, alias="s3Bucket")
    s3_key: str | None = Field(default=None, alias="s3Key")

    @property
    def payload_ref(self) -> PayloadRef | None:
        """Out-of-line payload location, if both parts are present."""
        if self.s3_bucket and self.s3_key:
            return PayloadRef(bucket=self.s3_bucket, key=self.s3_key)
        return None
