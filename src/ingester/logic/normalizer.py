"""
Field normalization for documents before they are indexed.

content_truncated is what search results render when no query-time
highlight is available, so it is recomputed from the current content
on every upsert.
"""

import re

from search_lib.constants import CONTENT_TRUNCATE_LENGTH, CONTENT_TRUNCATE_MARKER
from search_lib.models.event_model import Document

from ingester.logic.content_extractor import ExtractedContent

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str | None) -> str:
    """
    Collapse every whitespace run to a single space and trim.

    Args:
        text: Raw text, may be None.

    Returns:
        Normalized text ("" for None).
    """
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def truncate_content(
    content: str | None,
    limit: int = CONTENT_TRUNCATE_LENGTH,
    marker: str = CONTENT_TRUNCATE_MARKER,
) -> str | None:
    """
    Derive the display snippet for a document's content.

    Args:
        content: Full document content.
        limit: Maximum characters kept before the marker.
        marker: Appended when the content is longer than ``limit``.

    Returns:
        Snippet, or None when the content is empty.
    """
    text = collapse_whitespace(content)
    if not text:
        return None
    if len(text) > limit:
        return text[:limit] + marker
    return text


class DocumentNormalizer:
    """Applies extraction output and derived fields to documents."""

    def __init__(
        self,
        truncate_length: int = CONTENT_TRUNCATE_LENGTH,
        truncate_marker: str = CONTENT_TRUNCATE_MARKER,
    ) -> None:
        self._truncate_length = truncate_length
        self._truncate_marker = truncate_marker

    def apply_extraction(self, document: Document, extracted: ExtractedContent) -> Document:
        """
        Merge extracted text and title into a document.

        Empty extracted text leaves the existing content alone. The raw
        file bytes are always dropped.

        Args:
            document: Document that carried the file.
            extracted: Extraction output.

        Returns:
            Updated copy of the document.
        """
        updates: dict[str, str | None] = {"file_base64": None}
        text = collapse_whitespace(extracted.text)
        if text:
            updates["content"] = text
        if extracted.title:
            updates["title"] = extracted.title
        return document.model_copy(update=updates)

    def set_content_truncated(self, document: Document) -> Document:
        """
        Recompute content_truncated from the document's content.

        Whitespace-only content is cleared so that content and
        content_truncated are either both present or both absent.

        Args:
            document: Document to normalize.

        Returns:
            Updated copy of the document.
        """
        snippet = truncate_content(
            document.content,
            limit=self._truncate_length,
            marker=self._truncate_marker,
        )
        updates: dict[str, str | None] = {"content_truncated": snippet}
        if snippet is None:
            updates["content"] = None
        return document.model_copy(update=updates)
