"""Unit tests for document normalization."""

from search_lib.models.event_model import Document

from ingester.logic.content_extractor import ExtractedContent
from ingester.logic.normalizer import (
    DocumentNormalizer,
    collapse_whitespace,
    truncate_content,
)


class TestCollapseWhitespace:
    """Tests for collapse_whitespace."""

    def test_removes_newlines_and_collapses_spaces(self) -> None:
        """Test newline and space runs become single spaces, then trimmed."""
        assert collapse_whitespace("Hello\nWorld  \n") == "Hello World"

    def test_tabs_and_carriage_returns(self) -> None:
        """Test all whitespace kinds are collapsed."""
        assert collapse_whitespace("\t a\r\n\tb  ") == "a b"

    def test_none_is_empty(self) -> None:
        """Test None yields an empty string."""
        assert collapse_whitespace(None) == ""


class TestTruncateContent:
    """Tests for truncate_content."""

    def test_short_content_kept_verbatim(self) -> None:
        """Test content up to 200 characters is kept as is."""
        content = "x" * 200
        assert truncate_content(content) == content

    def test_long_content_truncated_with_marker(self) -> None:
        """Test 250 characters give the first 200 plus the marker."""
        content = "abcde" * 50

        result = truncate_content(content)

        assert result == content[:200] + "..."
        assert len(result) == 203

    def test_normalizes_before_truncating(self) -> None:
        """Test newlines are collapsed in the snippet."""
        assert truncate_content("Hello\nWorld  \n") == "Hello World"

    def test_empty_content_gives_none(self) -> None:
        """Test the snippet is absent when content is empty."""
        assert truncate_content("") is None
        assert truncate_content("  \n ") is None
        assert truncate_content(None) is None

    def test_idempotent_for_same_source(self) -> None:
        """Test truncating twice from the same source gives the same result."""
        content = "word " * 100
        assert truncate_content(content) == truncate_content(content)

    def test_custom_limit_and_marker(self) -> None:
        """Test configured limit and marker are honoured."""
        assert truncate_content("abcdef", limit=3, marker="…") == "abc…"


class TestDocumentNormalizer:
    """Tests for DocumentNormalizer."""

    def setup_method(self) -> None:
        """Create normalizer for each test."""
        self.normalizer = DocumentNormalizer()

    def test_set_content_truncated_replaces_stale_value(self) -> None:
        """Test a stale content_truncated from the wire is overwritten."""
        doc = Document(id="1", site="s", content="fresh text", content_truncated="stale")

        result = self.normalizer.set_content_truncated(doc)

        assert result.content_truncated == "fresh text"

    def test_set_content_truncated_clears_when_no_content(self) -> None:
        """Test content_truncated is absent when content is empty."""
        doc = Document(id="1", site="s", content_truncated="stale")

        result = self.normalizer.set_content_truncated(doc)

        assert result.content_truncated is None

    def test_whitespace_only_content_cleared(self) -> None:
        """Test blank content is dropped along with content_truncated."""
        doc = Document(id="1", site="s", content="  \n ", content_truncated="stale")

        result = self.normalizer.set_content_truncated(doc)

        assert result.content is None
        assert result.content_truncated is None

    def test_non_blank_content_kept_verbatim(self) -> None:
        """Test real content is left as sent; only the snippet is collapsed."""
        doc = Document(id="1", site="s", content="two\n lines")

        result = self.normalizer.set_content_truncated(doc)

        assert result.content == "two\n lines"
        assert result.content_truncated == "two lines"

    def test_set_content_truncated_does_not_mutate_input(self) -> None:
        """Test normalization returns a copy."""
        doc = Document(id="1", site="s", content="text")

        self.normalizer.set_content_truncated(doc)

        assert doc.content_truncated is None

    def test_apply_extraction_replaces_content_and_title(self) -> None:
        """Test extracted text and title overwrite the document's."""
        doc = Document(id="1", site="s", title="old", content="old", file_base64="Zm9v")

        result = self.normalizer.apply_extraction(
            doc, ExtractedContent(text="New\n\ncontent  here", title="New title"),
        )

        assert result.content == "New content here"
        assert result.title == "New title"
        assert result.file_base64 is None

    def test_apply_extraction_keeps_content_when_empty(self) -> None:
        """Test empty extraction output leaves prior content untouched."""
        doc = Document(id="1", site="s", title="kept", content="prior", file_base64="Zm9v")

        result = self.normalizer.apply_extraction(doc, ExtractedContent(text=" \n "))

        assert result.content == "prior"
        assert result.title == "kept"
        assert result.file_base64 is None

    def test_configured_truncate_length(self) -> None:
        """Test the normalizer uses its configured limit."""
        normalizer = DocumentNormalizer(truncate_length=5, truncate_marker="~")
        doc = Document(id="1", site="s", content="abcdefgh")

        assert normalizer.set_content_truncated(doc).content_truncated == "abcde~"
