"""
Content extraction for documents that arrive as raw file bytes.

Wraps a pluggable extraction engine. The default engine handles PDF,
DOCX, HTML and plain text; anything else is decoded as text.
"""

import asyncio
import base64
import binascii
import functools
import io
import logging
import zipfile
from dataclasses import dataclass
from typing import Protocol

from ingester.logic.exceptions import ExtractionError

logger = logging.getLogger("search-ingester.extractor")


class ExtractionLimitReached(Exception):
    """
    Raised by an engine that stopped early at its character limit.

    Carries the partial output; callers treat it as a successful result.
    """

    def __init__(self, text: str, metadata: dict[str, str] | None = None) -> None:
        self.text = text
        self.metadata = metadata or {}
        super().__init__(f"Extraction stopped at limit after {len(text)} characters")


class ExtractionEngine(Protocol):
    """Engine turning file bytes into plain text and metadata."""

    def extract(self, data: bytes, limit: int) -> tuple[str, dict[str, str]]:
        """
        Extract text and metadata.

        Args:
            data: Raw file bytes.
            limit: Maximum number of characters to produce.

        Returns:
            Tuple of (text, metadata). Metadata may carry a "title".

        Raises:
            ExtractionLimitReached: If output was cut at ``limit``.
        """
        ...


@dataclass
class ExtractedContent:
    """Text and optional title produced from a file."""

    text: str
    title: str | None = None
    truncated: bool = False


class DefaultExtractionEngine:
    """
    Format-sniffing extraction engine.

    - PDF (``%PDF`` header): pypdf
    - DOCX (zip with ``word/document.xml``): python-docx
    - HTML: BeautifulSoup + html2text
    - Everything else: UTF-8 text with latin-1 fallback
    """

    def extract(self, data: bytes, limit: int) -> tuple[str, dict[str, str]]:
        kind = self.detect_format(data)
        if kind == "pdf":
            text, title = self._extract_pdf(data)
        elif kind == "docx":
            text, title = self._extract_docx(data)
        elif kind == "html":
            text, title = self._extract_html(self._decode(data))
        else:
            text, title = self._decode(data), None

        metadata = {"content_type": kind}
        if title:
            metadata["title"] = title

        if len(text) > limit:
            raise ExtractionLimitReached(text[:limit], metadata)
        return text, metadata

    @staticmethod
    def detect_format(data: bytes) -> str:
        """
        Guess the file format from its leading bytes.

        Args:
            data: Raw file bytes.

        Returns:
            One of "pdf", "docx", "html", "text".
        """
        if data.startswith(b"%PDF"):
            return "pdf"
        if data.startswith(b"PK"):
            try:
                with zipfile.ZipFile(io.BytesIO(data)) as archive:
                    if "word/document.xml" in archive.namelist():
                        return "docx"
            except zipfile.BadZipFile:
                pass
        head = data[:1024].lstrip().lower()
        if head.startswith((b"<!doctype html", b"<html")) or b"<body" in head:
            return "html"
        return "text"

    @staticmethod
    def _decode(data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return data.decode("latin-1")

    @staticmethod
    def _extract_pdf(data: bytes) -> tuple[str, str | None]:
        from pypdf import PdfReader

        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
        title = reader.metadata.title if reader.metadata else None
        return "\n".join(pages), title

    @staticmethod
    def _extract_docx(data: bytes) -> tuple[str, str | None]:
        from docx import Document

        doc = Document(io.BytesIO(data))
        text = "\n".join(p.text for p in doc.paragraphs)
        return text, doc.core_properties.title or None

    @staticmethod
    def _extract_html(content: str) -> tuple[str, str | None]:
        from bs4 import BeautifulSoup
        import html2text

        soup = BeautifulSoup(content, "html.parser")
        title = soup.title.get_text(strip=True) if soup.title else None

        # Remove script and style elements
        for element in soup(["script", "style"]):
            element.decompose()

        h = html2text.HTML2Text()
        h.ignore_links = True
        h.ignore_images = True
        return h.handle(str(soup)), title


class ContentExtractor:
    """
    Runs an extraction engine off the event loop with a bounded wait.

    Attributes:
        engine: Extraction engine doing the actual parsing.
        char_limit: Character limit passed to the engine.
        timeout: Seconds to wait for a single extraction.
    """

    def __init__(
        self,
        engine: ExtractionEngine | None = None,
        char_limit: int = 100_000_000,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize content extractor.

        Args:
            engine: Extraction engine (defaults to DefaultExtractionEngine).
            char_limit: Maximum characters requested from the engine.
            timeout: Optional timeout in seconds.
        """
        self._engine = engine or DefaultExtractionEngine()
        self._char_limit = char_limit
        self._timeout = timeout

    async def extract_base64(
        self,
        encoded: str,
        document_id: str | None = None,
    ) -> ExtractedContent:
        """
        Decode base64 file content and extract it.

        Args:
            encoded: Base64 file bytes from the document.
            document_id: Document ID for error context.

        Returns:
            Extracted content.

        Raises:
            ExtractionError: If decoding or extraction fails.
        """
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ExtractionError(f"invalid base64 file content: {e}", document_id) from e
        return await self.extract(raw, document_id)

    async def extract(
        self,
        raw: bytes,
        document_id: str | None = None,
    ) -> ExtractedContent:
        """
        Extract text and title from file bytes.

        Args:
            raw: Raw file bytes.
            document_id: Document ID for error context.

        Returns:
            Extracted content. ``truncated`` is set when the engine hit
            its character limit.

        Raises:
            ExtractionError: If the engine fails or times out.
        """
        loop = asyncio.get_running_loop()
        call = functools.partial(self._engine.extract, raw, self._char_limit)

        try:
            text, metadata = await asyncio.wait_for(
                loop.run_in_executor(None, call),
                timeout=self._timeout,
            )
            truncated = False
        except ExtractionLimitReached as e:
            logger.warning(
                f"⚠️ [id:{document_id}] Extraction hit the {self._char_limit} character limit, "
                f"keeping {len(e.text)} characters"
            )
            text, metadata = e.text, e.metadata
            truncated = True
        except asyncio.TimeoutError as e:
            raise ExtractionError(f"timed out after {self._timeout}s", document_id) from e
        except Exception as e:
            logger.exception(f"❌ [id:{document_id}] Extraction failed: {e}")
            raise ExtractionError(str(e), document_id) from e

        title = (metadata or {}).get("title") or None
        logger.debug(f"[id:{document_id}] Extracted {len(text)} characters")
        return ExtractedContent(text=text or "", title=title, truncated=truncated)
