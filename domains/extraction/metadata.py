"""
PDF metadata extractor.

Reads the document information dictionary with pypdf and, when the title
or author is missing, recovers them heuristically from the text of the
first pages.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from renamer.models.exceptions import UnreadableDocument
from renamer.models.schemas import DocumentMetadata
from renamer.utils.config import get_settings

PDF_DATE_PATTERN = re.compile(
    r"^(?:D:)?(\d{4})(\d{2})?(\d{2})?(\d{2})?(\d{2})?(\d{2})?"
)
KEYWORD_SEPARATORS = re.compile(r"[,;]")

AUTHOR_PATTERNS = [
    re.compile(r"^[A-Z][a-z]+ [A-Z][a-z]+"),
    re.compile(r"^[A-Z]\. [A-Z][a-z]+"),
    re.compile(r"and ", re.IGNORECASE),
]


def parse_pdf_date(raw: Optional[str]) -> Optional[datetime]:
    """
    Parse a PDF date string such as ``D:20230115103000+01'00'``.

    Timezone offsets are ignored. Returns None for absent or malformed dates.
    """
    if not raw:
        return None

    match = PDF_DATE_PATTERN.match(raw.strip())
    if not match:
        return None

    year, month, day, hour, minute, second = (
        int(part) if part else default
        for part, default in zip(match.groups(), (None, 1, 1, 0, 0, 0))
    )

    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError:
        return None


def split_keywords(raw: Optional[str]) -> list[str]:
    """Split a delimited keywords string, dropping empty entries."""
    if not raw:
        return []
    return [kw.strip() for kw in KEYWORD_SEPARATORS.split(raw) if kw.strip()]


def extract_title_from_text(text: str) -> Optional[str]:
    """
    Find a title-like line near the top of the text.

    Args:
        text: Plain text of the first pages

    Returns:
        Cleaned title or None
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]

    for line in lines[:10]:
        if 10 < len(line) < 200 and "@" not in line and "http" not in line:
            cleaned = re.sub(r"^\d+\s*", "", line)
            cleaned = re.sub(r"\s+", " ", cleaned).strip()

            if len(cleaned) > 10:
                return cleaned

    return None


def extract_author_from_text(text: str) -> Optional[str]:
    """
    Find an author-like line after the first line of the text.

    Args:
        text: Plain text of the first pages

    Returns:
        Author line or None
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]

    for index, line in enumerate(lines[:15]):
        if index == 0:
            continue
        if len(line) < 5 or len(line) > 100:
            continue

        if any(pattern.search(line) for pattern in AUTHOR_PATTERNS):
            return line

    return None


class MetadataExtractor:
    """Extractor for PDF document metadata."""

    def __init__(self, page_limit: Optional[int] = None):
        """
        Initialize metadata extractor.

        Args:
            page_limit: Pages of text used by the heuristics (defaults to settings)
        """
        self.page_limit = page_limit or get_settings().text_page_limit

    def extract_metadata(self, path: Path) -> DocumentMetadata:
        """
        Extract a best-effort metadata record from a PDF.

        Args:
            path: PDF file path

        Returns:
            Metadata record; any field may be None

        Raises:
            UnreadableDocument: If the file cannot be opened as a PDF
        """
        reader = self._open(path)

        try:
            info = reader.metadata or {}
        except (PyPdfError, KeyError, ValueError) as e:
            logger.warning(f"Could not read document info of {path.name}: {e}")
            info = {}

        title = _text_field(info, "/Title")
        author = _text_field(info, "/Author")

        metadata = DocumentMetadata(
            title=title,
            author=author,
            subject=_text_field(info, "/Subject"),
            creator=_text_field(info, "/Creator"),
            producer=_text_field(info, "/Producer"),
            creation_date=parse_pdf_date(_text_field(info, "/CreationDate")),
            modification_date=parse_pdf_date(_text_field(info, "/ModDate")),
            keywords=split_keywords(_text_field(info, "/Keywords")),
        )

        if title is None or author is None:
            text = self._first_pages_text(reader, path)

            if title is None:
                metadata.title = extract_title_from_text(text)
            if author is None:
                metadata.author = extract_author_from_text(text)

            logger.debug(
                f"Heuristic metadata for {path.name}: "
                f"title={metadata.title!r} author={metadata.author!r}"
            )

        return metadata

    def extract_text_from_first_pages(self, path: Path, page_limit: Optional[int] = None) -> str:
        """
        Extract plain text from the first pages of a PDF.

        Raises:
            UnreadableDocument: If the file cannot be opened as a PDF
        """
        reader = self._open(path)
        return self._first_pages_text(reader, path, page_limit)

    def _open(self, path: Path) -> PdfReader:
        path = Path(path)

        try:
            reader = PdfReader(path)
            if reader.is_encrypted and not reader.decrypt(""):
                raise UnreadableDocument(path, "PDF is encrypted")
            # Force the page tree to load so broken files fail here
            len(reader.pages)
        except UnreadableDocument:
            raise
        except (PyPdfError, OSError, KeyError, ValueError) as e:
            logger.warning(f"Unable to open PDF {path}: {e}")
            raise UnreadableDocument(path) from e

        return reader

    def _first_pages_text(
        self, reader: PdfReader, path: Path, page_limit: Optional[int] = None
    ) -> str:
        limit = min(page_limit or self.page_limit, len(reader.pages))
        text = ""

        for index in range(limit):
            try:
                page_text = reader.pages[index].extract_text()
            except Exception as e:
                logger.warning(f"Text extraction failed on page {index + 1} of {path.name}: {e}")
                continue

            if page_text:
                text += page_text + "\n"

        return text


def _text_field(info: Any, key: str) -> Optional[str]:
    """Read a text entry from the info dictionary; blank counts as absent."""
    if key not in info:
        return None

    value = info[key]
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")

    text = str(value).strip()
    return text or None
