"""
Naming templates for renamed documents.

Every template joins sanitized metadata fields with ``_`` in a fixed order
and appends the source file's extension. Generation is pure and performs
no I/O; collision checks belong to the caller.
"""

from __future__ import annotations

import re
import unicodedata
from enum import Enum
from typing import Optional

from renamer.models.schemas import DocumentMetadata

INVALID_FILENAME_CHARS = re.compile(r'[/<>:"|\\?*]')
MAX_FIELD_LENGTH = 100

JOURNAL_HINTS = ["IEEE", "ACM", "Nature", "Science", "Cell", "PLOS", "Elsevier", "Springer", "Wiley"]
JOURNAL_KEYWORDS = ["journal", "proceedings", "transactions", "letters", "review"]

UNKNOWN_AUTHOR = "Unknown_Author"
UNKNOWN_TITLE = "Unknown_Title"
UNKNOWN_YEAR = "Unknown_Year"
UNKNOWN_JOURNAL = "Unknown_Journal"


def sanitize_for_filename(value: str) -> str:
    """
    Reduce ``value`` to a filename-safe field.

    Invalid characters are replaced with ``_``, every word is stripped of
    surrounding Unicode punctuation, and the words are joined with ``_``.

    Args:
        value: Raw field text

    Returns:
        Sanitized field, at most 100 characters, ``"Unknown"`` when empty
    """
    sanitized = INVALID_FILENAME_CHARS.sub("_", value)

    words = [_strip_punctuation(word) for word in sanitized.split()]
    result = "_".join(word for word in words if word)

    if not result:
        return "Unknown"
    return result[:MAX_FIELD_LENGTH]


def _is_punctuation(char: str) -> bool:
    return unicodedata.category(char).startswith("P")


def _strip_punctuation(word: str) -> str:
    start, end = 0, len(word)
    while start < end and _is_punctuation(word[start]):
        start += 1
    while end > start and _is_punctuation(word[end - 1]):
        end -= 1
    return word[start:end]


def resolve_journal(metadata: DocumentMetadata) -> str:
    """
    Best guess at the publishing journal.

    Checks, in order: the subject field, publisher names in the producer
    string, and journal-like keywords in the title. The title match keeps
    the keyword plus one neighbouring word on each side.
    """
    if metadata.subject:
        return sanitize_for_filename(metadata.subject)

    if metadata.producer:
        producer = metadata.producer.casefold()
        for hint in JOURNAL_HINTS:
            if hint.casefold() in producer:
                return sanitize_for_filename(hint)

    if metadata.title:
        title = metadata.title.casefold()
        words = metadata.title.split()
        for keyword in JOURNAL_KEYWORDS:
            if keyword not in title:
                continue
            index = _first_word_containing(words, keyword)
            if index is None:
                continue
            window = words[max(0, index - 1):min(len(words) - 1, index + 1) + 1]
            return sanitize_for_filename(" ".join(window))

    return UNKNOWN_JOURNAL


def _first_word_containing(words: list[str], keyword: str) -> Optional[int]:
    for index, word in enumerate(words):
        if keyword in word.casefold():
            return index
    return None


class NamingTemplate(str, Enum):
    """Fixed field orderings for generated filenames."""

    AUTHOR_TITLE_JOURNAL_YEAR = "author_title_journal_year"
    TITLE_AUTHOR_YEAR = "title_author_year"
    AUTHOR_YEAR_TITLE = "author_year_title"
    YEAR_AUTHOR_TITLE = "year_author_title"
    AUTHOR_TITLE_YEAR = "author_title_year"

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.value.split("_"))

    @property
    def description(self) -> str:
        return "_".join(
            "firstauthor" if field == "author" else field for field in self.fields
        ) + ".pdf"

    @property
    def example_output(self) -> str:
        example = {
            "author": "Smith",
            "title": "Machine_Learning_in_Biology",
            "journal": "Nature",
            "year": "2023",
        }
        return "_".join(example[field] for field in self.fields) + ".pdf"

    @classmethod
    def from_value(cls, value: str) -> "NamingTemplate":
        """Parse a template name, accepting either the value or member name."""
        normalised = value.strip().lower().replace("-", "_")
        for template in cls:
            if template.value == normalised:
                return template
        raise ValueError(f"Unknown naming template: {value}")

    def generate_filename(self, metadata: DocumentMetadata, extension: str = ".pdf") -> str:
        """
        Build the canonical filename for ``metadata``.

        Args:
            metadata: Extracted document metadata
            extension: Extension of the source file, with or without the dot

        Returns:
            Filename with extension
        """
        values = {
            "author": sanitize_for_filename(metadata.first_author_surname or UNKNOWN_AUTHOR),
            "title": sanitize_for_filename(metadata.title or UNKNOWN_TITLE),
            "year": metadata.year or UNKNOWN_YEAR,
            "journal": resolve_journal(metadata),
        }

        if extension and not extension.startswith("."):
            extension = "." + extension

        return "_".join(values[field] for field in self.fields) + extension


def list_templates() -> list[dict[str, str]]:
    """Describe every available template."""
    return [
        {
            "name": template.value,
            "description": template.description,
            "example": template.example_output,
        }
        for template in NamingTemplate
    ]
