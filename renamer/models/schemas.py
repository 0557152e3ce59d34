"""
Pydantic models for the PDF Renamer.

Shared data models across the application.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field


# =====================================================
# Extraction Models
# =====================================================

AUTHOR_SEPARATORS = [",", ";", " and ", " & ", "\n"]


class DocumentMetadata(BaseModel):
    """Best-effort metadata record for a single document."""
    title: Optional[str] = None
    author: Optional[str] = None  # raw, possibly several authors
    subject: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    creation_date: Optional[datetime] = None
    modification_date: Optional[datetime] = None
    keywords: List[str] = Field(default_factory=list)

    @property
    def first_author_surname(self) -> Optional[str]:
        """
        Surname-like token of the first listed author.

        The first separator present in the author string decides the split.
        """
        if not self.author:
            return None

        cleaned = self.author.strip()
        if not cleaned:
            return None

        for separator in AUTHOR_SEPARATORS:
            if separator in cleaned:
                first = cleaned.split(separator)[0].strip()
                if first:
                    return _last_name(first)

        return _last_name(cleaned)

    @property
    def year(self) -> Optional[str]:
        """Four-digit year of the creation date."""
        if self.creation_date is None:
            return None
        return f"{self.creation_date.year:04d}"


def _last_name(full_name: str) -> str:
    components = full_name.split()
    if len(components) >= 2:
        return components[-1]
    return full_name


# =====================================================
# Processing Models
# =====================================================

class ProcessingStatus(str, Enum):
    """Result of processing one document."""
    RENAMED = "renamed"
    ALREADY_NAMED = "already_named"
    NAME_COLLISION = "name_collision"
    NO_TEMPLATE = "no_template"
    UNREADABLE = "unreadable"
    FAILED = "failed"


class ProcessingOutcome(BaseModel):
    """Outcome reported for a single processed file."""
    status: ProcessingStatus
    source: Path
    target: Optional[Path] = None
    message: str

    @property
    def renamed(self) -> bool:
        return self.status == ProcessingStatus.RENAMED
