"""
Helper utilities for the PDF Renamer.

Common functions used across domains.
"""

from pathlib import Path
from typing import Iterable
from uuid import uuid4


def generate_uuid() -> str:
    """Generate a unique identifier."""
    return str(uuid4())


def normalise_path(path: Path) -> Path:
    """Return a resolved version of ``path`` without forcing existence."""
    try:
        return path.expanduser().resolve()
    except FileNotFoundError:
        return path.expanduser().absolute()


def has_supported_extension(path: Path, extensions: Iterable[str]) -> bool:
    """Check whether ``path`` ends in one of ``extensions`` (case-insensitive)."""
    return path.suffix.lower() in {ext.lower() for ext in extensions}
