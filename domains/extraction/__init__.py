"""
Extraction Domain

Reads document metadata for the renaming pipeline:
- metadata.py - PDF info dictionary reading with text-heuristic fallbacks
"""

__all__ = ["metadata"]
