"""
Naming Domain

Turns a document metadata record into a canonical filename:
- templates.py - Naming templates, sanitization and journal resolution
"""

__all__ = ["templates"]
