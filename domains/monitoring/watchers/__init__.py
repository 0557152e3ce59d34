"""
Folder Watchers

- folder.py - Startup sweep, live creation events and per-file renaming
"""

__all__ = ["folder"]
