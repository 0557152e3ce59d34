"""
Monitoring Domain

Watches folders for newly arriving PDFs and renames them:
- models.py - Monitored folder and preference records
- store.py - JSON and in-memory persistence of the folder set
- events.py - Creation-event sources (watchdog) with coalescing
- watchers/folder.py - Per-folder sweep, subscription and rename logic
- registry.py - Owner of all monitored folders and aggregate counters
"""

__all__ = ["models", "store", "events", "watchers", "registry"]
