"""Persistence for the monitored folder set and preferences."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Iterable, Optional, Protocol

from loguru import logger
from pydantic import ValidationError

from domains.monitoring.models import MonitoredFolder, Preferences


class FolderStore(Protocol):
    """Load/save entry points used by the folder registry."""

    def load(self) -> list[MonitoredFolder]: ...

    def save(self, folders: Iterable[MonitoredFolder]) -> None: ...

    def load_preferences(self) -> Optional[Preferences]: ...

    def save_preferences(self, preferences: Preferences) -> None: ...


class InMemoryFolderStore:
    """Store that keeps everything in process memory."""

    def __init__(
        self,
        folders: Iterable[MonitoredFolder] = (),
        preferences: Preferences | None = None,
    ) -> None:
        self._folders = [folder.model_copy() for folder in folders]
        self._preferences = preferences
        self.save_count = 0

    def load(self) -> list[MonitoredFolder]:
        return [folder.model_copy() for folder in self._folders]

    def save(self, folders: Iterable[MonitoredFolder]) -> None:
        self._folders = [folder.model_copy() for folder in folders]
        self.save_count += 1

    def load_preferences(self) -> Optional[Preferences]:
        if self._preferences is None:
            return None
        return self._preferences.model_copy()

    def save_preferences(self, preferences: Preferences) -> None:
        self._preferences = preferences.model_copy()


class JsonFolderStore:
    """
    Store backed by a single JSON document.

    Layout::

        {"folders": [...], "preferences": {...}}

    Writes go through a temporary file that replaces the target, so a crash
    never leaves a half-written state file.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def load(self) -> list[MonitoredFolder]:
        raw_folders = self._read().get("folders", [])
        folders = []

        for raw in raw_folders:
            try:
                folders.append(MonitoredFolder.model_validate(raw))
            except ValidationError as e:
                logger.error(f"Skipping invalid monitored folder entry {raw!r}: {e}")

        return folders

    def save(self, folders: Iterable[MonitoredFolder]) -> None:
        with self._lock:
            document = self._read()
            document["folders"] = [folder.model_dump(mode="json") for folder in folders]
            self._write(document)

    def load_preferences(self) -> Optional[Preferences]:
        raw = self._read().get("preferences")
        if raw is None:
            return None

        try:
            return Preferences.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Invalid preferences in {self.path}, using defaults: {e}")
            return None

    def save_preferences(self, preferences: Preferences) -> None:
        with self._lock:
            document = self._read()
            document["preferences"] = preferences.model_dump(mode="json")
            self._write(document)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}

        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load state file {self.path}: {e}")
            return {}

        if not isinstance(document, dict):
            logger.error(f"Unexpected state file layout in {self.path}")
            return {}
        return document

    def _write(self, document: dict) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(json.dumps(document, indent=2, sort_keys=True), encoding="utf-8")
        tmp_path.replace(self.path)
