"""
Folder registry for the Monitoring domain.

Owns every monitored folder, the watcher bound to each, and the aggregate
counters shown to the user. All state changes go through one re-entrant
lock because watchers report from their own worker threads.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from domains.monitoring.models import MonitoredFolder, Preferences
from domains.monitoring.store import FolderStore, JsonFolderStore
from domains.monitoring.watchers.folder import FolderWatcher
from domains.naming.templates import NamingTemplate
from renamer.utils.config import Settings, get_settings
from renamer.utils.helpers import normalise_path

WatcherFactory = Callable[
    [MonitoredFolder, Callable[[str], None], Callable[[str], None]], FolderWatcher
]


class FolderRegistry:
    """Collection of monitored folders and their watchers."""

    def __init__(
        self,
        store: FolderStore,
        watcher_factory: Optional[WatcherFactory] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize folder registry.

        Args:
            store: Persistence for the folder set and preferences
            watcher_factory: Builds a watcher for a folder and its two callbacks
            settings: Application settings
        """
        self.settings = settings or get_settings()
        self.store = store
        self.watcher_factory = watcher_factory or self._create_watcher

        self._lock = threading.RLock()
        self._folders: dict[str, MonitoredFolder] = {}
        self._watchers: dict[str, FolderWatcher] = {}
        self._preferences = Preferences(
            default_template=NamingTemplate.from_value(self.settings.default_template)
        )
        self._total_processed = 0
        self._last_status: Optional[str] = None

    # Lifecycle ---------------------------------------------------------------------

    def start(self) -> None:
        """Load persisted folders and start one watcher per entry."""
        with self._lock:
            preferences = self.store.load_preferences()
            if preferences is not None:
                self._preferences = preferences

            for folder in self.store.load():
                self._folders[folder.id] = folder
                self._start_watcher(folder)

            self._total_processed = sum(f.processed_count for f in self._folders.values())

        logger.info(
            f"Folder registry started: {len(self._folders)} folders, "
            f"{self._total_processed} files processed so far"
        )

    def shutdown(self) -> None:
        """Stop every watcher. In-flight renames are left to finish."""
        with self._lock:
            watchers = list(self._watchers.values())
            self._watchers.clear()

        for watcher in watchers:
            watcher.stop()

        logger.info("Folder registry shut down")

    # Folder management -------------------------------------------------------------

    def add_folder(self, path: Path, template: Optional[NamingTemplate] = None) -> MonitoredFolder:
        """
        Start monitoring ``path``.

        Args:
            path: Directory to monitor
            template: Naming template; the default template when omitted

        Returns:
            The new monitored folder

        Raises:
            ValueError: If the folder is already monitored
        """
        path = normalise_path(Path(path))

        with self._lock:
            if any(folder.path == path for folder in self._folders.values()):
                raise ValueError(f"Folder is already monitored: {path}")

            folder = MonitoredFolder(path=path, template=template or self._preferences.default_template)
            self._folders[folder.id] = folder
            self._start_watcher(folder)

            self._preferences.last_selected_folder = path
            self._save()
            self._save_preferences()

        logger.info(f"Added folder {path} ({folder.template.value})")
        return folder.model_copy()

    def remove_folder(self, folder_id: str) -> bool:
        """
        Stop monitoring a folder.

        Returns:
            False if no folder has ``folder_id``
        """
        with self._lock:
            folder = self._folders.pop(folder_id, None)
            if folder is None:
                return False

            watcher = self._watchers.pop(folder_id, None)
            if watcher is not None:
                watcher.stop()

            self._save()

        logger.info(f"Removed folder {folder.path}")
        return True

    def get_folder(self, folder_id: str) -> Optional[MonitoredFolder]:
        with self._lock:
            folder = self._folders.get(folder_id)
            return folder.model_copy() if folder else None

    # Watcher callbacks -------------------------------------------------------------

    def handle_file_processed(self, folder_id: str, file_name: str) -> None:
        """Count a successful rename."""
        with self._lock:
            folder = self._folders.get(folder_id)
            if folder is None:
                return

            folder.processed_count += 1
            self._total_processed += 1
            self._last_status = f"Processed: {file_name}"
            self._save()

    def handle_error(self, message: str) -> None:
        """Record the latest status or error message."""
        with self._lock:
            self._last_status = message

    # Read-only views ---------------------------------------------------------------

    @property
    def monitored_folders(self) -> list[MonitoredFolder]:
        with self._lock:
            return [folder.model_copy() for folder in self._folders.values()]

    @property
    def total_processed_files(self) -> int:
        with self._lock:
            return self._total_processed

    @property
    def is_monitoring(self) -> bool:
        with self._lock:
            return any(watcher.is_active for watcher in self._watchers.values())

    @property
    def last_status_message(self) -> Optional[str]:
        with self._lock:
            return self._last_status

    @property
    def last_selected_folder(self) -> Optional[Path]:
        with self._lock:
            return self._preferences.last_selected_folder

    @property
    def default_template(self) -> NamingTemplate:
        with self._lock:
            return self._preferences.default_template

    @default_template.setter
    def default_template(self, template: NamingTemplate) -> None:
        with self._lock:
            self._preferences.default_template = template
            self._save_preferences()

    # Internals ---------------------------------------------------------------------

    def _start_watcher(self, folder: MonitoredFolder) -> None:
        folder_id = folder.id

        watcher = self.watcher_factory(
            folder,
            lambda file_name: self.handle_file_processed(folder_id, file_name),
            self.handle_error,
        )
        self._watchers[folder_id] = watcher
        folder.is_active = watcher.start()

        if not folder.is_active:
            logger.warning(f"Folder {folder.path} is not being watched for new files")

    def _create_watcher(
        self,
        folder: MonitoredFolder,
        on_file_processed: Callable[[str], None],
        on_error: Callable[[str], None],
    ) -> FolderWatcher:
        # each watcher owns its pool, so a stuck file only holds up its own folder
        return FolderWatcher(
            folder.path,
            folder.template,
            on_file_processed=on_file_processed,
            on_error=on_error,
            settings=self.settings,
        )

    def _save(self) -> None:
        try:
            self.store.save(list(self._folders.values()))
        except OSError as e:
            logger.error(f"Failed to save monitored folders: {e}")
            self._last_status = f"Failed to save monitored folders: {e}"

    def _save_preferences(self) -> None:
        try:
            self.store.save_preferences(self._preferences)
        except OSError as e:
            logger.error(f"Failed to save preferences: {e}")
            self._last_status = f"Failed to save preferences: {e}"


# Global registry instance
_registry: Optional[FolderRegistry] = None


def get_folder_registry() -> FolderRegistry:
    """Get global folder registry, starting it on first use."""
    global _registry
    if _registry is None:
        settings = get_settings()
        _registry = FolderRegistry(JsonFolderStore(settings.get_state_file()), settings=settings)
        _registry.start()
    return _registry


def close_folder_registry():
    """Shut down global folder registry."""
    global _registry
    if _registry:
        _registry.shutdown()
        _registry = None
