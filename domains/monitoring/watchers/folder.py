"""
Folder watcher for the Monitoring domain.

Sweeps a folder for existing PDFs once, then subscribes to file creation
events and renames every new PDF according to its naming template.
Uses watchdog (through ``domains.monitoring.events``) for notifications.
"""

from __future__ import annotations

import errno
import os
import threading
from collections import Counter
from concurrent.futures import Executor, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from domains.extraction.metadata import MetadataExtractor
from domains.monitoring.events import CreationEventSource, Subscription, WatchdogEventSource
from domains.naming.templates import NamingTemplate
from renamer.models.exceptions import (
    DirectoryListingFailure,
    NameCollision,
    NoTemplateConfigured,
    SubscriptionFailure,
    UnreadableDocument,
)
from renamer.models.schemas import ProcessingOutcome, ProcessingStatus
from renamer.utils.config import Settings, get_settings
from renamer.utils.helpers import has_supported_extension

# errno values meaning the volume cannot hard-link
LINK_UNSUPPORTED = {errno.EPERM, errno.EOPNOTSUPP, errno.ENOTSUP, errno.EMLINK, errno.ENOSYS, errno.EXDEV}


def rename_without_overwrite(source: Path, target: Path) -> bool:
    """
    Move ``source`` to ``target`` only if ``target`` does not exist.

    A hard link is created first so the existence check and the move happen
    as one step; volumes without hard links fall back to check-then-rename.

    Returns:
        True if ``target`` was created as a hard link, False if it was renamed

    Raises:
        NameCollision: If ``target`` already exists
        OSError: If the move fails for any other reason
    """
    try:
        os.link(source, target)
    except FileExistsError:
        raise NameCollision(target) from None
    except OSError as e:
        if e.errno not in LINK_UNSUPPORTED:
            raise
        if target.exists():
            raise NameCollision(target) from None
        os.rename(source, target)
        return False

    try:
        os.unlink(source)
    except OSError:
        os.unlink(target)
        raise

    return True


class FolderWatcher:
    """Live monitoring plus startup sweep for one folder."""

    def __init__(
        self,
        folder_path: Path,
        template: Optional[NamingTemplate],
        on_file_processed: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
        extractor: Optional[MetadataExtractor] = None,
        event_source: Optional[CreationEventSource] = None,
        executor: Optional[Executor] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize folder watcher.

        Args:
            folder_path: Directory to monitor
            template: Naming template applied to new files
            on_file_processed: Called with the new filename after each rename
            on_error: Called with a status or error message
            extractor: Metadata extractor (defaults to a PDF extractor)
            event_source: Source of creation events (defaults to watchdog)
            executor: Runs per-file processing; one is created when omitted
            settings: Application settings
        """
        self.settings = settings or get_settings()
        self.folder_path = Path(folder_path)
        self.template = template
        self.on_file_processed = on_file_processed or (lambda name: None)
        self.on_error = on_error or (lambda message: None)
        self.extractor = extractor or MetadataExtractor(self.settings.text_page_limit)
        self.event_source = event_source or WatchdogEventSource(recursive=self.settings.recursive)
        self.extensions = self.settings.get_supported_extensions()

        self._executor = executor
        self._owns_executor = executor is None
        self._subscription: Optional[Subscription] = None
        self._sweep_thread: Optional[threading.Thread] = None
        self._stopped = threading.Event()
        self._lock = threading.Lock()
        # targets this watcher created, each still owed one creation event
        self._produced: Counter = Counter()

        self.is_active = False

    def start(self, sweep: bool = True) -> bool:
        """
        Start the startup sweep and the live subscription.

        Args:
            sweep: Process PDFs already in the folder

        Returns:
            True if the live subscription is running
        """
        with self._lock:
            if self.is_active:
                return True

            self._stopped.clear()
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.settings.max_workers,
                    thread_name_prefix=f"renamer-{self.folder_path.name}",
                )

        if sweep:
            self._sweep_thread = threading.Thread(
                target=self._sweep_existing,
                name=f"sweep-{self.folder_path.name}",
                daemon=True,
            )
            self._sweep_thread.start()

        try:
            subscription = self.event_source.subscribe(
                self.folder_path, self.settings.event_latency, self._handle_batch
            )
        except SubscriptionFailure as e:
            logger.error(str(e))
            self._report_error(str(e))
            return False

        with self._lock:
            self._subscription = subscription
            self.is_active = True

        logger.info(f"Monitoring {self.folder_path} with template {self.template.value if self.template else None}")
        return True

    def stop(self) -> None:
        """
        Stop accepting notifications and release the subscription.

        Safe to call repeatedly. Files already dispatched keep processing.
        """
        with self._lock:
            self._stopped.set()
            subscription, self._subscription = self._subscription, None
            executor = self._executor if self._owns_executor else None
            if self._owns_executor:
                self._executor = None
            self.is_active = False

        if subscription is not None:
            subscription.close()
        if executor is not None:
            executor.shutdown(wait=False)

    def process_file(self, path: Path) -> ProcessingOutcome:
        """
        Rename one PDF according to the watcher's template.

        Exactly one callback fires per call: ``on_file_processed`` for a
        rename, ``on_error`` for everything else.

        Args:
            path: PDF file path

        Returns:
            Processing outcome
        """
        path = Path(path)

        target: Optional[Path] = None
        try:
            if self.template is None:
                raise NoTemplateConfigured("No naming pattern set")

            metadata = self.extractor.extract_metadata(path)
            new_name = self.template.generate_filename(metadata, path.suffix or ".pdf")
            target = path.with_name(new_name)

            if target == path:
                return self._report(ProcessingOutcome(
                    status=ProcessingStatus.ALREADY_NAMED,
                    source=path,
                    target=target,
                    message=f"File {path.name} already has correct name",
                ))

            self._move(path, target)

        except NoTemplateConfigured as e:
            outcome = ProcessingOutcome(
                status=ProcessingStatus.NO_TEMPLATE,
                source=path,
                message=str(e),
            )
        except UnreadableDocument as e:
            outcome = ProcessingOutcome(
                status=ProcessingStatus.UNREADABLE,
                source=path,
                message=f"Failed to process {path.name}: {e.reason}",
            )
        except NameCollision as e:
            outcome = ProcessingOutcome(
                status=ProcessingStatus.NAME_COLLISION,
                source=path,
                target=target,
                message=str(e),
            )
        except OSError as e:
            outcome = ProcessingOutcome(
                status=ProcessingStatus.FAILED,
                source=path,
                target=target,
                message=f"Failed to process {path.name}: {e.strerror or e}",
            )
        except Exception as e:
            logger.exception(f"Unexpected error processing {path}")
            outcome = ProcessingOutcome(
                status=ProcessingStatus.FAILED,
                source=path,
                target=target,
                message=f"Failed to process {path.name}: {e}",
            )
        else:
            outcome = ProcessingOutcome(
                status=ProcessingStatus.RENAMED,
                source=path,
                target=target,
                message=f"Renamed {path.name} -> {target.name}",
            )

        return self._report(outcome)

    def _move(self, source: Path, target: Path) -> None:
        """Rename ``source`` and remember ``target`` so its own creation event is skipped."""
        with self._lock:
            self._produced[target] += 1

        linked = False
        try:
            linked = rename_without_overwrite(source, target)
        finally:
            if not linked:
                self._consume_produced(target)

    def _consume_produced(self, path: Path) -> bool:
        with self._lock:
            remaining = self._produced.get(path, 0)
            if not remaining:
                return False
            if remaining == 1:
                del self._produced[path]
            else:
                self._produced[path] = remaining - 1
            return True

    def _sweep_existing(self) -> None:
        """Process PDFs already present, one at a time."""
        try:
            files = sorted(
                entry for entry in self.folder_path.iterdir()
                if entry.is_file() and has_supported_extension(entry, self.extensions)
            )
        except OSError as e:
            failure = DirectoryListingFailure(f"Error scanning folder: {e.strerror or e}")
            logger.error(f"{failure} ({self.folder_path})")
            self._report_error(str(failure))
            return

        logger.info(f"Found {len(files)} PDF files in {self.folder_path}")
        self._report_error(f"Found {len(files)} PDF files to process")

        for index, path in enumerate(files):
            if self._stopped.is_set():
                logger.info(f"Sweep of {self.folder_path} stopped with {len(files) - index} files left")
                return

            self.process_file(path)

            if index < len(files) - 1:
                self._stopped.wait(self.settings.sweep_delay)

    def _handle_batch(self, paths: list[Path]) -> None:
        """Dispatch every created PDF in a coalesced batch."""
        for path in paths:
            if not has_supported_extension(path, self.extensions):
                continue
            if self._consume_produced(path):
                logger.debug(f"Skipping renamed file: {path}")
                continue

            with self._lock:
                executor = self._executor
                if self._stopped.is_set() or executor is None:
                    return

            logger.debug(f"Created: {path}")
            try:
                executor.submit(self.process_file, path)
            except RuntimeError as e:
                logger.warning(f"Could not schedule {path}: {e}")
                self._report_error(f"Failed to process {path.name}: {e}")

    def _report(self, outcome: ProcessingOutcome) -> ProcessingOutcome:
        if outcome.status == ProcessingStatus.RENAMED:
            logger.success(outcome.message)
            self.on_file_processed(outcome.target.name)
        else:
            if outcome.status == ProcessingStatus.ALREADY_NAMED:
                logger.info(outcome.message)
            else:
                logger.warning(outcome.message)
            self._report_error(outcome.message)

        return outcome

    def _report_error(self, message: str) -> None:
        self.on_error(message)
