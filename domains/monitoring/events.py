"""
Creation-event sources for folder watchers.

The watcher only depends on ``CreationEventSource.subscribe``; production
code uses watchdog, tests drive watchers with a synthetic source.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Callable, Optional, Protocol

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from renamer.models.exceptions import SubscriptionFailure

BatchHandler = Callable[[list[Path]], None]


class Subscription(Protocol):
    """Handle for a live subscription."""

    def close(self) -> None: ...


class CreationEventSource(Protocol):
    """Delivers batches of newly created file paths below a directory."""

    def subscribe(self, path: Path, latency: float, handler: BatchHandler) -> Subscription: ...


class CoalescingCreationHandler(FileSystemEventHandler):
    """
    Watchdog handler that batches file creation events.

    The first event of a batch arms a timer; everything created before it
    fires is delivered together.
    """

    def __init__(self, deliver: BatchHandler, latency: float) -> None:
        super().__init__()
        self.deliver = deliver
        self.latency = latency
        self._pending: list[Path] = []
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._closed = False

    def on_created(self, event: FileSystemEvent) -> None:
        """Queue file creations; directories are ignored."""
        if event.is_directory:
            return

        path = Path(os.fsdecode(event.src_path))

        with self._lock:
            if self._closed:
                return
            self._pending.append(path)

            if self.latency <= 0:
                immediate = True
            else:
                immediate = False
                if self._timer is None:
                    self._timer = threading.Timer(self.latency, self.flush)
                    self._timer.daemon = True
                    self._timer.start()

        if immediate:
            self.flush()

    def flush(self) -> None:
        """Deliver everything queued so far."""
        with self._lock:
            batch, self._pending = self._pending, []
            self._timer = None
            if self._closed:
                return

        if batch:
            self.deliver(batch)

    def close(self) -> None:
        """Drop queued events and refuse new ones."""
        with self._lock:
            self._closed = True
            self._pending = []
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class WatchdogSubscription:
    """Subscription backed by a running watchdog observer."""

    def __init__(self, observer: Observer, handler: CoalescingCreationHandler, path: Path) -> None:
        self.observer = observer
        self.handler = handler
        self.path = path
        self._closed = False

    def close(self) -> None:
        """Stop the observer; safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        self.handler.close()
        self.observer.stop()
        if self.observer.is_alive() and threading.current_thread() is not self.observer:
            self.observer.join()
        logger.info(f"Stopped watching: {self.path}")


class WatchdogEventSource:
    """Event source using a watchdog observer per subscribed folder."""

    def __init__(self, recursive: bool = False) -> None:
        self.recursive = recursive

    def subscribe(self, path: Path, latency: float, handler: BatchHandler) -> WatchdogSubscription:
        """
        Start watching ``path`` for created files.

        Raises:
            SubscriptionFailure: If the observer cannot be scheduled or started
        """
        event_handler = CoalescingCreationHandler(handler, latency)
        observer = Observer()

        try:
            observer.schedule(event_handler, str(path), recursive=self.recursive)
            observer.daemon = True
            observer.start()
        except Exception as e:
            event_handler.close()
            raise SubscriptionFailure(f"Failed to watch {path}: {e}") from e

        logger.success(f"Started watching: {path}")
        return WatchdogSubscription(observer, event_handler, path)
