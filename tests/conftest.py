"""Shared fixtures: synthetic event source, inline executor, PDF builder."""

from __future__ import annotations

from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Optional

import pytest
from pypdf import PdfWriter

from renamer.models.exceptions import SubscriptionFailure, UnreadableDocument
from renamer.models.schemas import DocumentMetadata
from renamer.utils.config import Settings


class InlineExecutor:
    """Executor that runs submitted work immediately on the caller's thread."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, *args, **kwargs) -> Future:
        self.submitted += 1
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:  # pragma: no cover - surfaced through the future
            future.set_exception(e)
        return future

    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        pass


class SyntheticSubscription:
    def __init__(self, source: "SyntheticEventSource", path: Path):
        self.source = source
        self.path = path
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        self.source.handlers.pop(self.path, None)


class SyntheticEventSource:
    """Event source driven by the test instead of the file system."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.handlers: dict[Path, Callable[[list[Path]], None]] = {}
        self.subscriptions: list[SyntheticSubscription] = []
        self.latencies: list[float] = []

    def subscribe(self, path: Path, latency: float, handler) -> SyntheticSubscription:
        if self.fail:
            raise SubscriptionFailure(f"Failed to watch {path}: simulated failure")
        self.handlers[Path(path)] = handler
        self.latencies.append(latency)
        subscription = SyntheticSubscription(self, Path(path))
        self.subscriptions.append(subscription)
        return subscription

    def emit(self, folder: Path, *paths: Path) -> None:
        handler = self.handlers.get(Path(folder))
        if handler is not None:
            handler([Path(p) for p in paths])


class StubExtractor:
    """Returns canned metadata; raises UnreadableDocument for listed names."""

    def __init__(self, metadata: Optional[DocumentMetadata] = None, unreadable: tuple[str, ...] = ()):
        self.metadata = metadata or DocumentMetadata()
        self.unreadable = set(unreadable)
        self.calls: list[Path] = []

    def extract_metadata(self, path: Path) -> DocumentMetadata:
        self.calls.append(Path(path))
        if Path(path).name in self.unreadable:
            raise UnreadableDocument(path)
        return self.metadata


@pytest.fixture
def settings() -> Settings:
    return Settings(sweep_delay=0, event_latency=0, max_workers=2, _env_file=None)


@pytest.fixture
def event_source() -> SyntheticEventSource:
    return SyntheticEventSource()


@pytest.fixture
def executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def make_pdf(tmp_path) -> Callable[..., Path]:
    """Write a one-page PDF with the given document info entries."""

    def _make_pdf(name: str = "paper.pdf", directory: Optional[Path] = None, **info: str) -> Path:
        writer = PdfWriter()
        writer.add_blank_page(width=612, height=792)
        if info:
            writer.add_metadata({f"/{key}": value for key, value in info.items()})

        path = (directory or tmp_path) / name
        with open(path, "wb") as fh:
            writer.write(fh)
        return path

    return _make_pdf
