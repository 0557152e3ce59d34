#!/usr/bin/env python3
"""Headless runner for the PDF renamer.

Keeps every monitored folder under watch until interrupted, and offers
small subcommands to manage the persisted folder set without starting the
HTTP API.
"""

from __future__ import annotations

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

from loguru import logger

from domains.monitoring.models import MonitoredFolder, Preferences
from domains.monitoring.registry import FolderRegistry
from domains.monitoring.store import JsonFolderStore
from domains.naming.templates import NamingTemplate
from renamer.utils.config import get_settings
from renamer.utils.helpers import normalise_path


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    settings = get_settings()
    template_names = [template.value for template in NamingTemplate]

    parser = argparse.ArgumentParser(
        description="Rename PDFs arriving in monitored folders from their metadata.",
    )
    parser.add_argument(
        "--state-file",
        type=Path,
        default=settings.get_state_file(),
        help="Where monitored folders are persisted.",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Log level for console output.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Watch all monitored folders until interrupted.")

    add = subparsers.add_parser("add", help="Add a folder to monitor.")
    add.add_argument("path", type=Path)
    add.add_argument(
        "--template",
        choices=template_names,
        default=None,
        help="Naming template (defaults to the saved default template).",
    )

    remove = subparsers.add_parser("remove", help="Stop monitoring a folder.")
    remove.add_argument("folder", help="Folder id or path.")

    subparsers.add_parser("list", help="List monitored folders.")

    templates = subparsers.add_parser("templates", help="List naming templates.")
    templates.add_argument(
        "--set-default",
        choices=template_names,
        default=None,
        help="Change the template used for newly added folders.",
    )

    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level.upper(),
    )


def default_template(store: JsonFolderStore) -> NamingTemplate:
    preferences = store.load_preferences()
    if preferences is not None:
        return preferences.default_template
    return NamingTemplate.from_value(get_settings().default_template)


def run(store: JsonFolderStore) -> int:
    """Watch every persisted folder until SIGINT/SIGTERM."""

    registry = FolderRegistry(store)
    registry.start()

    if not registry.monitored_folders:
        logger.error("No folders to monitor. Add one with the 'add' command.")
        registry.shutdown()
        return 1

    stop_event = threading.Event()

    def _signal_handler(signum, frame):  # noqa: D401
        logger.info(f"Received signal {signum}, shutting down.")
        stop_event.set()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    try:
        while not stop_event.is_set():
            stop_event.wait(1.0)
    finally:
        registry.shutdown()

    logger.info(f"Renamer stopped after {registry.total_processed_files} renames.")
    return 0


def add_folder(store: JsonFolderStore, path: Path, template: Optional[str]) -> int:
    path = normalise_path(path)
    if not path.is_dir():
        logger.error(f"Not a directory: {path}")
        return 1

    folders = store.load()
    if any(folder.path == path for folder in folders):
        logger.error(f"Folder is already monitored: {path}")
        return 1

    chosen = NamingTemplate.from_value(template) if template else default_template(store)
    folder = MonitoredFolder(path=path, template=chosen)
    store.save([*folders, folder])

    preferences = store.load_preferences() or Preferences(default_template=default_template(store))
    preferences.last_selected_folder = path
    store.save_preferences(preferences)

    print(f"{folder.id}  {folder.path}  {folder.template.value}")
    return 0


def remove_folder(store: JsonFolderStore, key: str) -> int:
    folders = store.load()
    remaining = [
        folder for folder in folders
        if folder.id != key and str(folder.path) != str(normalise_path(Path(key)))
    ]

    if len(remaining) == len(folders):
        logger.error(f"No monitored folder matches {key}")
        return 1

    store.save(remaining)
    print(f"Removed {len(folders) - len(remaining)} folder(s)")
    return 0


def list_folders(store: JsonFolderStore) -> int:
    folders = store.load()
    if not folders:
        print("No monitored folders.")
        return 0

    for folder in folders:
        print(f"{folder.id}  {folder.path}  {folder.template.value}  processed={folder.processed_count}")
    return 0


def list_templates(store: JsonFolderStore, set_default: Optional[str]) -> int:
    if set_default:
        preferences = store.load_preferences() or Preferences()
        preferences.default_template = NamingTemplate.from_value(set_default)
        store.save_preferences(preferences)

    current = default_template(store)
    for template in NamingTemplate:
        marker = "*" if template == current else " "
        print(f"{marker} {template.value:<28} {template.example_output}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI script."""

    args = parse_args(argv)
    configure_logging(args.log_level)
    store = JsonFolderStore(args.state_file)

    if args.command == "run":
        return run(store)
    if args.command == "add":
        return add_folder(store, args.path, args.template)
    if args.command == "remove":
        return remove_folder(store, args.folder)
    if args.command == "list":
        return list_folders(store)
    return list_templates(store, args.set_default)


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
