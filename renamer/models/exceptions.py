"""
Error taxonomy for the renaming pipeline.

Per-file errors are caught by the folder watcher and reported once through
its error callback; none of them terminate a watcher or the process.
"""


class RenamerError(Exception):
    """Base class for renaming pipeline errors."""


class UnreadableDocument(RenamerError):
    """The file cannot be parsed as a valid document."""

    def __init__(self, path, reason: str = "Unable to open PDF file"):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class DirectoryListingFailure(RenamerError):
    """The startup sweep could not enumerate a folder."""


class NoTemplateConfigured(RenamerError):
    """Processing was attempted with no naming template bound."""


class NameCollision(RenamerError):
    """A file already exists at the generated target path."""

    def __init__(self, target):
        self.target = target
        super().__init__(f"File {target.name} already exists")


class SubscriptionFailure(RenamerError):
    """The file-system notification subscription could not be established."""
