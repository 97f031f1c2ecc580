"""Exception hierarchy for mdvault.

Configuration and scan errors are fatal at startup.  Watch errors are
confined to the background watcher.  Missing or private notes are *not*
errors: the read API reports them as ordinary lookup outcomes.
"""

from __future__ import annotations

from pathlib import Path


class VaultError(Exception):
    """Base class for every error raised by mdvault."""


class ConfigurationError(VaultError):
    """Settings are missing, unreadable, empty or invalid."""


class _PathError(VaultError):
    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        self.message = message
        super().__init__(f"{message}: {self.path}")


class TransformError(_PathError):
    """One document could not be turned into a note (bad frontmatter, render failure)."""

    def __init__(self, path: Path | str, message: str = "Failed to transform document") -> None:
        super().__init__(path, message)


class ScanError(_PathError):
    """The initial scan hit an unreadable directory/file or an invalid document."""

    def __init__(self, path: Path | str, message: str = "Failed to scan") -> None:
        super().__init__(path, message)


class WatchError(_PathError):
    """Reacting to a live change failed; the watcher stops."""

    def __init__(self, path: Path | str, message: str = "Failed to process change") -> None:
        super().__init__(path, message)


class FrontmatterError(VaultError):
    """The frontmatter block is not valid YAML metadata."""
