"""mdvault: live note and link graph over a Markdown vault."""

from mdvault.api import Lookup, LookupStatus, get_note, list_notes
from mdvault.config import PrivatePolicy, VaultConfig, load_config
from mdvault.errors import ConfigurationError, ScanError, TransformError, VaultError, WatchError
from mdvault.note import Link, Metadata, Note, Visibility
from mdvault.scanner import scan
from mdvault.service import VaultService
from mdvault.store import NoteStore
from mdvault.transform import build_note
from mdvault.watcher import VaultWatcher

__all__ = [
    "Note",
    "Link",
    "Metadata",
    "Visibility",
    "NoteStore",
    "scan",
    "build_note",
    "VaultWatcher",
    "VaultService",
    "VaultConfig",
    "PrivatePolicy",
    "load_config",
    "list_notes",
    "get_note",
    "Lookup",
    "LookupStatus",
    "VaultError",
    "ConfigurationError",
    "ScanError",
    "TransformError",
    "WatchError",
]
