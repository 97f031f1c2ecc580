"""Initial vault scan."""

from __future__ import annotations

import fnmatch
import logging
import os
import time
from pathlib import Path
from typing import Iterable, Iterator

from mdvault.config import PrivatePolicy
from mdvault.errors import ScanError, TransformError
from mdvault.note import NOTE_SUFFIX
from mdvault.store import NoteStore
from mdvault.transform import build_note

logger = logging.getLogger(__name__)


def is_ignored_dir(name: str, ignore: Iterable[str]) -> bool:
    """True when the directory *name* matches one of the *ignore* patterns."""
    return any(name == pattern or fnmatch.fnmatchcase(name, pattern) for pattern in ignore)


def iter_note_files(root: Path, ignore: Iterable[str]) -> Iterator[Path]:
    """Yield every ``.md`` file under *root*, depth-first, skipping ignored subtrees.

    Uses an explicit stack, so deep trees never hit the recursion limit.
    Symlinked directories are not followed.
    """
    ignore = tuple(ignore)
    stack = [root]
    while stack:
        directory = stack.pop()
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            raise ScanError(directory, f"Failed to read directory: {exc}") from exc

        subdirs: list[Path] = []
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    if is_ignored_dir(entry.name, ignore):
                        logger.info("Ignoring folder: %s", entry.path)
                        continue
                    subdirs.append(Path(entry.path))
                elif entry.name.endswith(NOTE_SUFFIX) and entry.is_file():
                    yield Path(entry.path)
            except OSError as exc:
                raise ScanError(entry.path, f"Failed to read directory entry: {exc}") from exc
        # Reversed so the stack pops subdirectories in name order.
        stack.extend(reversed(subdirs))


def scan(
    root: Path,
    ignore: Iterable[str],
    policy: PrivatePolicy,
    *,
    store: NoteStore | None = None,
    strict: bool = True,
) -> NoteStore:
    """Index every note under *root* into *store* (a fresh one by default).

    Any unreadable directory or file raises :class:`ScanError`.  A document
    that fails to transform raises too, unless *strict* is false, in which
    case it is logged and left out.
    """
    root = Path(root)
    store = store if store is not None else NoteStore()
    started = time.perf_counter()
    public = private = skipped = 0

    for path in iter_note_files(root, ignore):
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ScanError(path, f"Failed to read file: {exc}") from exc

        rel_path = path.relative_to(root).as_posix()
        try:
            note = build_note(root, rel_path, content, policy)
        except TransformError as exc:
            if strict:
                raise ScanError(path, f"Failed to transform document: {exc.message}") from exc
            logger.warning("Skipping %s: %s", path, exc.message)
            skipped += 1
            continue

        store.upsert(note)
        if note.is_public:
            public += 1
        else:
            private += 1

    logger.info(
        "Indexed %d notes in %.3fs | %d public | %d private | %d skipped",
        public + private,
        time.perf_counter() - started,
        public,
        private,
        skipped,
    )
    return store
