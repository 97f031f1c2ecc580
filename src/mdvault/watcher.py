"""Filesystem watcher keeping a :class:`NoteStore` in sync with the vault.

A watchdog observer thread is the producer: its handler only turns
filesystem events into :class:`ChangeEvent` objects on an unbounded queue.
One consumer thread drains the queue and applies each change to the store,
so store updates happen one at a time in arrival order.
"""

from __future__ import annotations

import enum
import logging
import os
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from mdvault.config import PrivatePolicy
from mdvault.errors import TransformError, WatchError
from mdvault.note import NOTE_SUFFIX, note_id_for
from mdvault.scanner import is_ignored_dir
from mdvault.store import NoteStore
from mdvault.transform import build_note

logger = logging.getLogger(__name__)


class ChangeKind(str, enum.Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"


@dataclass(frozen=True)
class ChangeEvent:
    kind: ChangeKind
    path: Path
    #: Destination of a move.
    dest_path: Path | None = None


_STOP = object()


class _QueueingHandler(FileSystemEventHandler):
    """watchdog handler that forwards file events to the watcher's queue."""

    def __init__(self, events: "queue.Queue[object]") -> None:
        super().__init__()
        self._events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        try:
            kind = ChangeKind(event.event_type)
        except ValueError:
            return  # opened / closed
        dest = getattr(event, "dest_path", None) if kind is ChangeKind.MOVED else None
        self._events.put(
            ChangeEvent(
                kind=kind,
                path=Path(os.fsdecode(event.src_path)),
                dest_path=Path(os.fsdecode(dest)) if dest else None,
            )
        )


class VaultWatcher:
    """Re-indexes changed notes in the background.

    With ``strict=True`` the first failing change stops the watcher; the
    error is kept in :attr:`error` and the store keeps its last good state.
    With ``strict=False`` failures are logged and the watcher carries on.
    """

    def __init__(
        self,
        root: Path,
        ignore: Iterable[str],
        policy: PrivatePolicy,
        store: NoteStore,
        *,
        strict: bool = True,
        observer: BaseObserver | None = None,
    ) -> None:
        self.root = Path(root)
        self.ignore = tuple(ignore)
        self.policy = policy
        self.store = store
        self.strict = strict
        self.error: WatchError | None = None
        self.processed = 0

        self._events: "queue.Queue[object]" = queue.Queue()
        self._observer = observer if observer is not None else Observer()
        self._consumer: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self._observer.schedule(_QueueingHandler(self._events), str(self.root), recursive=True)
        self._observer.start()
        self._consumer = threading.Thread(target=self._consume, name="mdvault-watcher", daemon=True)
        self._consumer.start()
        logger.info("Watching %s", self.root)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the observer, then let the consumer drain and exit."""
        if self._observer.is_alive():
            self._observer.stop()
            self._observer.join(timeout)
        self._events.put(_STOP)
        self.join(timeout)

    def join(self, timeout: float | None = None) -> None:
        if self._consumer is not None:
            self._consumer.join(timeout)

    def run(self) -> None:
        """Start and block until the watcher stops; re-raise its error, if any."""
        self.start()
        try:
            self.join()
        finally:
            self.stop()
        if self.error is not None:
            raise self.error

    @property
    def is_alive(self) -> bool:
        return self._consumer is not None and self._consumer.is_alive()

    def submit(self, event: ChangeEvent) -> None:
        """Queue *event* as if the observer had reported it."""
        self._events.put(event)

    def _consume(self) -> None:
        while True:
            event = self._events.get()
            if event is _STOP:
                return
            try:
                self.handle_event(event)  # type: ignore[arg-type]
            except WatchError as exc:
                if self.strict:
                    logger.error("Watcher stopped: %s", exc)
                    self.error = exc
                    if self._observer.is_alive():
                        self._observer.stop()
                    return
                logger.warning("Ignoring failed change: %s", exc)
            finally:
                self.processed += 1

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def relative_path(self, path: Path) -> str | None:
        """*path* relative to the vault root, or ``None`` when outside it."""
        for root in (self.root, self.root.resolve()):
            try:
                return path.relative_to(root).as_posix()
            except ValueError:
                continue
        return None

    def is_ignored(self, rel_path: str) -> bool:
        """True when the containing directory contains an ignore pattern.

        Any directory on the way that the scanner would skip counts too.
        """
        parent = rel_path.rpartition("/")[0]
        if not parent:
            return False
        if any(pattern in parent for pattern in self.ignore):
            return True
        return any(is_ignored_dir(name, self.ignore) for name in parent.split("/"))

    def _note_rel_path(self, path: Path) -> str | None:
        if path.suffix != NOTE_SUFFIX:
            return None
        rel_path = self.relative_path(path)
        if rel_path is None:
            return None
        if self.is_ignored(rel_path):
            logger.debug("Ignoring: %s", path)
            return None
        return rel_path

    def handle_event(self, event: ChangeEvent) -> None:
        """Apply one change to the store; raise :class:`WatchError` on failure."""
        try:
            self._apply(event)
        except WatchError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise WatchError(event.path, f"Failed to process change: {exc}") from exc

    def _apply(self, event: ChangeEvent) -> None:
        if event.kind is ChangeKind.DELETED:
            self._remove(event.path)
        elif event.kind is ChangeKind.MOVED:
            self._remove(event.path)
            if event.dest_path is not None:
                self._index(event.dest_path)
        else:
            self._index(event.path)

    def _remove(self, path: Path) -> None:
        rel_path = self._note_rel_path(path)
        if rel_path is None:
            return
        if self.store.remove(note_id_for(rel_path)):
            logger.info("Removed: %s", path)

    def _index(self, path: Path) -> None:
        rel_path = self._note_rel_path(path)
        if rel_path is None:
            return
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            # Deleted again before we got to it.
            self._remove(path)
            return
        except (OSError, UnicodeDecodeError) as exc:
            raise WatchError(path, f"Failed to read file: {exc}") from exc

        try:
            note = build_note(self.root, rel_path, content, self.policy)
        except TransformError as exc:
            raise WatchError(path, f"Failed to transform document: {exc.message}") from exc

        logger.info("Updating: %s", path)
        self.store.upsert(note)
