"""NoteStore: the shared in-memory snapshot of the vault."""

from __future__ import annotations

import threading
from typing import Iterable

from mdvault.note import Note


class NoteStore:
    """Thread-safe mapping from note id to :class:`Note`.

    Writes are serialised by a lock.  Notes are immutable and swapped by
    reference, so a reader always sees either the old or the new record.
    """

    def __init__(self, notes: Iterable[Note] = ()) -> None:
        self._lock = threading.Lock()
        self._notes: dict[str, Note] = {}
        self.upsert_many(notes)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def upsert(self, note: Note) -> None:
        """Insert *note*, replacing any record with the same id."""
        with self._lock:
            self._notes[note.id] = note

    def upsert_many(self, notes: Iterable[Note]) -> None:
        with self._lock:
            for note in notes:
                self._notes[note.id] = note

    def remove(self, note_id: str) -> bool:
        """Drop *note_id*; return ``False`` when it was not present."""
        with self._lock:
            return self._notes.pop(note_id, None) is not None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, note_id: str) -> Note | None:
        with self._lock:
            return self._notes.get(note_id)

    def snapshot(self) -> list[Note]:
        """Every note at this instant (order not significant)."""
        with self._lock:
            return list(self._notes.values())

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._notes)

    def __contains__(self, note_id: object) -> bool:
        with self._lock:
            return note_id in self._notes

    def __len__(self) -> int:
        with self._lock:
            return len(self._notes)
