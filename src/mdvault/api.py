"""Read operations over a :class:`NoteStore`.

These are what a transport layer (HTTP routes, CLI) calls.  Missing and
private notes are reported as :class:`Lookup` outcomes, not exceptions.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from mdvault import graph
from mdvault.config import PrivatePolicy
from mdvault.note import Link, Note, note_id_for
from mdvault.store import NoteStore


class LookupStatus(str, enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Lookup:
    status: LookupStatus
    note: Note | None = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.value}
        if self.note is not None:
            data["note"] = self.note.to_dict()
        return data


@dataclass(frozen=True)
class NodeInfo:
    id: str
    name: str
    path: str
    public: bool
    type: str

    @classmethod
    def from_note(cls, note: Note) -> "NodeInfo":
        return cls(
            id=note.id,
            name=note.display_name,
            path=note.path,
            public=note.is_public,
            type=note.metadata.type or "note",
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "path": self.path, "public": self.public, "type": self.type}


@dataclass(frozen=True)
class Listing:
    nodes: tuple[NodeInfo, ...]
    links: tuple[Link, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }


def list_notes(store: NoteStore, *, public_only: bool = False) -> Listing:
    """All notes with their visibility, plus the links of public notes.

    With *public_only*, only public notes and the links between them.
    """
    notes = sorted(store.snapshot(), key=lambda n: n.id)
    if public_only:
        G = graph.build_link_graph(notes, public_only=True)
        nodes = tuple(NodeInfo.from_note(n) for n in notes if n.is_public)
        links = tuple(
            link
            for n in notes
            if n.is_public
            for link in n.outbound_links
            if G.has_edge(link.source_id, link.target_id)
        )
        return Listing(nodes=nodes, links=links)

    nodes = tuple(NodeInfo.from_note(n) for n in notes)
    links = tuple(link for n in notes if n.is_public for link in n.outbound_links)
    return Listing(nodes=nodes, links=links)


def _lookup_id(store: NoteStore, note_id: str) -> Note | None:
    return store.get(note_id) or store.get(note_id_for(note_id))


def get_note(store: NoteStore, note_id: str, policy: PrivatePolicy) -> Lookup:
    """Fetch one note; private notes are forbidden unless the policy includes them.

    *note_id* may also be given as a plain relative path (``dir/My Note.md``).
    """
    note = _lookup_id(store, note_id)
    if note is None:
        return Lookup(LookupStatus.NOT_FOUND)
    if not note.is_public and not policy.include:
        return Lookup(LookupStatus.FORBIDDEN)
    return Lookup(LookupStatus.FOUND, note)


def get_backlinks(store: NoteStore, note_id: str, policy: PrivatePolicy) -> list[str]:
    """Ids of notes linking to *note_id*; private sources are hidden unless included."""
    G = graph.build_link_graph(store.snapshot(), public_only=not policy.include)
    return graph.backlinks(G, note_id_for(note_id) if note_id not in G else note_id)
