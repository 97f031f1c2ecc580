"""Link graph over a store snapshot, built with :mod:`networkx`."""

from __future__ import annotations

from typing import Iterable

import networkx as nx

from mdvault.note import Note


def build_link_graph(notes: Iterable[Note], *, public_only: bool = False) -> nx.DiGraph:
    """Return a directed graph of notes (nodes) and their links (edges).

    Link targets that match no note are kept as nodes with
    ``resolved=False``.  With *public_only*, private notes, the links of
    private notes and links into anything but a public note are left out.
    """
    notes = list(notes)
    G: nx.DiGraph = nx.DiGraph()
    for note in notes:
        if public_only and not note.is_public:
            continue
        G.add_node(
            note.id,
            name=note.display_name,
            path=note.path,
            public=note.is_public,
            type=note.metadata.type or "note",
            resolved=True,
        )

    for note in notes:
        if note.id not in G:
            continue
        for link in note.outbound_links:
            if link.target_id not in G:
                if public_only:
                    continue
                G.add_node(link.target_id, public=False, resolved=False)
            G.add_edge(note.id, link.target_id)
    return G


def backlinks(graph: nx.DiGraph, note_id: str) -> list[str]:
    """Ids of the notes linking to *note_id*, sorted."""
    if note_id not in graph:
        return []
    return sorted(graph.predecessors(note_id))


def unresolved_targets(graph: nx.DiGraph) -> list[str]:
    """Link targets that do not correspond to any indexed note."""
    return sorted(n for n, resolved in graph.nodes(data="resolved") if not resolved)
