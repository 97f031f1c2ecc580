"""Core data model: notes, their metadata and outbound links."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any

#: Extension of vault documents.
NOTE_SUFFIX = ".md"


class Visibility(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    #: Link target that could not be read; treated as private.
    UNKNOWN = "unknown"

    @property
    def is_public(self) -> bool:
        return self is Visibility.PUBLIC


@dataclass(frozen=True)
class Metadata:
    """Structured frontmatter of a document."""

    type: str | None = None
    public: bool = False
    title: str | None = None
    created: str | None = None
    updated: str | None = None
    aliases: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    summary: str | None = None
    #: Any frontmatter keys not listed above.
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def visibility(self) -> Visibility:
        return Visibility.PUBLIC if self.public else Visibility.PRIVATE

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "public": self.public,
            "title": self.title,
            "created": self.created,
            "updated": self.updated,
            "aliases": list(self.aliases),
            "tags": list(self.tags),
            "summary": self.summary,
            "extra": self.extra,
        }


@dataclass(frozen=True)
class Link:
    """A relative document reference found in a note's body."""

    source_id: str
    #: Best-effort id of the referenced document; it may not exist.
    target_id: str
    target_path: str
    target_visibility: Visibility

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source_id,
            "target": self.target_id,
            "target_path": self.target_path,
            "target_visibility": self.target_visibility.value,
        }


@dataclass(frozen=True)
class Note:
    """A single indexed vault document.

    Instances are immutable: the store swaps whole notes, so a reader never
    sees a half-updated record.
    """

    id: str
    display_name: str
    #: Relative path without extension, ``/``-separated.
    path: str
    metadata: Metadata
    rendered_content: str
    outbound_links: tuple[Link, ...] = ()

    @property
    def visibility(self) -> Visibility:
        return self.metadata.visibility

    @property
    def is_public(self) -> bool:
        return self.visibility.is_public

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.display_name,
            "path": self.path,
            "public": self.is_public,
            "metadata": self.metadata.to_dict(),
            "links": [link.to_dict() for link in self.outbound_links],
            "content": self.rendered_content,
        }


# ---------------------------------------------------------------------------
# Id helpers
# ---------------------------------------------------------------------------


def strip_suffix(path: str) -> str:
    return path[: -len(NOTE_SUFFIX)] if path.endswith(NOTE_SUFFIX) else path


def note_path_for(rel_path: str) -> str:
    """``"dir\\My Note.md"`` -> ``"dir/My Note"``."""
    return strip_suffix(rel_path.replace("\\", "/").lstrip("/"))


def note_id_for(rel_path: str) -> str:
    """Canonical note id: relative path, extension stripped, spaces encoded."""
    return note_path_for(rel_path).replace(" ", "%20")


def display_name_for(note_id: str) -> str:
    return PurePosixPath(note_id).name.replace("%20", " ")
