"""YAML-frontmatter parser and relative link resolution."""

from __future__ import annotations

import datetime
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

from mdvault.errors import FrontmatterError
from mdvault.note import Metadata

FRONTMATTER_MARKER = "---"

_KNOWN_KEYS = {"type", "public", "title", "created", "updated", "aliases", "tags", "summary"}


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Split the raw frontmatter text from the body.

    The document (ignoring leading whitespace) must start with ``---``; the
    text up to the next ``---`` is the frontmatter.  Returns
    ``(None, content)`` when there is no complete block.
    """
    trimmed = content.lstrip()
    if not trimmed.startswith(FRONTMATTER_MARKER):
        return None, content
    after_open = trimmed[len(FRONTMATTER_MARKER) :]
    end = after_open.find(FRONTMATTER_MARKER)
    if end == -1:
        return None, content
    return after_open[:end].strip(), after_open[end + len(FRONTMATTER_MARKER) :]


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split YAML front-matter from body text.

    Returns ``(metadata_dict, body)``; ``metadata_dict`` is empty when there
    is no front-matter block.  Raises :class:`FrontmatterError` when the
    block is present but is not a YAML mapping.
    """
    raw, body = split_frontmatter(content)
    if raw is None:
        return {}, body
    try:
        meta = yaml.safe_load(raw) if raw else None
    except yaml.YAMLError as exc:
        raise FrontmatterError(f"Invalid YAML frontmatter: {exc}") from exc
    if meta is None:
        return {}, body
    if not isinstance(meta, dict):
        raise FrontmatterError(f"Frontmatter must be a mapping, got {type(meta).__name__}")
    return meta, body


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return str(value)


def _as_list(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(v.strip() for v in value.split(",") if v.strip())
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value if v is not None)
    return (str(value),)


def to_metadata(meta: dict[str, Any]) -> Metadata:
    """Build a :class:`Metadata` record from a parsed frontmatter mapping."""
    public = meta.get("public", False)
    if public is None:
        public = False
    if not isinstance(public, bool):
        raise FrontmatterError(f"'public' must be a boolean, got {public!r}")
    return Metadata(
        type=_as_text(meta.get("type")),
        public=public,
        title=_as_text(meta.get("title")),
        created=_as_text(meta.get("created")),
        updated=_as_text(meta.get("updated")),
        aliases=_as_list(meta.get("aliases")),
        tags=_as_list(meta.get("tags")),
        summary=_as_text(meta.get("summary")),
        extra={str(k): v for k, v in meta.items() if k not in _KNOWN_KEYS},
    )


def parse_metadata(content: str) -> tuple[Metadata, str]:
    """Return ``(Metadata, body)`` for a whole document."""
    meta, body = parse_frontmatter(content)
    return to_metadata(meta), body


def read_frontmatter(path: Path) -> Metadata:
    """Read only the frontmatter block of the file at *path*.

    Stops reading at the closing marker so large bodies are never loaded.
    Raises :class:`OSError` when the file cannot be read and
    :class:`UnicodeDecodeError` when it is not UTF-8.
    """
    buffer = ""
    with open(path, encoding="utf-8") as fh:
        for line in fh:
            buffer += line
            stripped = buffer.lstrip()
            if not stripped:
                continue
            if len(stripped) >= len(FRONTMATTER_MARKER) and not stripped.startswith(FRONTMATTER_MARKER):
                break
            if FRONTMATTER_MARKER in stripped[len(FRONTMATTER_MARKER) :]:
                break
    return parse_metadata(buffer)[0]


def resolve_relative_path(base_file: str, relative: str) -> str:
    """Resolve *relative* against the directory of *base_file*, textually.

    ``..`` pops one segment (never above the start of *base_file*), ``.``
    and empty segments are ignored.  Both inputs and the result use ``/``.
    """
    base = base_file.replace("\\", "/")
    parts = list(PurePosixPath(base).parent.parts) if "/" in base else []
    for segment in relative.replace("\\", "/").split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if parts:
                parts.pop()
            continue
        parts.append(segment)
    return "/".join(parts)
