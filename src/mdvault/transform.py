"""Per-document transform pipeline.

``frontmatter -> Markdown render -> document links -> callouts -> post-processing``

The Scanner and the Watcher both go through :func:`build_note`, so a note's
id and path are computed the same way wherever it comes from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlsplit

from mdvault.config import PrivatePolicy
from mdvault.errors import FrontmatterError, TransformError
from mdvault.note import Link, Metadata, Note, Visibility, display_name_for, note_id_for, note_path_for
from mdvault.parser import parse_metadata, read_frontmatter, resolve_relative_path
from mdvault.render import (
    parse_html,
    render_markdown,
    rewrite_document_links,
    rewrite_image_sources,
    transform_callouts,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformResult:
    html: str
    metadata: Metadata
    links: tuple[Link, ...]


class _LinkResolver:
    """Resolves document hrefs of one note and records a :class:`Link` for each."""

    def __init__(self, root: Path, rel_path: str, note_id: str, policy: PrivatePolicy) -> None:
        self.root = root
        self.rel_path = rel_path
        self.note_id = note_id
        self.policy = policy
        self.links: list[Link] = []
        self._visibility: dict[str, Visibility] = {}

    def target_visibility(self, target_rel: str) -> Visibility:
        if target_rel not in self._visibility:
            path = self.root / target_rel
            try:
                visibility = read_frontmatter(path).visibility
            except (OSError, UnicodeDecodeError, ValueError) as exc:
                # missing, not UTF-8, or an embedded NUL in the decoded href
                logger.debug("Link target %s is unreadable: %s", path, exc)
                visibility = Visibility.UNKNOWN
            except FrontmatterError as exc:
                logger.warning("Link target %s has invalid frontmatter: %s", path, exc)
                visibility = Visibility.UNKNOWN
            self._visibility[target_rel] = visibility
        return self._visibility[target_rel]

    def __call__(self, href: str) -> bool:
        """Record the link behind *href*; return whether it may stay navigable."""
        target = unquote(urlsplit(href).path)
        if target.startswith("/"):
            target_rel = resolve_relative_path("", target)
        else:
            target_rel = resolve_relative_path(self.rel_path, target)

        visibility = self.target_visibility(target_rel)
        self.links.append(
            Link(
                source_id=self.note_id,
                target_id=note_id_for(target_rel),
                target_path=(self.root / target_rel).as_posix(),
                target_visibility=visibility,
            )
        )
        return visibility.is_public or self.policy.include


def transform(
    root: Path,
    rel_path: str,
    note_id: str,
    content: str,
    policy: PrivatePolicy,
) -> TransformResult:
    """Run the whole pipeline over one document's text.

    *rel_path* is the document's path relative to *root* (``/``-separated);
    relative links are resolved against its directory.
    """
    file_path = root / rel_path
    try:
        metadata, body = parse_metadata(content)
    except FrontmatterError as exc:
        raise TransformError(file_path, str(exc)) from exc

    try:
        soup = parse_html(render_markdown(body))
    except Exception as exc:  # noqa: BLE001
        raise TransformError(file_path, f"Failed to render Markdown: {exc}") from exc

    resolver = _LinkResolver(root, rel_path, note_id, policy)
    rewrite_document_links(soup, resolver, policy.icon)
    transform_callouts(soup)
    rewrite_image_sources(soup)

    return TransformResult(html=str(soup), metadata=metadata, links=tuple(resolver.links))


def build_note(root: Path, rel_path: str, content: str, policy: PrivatePolicy) -> Note:
    """Transform one document and wrap the result in a :class:`Note`."""
    rel_path = rel_path.replace("\\", "/")
    note_id = note_id_for(rel_path)
    result = transform(root, rel_path, note_id, content, policy)
    return Note(
        id=note_id,
        display_name=display_name_for(note_id),
        path=note_path_for(rel_path),
        metadata=result.metadata,
        rendered_content=result.html,
        outbound_links=result.links,
    )
