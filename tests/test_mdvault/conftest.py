"""Shared fixtures for mdvault tests."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from mdvault.config import PrivatePolicy


def _write_note(root: Path, rel_path: str, content: str) -> Path:
    """Write ``root/rel_path`` (creating parent dirs) with dedented *content*."""
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture()
def exclude_private() -> PrivatePolicy:
    return PrivatePolicy(include=False, icon="🔒")


@pytest.fixture()
def include_private() -> PrivatePolicy:
    return PrivatePolicy(include=True, icon="🔒")


@pytest.fixture()
def linked_vault(tmp_path: Path) -> Path:
    """Public ``A`` linking to private ``B``."""
    _write_note(tmp_path, "A.md", """\
        ---
        public: true
        title: Alpha
        ---
        See [the B note](./B.md) for details.
    """)
    _write_note(tmp_path, "B.md", """\
        ---
        public: false
        ---
        Secret stuff.
    """)
    return tmp_path


@pytest.fixture()
def write_note():
    """The :func:`_write_note` helper, for tests building their own vaults."""
    return _write_note
