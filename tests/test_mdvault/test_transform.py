"""Unit tests for mdvault.transform."""

from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from mdvault.config import PrivatePolicy
from mdvault.errors import TransformError
from mdvault.note import Link, Visibility
from mdvault.transform import build_note, transform


def _anchors(html: str) -> list:
    return BeautifulSoup(html, "html.parser").find_all("a")


# ---------------------------------------------------------------------------
# transform()
# ---------------------------------------------------------------------------


class TestTransform:
    def test_metadata_and_html(self, tmp_path: Path, exclude_private: PrivatePolicy):
        result = transform(tmp_path, "a.md", "a", "---\npublic: true\ntitle: A\n---\n# Heading\n", exclude_private)
        assert result.metadata.visibility is Visibility.PUBLIC
        assert result.metadata.title == "A"
        assert "<h1>Heading</h1>" in result.html
        assert result.links == ()

    def test_no_frontmatter_is_private(self, tmp_path: Path, exclude_private: PrivatePolicy):
        result = transform(tmp_path, "a.md", "a", "plain body", exclude_private)
        assert result.metadata.visibility is Visibility.PRIVATE
        assert "plain body" in result.html

    def test_malformed_frontmatter_raises(self, tmp_path: Path, exclude_private: PrivatePolicy):
        with pytest.raises(TransformError) as info:
            transform(tmp_path, "bad.md", "bad", "---\ntitle: [oops\n---\n", exclude_private)
        assert info.value.path == tmp_path / "bad.md"

    def test_link_record(self, linked_vault: Path, exclude_private: PrivatePolicy):
        content = (linked_vault / "A.md").read_text(encoding="utf-8")
        result = transform(linked_vault, "A.md", "A", content, exclude_private)
        assert result.links == (
            Link(
                source_id="A",
                target_id="B",
                target_path=(linked_vault / "B.md").as_posix(),
                target_visibility=Visibility.PRIVATE,
            ),
        )

    def test_private_link_masked(self, linked_vault: Path, exclude_private: PrivatePolicy):
        content = (linked_vault / "A.md").read_text(encoding="utf-8")
        result = transform(linked_vault, "A.md", "A", content, exclude_private)
        (anchor,) = _anchors(result.html)
        assert anchor["href"] == "#"
        assert anchor["title"] == "private file"
        assert anchor.get_text() == "🔒 the B note"
        assert "B.md" not in result.html

    def test_private_link_kept_when_included(self, linked_vault: Path, include_private: PrivatePolicy):
        content = (linked_vault / "A.md").read_text(encoding="utf-8")
        result = transform(linked_vault, "A.md", "A", content, include_private)
        (anchor,) = _anchors(result.html)
        assert anchor["href"] == "./B"
        assert anchor.get_text() == "the B note"
        assert result.links[0].target_visibility is Visibility.PRIVATE

    def test_every_occurrence_masked(self, linked_vault: Path, exclude_private: PrivatePolicy):
        content = "[one](B.md)\n\n- [two](./B.md)\n\n> [three](B.md#part)\n"
        result = transform(linked_vault, "C.md", "C", content, exclude_private)
        anchors = _anchors(result.html)
        assert len(anchors) == 3
        assert all(a["href"] == "#" for a in anchors)
        assert all(a.get_text().startswith("🔒 ") for a in anchors)
        assert [link.target_id for link in result.links] == ["B", "B", "B"]

    def test_custom_icon(self, linked_vault: Path):
        policy = PrivatePolicy(include=False, icon="[private]")
        result = transform(linked_vault, "C.md", "C", "[b](B.md)", policy)
        assert _anchors(result.html)[0].get_text() == "[private] b"

    def test_public_link_stripped(self, tmp_path: Path, write_note, exclude_private: PrivatePolicy):
        write_note(tmp_path, "docs/Target.md", "---\npublic: true\n---\nhi\n")
        result = transform(tmp_path, "docs/src.md", "docs/src", "[t](Target.md#top)", exclude_private)
        (anchor,) = _anchors(result.html)
        assert anchor["href"] == "Target#top"
        assert result.links[0].target_id == "docs/Target"
        assert result.links[0].target_visibility is Visibility.PUBLIC

    def test_unreadable_target_recorded_and_masked(self, tmp_path: Path, exclude_private: PrivatePolicy):
        result = transform(tmp_path, "a.md", "a", "[gone](missing.md)", exclude_private)
        assert result.links[0].target_id == "missing"
        assert result.links[0].target_visibility is Visibility.UNKNOWN
        assert _anchors(result.html)[0]["href"] == "#"

    def test_non_utf8_target_is_unknown(self, tmp_path: Path, exclude_private: PrivatePolicy):
        (tmp_path / "bin.md").write_bytes(b"\xff\xfe\x00")
        result = transform(tmp_path, "a.md", "a", "[b](bin.md)", exclude_private)
        assert result.links[0].target_id == "bin"
        assert result.links[0].target_visibility is Visibility.UNKNOWN
        assert _anchors(result.html)[0]["href"] == "#"

    def test_nul_in_target_href_is_unknown(self, tmp_path: Path, exclude_private: PrivatePolicy):
        result = transform(tmp_path, "a.md", "a", "[x](a%00b.md)", exclude_private)
        assert len(result.links) == 1
        assert result.links[0].target_visibility is Visibility.UNKNOWN
        assert _anchors(result.html)[0]["href"] == "#"

    def test_network_links_ignored(self, tmp_path: Path, exclude_private: PrivatePolicy):
        result = transform(tmp_path, "a.md", "a", "[x](https://example.com/x.md) [y](other.txt)", exclude_private)
        assert result.links == ()
        assert [a["href"] for a in _anchors(result.html)] == ["https://example.com/x.md", "other.txt"]

    def test_links_in_document_order(self, tmp_path: Path, write_note, include_private: PrivatePolicy):
        for name in ("one", "two", "three"):
            write_note(tmp_path, f"{name}.md", "body\n")
        content = "[3](three.md)\n\n| a |\n|---|\n| [1](one.md) |\n\n* [2](two.md)\n"
        result = transform(tmp_path, "index.md", "index", content, include_private)
        assert [link.target_id for link in result.links] == ["three", "one", "two"]

    def test_spaces_are_percent_encoded(self, tmp_path: Path, write_note, exclude_private: PrivatePolicy):
        write_note(tmp_path, "sub dir/My Note.md", "---\npublic: true\n---\n")
        result = transform(tmp_path, "index.md", "index", "[n](sub%20dir/My%20Note.md)", exclude_private)
        assert result.links[0].target_id == "sub%20dir/My%20Note"
        assert result.links[0].target_visibility is Visibility.PUBLIC

    def test_callout_and_images(self, tmp_path: Path, exclude_private: PrivatePolicy):
        content = "> [!WARNING]\n> Mind the gap.\n\n![pic](../assets/p.webp)\n"
        result = transform(tmp_path, "notes/a.md", "notes/a", content, exclude_private)
        soup = BeautifulSoup(result.html, "html.parser")
        assert soup.find("div", class_="markdown-callout-warning") is not None
        assert soup.find("img")["src"] == "/assets/p.webp"


# ---------------------------------------------------------------------------
# Link target resolution across directories
# ---------------------------------------------------------------------------


class TestLinkResolution:
    @pytest.mark.parametrize(
        "source, href, target_rel",
        [
            ("A.md", "./B.md", "B"),
            ("a/A.md", "B.md", "a/B"),
            ("a/A.md", "../B.md", "B"),
            ("a/b/c/A.md", "../../../B.md", "B"),
            ("a/b/c/A.md", "../../x/y/B.md", "a/x/y/B"),
            ("a/b/A.md", "./../b/./B.md", "a/b/B"),
        ],
    )
    def test_target_equals_computed_id(self, tmp_path, write_note, exclude_private, source, href, target_rel):
        target = write_note(tmp_path, f"{target_rel}.md", "---\npublic: true\n---\n")
        note = build_note(tmp_path, source, f"[b]({href})", exclude_private)
        target_note = build_note(tmp_path, f"{target_rel}.md", target.read_text(encoding="utf-8"), exclude_private)
        assert note.outbound_links[0].target_id == target_note.id
        assert note.outbound_links[0].target_path == target.as_posix()


# ---------------------------------------------------------------------------
# build_note()
# ---------------------------------------------------------------------------


class TestBuildNote:
    def test_ids_and_names(self, tmp_path: Path, exclude_private: PrivatePolicy):
        note = build_note(tmp_path, "Projects/My Plan.md", "---\npublic: true\n---\n", exclude_private)
        assert note.id == "Projects/My%20Plan"
        assert note.display_name == "My Plan"
        assert note.path == "Projects/My Plan"
        assert note.is_public

    def test_windows_separators(self, tmp_path: Path, exclude_private: PrivatePolicy):
        note = build_note(tmp_path, "a\\b.md", "", exclude_private)
        assert note.id == "a/b"

    def test_same_name_different_dirs_distinct(self, tmp_path: Path, exclude_private: PrivatePolicy):
        one = build_note(tmp_path, "x/index.md", "", exclude_private)
        two = build_note(tmp_path, "y/index.md", "", exclude_private)
        assert one.id != two.id
