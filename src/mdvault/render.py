"""Markdown rendering and HTML tree rewrites.

Markdown is rendered with Python-Markdown (tables, fenced code, plus the
pymdown ``tilde`` and ``tasklist`` extensions for strikethrough and task
lists).  Every structural rewrite afterwards works on a BeautifulSoup tree
and re-serialises it; nothing pattern-matches the rendered text.
"""

from __future__ import annotations

import re
from typing import Callable, Iterator
from urllib.parse import urlsplit, urlunsplit

import markdown
from bs4 import BeautifulSoup, NavigableString, Tag

from mdvault.note import NOTE_SUFFIX, strip_suffix

MARKDOWN_EXTENSIONS = [
    "tables",
    "fenced_code",
    "sane_lists",
    "pymdownx.tilde",
    "pymdownx.tasklist",
]
MARKDOWN_EXTENSION_CONFIGS = {
    "pymdownx.tilde": {"subscript": False},
    "pymdownx.tasklist": {"custom_checkbox": False},
}

PRIVATE_HREF = "#"
PRIVATE_TITLE = "private file"

_CALLOUT_RE = re.compile(r"^\s*\[!([A-Za-z][\w-]*)\]", re.IGNORECASE)

# Octicons (16x16); unknown callout types use the "note" icon.
CALLOUT_ICONS: dict[str, str] = {
    "note": (
        "M0 8a8 8 0 1 1 16 0A8 8 0 0 1 0 8Zm8-6.5a6.5 6.5 0 1 0 0 13 6.5 6.5 0 0 0 0-13ZM6.5 7.75A.75.75 "
        "0 0 1 7.25 7h1a.75.75 0 0 1 .75.75v2.75h.25a.75.75 0 0 1 0 1.5h-2a.75.75 0 0 1 0-1.5h.25v-2h-.25a"
        ".75.75 0 0 1-.75-.75ZM8 6a1 1 0 1 1 0-2 1 1 0 0 1 0 2Z"
    ),
    "tip": (
        "M8 1.5c-2.363 0-4 1.69-4 3.75 0 .984.424 1.625.984 2.304l.214.253c.223.264.47.556.673.848.284.411"
        ".537.896.621 1.49a.75.75 0 0 1-1.484.211c-.04-.282-.163-.547-.37-.847a8.456 8.456 0 0 0-.542-.68c"
        "-.084-.1-.173-.205-.268-.32C3.201 7.75 2.5 6.766 2.5 5.25 2.5 2.31 4.863 0 8 0s5.5 2.31 5.5 5.25c0 "
        "1.516-.701 2.5-1.328 3.259-.095.115-.184.22-.268.319-.207.245-.383.453-.541.681-.208.3-.33.565-.37"
        ".847a.751.751 0 0 1-1.485-.212c.084-.593.337-1.078.621-1.489.203-.292.45-.584.673-.848.075-.088.147"
        "-.173.213-.253.561-.679.985-1.32.985-2.304 0-2.06-1.637-3.75-4-3.75ZM5.75 12h4.5a.75.75 0 0 1 0 1.5h"
        "-4.5a.75.75 0 0 1 0-1.5ZM6 15.25a.75.75 0 0 1 .75-.75h2.5a.75.75 0 0 1 0 1.5h-2.5a.75.75 0 0 1-.75"
        "-.75Z"
    ),
    "important": (
        "M0 1.75C0 .784.784 0 1.75 0h12.5C15.216 0 16 .784 16 1.75v9.5A1.75 1.75 0 0 1 14.25 13H8.06l-2.573 "
        "2.573A1.458 1.458 0 0 1 3 14.543V13H1.75A1.75 1.75 0 0 1 0 11.25Zm1.75-.25a.25.25 0 0 0-.25.25v9.5c0 "
        ".138.112.25.25.25h2a.75.75 0 0 1 .75.75v2.19l2.72-2.72a.749.749 0 0 1 .53-.22h6.5a.25.25 0 0 0 .25"
        "-.25v-9.5a.25.25 0 0 0-.25-.25Zm7 2.25v2.5a.75.75 0 0 1-1.5 0v-2.5a.75.75 0 0 1 1.5 0ZM9 9a1 1 0 1 1"
        "-2 0 1 1 0 0 1 2 0Z"
    ),
    "caution": (
        "M4.47.22A.749.749 0 0 1 5 0h6c.199 0 .389.079.53.22l4.25 4.25c.141.14.22.331.22.53v6a.749.749 0 0 1"
        "-.22.53l-4.25 4.25A.749.749 0 0 1 11 16H5a.749.749 0 0 1-.53-.22L.22 11.53A.749.749 0 0 1 0 11V5c0"
        "-.199.079-.389.22-.53Zm.84 1.28L1.5 5.31v5.38l3.81 3.81h5.38l3.81-3.81V5.31L10.69 1.5ZM8 4a.75.75 0 "
        "0 1 .75.75v3.5a.75.75 0 0 1-1.5 0v-3.5A.75.75 0 0 1 8 4Zm0 8a1 1 0 1 1 0-2 1 1 0 0 1 0 2Z"
    ),
    "warning": (
        "M8.22 1.754a.25.25 0 0 0-.44 0L1.698 13.132a.25.25 0 0 0 .22.368h12.164a.25.25 0 0 0 .22-.368L8.22 "
        "1.754ZM7 9a1 1 0 1 1 2 0v2a1 1 0 1 1-2 0V9Zm1-5a.75.75 0 0 1 .75.75v3a.75.75 0 0 1-1.5 0v-3A.75.75 0 "
        "0 1 8 4Z"
    ),
    "question": (
        "M8,0C3.6,0,0,3.6,0,8s3.6,8,8,8,8-3.6,8-8S12.4,0,8,0ZM8,14.5c-3.6,0-6.5-2.9-6.5-6.5S4.4,1.5,8,1.5s6.5,"
        "2.9,6.5,6.5-2.9,6.5-6.5,6.5ZM10.8,6.5c0,1.9-2.4,2.8-2.7,2.8h-.2c-.3,0-.6-.2-.7-.5-.1-.4,0-.8.4-.9.4-.1,"
        "1.7-.7,1.7-1.5s-.4-1.2-.9-1.4c-.7-.3-1.6.1-1.9.9-.1.4-.6.6-.9.4s-.6-.6-.4-.9c.5-1.5,2.2-2.3,3.7-1.7,1.2"
        ".4,2,1.5,2,2.8h0ZM8.7,11.6c0,.4-.3.7-.7.7s-.7-.3-.7-.7.3-.7.7-.7h0c.4,0,.7.3.7.7Z"
    ),
}
DEFAULT_CALLOUT_ICON = CALLOUT_ICONS["note"]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_markdown(body: str) -> str:
    """Render a Markdown body (frontmatter already removed) to HTML."""
    return markdown.markdown(
        body,
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs=MARKDOWN_EXTENSION_CONFIGS,
    )


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


# ---------------------------------------------------------------------------
# Document links
# ---------------------------------------------------------------------------


def is_document_href(href: str) -> bool:
    """True for a relative reference to another vault document."""
    parts = urlsplit(href)
    if parts.scheme or parts.netloc:
        return False
    return parts.path.endswith(NOTE_SUFFIX)


def strip_href_suffix(href: str) -> str:
    """``"../b.md#intro"`` -> ``"../b#intro"``."""
    parts = urlsplit(href)
    return urlunsplit(parts._replace(path=strip_suffix(parts.path)))


def document_anchors(soup: BeautifulSoup) -> Iterator[Tag]:
    """Yield every ``<a href>`` pointing at a vault document, in document order."""
    for anchor in soup.find_all("a", href=True):
        if is_document_href(anchor["href"]):
            yield anchor


def mask_anchor(anchor: Tag, icon: str) -> None:
    """Disable *anchor* and prefix its visible text with *icon*."""
    anchor["href"] = PRIVATE_HREF
    anchor["title"] = PRIVATE_TITLE
    anchor.insert(0, NavigableString(f"{icon} "))


def rewrite_document_links(soup: BeautifulSoup, visit: Callable[[str], bool], icon: str) -> None:
    """Call *visit* with each document href; mask the anchor when it returns ``False``.

    Navigable anchors lose their document extension.
    """
    for anchor in list(document_anchors(soup)):
        href = anchor["href"]
        if visit(href):
            anchor["href"] = strip_href_suffix(href)
        else:
            mask_anchor(anchor, icon)


# ---------------------------------------------------------------------------
# Callouts
# ---------------------------------------------------------------------------


def callout_icon_svg(soup: BeautifulSoup, callout_type: str) -> Tag:
    path_data = CALLOUT_ICONS.get(callout_type, DEFAULT_CALLOUT_ICON)
    svg = soup.new_tag(
        "svg",
        attrs={
            "class": "octicon",
            "viewBox": "0 0 16 16",
            "width": "16",
            "height": "16",
            "aria-hidden": "true",
        },
    )
    svg.append(soup.new_tag("path", attrs={"d": path_data}))
    return svg


def _callout_marker(blockquote: Tag) -> tuple[Tag, NavigableString, re.Match[str]] | None:
    first = blockquote.find(True, recursive=False)
    if first is None or first.name != "p" or not first.contents:
        return None
    lead = first.contents[0]
    if not isinstance(lead, NavigableString):
        return None
    match = _CALLOUT_RE.match(str(lead))
    if match is None:
        return None
    return first, lead, match


def transform_callouts(soup: BeautifulSoup) -> int:
    """Turn ``> [!TYPE]`` quotations into titled callout containers.

    Returns the number of callouts produced.
    """
    count = 0
    for blockquote in soup.find_all("blockquote"):
        found = _callout_marker(blockquote)
        if found is None:
            continue
        first, lead, match = found
        callout_type = match.group(1).lower()

        remainder = str(lead)[match.end() :].lstrip()
        if remainder:
            lead.replace_with(NavigableString(remainder))
        else:
            lead.extract()
        if not first.get_text(strip=True) and first.find(True) is None:
            first.decompose()

        container = soup.new_tag(
            "div",
            attrs={"class": ["markdown-callout", f"markdown-callout-{callout_type}"], "dir": "auto"},
        )
        title = soup.new_tag("p", attrs={"class": ["markdown-callout-title"], "dir": "auto"})
        title.append(callout_icon_svg(soup, callout_type))
        title.append(NavigableString(callout_type.upper()))
        container.append(title)
        for child in list(blockquote.contents):
            container.append(child.extract())
        blockquote.replace_with(container)
        count += 1
    return count


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------


def site_root_src(src: str) -> str:
    """``"../../assets/a.webp"`` -> ``"/assets/a.webp"``."""
    while src.startswith(("../", "./")):
        src = src[3:] if src.startswith("../") else src[2:]
    return "/" + src


def rewrite_image_sources(soup: BeautifulSoup) -> None:
    for img in soup.find_all("img", src=True):
        src = img["src"]
        if urlsplit(src).scheme:
            continue
        if src.startswith("../") or src.startswith("./../"):
            img["src"] = site_root_src(src)
