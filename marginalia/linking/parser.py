"""Parsing and rendering of [[wiki links]] in note content."""

import html
import re
from typing import Callable, Mapping

from marginalia.domain.links import HighlightResult, WikiLink

from .matcher import normalize_title

# [[text]] or [[text|display]]
WIKI_LINK_PATTERN = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]+))?\]\]")

# Characters that conflict with the link syntax or with HTML rendering
_INVALID_FORMAT_PATTERN = re.compile(r"[\[\]<>{}]")

VALID_MARK_CLASS = "wiki-link-valid"
INVALID_MARK_CLASS = "wiki-link-invalid"


def extract_links(source: str) -> list[WikiLink]:
    """Extract all wiki links from text.

    Matches are scanned left to right and never overlap. Occurrences whose
    target name is empty after trimming are dropped, but their span is still
    consumed by the scan.

    Args:
        source: Note content to parse

    Returns:
        Links ordered by start_index
    """
    links = []
    for match in WIKI_LINK_PATTERN.finditer(source):
        text = match.group(1).strip()
        if not text:
            continue
        display_text = (match.group(2) or match.group(1)).strip()
        links.append(
            WikiLink(
                text=text,
                display_text=display_text,
                start_index=match.start(),
                end_index=match.end(),
            )
        )
    return links


def has_links(source: str) -> bool:
    """Check whether the text contains at least one wiki link."""
    return bool(extract_links(source))


def _splice(
    source: str,
    links: list[WikiLink],
    render_link: Callable[[WikiLink], str],
    render_text: Callable[[str], str] = lambda text: text,
) -> str:
    parts = []
    cursor = 0
    for link in links:
        parts.append(render_text(source[cursor : link.start_index]))
        parts.append(render_link(link))
        cursor = link.end_index
    parts.append(render_text(source[cursor:]))
    return "".join(parts)


def replace_links(source: str, callback: Callable[[WikiLink], str]) -> str:
    """Replace every wiki link with the value returned by ``callback``.

    Text outside the bracketed spans is left untouched.

    Args:
        source: Note content
        callback: Called once per link, in order, with the parsed link

    Returns:
        The rewritten text
    """
    return _splice(source, extract_links(source), callback)


def highlight_links(source: str) -> HighlightResult:
    """Wrap wiki links in <mark> tags for an editor preview.

    Links are spliced from the end of the string towards the start, so the
    original offsets stay valid without tracking a length delta.
    """
    links = extract_links(source)
    valid_links = []
    invalid_links = []
    marked_up = source

    for link in reversed(links):
        if link.text:
            valid_links.append(link)
            css_class = VALID_MARK_CLASS
        else:
            # Unreachable while extraction drops empty names
            invalid_links.append(link)
            css_class = INVALID_MARK_CLASS
        original = marked_up[link.start_index : link.end_index]
        marked_up = (
            marked_up[: link.start_index]
            + f'<mark class="{css_class}">{original}</mark>'
            + marked_up[link.end_index :]
        )

    valid_links.reverse()
    invalid_links.reverse()
    return HighlightResult(
        marked_up_text=marked_up, valid_links=valid_links, invalid_links=invalid_links
    )


def parse_link_text(inner: str) -> tuple[str, str]:
    """Split the text inside [[ ]] into target name and display text.

    Args:
        inner: Link text without the surrounding brackets, e.g. "Note|shown"

    Returns:
        Tuple of (text, display_text)
    """
    parts = [part.strip() for part in inner.split("|")]
    text = parts[0]
    display_text = parts[1] if len(parts) > 1 and parts[1] else text
    return text, display_text


def is_valid_link_format(inner: str) -> bool:
    """Check that a link target is non-empty and free of syntax characters."""
    if not inner.strip():
        return False
    return _INVALID_FORMAT_PATTERN.search(inner) is None


def link_to_html(link: WikiLink, note_id: str) -> str:
    """Render a resolved wiki link as an anchor to the target note."""
    return f'<a href="/notes/{note_id}" class="wiki-link">{html.escape(link.display_text)}</a>'


def render_links(source: str, title_to_id: Mapping[str, str]) -> str:
    """Render note content as HTML, turning wiki links into anchors.

    Links whose text matches no title are rendered as orphan spans instead.

    Args:
        source: Note content
        title_to_id: Mapping of note title to note ID

    Returns:
        HTML-escaped content with rendered links
    """
    normalized_ids = {}
    for title, note_id in title_to_id.items():
        normalized_ids.setdefault(normalize_title(title), note_id)

    def render(link: WikiLink) -> str:
        note_id = normalized_ids.get(normalize_title(link.text))
        if note_id is None:
            return f'<span class="wiki-link-orphan">{html.escape(link.display_text)}</span>'
        return link_to_html(link, note_id)

    return _splice(source, extract_links(source), render, html.escape)
