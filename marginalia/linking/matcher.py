"""Matching wiki link names against the titles of existing notes."""

from typing import Iterable


def normalize_title(title: str) -> str:
    """Normalize a note title for matching (case-insensitive, trimmed)."""
    return title.lower().strip()


def find_matching_note(link_text: str, candidate_titles: Iterable[str]) -> str | None:
    """Find the title a wiki link refers to.

    Only exact matches on the normalized title count. When several candidates
    normalize to the same value the first one supplied wins.

    Args:
        link_text: Target name of the wiki link
        candidate_titles: Titles of the notes available for linking

    Returns:
        The matching title as supplied, or None if nothing matches
    """
    normalized = normalize_title(link_text)
    for title in candidate_titles:
        if normalize_title(title) == normalized:
            return title
    return None


def search_by_prefix(
    query: str, candidate_titles: Iterable[str], limit: int | None = None
) -> list[str]:
    """Search titles for autocomplete.

    Titles starting with the query come first, followed by titles that only
    contain it. Input order is kept within each group.

    Args:
        query: Text typed so far
        candidate_titles: Titles of the notes available for linking
        limit: Maximum number of titles to return

    Returns:
        Matching titles, empty for an empty query
    """
    normalized = normalize_title(query)
    if not normalized:
        return []

    prefix_matches = []
    contains_matches = []
    for title in candidate_titles:
        normalized_title = normalize_title(title)
        if normalized_title.startswith(normalized):
            prefix_matches.append(title)
        elif normalized in normalized_title:
            contains_matches.append(title)

    results = prefix_matches + contains_matches
    if limit is not None:
        results = results[: max(0, limit)]
    return results
