"""Resolution of wiki links against the titles of existing notes."""

import logging
from typing import Sequence

from marginalia.domain.links import ResolvedLink, WikiLink

from .matcher import find_matching_note
from .parser import extract_links

logger = logging.getLogger(__name__)


class LinkResolver:
    """Resolves wiki links against a corpus of note titles.

    The corpus is treated as ground truth for the lifetime of the resolver and
    is never modified. Build a new resolver whenever the titles change.
    """

    def __init__(self, candidate_titles: Sequence[str]):
        """Initialize resolver with the titles available for linking.

        Args:
            candidate_titles: Note titles, in the order ties should be broken
        """
        self.candidate_titles = tuple(candidate_titles)

    def resolve(self, links: Sequence[WikiLink]) -> list[ResolvedLink]:
        """Pair every link with the title it refers to.

        Args:
            links: Links extracted from a note

        Returns:
            One ResolvedLink per input link, orphans included
        """
        resolved = []
        for link in links:
            matched_title = find_matching_note(link.text, self.candidate_titles)
            if matched_title is None:
                logger.debug(f"Could not resolve wikilink: {link.text}")
            resolved.append(ResolvedLink(link=link, matched_title=matched_title))
        return resolved

    def resolve_text(self, source: str) -> list[ResolvedLink]:
        """Extract and resolve all wiki links in a piece of note content."""
        return self.resolve(extract_links(source))

    @staticmethod
    def orphans(resolved: Sequence[ResolvedLink]) -> list[WikiLink]:
        """Links that did not match any title."""
        return [item.link for item in resolved if item.is_orphan]
