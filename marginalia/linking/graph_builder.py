"""Building note link edges from resolved wiki links."""

from datetime import datetime
from typing import Mapping, Sequence

from marginalia.domain.links import NoteLink, RelationshipType, ResolvedLink
from marginalia.domain.note import Note, utc_now

from .matcher import normalize_title


class LinkGraphBuilder:
    """Derives directed note links from the wiki links of a note."""

    def build_links(
        self,
        source_note: Note,
        resolved: Sequence[ResolvedLink],
        title_to_id: Mapping[str, str],
        relationship_type: RelationshipType = "relates_to",
        now: datetime | None = None,
    ) -> list[NoteLink]:
        """Build one edge per distinct target note.

        Args:
            source_note: The note containing the wiki links
            resolved: Resolved links of the source note
            title_to_id: Mapping of note title to note ID
            relationship_type: Type assigned to every derived edge
            now: Creation timestamp for the edges

        Returns:
            Edges in order of first appearance, without orphans or self links
        """
        created_at = now or utc_now()
        ids_by_title = self._normalized_ids(title_to_id)

        links = []
        seen_targets = set()
        for item in resolved:
            if item.matched_title is None:
                continue

            target_id = ids_by_title.get(normalize_title(item.matched_title))
            if target_id is None or target_id == source_note.id or target_id in seen_targets:
                continue

            seen_targets.add(target_id)
            links.append(
                NoteLink(
                    source_note_id=source_note.id,
                    target_note_id=target_id,
                    relationship_type=relationship_type,
                    created_at=created_at,
                )
            )

        return links

    @staticmethod
    def _normalized_ids(title_to_id: Mapping[str, str]) -> dict[str, str]:
        """Index note IDs by normalized title, first title wins."""
        ids_by_title: dict[str, str] = {}
        for title, note_id in title_to_id.items():
            ids_by_title.setdefault(normalize_title(title), note_id)
        return ids_by_title
