"""Keeping note links in sync with the wiki links written in a note."""

import logging
from datetime import datetime
from typing import Callable

from pydantic import BaseModel

from marginalia.domain.links import NoteLink, RelationshipType, WikiLink
from marginalia.domain.note import Note, utc_now
from marginalia.exceptions import DuplicateLinkError
from marginalia.storage.base import LinkStore, NoteStore

from .graph_builder import LinkGraphBuilder
from .resolver import LinkResolver

logger = logging.getLogger(__name__)


class LinkSyncReport(BaseModel):
    """Result of syncing the links of a single note."""

    note_id: str
    created: list[NoteLink] = []
    skipped: list[NoteLink] = []
    orphans: list[WikiLink] = []


class LinkSyncOrchestrator:
    """Creates note links for every resolvable wiki link in a saved note."""

    def __init__(
        self,
        *,
        note_store: NoteStore,
        link_store: LinkStore,
        relationship_type: RelationshipType = "relates_to",
        exclude_self: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the orchestrator with the stores it reads and writes.

        Args:
            note_store: Source of the title corpus
            link_store: Destination for derived links
            relationship_type: Type assigned to derived links
            exclude_self: Leave the saved note's own title out of the corpus
            clock: Returns the current time
        """
        self.note_store = note_store
        self.link_store = link_store
        self.relationship_type = relationship_type
        self.exclude_self = exclude_self
        self.clock = clock
        self.graph_builder = LinkGraphBuilder()

    def sync_note(self, note: Note) -> LinkSyncReport:
        """Resolve the wiki links of a note and persist one link per target.

        Links that already exist are skipped rather than treated as errors.

        Args:
            note: The note that was created or edited

        Returns:
            LinkSyncReport listing created, skipped and orphan links
        """
        exclude_id = note.id if self.exclude_self else None
        resolver = LinkResolver(self.note_store.list_titles(exclude_id=exclude_id))
        resolved = resolver.resolve_text(note.content)

        candidate_links = self.graph_builder.build_links(
            note,
            resolved,
            self.note_store.title_to_id_map(exclude_id=exclude_id),
            relationship_type=self.relationship_type,
            now=self.clock(),
        )

        report = LinkSyncReport(note_id=note.id, orphans=resolver.orphans(resolved))
        for link in candidate_links:
            try:
                report.created.append(self.link_store.add_link(link))
            except DuplicateLinkError:
                report.skipped.append(link)

        logger.info(
            f"Synced links for note {note.id}: {len(report.created)} created, "
            f"{len(report.skipped)} already present, {len(report.orphans)} unresolved"
        )
        return report
