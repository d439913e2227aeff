"""CLI for deriving note links from the wiki links of every stored note."""

import argparse
import sys

from loguru import logger

from marginalia.config import settings
from marginalia.linking import LinkSyncOrchestrator
from marginalia.storage.local import LocalLinkStore, LocalNoteStore


def main(notes_store_path: str, links_store_path: str) -> None:
    note_store = LocalNoteStore(filepath=notes_store_path)
    link_store = LocalLinkStore(filepath=links_store_path)

    orchestrator = LinkSyncOrchestrator(
        note_store=note_store,
        link_store=link_store,
        relationship_type=settings.default_relationship_type,
        exclude_self=settings.exclude_self_links,
    )

    created = 0
    orphans = 0
    for note in note_store.list_notes():
        report = orchestrator.sync_note(note)
        created += len(report.created)
        orphans += len(report.orphans)

    link_store.save()
    logger.info(f"Created {created} links, {orphans} wiki links left unresolved")


if __name__ == "__main__":
    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--notes-store",
        type=str,
        required=False,
        help="Local notes store file",
        default=settings.notes_store_path,
    )
    parser.add_argument(
        "--links-store",
        type=str,
        required=False,
        help="Local links store file",
        default=settings.links_store_path,
    )

    args = parser.parse_args()

    main(notes_store_path=args.notes_store, links_store_path=args.links_store)
