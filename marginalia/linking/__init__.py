"""Wiki link parsing, matching and resolution."""

from marginalia.linking.graph_builder import LinkGraphBuilder
from marginalia.linking.matcher import find_matching_note, normalize_title, search_by_prefix
from marginalia.linking.orchestrator import LinkSyncOrchestrator, LinkSyncReport
from marginalia.linking.parser import (
    extract_links,
    has_links,
    highlight_links,
    replace_links,
)
from marginalia.linking.resolver import LinkResolver

__all__ = [
    "LinkGraphBuilder",
    "LinkResolver",
    "LinkSyncOrchestrator",
    "LinkSyncReport",
    "extract_links",
    "find_matching_note",
    "has_links",
    "highlight_links",
    "normalize_title",
    "replace_links",
    "search_by_prefix",
]
