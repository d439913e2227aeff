#!/usr/bin/env python3
"""Test suite for link resolution and edge derivation."""

from datetime import datetime, timezone

from marginalia.domain.note import Note
from marginalia.linking.graph_builder import LinkGraphBuilder
from marginalia.linking.parser import extract_links
from marginalia.linking.resolver import LinkResolver


def _note(note_id: str, title: str, content: str = "") -> Note:
    return Note(id=note_id, title=title, content=content)


def test_resolver_pairs_links_with_titles() -> None:
    """Test that each link gets its matched title or None."""
    resolver = LinkResolver(["System 1", "System 2"])
    resolved = resolver.resolve_text("[[system 1]], [[System 2|slow]] and [[Heuristics]]")

    assert [(item.link.text, item.matched_title) for item in resolved] == [
        ("system 1", "System 1"),
        ("System 2", "System 2"),
        ("Heuristics", None),
    ]
    assert [item.is_orphan for item in resolved] == [False, False, True]


def test_resolver_orphans() -> None:
    resolver = LinkResolver(["Known"])
    resolved = resolver.resolve(extract_links("[[Known]] [[Unknown]] [[Other]]"))

    assert [link.text for link in LinkResolver.orphans(resolved)] == ["Unknown", "Other"]


def test_resolver_does_not_modify_corpus() -> None:
    titles = ["B", "A"]
    LinkResolver(titles).resolve_text("[[A]] [[C]]")
    assert titles == ["B", "A"]


def test_resolver_empty_corpus() -> None:
    resolved = LinkResolver([]).resolve_text("[[A]]")
    assert len(resolved) == 1
    assert resolved[0].is_orphan


def test_build_links_one_edge_per_target() -> None:
    """Test that repeated references to the same note produce one edge."""
    source = _note("n1", "Source", "[[Target]] again [[target|t]] and [[Missing]]")
    resolved = LinkResolver(["Target"]).resolve_text(source.content)
    created_at = datetime(2026, 3, 1, tzinfo=timezone.utc)

    links = LinkGraphBuilder().build_links(
        source, resolved, {"Target": "n2", "Source": "n1"}, now=created_at
    )

    assert len(links) == 1
    assert links[0].source_note_id == "n1"
    assert links[0].target_note_id == "n2"
    assert links[0].relationship_type == "relates_to"
    assert links[0].created_at == created_at


def test_build_links_skips_self_links() -> None:
    source = _note("n1", "Source", "I link to [[Source]] and [[Other]]")
    resolved = LinkResolver(["Source", "Other"]).resolve_text(source.content)

    links = LinkGraphBuilder().build_links(source, resolved, {"Source": "n1", "Other": "n2"})

    assert [link.target_note_id for link in links] == ["n2"]


def test_build_links_relationship_type() -> None:
    source = _note("n1", "Source", "[[Other]]")
    resolved = LinkResolver(["Other"]).resolve_text(source.content)

    links = LinkGraphBuilder().build_links(
        source, resolved, {"Other": "n2"}, relationship_type="inspired_by"
    )

    assert links[0].relationship_type == "inspired_by"


def test_build_links_keeps_order_of_first_appearance() -> None:
    source = _note("n1", "Source", "[[C]] [[A]] [[B]] [[A]]")
    resolved = LinkResolver(["A", "B", "C"]).resolve_text(source.content)

    links = LinkGraphBuilder().build_links(source, resolved, {"A": "a", "B": "b", "C": "c"})

    assert [link.target_note_id for link in links] == ["c", "a", "b"]
