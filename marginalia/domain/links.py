"""Wiki link and note link domain models."""

from typing import Literal

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from marginalia.domain.note import utc_now

RelationshipType = Literal["relates_to", "supports", "contradicts", "inspired_by"]

RELATIONSHIP_TYPES: tuple[str, ...] = ("relates_to", "supports", "contradicts", "inspired_by")


class WikiLink(BaseModel):
    """A single [[text]] or [[text|display]] occurrence inside a source string.

    Offsets are half-open and index the full bracketed span in the source string,
    so ``source[link.start_index:link.end_index]`` reproduces the original text.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    display_text: str
    start_index: int
    end_index: int


class HighlightResult(BaseModel):
    """Source text with every wiki link wrapped in a marker."""

    marked_up_text: str
    valid_links: list[WikiLink] = []
    invalid_links: list[WikiLink] = []


class ResolvedLink(BaseModel):
    """A wiki link paired with the corpus title it matched, if any."""

    link: WikiLink
    matched_title: str | None = None

    @property
    def is_orphan(self) -> bool:
        return self.matched_title is None


class NoteLink(BaseModel):
    """Directed, typed edge between two notes."""

    source_note_id: str
    target_note_id: str
    relationship_type: RelationshipType = "relates_to"
    created_at: AwareDatetime = Field(default_factory=utc_now)

    @property
    def key(self) -> tuple[str, str]:
        return (self.source_note_id, self.target_note_id)
