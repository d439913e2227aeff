"""Note domain models."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import AwareDatetime, BaseModel, Field

NoteType = Literal["book", "concept", "quote"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Note(BaseModel):
    """Represents a note captured by the user.

    Attributes:
        id: Unique identifier of the note
        title: Note title, also the name wiki links refer to
        type: Kind of note (book, concept or quote)
        content: Free-form text, may contain [[wiki links]]
        tags: User supplied tags
        created_at: Creation timestamp
        updated_at: Last modification timestamp
    """

    id: str
    title: str
    type: NoteType = "concept"
    content: str = ""
    tags: list[str] = []
    created_at: AwareDatetime = Field(default_factory=utc_now)
    updated_at: AwareDatetime = Field(default_factory=utc_now)

    @property
    def preview(self) -> str:
        """First 100 characters of the content, used by autocomplete."""
        return self.content[:100] if self.content else "(빈 노트)"
