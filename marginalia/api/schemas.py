from pydantic import BaseModel, Field

from marginalia.domain.links import NoteLink, ResolvedLink, WikiLink
from marginalia.domain.note import Note, NoteType
from marginalia.domain.reminder import Reminder
from marginalia.linking.orchestrator import LinkSyncReport


class AutocompleteItem(BaseModel):
    id: str
    title: str
    type: NoteType
    preview: str


class PreviewRequest(BaseModel):
    content: str


class NoteLinksResponse(BaseModel):
    note_id: str
    resolved: list[ResolvedLink]
    orphans: list[WikiLink]
    stored: list[NoteLink]


class RenderedNoteResponse(BaseModel):
    note_id: str
    html: str


class CreateReminderRequest(BaseModel):
    note_id: str = Field(..., min_length=1)
    interval_level: int = 0


class UpdateReminderRequest(BaseModel):
    status: str


class ReminderListResponse(BaseModel):
    reminders: list[Reminder]
    total: int
    limit: int
    offset: int


class ReminderUpdateResponse(BaseModel):
    reminder: Reminder
    next_reminder: Reminder | None = None


class UpsertNoteRequest(BaseModel):
    title: str = Field(..., min_length=1)
    type: NoteType = "concept"
    content: str = ""
    tags: list[str] = []


class UpsertNoteResponse(BaseModel):
    note: Note
    links: LinkSyncReport
