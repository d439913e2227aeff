import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from marginalia.domain.links import NoteLink
from marginalia.domain.note import Note
from marginalia.domain.reminder import Reminder, ReminderStatus
from marginalia.exceptions import DuplicateLinkError, ReminderNotFoundError, SelfLinkError
from marginalia.storage.base import LinkStore, NoteStore, ReminderStore


class _LocalJSONStore(ABC):
    """Shared file handling for the local stores."""

    def __init__(self, filepath: str | Path | None = None, autosave: bool = False) -> None:
        """Initialize the store.

        Args:
            filepath: Path to the store file. If provided and exists, will auto-load.
                     If provided and doesn't exist, will save to this path when save() is called.
                     If not provided, creates empty store in memory only.
            autosave: Save to filepath after every change
        """
        self._filepath = str(filepath) if filepath else None
        self._autosave = autosave and self._filepath is not None

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                self._load(json.load(f))

    @abstractmethod
    def _load(self, data: dict) -> None:
        """Replace the store contents with data read from the file."""

    @abstractmethod
    def _dump(self) -> dict:
        """Return the store contents as JSON-serializable data."""

    def _changed(self) -> None:
        if self._autosave:
            self.save()

    def save(self, filepath: str | None = None) -> None:
        """Save the store to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        with open(str(save_path), "w") as f:
            json.dump(self._dump(), f)


class LocalNoteStore(_LocalJSONStore, NoteStore):
    """Local note store that saves notes to a JSON file."""

    def __init__(self, filepath: str | Path | None = None, autosave: bool = False) -> None:
        self._notes: dict[str, Note] = {}
        super().__init__(filepath, autosave)

    @classmethod
    def from_notes(cls, notes: List[Note]) -> "LocalNoteStore":
        """Create an in-memory store from a list of notes (useful for testing)."""
        instance = cls(filepath=None)
        for note in notes:
            instance.update_note(note)
        return instance

    def _load(self, data: dict) -> None:
        self._notes = {
            note_id: Note.model_validate(note_data) for note_id, note_data in data["notes"].items()
        }

    def _dump(self) -> dict:
        return {
            "notes": {
                note_id: note.model_dump(mode="json") for note_id, note in self._notes.items()
            }
        }

    def get_note(self, note_id: str) -> Note | None:
        return self._notes.get(note_id)

    def list_notes(self) -> List[Note]:
        return sorted(self._notes.values(), key=lambda note: note.updated_at, reverse=True)

    def list_titles(self, exclude_id: str | None = None) -> List[str]:
        return [note.title for note in self.list_notes() if note.id != exclude_id]

    def title_to_id_map(self, exclude_id: str | None = None) -> dict[str, str]:
        mapping: dict[str, str] = {}
        for note in self.list_notes():
            if note.id == exclude_id:
                continue
            mapping.setdefault(note.title, note.id)
        return mapping

    def update_note(self, note: Note) -> None:
        self._notes[note.id] = note
        self._changed()

    def delete_note(self, note_id: str) -> None:
        if self._notes.pop(note_id, None) is not None:
            self._changed()


class LocalLinkStore(_LocalJSONStore, LinkStore):
    """Local link store, at most one link per ordered (source, target) pair."""

    def __init__(self, filepath: str | Path | None = None, autosave: bool = False) -> None:
        self._links: dict[tuple[str, str], NoteLink] = {}
        super().__init__(filepath, autosave)

    def _load(self, data: dict) -> None:
        for link_data in data["links"]:
            link = NoteLink.model_validate(link_data)
            self._links[link.key] = link

    def _dump(self) -> dict:
        return {"links": [link.model_dump(mode="json") for link in self._links.values()]}

    def add_link(self, link: NoteLink) -> NoteLink:
        if link.source_note_id == link.target_note_id:
            raise SelfLinkError(link.source_note_id)
        if link.key in self._links:
            raise DuplicateLinkError(link.source_note_id, link.target_note_id)
        self._links[link.key] = link
        self._changed()
        return link

    def get_links_for_note(self, note_id: str) -> List[NoteLink]:
        return [link for link in self._links.values() if link.source_note_id == note_id]

    def get_all_links(self) -> List[NoteLink]:
        return sorted(self._links.values(), key=lambda link: link.created_at, reverse=True)

    def delete_link(self, source_note_id: str, target_note_id: str) -> None:
        if self._links.pop((source_note_id, target_note_id), None) is not None:
            self._changed()


class LocalReminderStore(_LocalJSONStore, ReminderStore):
    """Local reminder store that saves reminders to a JSON file."""

    def __init__(self, filepath: str | Path | None = None, autosave: bool = False) -> None:
        self._reminders: dict[str, Reminder] = {}
        super().__init__(filepath, autosave)

    def _load(self, data: dict) -> None:
        self._reminders = {
            reminder_id: Reminder.model_validate(reminder_data)
            for reminder_id, reminder_data in data["reminders"].items()
        }

    def _dump(self) -> dict:
        return {
            "reminders": {
                reminder_id: reminder.model_dump(mode="json")
                for reminder_id, reminder in self._reminders.items()
            }
        }

    def get_reminder(self, reminder_id: str) -> Reminder | None:
        return self._reminders.get(reminder_id)

    def add_reminder(self, reminder: Reminder) -> Reminder:
        self._reminders[reminder.id] = reminder
        self._changed()
        return reminder

    def update_reminder(self, reminder: Reminder) -> Reminder:
        if reminder.id not in self._reminders:
            raise ReminderNotFoundError(reminder.id)
        self._reminders[reminder.id] = reminder
        self._changed()
        return reminder

    def list_reminders(self, status: ReminderStatus | None = None) -> List[Reminder]:
        reminders = [
            reminder
            for reminder in self._reminders.values()
            if status is None or reminder.status == status
        ]
        return sorted(reminders, key=lambda reminder: reminder.scheduled_at)
