from typing import List, Protocol

from marginalia.domain.links import NoteLink
from marginalia.domain.note import Note
from marginalia.domain.reminder import Reminder, ReminderStatus


class NoteStore(Protocol):
    def get_note(self, note_id: str) -> Note | None:
        """Get a note by its ID."""
        ...

    def list_notes(self) -> List[Note]:
        """Get all notes, most recently updated first."""
        ...

    def list_titles(self, exclude_id: str | None = None) -> List[str]:
        """Get all note titles, most recently updated first.

        Args:
            exclude_id: ID of a note whose title should be left out

        Returns:
            List of titles
        """
        ...

    def title_to_id_map(self, exclude_id: str | None = None) -> dict[str, str]:
        """Map note titles to note IDs, most recently updated note wins.

        Args:
            exclude_id: ID of a note to leave out of the map
        """
        ...

    def update_note(self, note: Note) -> None:
        """Add a new note or update an existing one."""
        ...

    def delete_note(self, note_id: str) -> None:
        """Delete a note."""
        ...


class LinkStore(Protocol):
    def add_link(self, link: NoteLink) -> NoteLink:
        """Add a link.

        Raises:
            DuplicateLinkError: If the ordered note pair is already linked
            SelfLinkError: If the link points back at its source note
        """
        ...

    def get_links_for_note(self, note_id: str) -> List[NoteLink]:
        """Get outbound links of a note."""
        ...

    def get_all_links(self) -> List[NoteLink]:
        """Get all links, newest first."""
        ...

    def delete_link(self, source_note_id: str, target_note_id: str) -> None:
        """Delete the link between two notes, if any."""
        ...


class ReminderStore(Protocol):
    def get_reminder(self, reminder_id: str) -> Reminder | None:
        """Get a reminder by its ID."""
        ...

    def add_reminder(self, reminder: Reminder) -> Reminder:
        """Add a new reminder."""
        ...

    def update_reminder(self, reminder: Reminder) -> Reminder:
        """Replace a stored reminder.

        Raises:
            ReminderNotFoundError: If the reminder is not stored
        """
        ...

    def list_reminders(self, status: ReminderStatus | None = None) -> List[Reminder]:
        """Get reminders ordered by scheduled_at, optionally filtered by status."""
        ...
