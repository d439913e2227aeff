"""Exceptions raised by marginalia services and stores."""

from marginalia.domain.reminder import REMINDER_STATUSES, Reminder


class MarginaliaError(Exception):
    """Base class for all marginalia errors."""


class InvalidStatusError(MarginaliaError, ValueError):
    """Raised when a reminder status string is not one of the allowed values."""

    def __init__(self, status: str) -> None:
        self.status = status
        allowed = ", ".join(REMINDER_STATUSES)
        super().__init__(f"Invalid status '{status}'. Must be one of: {allowed}")


class InvalidTransitionError(MarginaliaError):
    """Raised when a reminder is not in the status an operation requires."""

    def __init__(
        self, reminder: Reminder, target_status: str, required_status: str = "pending"
    ) -> None:
        self.reminder = reminder
        self.target_status = target_status
        self.required_status = required_status
        super().__init__(
            f"Reminder {reminder.id} is {reminder.status}; "
            f"only {required_status} reminders can become {target_status}"
        )


class ReminderNotFoundError(MarginaliaError, KeyError):
    """Raised when a reminder ID is unknown to the store."""

    def __init__(self, reminder_id: str) -> None:
        self.reminder_id = reminder_id
        super().__init__(f"Reminder {reminder_id} not found")

    def __str__(self) -> str:
        return self.args[0]


class ReminderUpdateError(MarginaliaError):
    """Raised when the reminder being reviewed could not be written.

    Nothing has been recorded; the whole operation can be retried.
    """


class NextReminderNotScheduledError(MarginaliaError):
    """Raised when a review was recorded but the follow-up reminder was not saved.

    Retry with ``ReviewService.retry_fork(error.completed.id)`` so the review is
    not counted twice.
    """

    def __init__(self, completed: Reminder, next_reminder: Reminder) -> None:
        self.completed = completed
        self.next_reminder = next_reminder
        super().__init__(
            f"Review of reminder {completed.id} was recorded, "
            f"but the next reminder for note {next_reminder.note_id} was not scheduled"
        )


class NextReminderAlreadyScheduledError(MarginaliaError):
    """Raised when a completed reminder already has its follow-up reminder."""

    def __init__(self, completed: Reminder, next_reminder: Reminder) -> None:
        self.completed = completed
        self.next_reminder = next_reminder
        super().__init__(f"Reminder {completed.id} already has next reminder {next_reminder.id}")


class DuplicateLinkError(MarginaliaError):
    """Raised by link stores when the same ordered note pair is linked twice."""

    def __init__(self, source_note_id: str, target_note_id: str) -> None:
        self.source_note_id = source_note_id
        self.target_note_id = target_note_id
        super().__init__(f"Link {source_note_id} -> {target_note_id} already exists")


class SelfLinkError(MarginaliaError, ValueError):
    """Raised when a note is linked to itself."""

    def __init__(self, note_id: str) -> None:
        self.note_id = note_id
        super().__init__(f"Cannot create self-referential link for note {note_id}")
