"""Persisting reminder transitions through a reminder store."""

import logging

from marginalia.domain.reminder import Reminder, ReminderStatus, ReviewOutcome
from marginalia.exceptions import (
    NextReminderAlreadyScheduledError,
    NextReminderNotScheduledError,
    ReminderNotFoundError,
    ReminderUpdateError,
)
from marginalia.storage.base import ReminderStore

from .scheduler import ReviewScheduler, validate_status

logger = logging.getLogger(__name__)


class ReviewService:
    """Runs reminder transitions and writes their results to a store."""

    def __init__(self, *, store: ReminderStore, scheduler: ReviewScheduler | None = None):
        self.store = store
        self.scheduler = scheduler or ReviewScheduler()

    def create(self, note_id: str, interval_level: int = 0) -> Reminder:
        """Schedule a first reminder for a note."""
        reminder = self.store.add_reminder(self.scheduler.create_reminder(note_id, interval_level))
        logger.info(
            f"Scheduled reminder {reminder.id} for note {note_id} at level "
            f"{reminder.interval_level}"
        )
        return reminder

    def get(self, reminder_id: str) -> Reminder:
        reminder = self.store.get_reminder(reminder_id)
        if reminder is None:
            raise ReminderNotFoundError(reminder_id)
        return reminder

    def list_due(
        self, status: ReminderStatus = "pending", limit: int = 10, offset: int = 0
    ) -> tuple[list[Reminder], int]:
        """Get reminders that are due, oldest first.

        Args:
            status: Only reminders with this status are returned
            limit: Page size
            offset: Number of due reminders to skip

        Returns:
            Tuple of (page of reminders, total number of due reminders)
        """
        validate_status(status)
        due = [
            reminder
            for reminder in self.store.list_reminders(status=status)
            if self.scheduler.is_due(reminder)
        ]
        return due[offset : offset + limit], len(due)

    def update_status(self, reminder_id: str, status: str) -> Reminder | ReviewOutcome:
        """Apply a status change and persist it.

        Completing a reminder takes two writes: the reviewed reminder first,
        then the forked one.

        Args:
            reminder_id: ID of the reminder to update
            status: Requested status

        Returns:
            ReviewOutcome when completed, the updated reminder otherwise

        Raises:
            InvalidStatusError: If the status is not allowed
            ReminderNotFoundError: If the reminder does not exist
            InvalidTransitionError: If the reminder is not pending
            ReminderUpdateError: If the reminder could not be written
            NextReminderNotScheduledError: If the review was recorded but the
                forked reminder could not be written
        """
        result = self.scheduler.apply_status(self.get(reminder_id), status)

        if isinstance(result, ReviewOutcome):
            return self._record_review(result)

        self._write_update(result)
        return result

    def retry_fork(self, reminder_id: str) -> Reminder:
        """Schedule the follow-up of a completed reminder whose fork write failed.

        The follow-up is rebuilt from the stored reminder, which is never
        written here.

        Args:
            reminder_id: ID of the completed reminder

        Returns:
            The newly stored follow-up reminder

        Raises:
            ReminderNotFoundError: If the reminder does not exist
            InvalidTransitionError: If the reminder is not completed
            NextReminderAlreadyScheduledError: If the follow-up is already stored
            NextReminderNotScheduledError: If the follow-up could not be written
        """
        completed = self.get(reminder_id)
        next_reminder = self.scheduler.fork(completed)

        for reminder in self.store.list_reminders():
            if reminder.forked_from == completed.id:
                raise NextReminderAlreadyScheduledError(completed, reminder)

        try:
            saved = self.store.add_reminder(next_reminder)
        except Exception as e:
            logger.error(f"Retry of next reminder for {completed.id} failed: {e}")
            raise NextReminderNotScheduledError(completed, next_reminder) from e

        logger.info(f"Scheduled next reminder {saved.id} for note {saved.note_id} on retry")
        return saved

    def _record_review(self, outcome: ReviewOutcome) -> ReviewOutcome:
        completed = self._write_update(outcome.completed)

        try:
            next_reminder = self.store.add_reminder(outcome.next_reminder)
        except Exception as e:
            logger.error(
                f"Review of reminder {completed.id} recorded but next reminder failed: {e}"
            )
            raise NextReminderNotScheduledError(completed, outcome.next_reminder) from e

        logger.info(
            f"Reminder {completed.id} reviewed; next review at level "
            f"{next_reminder.interval_level} on {next_reminder.scheduled_at.isoformat()}"
        )
        return ReviewOutcome(completed=completed, next_reminder=next_reminder)

    def _write_update(self, reminder: Reminder) -> Reminder:
        try:
            return self.store.update_reminder(reminder)
        except ReminderNotFoundError:
            raise
        except Exception as e:
            logger.error(f"Failed to update reminder {reminder.id}: {e}")
            raise ReminderUpdateError(f"Failed to update reminder {reminder.id}") from e
