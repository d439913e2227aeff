"""Interval-based spaced repetition scheduling.

A reminder moves through four interval levels. Completing a pending reminder
records the review and forks a new pending reminder one level further along,
saturating at the last level:

    level 0 -> due in 1 day
    level 1 -> due in 3 days
    level 2 -> due in 7 days
    level 3 -> due in 30 days
"""

import math
from datetime import datetime, timedelta
from typing import Callable, NamedTuple

from marginalia.domain.note import utc_now
from marginalia.domain.reminder import REMINDER_STATUSES, Reminder, ReviewOutcome
from marginalia.exceptions import InvalidStatusError, InvalidTransitionError


class IntervalLevel(NamedTuple):
    days: int
    label: str


INTERVAL_LEVELS: dict[int, IntervalLevel] = {
    0: IntervalLevel(days=1, label="1일 후"),
    1: IntervalLevel(days=3, label="3일 후"),
    2: IntervalLevel(days=7, label="7일 후"),
    3: IntervalLevel(days=30, label="30일 후"),
}

MIN_LEVEL = 0
MAX_LEVEL = 3


def clamp_level(level: int) -> int:
    """Clamp an interval level into the supported range."""
    return max(MIN_LEVEL, min(MAX_LEVEL, level))


def days_for_level(level: int) -> int:
    return INTERVAL_LEVELS[clamp_level(level)].days


def interval_label(level: int) -> str:
    return INTERVAL_LEVELS[clamp_level(level)].label


def next_interval_level(level: int) -> int:
    """Level reached after a successful review (capped at the last level)."""
    return min(MAX_LEVEL, clamp_level(level) + 1)


def next_review_date(level: int, now: datetime) -> datetime:
    return now + timedelta(days=days_for_level(level))


def is_due(scheduled_at: datetime, now: datetime) -> bool:
    return scheduled_at <= now


def days_remaining(scheduled_at: datetime, now: datetime) -> int:
    """Whole days until the review, rounded up. Negative when overdue."""
    return math.ceil((scheduled_at - now) / timedelta(days=1))


def progress_percent(level: int) -> float:
    """Progress through the interval levels as a percentage (0-100)."""
    if level <= MIN_LEVEL:
        return 0
    if level >= MAX_LEVEL:
        return 100
    return (level / MAX_LEVEL) * 100


def format_review_date(value: datetime) -> str:
    return value.date().isoformat()


def validate_status(status: str) -> str:
    """Reject status strings outside pending, completed and dismissed.

    Raises:
        InvalidStatusError: If the status is not allowed
    """
    if status not in REMINDER_STATUSES:
        raise InvalidStatusError(status)
    return status


class ReviewScheduler:
    """Computes reminder transitions. Never touches storage."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        """Initialize the scheduler.

        Args:
            clock: Returns the current time, injectable for deterministic tests
        """
        self.clock = clock

    def create_reminder(self, note_id: str, interval_level: int = 0) -> Reminder:
        """Create a pending reminder due after the interval of the given level.

        Out-of-range levels are clamped.
        """
        now = self.clock()
        level = clamp_level(interval_level)
        return Reminder(
            note_id=note_id,
            interval_level=level,
            scheduled_at=next_review_date(level, now),
            status="pending",
            created_at=now,
        )

    def complete(self, reminder: Reminder) -> ReviewOutcome:
        """Record a successful review.

        The reminder itself becomes completed and stays as history; a new
        pending reminder is forked at the next interval level.

        Args:
            reminder: A pending reminder

        Returns:
            ReviewOutcome with the completed reminder and the forked one

        Raises:
            InvalidTransitionError: If the reminder is not pending
        """
        self._require_pending(reminder, "completed")
        completed = reminder.model_copy(
            update={"status": "completed", "last_reviewed_at": self.clock()}
        )
        return ReviewOutcome(completed=completed, next_reminder=self.fork(completed))

    def fork(self, completed: Reminder) -> Reminder:
        """Build the follow-up reminder of a completed review.

        The follow-up sits one level further along and is due relative to
        when the review was recorded.

        Raises:
            InvalidTransitionError: If the reminder is not completed
        """
        if completed.status != "completed":
            raise InvalidTransitionError(completed, "forked", required_status="completed")

        now = self.clock()
        reviewed_at = completed.last_reviewed_at or now
        next_level = next_interval_level(completed.interval_level)
        return Reminder(
            note_id=completed.note_id,
            interval_level=next_level,
            scheduled_at=next_review_date(next_level, reviewed_at),
            status="pending",
            forked_from=completed.id,
            created_at=now,
        )

    def dismiss(self, reminder: Reminder) -> Reminder:
        """Dismiss a pending reminder without scheduling another one."""
        self._require_pending(reminder, "dismissed")
        return reminder.model_copy(update={"status": "dismissed"})

    def apply_status(self, reminder: Reminder, status: str) -> Reminder | ReviewOutcome:
        """Apply an externally supplied status to a reminder.

        Args:
            reminder: The stored reminder
            status: Requested status string

        Returns:
            ReviewOutcome for "completed", the updated reminder otherwise

        Raises:
            InvalidStatusError: If the status is not allowed
            InvalidTransitionError: If the reminder is not pending
        """
        validate_status(status)
        if status == "completed":
            return self.complete(reminder)
        if status == "dismissed":
            return self.dismiss(reminder)
        self._require_pending(reminder, status)
        return reminder

    def is_due(self, reminder: Reminder) -> bool:
        return is_due(reminder.scheduled_at, self.clock())

    def days_remaining(self, reminder: Reminder) -> int:
        return days_remaining(reminder.scheduled_at, self.clock())

    @staticmethod
    def _require_pending(reminder: Reminder, target_status: str) -> None:
        if reminder.status != "pending":
            raise InvalidTransitionError(reminder, target_status)
