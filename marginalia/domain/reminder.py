"""Reminder domain models."""

from typing import Literal
from uuid import uuid4

from pydantic import AwareDatetime, BaseModel, Field

from marginalia.domain.note import utc_now

ReminderStatus = Literal["pending", "completed", "dismissed"]

REMINDER_STATUSES: tuple[str, ...] = ("pending", "completed", "dismissed")


def new_reminder_id() -> str:
    return str(uuid4())


class Reminder(BaseModel):
    """A scheduled spaced-repetition review of a note.

    Attributes:
        id: Unique identifier of the reminder
        note_id: The note to review
        interval_level: Position in the interval table (0-3)
        scheduled_at: When the review becomes due
        status: pending, completed or dismissed
        last_reviewed_at: When the review was recorded, if it was
        forked_from: ID of the completed reminder this one follows up on
        created_at: Creation timestamp

    Timestamps must carry a timezone.
    """

    id: str = Field(default_factory=new_reminder_id)
    note_id: str
    interval_level: int = Field(default=0, ge=0, le=3)
    scheduled_at: AwareDatetime
    status: ReminderStatus = "pending"
    last_reviewed_at: AwareDatetime | None = None
    forked_from: str | None = None
    created_at: AwareDatetime = Field(default_factory=utc_now)


class ReviewOutcome(BaseModel):
    """The two records produced by a successful review."""

    completed: Reminder
    next_reminder: Reminder
