"""Tests for persisting reminder transitions, including partial failures."""

from datetime import timedelta

import pytest

from marginalia.domain.reminder import ReviewOutcome
from marginalia.exceptions import (
    InvalidStatusError,
    InvalidTransitionError,
    NextReminderAlreadyScheduledError,
    NextReminderNotScheduledError,
    ReminderNotFoundError,
    ReminderUpdateError,
)
from marginalia.review.service import ReviewService
from tests.fakes import FakeClock, FlakyReminderStore


def test_create_persists_reminder(
    review_service: ReviewService, reminder_store: FlakyReminderStore, clock: FakeClock
) -> None:
    reminder = review_service.create("note-system-1", interval_level=2)

    assert reminder_store.get_reminder(reminder.id) == reminder
    assert reminder.scheduled_at == clock.now + timedelta(days=7)


def test_update_status_completed_writes_parent_and_fork(
    review_service: ReviewService, reminder_store: FlakyReminderStore
) -> None:
    """Test that completing a reminder stores both the history record and the fork."""
    reminder = review_service.create("n1")

    outcome = review_service.update_status(reminder.id, "completed")

    assert isinstance(outcome, ReviewOutcome)
    assert reminder_store.get_reminder(reminder.id).status == "completed"
    forked = reminder_store.get_reminder(outcome.next_reminder.id)
    assert forked is not None
    assert forked.status == "pending"
    assert forked.interval_level == 1
    assert len(reminder_store.list_reminders()) == 2


def test_update_status_dismissed_does_not_fork(
    review_service: ReviewService, reminder_store: FlakyReminderStore
) -> None:
    reminder = review_service.create("n1")

    dismissed = review_service.update_status(reminder.id, "dismissed")

    assert dismissed.status == "dismissed"
    assert reminder_store.list_reminders() == [dismissed]


def test_update_status_invalid_status(review_service: ReviewService) -> None:
    reminder = review_service.create("n1")

    with pytest.raises(InvalidStatusError, match="pending, completed, dismissed"):
        review_service.update_status(reminder.id, "archived")


def test_update_status_unknown_reminder(review_service: ReviewService) -> None:
    with pytest.raises(ReminderNotFoundError, match="missing"):
        review_service.update_status("missing", "completed")


def test_update_status_twice_is_rejected(review_service: ReviewService) -> None:
    reminder = review_service.create("n1")
    review_service.update_status(reminder.id, "completed")

    with pytest.raises(InvalidTransitionError):
        review_service.update_status(reminder.id, "completed")


def test_fork_failure_is_reported_after_review_is_recorded(
    review_service: ReviewService, reminder_store: FlakyReminderStore
) -> None:
    """Test that a failed fork write surfaces as its own error."""
    reminder = review_service.create("n1")
    reminder_store.fail_add = True

    with pytest.raises(NextReminderNotScheduledError) as exc_info:
        review_service.update_status(reminder.id, "completed")

    error = exc_info.value
    assert isinstance(error.__cause__, ConnectionError)
    assert error.completed.status == "completed"
    assert error.next_reminder.interval_level == 1
    assert reminder_store.get_reminder(reminder.id).status == "completed"
    assert reminder_store.list_reminders(status="pending") == []

    reminder_store.fail_add = False
    saved = review_service.retry_fork(reminder.id)

    assert reminder_store.list_reminders(status="pending") == [saved]
    assert len(reminder_store.list_reminders(status="completed")) == 1
    assert saved.forked_from == reminder.id
    assert saved.interval_level == 1
    assert saved.scheduled_at == error.next_reminder.scheduled_at


def test_parent_failure_records_nothing(
    review_service: ReviewService, reminder_store: FlakyReminderStore
) -> None:
    """Test that a failed parent write neither completes nor forks."""
    reminder = review_service.create("n1")
    reminder_store.fail_update = True

    with pytest.raises(ReminderUpdateError):
        review_service.update_status(reminder.id, "completed")

    assert reminder_store.get_reminder(reminder.id).status == "pending"
    assert len(reminder_store.list_reminders()) == 1


def test_list_due_filters_and_orders(
    review_service: ReviewService, clock: FakeClock
) -> None:
    thirty_days = review_service.create("n1", interval_level=3)
    one_day = review_service.create("n2", interval_level=0)
    review_service.create("n3", interval_level=2)

    reminders, total = review_service.list_due()
    assert reminders == []
    assert total == 0

    clock.advance(days=30)
    reminders, total = review_service.list_due()
    assert total == 3
    assert reminders[0].id == one_day.id
    assert reminders[-1].id == thirty_days.id

    page, total = review_service.list_due(limit=1, offset=1)
    assert total == 3
    assert len(page) == 1
    assert page[0].note_id == "n3"


def test_list_due_by_status(review_service: ReviewService, clock: FakeClock) -> None:
    reminder = review_service.create("n1")
    clock.advance(days=1)
    review_service.update_status(reminder.id, "dismissed")

    pending, _ = review_service.list_due()
    dismissed, _ = review_service.list_due(status="dismissed")

    assert pending == []
    assert [item.id for item in dismissed] == [reminder.id]

    with pytest.raises(InvalidStatusError):
        review_service.list_due(status="overdue")


def test_retry_fork_rejects_scheduled_follow_up(
    review_service: ReviewService, reminder_store: FlakyReminderStore
) -> None:
    """Test that a follow-up is never scheduled twice for the same review."""
    reminder = review_service.create("n1")
    outcome = review_service.update_status(reminder.id, "completed")

    with pytest.raises(NextReminderAlreadyScheduledError) as exc_info:
        review_service.retry_fork(reminder.id)

    assert exc_info.value.next_reminder.id == outcome.next_reminder.id
    assert len(reminder_store.list_reminders()) == 2


@pytest.mark.parametrize("status", ["pending", "dismissed"])
def test_retry_fork_requires_completed_reminder(
    review_service: ReviewService, reminder_store: FlakyReminderStore, status: str
) -> None:
    """Test that retrying never rewrites the stored reminder."""
    reminder = review_service.create("n1")
    if status == "dismissed":
        review_service.update_status(reminder.id, "dismissed")

    with pytest.raises(InvalidTransitionError):
        review_service.retry_fork(reminder.id)

    assert reminder_store.get_reminder(reminder.id).status == status
    assert len(reminder_store.list_reminders()) == 1


def test_retry_fork_unknown_reminder(review_service: ReviewService) -> None:
    with pytest.raises(ReminderNotFoundError):
        review_service.retry_fork("missing")


def test_retry_fork_failure_is_reported_again(
    review_service: ReviewService, reminder_store: FlakyReminderStore
) -> None:
    reminder = review_service.create("n1")
    reminder_store.fail_add = True
    with pytest.raises(NextReminderNotScheduledError):
        review_service.update_status(reminder.id, "completed")

    with pytest.raises(NextReminderNotScheduledError) as exc_info:
        review_service.retry_fork(reminder.id)

    assert exc_info.value.completed.status == "completed"
    assert reminder_store.list_reminders(status="pending") == []
