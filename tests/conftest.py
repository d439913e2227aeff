from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from marginalia.api import create_app
from marginalia.domain.note import Note
from marginalia.review.scheduler import ReviewScheduler
from marginalia.review.service import ReviewService
from marginalia.storage.local import LocalLinkStore, LocalNoteStore
from tests.fakes import FakeClock, FlakyReminderStore

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def test_notes() -> list[Note]:
    """Three notes, listed most recently updated first."""
    return [
        Note(
            id="note-thinking",
            title="Thinking, Fast and Slow",
            type="book",
            content="Notes on [[System 1]] and [[System 2|the slow system]].",
            created_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
            updated_at=datetime(2026, 2, 3, tzinfo=timezone.utc),
        ),
        Note(
            id="note-system-1",
            title="System 1",
            content="Fast, intuitive thinking. See [[Heuristics]].",
            created_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
            updated_at=datetime(2026, 2, 2, tzinfo=timezone.utc),
        ),
        Note(
            id="note-system-2",
            title="System 2",
            content="Slow, deliberate thinking.",
            created_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
            updated_at=datetime(2026, 2, 1, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def note_store(test_notes: list[Note]) -> LocalNoteStore:
    return LocalNoteStore.from_notes(test_notes)


@pytest.fixture
def link_store() -> LocalLinkStore:
    return LocalLinkStore()


@pytest.fixture
def reminder_store() -> FlakyReminderStore:
    return FlakyReminderStore()


@pytest.fixture
def scheduler(clock: FakeClock) -> ReviewScheduler:
    return ReviewScheduler(clock=clock)


@pytest.fixture
def review_service(
    reminder_store: FlakyReminderStore, scheduler: ReviewScheduler
) -> ReviewService:
    return ReviewService(store=reminder_store, scheduler=scheduler)


@pytest.fixture(autouse=True)
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Override settings for testing."""
    monkeypatch.setattr("marginalia.config.settings.auth_username", "admin")
    monkeypatch.setattr("marginalia.config.settings.auth_password", "password")


@pytest.fixture
def test_client(
    note_store: LocalNoteStore,
    link_store: LocalLinkStore,
    reminder_store: FlakyReminderStore,
    clock: FakeClock,
) -> TestClient:
    """Create an authenticated test client backed by in-memory stores."""
    app = create_app(
        note_store=note_store,
        link_store=link_store,
        reminder_store=reminder_store,
        clock=clock,
    )
    client = TestClient(app)
    client.auth = ("admin", "password")
    return client
