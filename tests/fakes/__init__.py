from tests.fakes.fake_clock import FakeClock
from tests.fakes.fake_stores import FlakyLinkStore, FlakyReminderStore

__all__ = ["FakeClock", "FlakyLinkStore", "FlakyReminderStore"]
