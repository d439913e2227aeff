import sys

from loguru import logger

from marginalia.api import create_app
from marginalia.config import settings
from marginalia.storage.local import LocalLinkStore, LocalNoteStore, LocalReminderStore

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info("Loading notes, links and reminders from local stores")
note_store = LocalNoteStore(settings.notes_store_path, autosave=True)
link_store = LocalLinkStore(settings.links_store_path, autosave=True)
reminder_store = LocalReminderStore(settings.reminders_store_path, autosave=True)
app = create_app(
    note_store=note_store,
    link_store=link_store,
    reminder_store=reminder_store,
)
