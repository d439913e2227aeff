from datetime import datetime
from typing import Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marginalia.api.endpoints import get_endpoints_router
from marginalia.config import settings
from marginalia.domain.note import utc_now
from marginalia.linking import LinkSyncOrchestrator
from marginalia.review import ReviewScheduler, ReviewService
from marginalia.storage.base import LinkStore, NoteStore, ReminderStore


def create_app(
    *,
    note_store: NoteStore,
    link_store: LinkStore,
    reminder_store: ReminderStore,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    review_service = ReviewService(store=reminder_store, scheduler=ReviewScheduler(clock=clock))
    orchestrator = LinkSyncOrchestrator(
        note_store=note_store,
        link_store=link_store,
        relationship_type=settings.default_relationship_type,
        exclude_self=settings.exclude_self_links,
        clock=clock,
    )

    app.include_router(
        router=get_endpoints_router(
            note_store=note_store,
            link_store=link_store,
            review_service=review_service,
            orchestrator=orchestrator,
            clock=clock,
        )
    )

    return app
