from collections import defaultdict, deque
from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from marginalia.api.auth import verify_credentials
from marginalia.api.schemas import (
    AutocompleteItem,
    CreateReminderRequest,
    NoteLinksResponse,
    PreviewRequest,
    ReminderListResponse,
    ReminderUpdateResponse,
    RenderedNoteResponse,
    UpdateReminderRequest,
    UpsertNoteRequest,
    UpsertNoteResponse,
)
from marginalia.config import settings
from marginalia.domain.links import HighlightResult
from marginalia.domain.note import Note, utc_now
from marginalia.domain.reminder import Reminder, ReviewOutcome
from marginalia.exceptions import (
    InvalidStatusError,
    InvalidTransitionError,
    NextReminderAlreadyScheduledError,
    NextReminderNotScheduledError,
    ReminderNotFoundError,
    ReminderUpdateError,
)
from marginalia.linking import LinkResolver, LinkSyncOrchestrator, LinkSyncReport
from marginalia.linking.matcher import search_by_prefix
from marginalia.linking.parser import highlight_links, render_links
from marginalia.review.service import ReviewService
from marginalia.storage.base import LinkStore, NoteStore


def _get_note_or_404(note_store: NoteStore, note_id: str) -> Note:
    note = note_store.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return note


def _create_autocomplete_endpoint(note_store: NoteStore):
    """Create the wiki link autocomplete endpoint handler."""

    async def autocomplete(
        q: str = "",
        limit: int = settings.autocomplete_default_limit,
        exclude_id: str | None = None,
        _: str = Depends(verify_credentials),
    ) -> list[AutocompleteItem]:
        if not q:
            return []

        notes = [note for note in note_store.list_notes() if note.id != exclude_id]
        limit = max(1, min(limit, settings.autocomplete_max_limit))
        titles = search_by_prefix(q, [note.title for note in notes], limit=limit)

        # Titles may repeat, hand out notes in their original order
        notes_by_title: dict[str, deque[Note]] = defaultdict(deque)
        for note in notes:
            notes_by_title[note.title].append(note)

        results = []
        for title in titles:
            note = notes_by_title[title].popleft()
            results.append(
                AutocompleteItem(id=note.id, title=note.title, type=note.type, preview=note.preview)
            )
        return results

    return autocomplete


def _create_preview_endpoint():
    """Create the editor preview endpoint handler."""

    async def preview(
        request: PreviewRequest,
        _: str = Depends(verify_credentials),
    ) -> HighlightResult:
        return highlight_links(request.content)

    return preview


def _create_note_links_endpoint(note_store: NoteStore, link_store: LinkStore):
    """Create the endpoint listing resolved and orphan wiki links of a note."""

    async def get_note_links(
        note_id: str,
        _: str = Depends(verify_credentials),
    ) -> NoteLinksResponse:
        note = _get_note_or_404(note_store, note_id)
        resolver = LinkResolver(note_store.list_titles(exclude_id=note_id))
        resolved = resolver.resolve_text(note.content)
        return NoteLinksResponse(
            note_id=note_id,
            resolved=resolved,
            orphans=resolver.orphans(resolved),
            stored=link_store.get_links_for_note(note_id),
        )

    return get_note_links


def _create_render_endpoint(note_store: NoteStore):
    """Create the endpoint rendering note content with clickable wiki links."""

    async def render_note(
        note_id: str,
        _: str = Depends(verify_credentials),
    ) -> RenderedNoteResponse:
        note = _get_note_or_404(note_store, note_id)
        return RenderedNoteResponse(
            note_id=note_id, html=render_links(note.content, note_store.title_to_id_map())
        )

    return render_note


def _create_upsert_note_endpoint(
    note_store: NoteStore, orchestrator: LinkSyncOrchestrator, clock: Callable[[], datetime]
):
    """Create the endpoint saving a note and deriving its links."""

    async def upsert_note(
        note_id: str,
        request: UpsertNoteRequest,
        _: str = Depends(verify_credentials),
    ) -> UpsertNoteResponse:
        now = clock()
        existing = note_store.get_note(note_id)
        note = Note(
            id=note_id,
            title=request.title,
            type=request.type,
            content=request.content,
            tags=request.tags,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
        note_store.update_note(note)
        logger.info(f"Saved note {note_id}")

        try:
            report = orchestrator.sync_note(note)
        except Exception as e:
            logger.error(f"Note {note_id} saved but link sync failed: {str(e)}")
            raise HTTPException(status_code=500, detail="Note saved, failed to sync links") from e
        return UpsertNoteResponse(note=note, links=report)

    return upsert_note


def _create_sync_links_endpoint(note_store: NoteStore, orchestrator: LinkSyncOrchestrator):
    """Create the endpoint deriving note links from wiki links after a save."""

    async def sync_links(
        note_id: str,
        _: str = Depends(verify_credentials),
    ) -> LinkSyncReport:
        note = _get_note_or_404(note_store, note_id)
        try:
            return orchestrator.sync_note(note)
        except Exception as e:
            logger.error(f"Error syncing links for note {note_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Failed to sync links") from e

    return sync_links


def _create_list_reminders_endpoint(review_service: ReviewService):
    """Create the endpoint listing due reminders."""

    async def list_reminders(
        status: str = "pending",
        limit: int = 10,
        offset: int = 0,
        _: str = Depends(verify_credentials),
    ) -> ReminderListResponse:
        limit = min(100, max(1, limit))
        offset = max(0, offset)
        try:
            reminders, total = review_service.list_due(status=status, limit=limit, offset=offset)
        except InvalidStatusError as err:
            raise HTTPException(status_code=400, detail=str(err)) from err
        return ReminderListResponse(reminders=reminders, total=total, limit=limit, offset=offset)

    return list_reminders


def _create_add_reminder_endpoint(review_service: ReviewService):
    """Create the endpoint scheduling a first reminder for a note."""

    async def add_reminder(
        request: CreateReminderRequest,
        _: str = Depends(verify_credentials),
    ) -> Reminder:
        return review_service.create(request.note_id, request.interval_level)

    return add_reminder


def _next_reminder_not_scheduled(err: NextReminderNotScheduledError) -> HTTPException:
    return HTTPException(
        status_code=502,
        detail={
            "code": "next_reminder_not_scheduled",
            "message": str(err),
            "reminder": err.completed.model_dump(mode="json"),
            "next_reminder": err.next_reminder.model_dump(mode="json"),
        },
    )


def _create_update_reminder_endpoint(review_service: ReviewService):
    """Create the endpoint marking a reminder as reviewed or dismissed."""

    async def update_reminder(
        reminder_id: str,
        request: UpdateReminderRequest,
        _: str = Depends(verify_credentials),
    ) -> ReminderUpdateResponse:
        try:
            result = review_service.update_status(reminder_id, request.status)
        except InvalidStatusError as err:
            raise HTTPException(status_code=400, detail=str(err)) from err
        except ReminderNotFoundError as err:
            raise HTTPException(status_code=404, detail="Reminder not found") from err
        except InvalidTransitionError as err:
            raise HTTPException(status_code=409, detail=str(err)) from err
        except ReminderUpdateError as err:
            raise HTTPException(
                status_code=500,
                detail={"code": "update_failed", "message": str(err)},
            ) from err
        except NextReminderNotScheduledError as err:
            raise _next_reminder_not_scheduled(err) from err

        if isinstance(result, ReviewOutcome):
            return ReminderUpdateResponse(
                reminder=result.completed, next_reminder=result.next_reminder
            )
        return ReminderUpdateResponse(reminder=result)

    return update_reminder


def _create_retry_fork_endpoint(review_service: ReviewService):
    """Create the endpoint scheduling the follow-up of a completed reminder after a failed fork."""

    async def retry_fork(
        reminder_id: str,
        _: str = Depends(verify_credentials),
    ) -> Reminder:
        try:
            return review_service.retry_fork(reminder_id)
        except ReminderNotFoundError as err:
            raise HTTPException(status_code=404, detail="Reminder not found") from err
        except (InvalidTransitionError, NextReminderAlreadyScheduledError) as err:
            raise HTTPException(status_code=409, detail=str(err)) from err
        except NextReminderNotScheduledError as err:
            raise _next_reminder_not_scheduled(err) from err

    return retry_fork


def get_endpoints_router(
    *,
    note_store: NoteStore,
    link_store: LinkStore,
    review_service: ReviewService,
    orchestrator: LinkSyncOrchestrator,
    clock: Callable[[], datetime] = utc_now,
) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    router.get("/api/notes/autocomplete")(_create_autocomplete_endpoint(note_store))
    router.post("/api/notes/preview")(_create_preview_endpoint())
    router.get("/api/notes/{note_id}/links")(_create_note_links_endpoint(note_store, link_store))
    router.put("/api/notes/{note_id}")(
        _create_upsert_note_endpoint(note_store, orchestrator, clock)
    )
    router.get("/api/notes/{note_id}/render")(_create_render_endpoint(note_store))
    router.post("/api/notes/{note_id}/sync-links")(
        _create_sync_links_endpoint(note_store, orchestrator)
    )
    router.get("/api/reminders")(_create_list_reminders_endpoint(review_service))
    router.post("/api/reminders", status_code=status.HTTP_201_CREATED)(
        _create_add_reminder_endpoint(review_service)
    )
    router.post("/api/reminders/{reminder_id}/fork", status_code=status.HTTP_201_CREATED)(
        _create_retry_fork_endpoint(review_service)
    )
    router.patch("/api/reminders/{reminder_id}")(
        _create_update_reminder_endpoint(review_service)
    )

    return router
