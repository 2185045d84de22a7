"""
Events API endpoints.

Provides CRUD operations for events:
- Create and update events (runs the save pipeline: location fields,
  recurrences, translations)
- Get event or recurrence details and the list of event dates
- Trash, restore and permanently delete events
- Write single fields (managed location fields are rejected with 403)

Design:
- All endpoints use GUID format (evt_xxx, rec_xxx) for identifiers
- Recurrences are read-only; they are rebuilt from their event's further dates
- Service exceptions are mapped to HTTP status codes by the handlers in main
- The request session is committed only when the whole save succeeded
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from eventsync.api.dependencies import get_orchestrator, get_presenter
from eventsync.api.presenters import RecordPresenter
from eventsync.models import Record, RecordType, Taxonomies
from eventsync.schemas.event import (
    EventCreate,
    EventDateResponse,
    EventResponse,
    EventSaveResponse,
    EventUpdate,
    FieldWrite,
)
from eventsync.services.exceptions import NotFoundError, ValidationError
from eventsync.services.save_pipeline import RecordSaveOrchestrator
from eventsync.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/events",
    tags=["Events"],
)


def _get_event(saver: RecordSaveOrchestrator, guid: str) -> Record:
    """Resolve an event or recurrence GUID."""
    record = saver.content_store.get_by_guid(guid)
    if not saver.content_store.is_event(record):
        raise NotFoundError("Event", guid)
    return record


def _get_original_event(saver: RecordSaveOrchestrator, guid: str) -> Record:
    return saver.content_store.get_by_guid(guid, RecordType.EVENT.value)


@router.post(
    "",
    response_model=EventSaveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create event",
)
async def create_event(
    event: EventCreate,
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    presenter: RecordPresenter = Depends(get_presenter),
) -> EventSaveResponse:
    """
    Create an event.

    Creates one recurrence per further date when the event is visible
    (published, scheduled or private).

    Raises:
        422 Unprocessable Entity: Invalid date, duplicate further date,
            further date equal to the event date, unknown location
    """
    data = event.model_dump(mode="json")
    result = saver.create_record(
        RecordType.EVENT.value,
        title=data["title"],
        status=data["status"],
        fields=presenter.event_fields(data),
        terms={Taxonomies.EVENT_FILTER: data["filters"]} if data["filters"] else None,
        language=data["language"],
    )
    saver.db.commit()

    logger.info(
        "Created event",
        extra={"guid": result.record.guid, "recurrences": sum(len(r.created) for r in result.recurrences)}
    )
    return presenter.event_save_response(result)


@router.get(
    "/{guid}",
    response_model=EventResponse,
    summary="Get event",
)
async def get_event(
    guid: str,
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    presenter: RecordPresenter = Depends(get_presenter),
) -> EventResponse:
    """Get an event or recurrence by GUID."""
    return presenter.event_response(_get_event(saver, guid))


@router.put(
    "/{guid}",
    response_model=EventSaveResponse,
    summary="Update event",
)
async def update_event(
    guid: str,
    event: EventUpdate,
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    presenter: RecordPresenter = Depends(get_presenter),
) -> EventSaveResponse:
    """
    Update an event; its recurrences are rebuilt.

    Raises:
        404 Not Found: If the event doesn't exist (recurrences cannot be updated)
        422 Unprocessable Entity: If a value is invalid
    """
    record = _get_original_event(saver, guid)
    data = event.model_dump(mode="json", exclude_unset=True)
    filters = data.get("filters")
    result = saver.update_record(
        record,
        title=data.get("title"),
        status=data.get("status"),
        fields=presenter.event_fields(data),
        terms={Taxonomies.EVENT_FILTER: filters} if filters is not None else None,
    )
    saver.db.commit()

    logger.info("Updated event", extra={"guid": guid})
    return presenter.event_save_response(result)


@router.put(
    "/{guid}/fields/{name}",
    response_model=EventSaveResponse,
    summary="Write a single event field",
)
async def write_event_field(
    guid: str,
    name: str,
    payload: FieldWrite,
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    presenter: RecordPresenter = Depends(get_presenter),
) -> EventSaveResponse:
    """
    Write one field of an event.

    Raises:
        403 Forbidden: If the field is maintained automatically
            (location_name, location_sort_name); the stored value is kept
    """
    record = _get_original_event(saver, guid)
    result = saver.write_field(record, name, payload.value)
    saver.db.commit()

    logger.info("Wrote event field", extra={"guid": guid, "field": name})
    return presenter.event_save_response(result)


@router.get(
    "/{guid}/dates",
    response_model=List[EventDateResponse],
    summary="List event dates",
)
async def get_event_dates(
    guid: str,
    recurrence: Optional[str] = Query(
        None, description="Recurrence GUID being viewed (marks it as current)"
    ),
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    presenter: RecordPresenter = Depends(get_presenter),
) -> List[EventDateResponse]:
    """
    Dates of an event and its recurrences, ascending.

    The entry of the record being viewed is flagged with is_current.
    """
    record = _get_event(saver, guid)
    current_id = None
    if recurrence:
        try:
            current_id = saver.content_store.get_by_guid(recurrence, RecordType.RECURRENCE.value).id
        except NotFoundError:
            raise ValidationError(f"Unknown recurrence: {recurrence}", field="recurrence")
    return presenter.event_dates(record, current_id)


@router.post(
    "/{guid}/trash",
    response_model=EventResponse,
    summary="Move event to trash",
)
async def trash_event(
    guid: str,
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    presenter: RecordPresenter = Depends(get_presenter),
) -> EventResponse:
    """Trash an event; its recurrences are deleted."""
    record = _get_original_event(saver, guid)
    saver.trash(record)
    saver.db.commit()

    logger.info("Trashed event", extra={"guid": guid})
    return presenter.event_response(record)


@router.post(
    "/{guid}/restore",
    response_model=EventSaveResponse,
    summary="Restore event from trash",
)
async def restore_event(
    guid: str,
    publish: bool = Query(False, description="Restore as published instead of draft"),
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    presenter: RecordPresenter = Depends(get_presenter),
) -> EventSaveResponse:
    """Restore a trashed event; recurrences are rebuilt when it is visible."""
    record = _get_original_event(saver, guid)
    result = saver.restore(record, status="published" if publish else "draft")
    saver.db.commit()

    logger.info("Restored event", extra={"guid": guid, "status": record.status})
    return presenter.event_save_response(result)


@router.delete(
    "/{guid}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete event",
)
async def delete_event(
    guid: str,
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
) -> None:
    """Permanently delete an event and its recurrences."""
    record = _get_original_event(saver, guid)
    saver.delete(record)
    saver.db.commit()

    logger.info("Deleted event", extra={"guid": guid})
