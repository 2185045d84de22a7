"""
Locations API endpoints.

Provides CRUD operations for event locations:
- Create, get and update locations
- Delete locations (protected against referenced events)
- List the events and recurrences at a location

Design:
- All endpoints use GUID format (loc_xxx) for identifiers
- Saving a visible location pushes its name and sort name onto every event
  referencing it
- Locations cannot be deleted while referenced by events
"""

from fastapi import APIRouter, Depends, status

from eventsync.api.dependencies import get_orchestrator, get_presenter
from eventsync.api.presenters import RecordPresenter
from eventsync.models import RecordType
from eventsync.schemas.location import (
    LocationCreate,
    LocationEventsResponse,
    LocationResponse,
    LocationUpdate,
)
from eventsync.services.exceptions import ConflictError
from eventsync.services.save_pipeline import RecordSaveOrchestrator
from eventsync.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/locations",
    tags=["Locations"],
)


@router.post(
    "",
    response_model=LocationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create location",
)
async def create_location(
    location: LocationCreate,
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    presenter: RecordPresenter = Depends(get_presenter),
) -> LocationResponse:
    """Create a location."""
    data = location.model_dump(mode="json")
    result = saver.create_record(
        RecordType.LOCATION.value,
        title=data["title"],
        status=data["status"],
        fields={k: v for k, v in presenter.location_fields(data).items() if v is not None},
        language=data["language"],
    )
    saver.db.commit()

    logger.info("Created location", extra={"guid": result.record.guid})
    return presenter.location_response(result.record)


@router.get(
    "/{guid}",
    response_model=LocationResponse,
    summary="Get location",
)
async def get_location(
    guid: str,
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    presenter: RecordPresenter = Depends(get_presenter),
) -> LocationResponse:
    """Get a location by GUID."""
    record = saver.content_store.get_by_guid(guid, RecordType.LOCATION.value)
    return presenter.location_response(record)


@router.put(
    "/{guid}",
    response_model=LocationResponse,
    summary="Update location",
)
async def update_location(
    guid: str,
    location: LocationUpdate,
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    presenter: RecordPresenter = Depends(get_presenter),
) -> LocationResponse:
    """
    Update a location.

    When the location is visible, every event referencing it gets the new
    name and sort name.
    """
    record = saver.content_store.get_by_guid(guid, RecordType.LOCATION.value)
    data = location.model_dump(mode="json", exclude_unset=True)
    result = saver.update_record(
        record,
        title=data.get("title"),
        status=data.get("status"),
        fields=presenter.location_fields(data),
    )
    saver.db.commit()

    logger.info(
        "Updated location",
        extra={"guid": guid, "events_updated": result.locations_updated}
    )
    return presenter.location_response(record, events_updated=result.locations_updated)


@router.delete(
    "/{guid}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete location",
    description="Delete location (protected: cannot delete if referenced by events)",
)
async def delete_location(
    guid: str,
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
) -> None:
    """
    Delete location by GUID.

    Raises:
        404 Not Found: If location doesn't exist
        409 Conflict: If location is referenced by events
    """
    record = saver.content_store.get_by_guid(guid, RecordType.LOCATION.value)
    if not saver.delete(record):
        count = len(saver.location_sync.get_events_at_location(record.id))
        logger.warning("Cannot delete location with references", extra={"guid": guid})
        raise ConflictError(
            f"Cannot delete location '{record.title}': {count} event(s) are using it"
        )
    saver.db.commit()

    logger.info("Deleted location", extra={"guid": guid})


@router.get(
    "/{guid}/events",
    response_model=LocationEventsResponse,
    summary="List events at location",
)
async def get_location_events(
    guid: str,
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    presenter: RecordPresenter = Depends(get_presenter),
) -> LocationEventsResponse:
    """Events and recurrences referencing the location (trashed excluded)."""
    record = saver.content_store.get_by_guid(guid, RecordType.LOCATION.value)
    events = saver.location_sync.get_events_at_location(record.id)
    return LocationEventsResponse(
        location_guid=record.guid,
        events=[presenter.location_event(event) for event in events],
    )
