"""
Event archive API endpoint.

Serves one page of the public event archive in one of three views:
- default: events by date
- calendar: upcoming events and recurrences grouped by day
- locations: events and recurrences grouped by location

For grouped views, page and page_size count groups.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from eventsync.api.dependencies import (
    get_grouping_engine,
    get_orchestrator,
    get_planner,
    get_presenter,
)
from eventsync.api.presenters import RecordPresenter
from eventsync.schemas.archive import ArchiveGroup, ArchiveResponse
from eventsync.services.archive_query_planner import ArchiveQueryPlanner
from eventsync.services.grouping_engine import GroupedEvents, GroupingEngine
from eventsync.services.save_pipeline import RecordSaveOrchestrator
from eventsync.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/events",
    tags=["Archive"],
)


@router.get(
    "/archive",
    response_model=ArchiveResponse,
    summary="Event archive page",
)
async def get_archive(
    view: Optional[str] = Query(None, description="calendar, locations or empty"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    lang: Optional[str] = Query(None, description="Language code"),
    filter: Optional[str] = Query(None, description="Classification term slug"),
    search: Optional[str] = Query(None, description="Search in title and location"),
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    planner: ArchiveQueryPlanner = Depends(get_planner),
    grouping: GroupingEngine = Depends(get_grouping_engine),
    presenter: RecordPresenter = Depends(get_presenter),
) -> ArchiveResponse:
    """
    Get one archive page.

    Example:
        GET /api/events/archive?view=calendar&page=1
    """
    spec = planner.plan(
        view=view,
        page=page,
        page_size=page_size,
        language=lang,
        filter_term=filter,
        search=search,
    )
    result = saver.content_store.query(spec)
    batch = grouping.get_current_batch(result, spec)

    response = ArchiveResponse(
        view=spec.view,
        page=spec.page,
        page_size=spec.page_size,
        total=result.total,
        max_pages=result.max_pages,
    )
    if spec.is_grouped:
        response.groups = [
            ArchiveGroup(
                title=group.title,
                events=[presenter.archive_event(record) for record in group.records],
            )
            for group in batch
            if isinstance(group, GroupedEvents)
        ]
    else:
        response.events = [presenter.archive_event(record) for record in batch]

    logger.info(
        "Served archive page",
        extra={"view": spec.view, "page": spec.page, "total": result.total}
    )
    return response
