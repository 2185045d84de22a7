"""
Shared FastAPI dependencies.

Settings and the date service are dependencies of their own so that tests
can override them (fixed timezone, fixed clock).
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from eventsync.api.presenters import RecordPresenter
from eventsync.config.settings import AppSettings, get_settings
from eventsync.db.database import get_db
from eventsync.services.archive_query_planner import ArchiveQueryPlanner
from eventsync.services.date_service import DateService
from eventsync.services.event_service import EventService
from eventsync.services.grouping_engine import GroupingEngine
from eventsync.services.save_pipeline import RecordSaveOrchestrator


def get_app_settings() -> AppSettings:
    """Application settings."""
    return get_settings()


def get_date_service(settings: AppSettings = Depends(get_app_settings)) -> DateService:
    """Create DateService in the configured timezone."""
    return DateService.from_settings(settings)


def get_orchestrator(
    db: Session = Depends(get_db),
    settings: AppSettings = Depends(get_app_settings),
    date_service: DateService = Depends(get_date_service),
) -> RecordSaveOrchestrator:
    """Create the record save orchestrator with database session."""
    return RecordSaveOrchestrator(db, settings=settings, date_service=date_service)


def get_event_service(
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
) -> EventService:
    """Create EventService sharing the orchestrator's stores."""
    return EventService(
        saver.db,
        content_store=saver.content_store,
        field_store=saver.field_store,
        taxonomy_store=saver.taxonomy_store,
        date_service=saver.date_service,
    )


def get_presenter(
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
    event_service: EventService = Depends(get_event_service),
) -> RecordPresenter:
    """Create the response presenter."""
    return RecordPresenter(saver, event_service)


def get_planner(
    settings: AppSettings = Depends(get_app_settings),
    date_service: DateService = Depends(get_date_service),
) -> ArchiveQueryPlanner:
    """Create ArchiveQueryPlanner."""
    return ArchiveQueryPlanner(settings=settings, date_service=date_service)


def get_grouping_engine(
    saver: RecordSaveOrchestrator = Depends(get_orchestrator),
) -> GroupingEngine:
    """Create GroupingEngine sharing the orchestrator's stores."""
    return GroupingEngine(
        saver.db,
        content_store=saver.content_store,
        field_store=saver.field_store,
        date_service=saver.date_service,
    )
