"""
Pytest configuration and fixtures for EventSync tests.

Provides shared fixtures for:
- Test database sessions (in-memory SQLite with foreign keys on)
- Settings and a date service with a fixed clock
- The save orchestrator and record factories
- FastAPI test client with overridden dependencies
"""

import os
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
os.environ['EVENTSYNC_DB_URL'] = 'sqlite:///:memory:'

from eventsync.config.settings import AppSettings
from eventsync.models import Base, EventFields, LocationFields, RecordType, Taxonomies
from eventsync.services.date_service import DateService
from eventsync.services.save_pipeline import RecordSaveOrchestrator


TEST_TIMEZONE = "Europe/Berlin"

# "Now" for every test: 1 March 2025, noon, site time
FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=ZoneInfo(TEST_TIMEZONE))


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    # Enable foreign key constraints for SQLite
    # This must be set for each connection
    def _fk_pragma_on_connect(dbapi_con, con_record):
        dbapi_con.execute('pragma foreign_keys=ON')

    event.listen(engine, 'connect', _fk_pragma_on_connect)

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope='function')
def test_db_session(test_db_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================================================
# Settings and Date Fixtures
# ============================================================================

@pytest.fixture
def test_settings():
    """Settings with translations disabled."""
    return AppSettings(timezone=TEST_TIMEZONE, active_languages="", archive_page_size=6)


@pytest.fixture
def i18n_settings():
    """Settings with German (default) and English active."""
    return AppSettings(
        timezone=TEST_TIMEZONE,
        active_languages="de,en",
        default_language="de",
        archive_page_size=6,
    )


@pytest.fixture
def fixed_clock():
    """Clock returning FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def date_service(test_settings, fixed_clock):
    """DateService in the test timezone with a fixed clock."""
    return DateService.from_settings(test_settings, clock=fixed_clock)


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def saver(test_db_session, test_settings, date_service):
    """Save orchestrator without translations."""
    return RecordSaveOrchestrator(test_db_session, settings=test_settings, date_service=date_service)


@pytest.fixture
def i18n_saver(test_db_session, i18n_settings, fixed_clock):
    """Save orchestrator with de/en translations."""
    return RecordSaveOrchestrator(
        test_db_session,
        settings=i18n_settings,
        date_service=DateService.from_settings(i18n_settings, clock=fixed_clock),
    )


# ============================================================================
# Sample Data Factories
# ============================================================================

@pytest.fixture
def make_location(saver):
    """Factory for creating locations through the save pipeline."""
    def _create(title="Hall A", status="published", sort_name=None, orchestrator=None, **fields):
        orchestrator = orchestrator or saver
        values = dict(fields)
        if sort_name is not None:
            values[LocationFields.SORT_NAME] = sort_name
        return orchestrator.create_record(
            RecordType.LOCATION.value,
            title=title,
            status=status,
            fields=values,
        ).record
    return _create


@pytest.fixture
def make_event(saver):
    """Factory for creating events through the save pipeline."""
    def _create(
        title="Concert",
        date_and_time="2025-03-01 18:00:00",
        further_dates=None,
        location=None,
        status="published",
        filters=None,
        duration=None,
        orchestrator=None,
    ):
        orchestrator = orchestrator or saver
        fields = {EventFields.DATE_AND_TIME: date_and_time}
        if further_dates is not None:
            fields[EventFields.FURTHER_DATES] = [
                {EventFields.FURTHER_DATES_DATE_AND_TIME: value} for value in further_dates
            ]
        if location is not None:
            fields[EventFields.LOCATION_ID] = location.id
        if duration is not None:
            fields[EventFields.DURATION] = duration
        return orchestrator.create_record(
            RecordType.EVENT.value,
            title=title,
            status=status,
            fields=fields,
            terms={Taxonomies.EVENT_FILTER: filters} if filters else None,
        ).record
    return _create


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def test_client(test_db_session, test_settings, date_service):
    """Create a test client for FastAPI application."""
    from fastapi.testclient import TestClient
    from eventsync.main import app
    from eventsync.db.database import get_db
    from eventsync.api.dependencies import get_app_settings, get_date_service

    # Override dependencies
    def get_test_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_app_settings] = lambda: test_settings
    app.dependency_overrides[get_date_service] = lambda: date_service

    with TestClient(app) as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()
