"""
Field and taxonomy names shared by the services.

Field values are stored per record in RecordField rows; these classes are the
single place where their names are spelled out.
"""


class EventFields:
    """Field names used by events and recurrences."""

    DATE_AND_TIME = "date_and_time"
    FURTHER_DATES = "further_dates"
    FURTHER_DATES_DATE_AND_TIME = "date_and_time"
    DURATION = "duration"
    LOCATION_ID = "location_id"
    LOCATION_NAME = "location_name"
    LOCATION_SORT_NAME = "location_sort_name"
    QUICK_INFOS = "quick_infos"
    EXTERNAL_LINK = "external_link"
    TICKET_LINK = "ticket_link"


class LocationFields:
    """Field names used by locations."""

    SORT_NAME = "sort_name"
    ADDRESS = "address"
    AREA = "area"
    TEL = "tel"
    EMAIL = "email"
    WEBSITE = "website"
    MAPS_URL = "maps_url"


class Taxonomies:
    """Taxonomy names."""

    EVENT_FILTER = "event_filter"
    TRANSLATIONS = "record_translations"


# Fields with exactly one writer: field name -> writer name
MANAGED_FIELDS = {
    EventFields.LOCATION_NAME: "location_sync",
    EventFields.LOCATION_SORT_NAME: "location_sync",
}


def translated_title_field(language: str) -> str:
    """Name of the staged title used when cloning a record into ``language``."""
    return f"_title_{language}"
