"""
Application settings configuration for EventSync.

Centralized settings loaded from environment variables.
"""

from functools import lru_cache
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment Variables:
        EVENTSYNC_TIMEZONE: IANA timezone used for every date comparison (default: UTC)
        EVENTSYNC_ACTIVE_LANGUAGES: Comma-separated language codes (default: empty = no translations)
        EVENTSYNC_DEFAULT_LANGUAGE: Language assigned to records created without one
        EVENTSYNC_TRANSLATABLE_TYPES: Record types that get a copy in every active language
        EVENTSYNC_ARCHIVE_PAGE_SIZE: Page size of the archive probe query (default: 6)
        EVENTSYNC_DATE_FORMAT: strftime format for absolute dates
        EVENTSYNC_TIME_FORMAT: strftime format for times
        EVENTSYNC_RELATIVE_DATE_FORMAT: strftime suffix rendered after "Today"/"Yesterday"/"Tomorrow"
    """

    timezone: str = Field(
        default="UTC",
        validation_alias="EVENTSYNC_TIMEZONE",
        description="IANA timezone identifier, e.g. Europe/Berlin"
    )

    active_languages: str = Field(
        default="",
        validation_alias="EVENTSYNC_ACTIVE_LANGUAGES",
        description="Comma-separated language codes (e.g., de,en)"
    )

    default_language: str = Field(
        default="",
        validation_alias="EVENTSYNC_DEFAULT_LANGUAGE",
    )

    translatable_types: str = Field(
        default="event,location",
        validation_alias="EVENTSYNC_TRANSLATABLE_TYPES",
        description="Comma-separated record types kept in sync across languages"
    )

    archive_page_size: int = Field(
        default=6,
        validation_alias="EVENTSYNC_ARCHIVE_PAGE_SIZE",
        ge=1,
        le=100,
    )

    date_format: str = Field(
        default="%d %B %Y",
        validation_alias="EVENTSYNC_DATE_FORMAT",
    )

    time_format: str = Field(
        default="%H:%M",
        validation_alias="EVENTSYNC_TIME_FORMAT",
    )

    relative_date_format: str = Field(
        default=", %d. %B %Y",
        validation_alias="EVENTSYNC_RELATIVE_DATE_FORMAT",
    )

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate that the timezone is a known IANA identifier."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def active_languages_list(self) -> List[str]:
        """
        Get the active languages in configured order.

        Returns:
            List of language codes (e.g., ["de", "en"])
        """
        if not self.active_languages:
            return []
        return [lang.strip().lower() for lang in self.active_languages.split(",") if lang.strip()]

    @property
    def translatable_types_set(self) -> set:
        """Get the set of record types kept in sync across languages."""
        if not self.translatable_types:
            return set()
        return {t.strip().lower() for t in self.translatable_types.split(",") if t.strip()}

    @property
    def translations_enabled(self) -> bool:
        """Check if more than zero languages are configured."""
        return bool(self.active_languages_list)


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings instance.

    Returns:
        AppSettings: Configured application settings from environment
    """
    return AppSettings()
