"""
Configuration module for the EventSync backend.

Provides centralized configuration for:
- Site timezone and display formats
- Active languages and translatable record types
- Archive listing page size
"""

from eventsync.config.settings import AppSettings, get_settings

__all__ = [
    "AppSettings",
    "get_settings",
]
