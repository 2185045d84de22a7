"""
Model mixins for shared functionality across entities.
"""

from eventsync.models.mixins.guid import GuidMixin, UUIDType

__all__ = ["GuidMixin", "UUIDType"]
