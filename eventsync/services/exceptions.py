"""
Custom exceptions for service layer.

Provides specific exception types for business logic errors
that can be translated to appropriate HTTP responses.

Propagation:
- Validation errors (ValidationError and its subclasses) are reported to the
  editor and block the offending field value only.
- Structural errors (MissingPrerequisiteError, TranslationCreateFailedError,
  InvalidDateFormatError raised mid-cascade) abort the rest of the current
  cascade; steps already completed stay in place.
"""

from typing import Any, Optional


class ServiceError(Exception):
    """Base exception for service layer errors."""
    pass


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class ConflictError(ServiceError):
    """Raised when an operation conflicts with existing state."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


class InvalidDateFormatError(ValidationError):
    """Raised when a date-time does not match YYYY-MM-DD HH:MM:SS."""

    def __init__(self, value: Any, field: Optional[str] = None):
        self.value = value
        super().__init__(f"Invalid date format: {value}", field=field)


class DateEqualsOriginalError(ValidationError):
    """Raised when a further date repeats the event's own date and time."""

    MESSAGE = "Each date must be different from the original event's date and time"

    def __init__(self, value: str, field: Optional[str] = None):
        self.value = value
        super().__init__(self.MESSAGE, field=field)


class DuplicateDateError(ValidationError):
    """Raised when the same further date is submitted more than once."""

    MESSAGE = "Each date must be unique"

    def __init__(self, value: str, field: Optional[str] = None):
        self.value = value
        super().__init__(self.MESSAGE, field=field)


class MissingPrerequisiteError(ServiceError):
    """Raised when a required record type or collaborator is not available."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class WriteDeniedError(ServiceError):
    """Raised when a field with a single designated writer is written by someone else.

    The stored value is left unchanged.
    """

    def __init__(self, field: str, owner: str):
        self.field = field
        self.owner = owner
        self.message = (
            f"Blocked update of '{field}': this field is managed by {owner}"
        )
        super().__init__(self.message)


class TranslationCreateFailedError(ServiceError):
    """Raised when the clone for one language could not be created."""

    def __init__(self, record_id: int, language: str, reason: str):
        self.record_id = record_id
        self.language = language
        self.reason = reason
        self.message = (
            f"Could not create '{language}' translation of record {record_id}: {reason}"
        )
        super().__init__(self.message)
