"""
Error taxonomy for the foundation core.

Field-level problems are collected as ValidationError values (see
validation.py). Everything that aborts an operation is raised as a
CoreError subclass, so callers can branch on the class or on ``kind``.

Every CoreError carries:
- kind: the ErrorKind category
- is_recoverable: whether retrying with corrected input can succeed
- failure_reason / recovery_action: short guidance for the caller
"""

from enum import Enum
from typing import Iterable, Optional, Sequence


class ErrorKind(Enum):
    """Broad error categories."""
    VALIDATION_FAILURE = "validation_failure"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    INVALID_RELATIONSHIP = "invalid_relationship"
    CONFIGURATION = "configuration"
    ACCESS_DENIED = "access_denied"
    SYSTEM_UNAVAILABLE = "system_unavailable"


_GUIDANCE = {
    ErrorKind.VALIDATION_FAILURE: (
        True,
        "Correct the validation errors and try again",
        "Fix validation errors",
    ),
    ErrorKind.NOT_FOUND: (
        False,
        "Verify the entity exists and you have access to it",
        "Check entity ID",
    ),
    ErrorKind.ALREADY_EXISTS: (
        False,
        "Use a different identifier or update the existing entity",
        "Use different ID",
    ),
    ErrorKind.INVALID_RELATIONSHIP: (
        True,
        "Check the relationship configuration and try again",
        "Fix relationship configuration",
    ),
    ErrorKind.CONFIGURATION: (
        True,
        "Review and correct the configuration settings",
        "Update configuration",
    ),
    ErrorKind.ACCESS_DENIED: (
        True,
        "Contact your administrator for appropriate permissions",
        "Request permissions",
    ),
    ErrorKind.SYSTEM_UNAVAILABLE: (
        True,
        "Try again later or contact support if the problem persists",
        "Retry later",
    ),
}


class CoreError(Exception):
    """Base class for every error raised by the foundation core."""

    kind: ErrorKind = ErrorKind.SYSTEM_UNAVAILABLE

    @property
    def is_recoverable(self) -> bool:
        return _GUIDANCE[self.kind][0]

    @property
    def failure_reason(self) -> str:
        return _GUIDANCE[self.kind][1]

    @property
    def recovery_action(self) -> str:
        return _GUIDANCE[self.kind][2]


def _join(errors: Iterable) -> str:
    return "; ".join(str(e) for e in errors)


class ValidationFailed(CoreError):
    """Raised when an entity fails validation. Carries the whole batch."""

    kind = ErrorKind.VALIDATION_FAILURE

    def __init__(self, errors: Sequence, entity_type: Optional[str] = None):
        self.errors = list(errors)
        self.entity_type = entity_type
        super().__init__(f"Validation failed: {_join(self.errors)}")


class EntityNotFound(CoreError):
    """Raised when a referenced entity does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class EntityAlreadyExists(CoreError):
    """Raised when creating an entity whose id is already taken."""

    kind = ErrorKind.ALREADY_EXISTS

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} already exists: {entity_id}")


class InvalidRelationship(CoreError):
    """Raised when an entity points at a parent that cannot own it."""

    kind = ErrorKind.INVALID_RELATIONSHIP

    def __init__(self, entity_type: str, reason: str):
        self.entity_type = entity_type
        self.reason = reason
        super().__init__(f"Invalid {entity_type} relationship: {reason}")


class InvalidEntityType(InvalidRelationship):
    """Raised when a string does not name a known entity type."""

    def __init__(self, value: str):
        super().__init__("entity", f"unknown entity type '{value}'")
        self.value = value


class ConfigurationError(CoreError):
    """Raised when a configuration is invalid, missing or unusable."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, reason: str, errors: Sequence = ()):
        self.reason = reason
        self.errors = list(errors)
        super().__init__(reason)

    @classmethod
    def validation_failed(cls, errors: Sequence) -> "ConfigurationError":
        return cls(f"Configuration validation failed: {_join(errors)}", errors)

    @classmethod
    def not_found(cls, key: str) -> "ConfigurationError":
        error = cls(f"Configuration not found: {key}")
        error.kind = ErrorKind.NOT_FOUND
        return error


class AccessDenied(CoreError):
    """Raised by access-control collaborators above the core."""

    kind = ErrorKind.ACCESS_DENIED

    def __init__(self, action: str, reason: str):
        self.action = action
        self.reason = reason
        super().__init__(f"Permission denied for {action}: {reason}")


class SystemUnavailable(CoreError):
    """Raised when a backing collaborator (e.g. the database) cannot be reached."""

    kind = ErrorKind.SYSTEM_UNAVAILABLE

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"System unavailable: {reason}")
