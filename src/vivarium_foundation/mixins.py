"""
Capabilities shared by entities: timestamps, soft deletion, facility
scoping, hierarchy and configuration.

These are plain mixins over dataclass fields. Each one documents the
attributes it expects the host class to define.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .errors import ConfigurationError


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


class Timestamped:
    """
    Creation / modification / access tracking.

    Expects: created_at, updated_at, last_accessed_at (Optional).
    """

    created_at: datetime
    updated_at: datetime
    last_accessed_at: Optional[datetime]

    def update_last_accessed(self) -> None:
        self.last_accessed_at = utcnow()

    def has_been_modified_since(self, moment: datetime) -> bool:
        return self.updated_at > moment

    def has_been_accessed_since(self, moment: datetime) -> bool:
        if self.last_accessed_at is None:
            return False
        return self.last_accessed_at > moment

    @property
    def age_in_days(self) -> int:
        return (utcnow() - self.created_at).days

    @property
    def hours_since_last_modification(self) -> float:
        return (utcnow() - self.updated_at).total_seconds() / 3600.0


class SoftDeletable(Timestamped):
    """
    Deletion by timestamp instead of record removal.

    Expects: deleted_at (Optional) in addition to the Timestamped fields.
    Not used by Facility or Building.
    """

    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        self.deleted_at = utcnow()
        self.update_last_accessed()

    def restore(self) -> None:
        self.deleted_at = None
        self.update_last_accessed()

    @property
    def days_since_deletion(self) -> Optional[int]:
        if self.deleted_at is None:
            return None
        return (utcnow() - self.deleted_at).days


class FacilityScoped:
    """Expects: facility_id."""

    facility_id: str

    def belongs_to(self, facility_id: str) -> bool:
        return self.facility_id == facility_id

    def belongs_to_any(self, facility_ids: Iterable[str]) -> bool:
        return self.facility_id in set(facility_ids)


class Hierarchical(FacilityScoped):
    """
    Position in the facility -> building -> location -> room tree.

    Expects: parent_id, hierarchy_level, hierarchy_path (root-to-self ids).
    """

    parent_id: Optional[str]
    hierarchy_level: int

    @property
    def hierarchy_path(self) -> List[str]:
        raise NotImplementedError

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def depth(self) -> int:
        return len(self.hierarchy_path) - 1

    def is_descendant_of(self, entity_id: str) -> bool:
        """True when entity_id is on this entity's path, the entity itself included."""
        return entity_id in self.hierarchy_path


class Configurable:
    """
    Validate-then-apply configuration updates.

    Expects: configuration, updated_at, and a class attribute
    ``configuration_class`` exposing ``preset(name)``.
    """

    configuration_class: type

    def update_configuration(self, new_configuration) -> None:
        """
        Replace the configuration if it validates.

        Raises:
            ConfigurationError: If the candidate has the wrong type or any
                validation errors. The current configuration is left untouched.
        """
        if not isinstance(new_configuration, self.configuration_class):
            raise ConfigurationError(
                f"Expected {self.configuration_class.__name__}, "
                f"got {type(new_configuration).__name__}"
            )
        errors = new_configuration.validate()
        if errors:
            raise ConfigurationError.validation_failed(errors)
        self.configuration = new_configuration
        self.updated_at = utcnow()

    def reset_configuration(self) -> None:
        """Restore the default preset for this entity's configuration type."""
        self.configuration = self.configuration_class.preset("default")
        self.updated_at = utcnow()
