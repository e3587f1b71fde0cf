"""
vivarium-foundation: facility and building records for vivarium digitization.

Entities validate themselves against declarative rules; configurations are
versioned and built from a packaged option table with named presets.
"""

from .identity import (
    EntityType,
    entity_type_of,
    generate_id,
    is_valid_id,
    parse_entity_type,
)
from .validation import Rule, Validatable, ValidationError, ValidationErrorKind
from .errors import (
    AccessDenied,
    ConfigurationError,
    CoreError,
    EntityAlreadyExists,
    EntityNotFound,
    ErrorKind,
    InvalidEntityType,
    InvalidRelationship,
    SystemUnavailable,
    ValidationFailed,
)
from .models import Address, ContactInfo, DayHours, OperatingHours
from .configuration import (
    BuildingConfiguration,
    Configuration,
    ConfigurationType,
    FacilityConfiguration,
    Language,
    ThemeType,
    ValueRange,
    describe_options,
)
from .facility import Facility, FacilityStatus, FacilityType
from .building import (
    Building,
    BuildingSpecifications,
    BuildingStatus,
    BuildingType,
    ConstructionType,
)
from .observer import ChangeType, EntityEvent, EntityObserver
from .manager import FacilityManager, FacilityStatistics, sample_facilities
from .config_store import ConfigurationStore
from .repository import FacilityRepository
from .settings import Settings, load_settings
from .log import configure_logging
from .core import CoreService, Foundation, InitializationStatus

__version__ = "0.1.0"
__all__ = [
    # Identity
    "EntityType",
    "generate_id",
    "is_valid_id",
    "entity_type_of",
    "parse_entity_type",
    # Validation and errors
    "Rule",
    "Validatable",
    "ValidationError",
    "ValidationErrorKind",
    "AccessDenied",
    "ConfigurationError",
    "CoreError",
    "EntityAlreadyExists",
    "EntityNotFound",
    "ErrorKind",
    "InvalidEntityType",
    "InvalidRelationship",
    "SystemUnavailable",
    "ValidationFailed",
    # Models
    "Address",
    "ContactInfo",
    "DayHours",
    "OperatingHours",
    "Facility",
    "FacilityStatus",
    "FacilityType",
    "Building",
    "BuildingSpecifications",
    "BuildingStatus",
    "BuildingType",
    "ConstructionType",
    # Configuration
    "BuildingConfiguration",
    "Configuration",
    "ConfigurationType",
    "FacilityConfiguration",
    "Language",
    "ThemeType",
    "ValueRange",
    "describe_options",
    "ConfigurationStore",
    # Coordination
    "ChangeType",
    "EntityEvent",
    "EntityObserver",
    "FacilityManager",
    "FacilityStatistics",
    "sample_facilities",
    "FacilityRepository",
    "CoreService",
    "Foundation",
    "InitializationStatus",
    # Runtime
    "Settings",
    "load_settings",
    "configure_logging",
]
