"""
Composition root: the core service and the foundation object.

CoreService ties the facility manager to the configuration store and
tracks initialization. Foundation adds settings and persistence on top.
Both are constructed explicitly and owned by the embedding application.
"""

import logging
from enum import Enum
from typing import Iterable, List, Optional, Type, TypeVar

from .configuration import BuildingConfiguration, Configuration, FacilityConfiguration
from .config_store import ConfigurationStore
from .errors import CoreError, EntityAlreadyExists, EntityNotFound
from .facility import Facility
from .manager import FacilityManager, sample_facilities
from .observer import EntityObserver
from .repository import FacilityRepository
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=Configuration)

PRESET_KEYS = (
    (FacilityConfiguration, "default", "default_facility_config"),
    (FacilityConfiguration, "minimal", "minimal_facility_config"),
    (FacilityConfiguration, "secure", "secure_facility_config"),
    (BuildingConfiguration, "default", "default_building_config"),
    (BuildingConfiguration, "minimal", "minimal_building_config"),
    (BuildingConfiguration, "secure", "secure_building_config"),
)


class InitializationStatus(Enum):
    NOT_STARTED = "not_started"
    CONFIGURING = "configuring"
    COMPLETED = "completed"
    FAILED = "failed"
    RESETTING = "resetting"

    @property
    def description(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def is_in_progress(self) -> bool:
        return self in (InitializationStatus.CONFIGURING, InitializationStatus.RESETTING)

    @property
    def is_complete(self) -> bool:
        return self == InitializationStatus.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self == InitializationStatus.FAILED


class CoreService:
    """
    Coordinates the facility manager and the configuration store.

    Usage:
        core = CoreService()
        core.configure(facilities)
        core.get_configuration("secure_facility_config", FacilityConfiguration)
    """

    def __init__(
        self,
        store: Optional[ConfigurationStore] = None,
        facility_manager: Optional[FacilityManager] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store or ConfigurationStore()
        self.facility_manager = facility_manager or FacilityManager()
        self.settings = settings or Settings()
        self.status = InitializationStatus.NOT_STARTED
        self.is_initialized = False
        self.current_error: Optional[CoreError] = None

    def configure(self, facilities: Optional[Iterable[Facility]] = None) -> None:
        """
        Load facilities and the canonical configuration presets.

        Args:
            facilities: Initial facility records (the manager starts empty if None)

        Raises:
            CoreError: Whatever the manager or store raised; status becomes FAILED
        """
        self.status = InitializationStatus.CONFIGURING
        try:
            self.facility_manager.load(facilities or [])
            for configuration_class, preset, key in PRESET_KEYS:
                self.store.store(configuration_class.preset(preset), key)
        except CoreError as e:
            self.status = InitializationStatus.FAILED
            self.current_error = e
            logger.error("Core initialization failed: %s", e, extra={"component": "core"})
            raise
        self.status = InitializationStatus.COMPLETED
        self.is_initialized = True
        self.current_error = None
        logger.info(
            "Core initialized with %d facilities",
            len(self.facility_manager.facilities),
            extra={"component": "core"},
        )

    def reset(self) -> None:
        """Return to the freshly constructed state."""
        self.status = InitializationStatus.RESETTING
        self.facility_manager.reset()
        self.store.clear_all()
        self.status = InitializationStatus.NOT_STARTED
        self.is_initialized = False
        self.current_error = None

    @property
    def is_ready(self) -> bool:
        return self.is_initialized and self.status.is_complete

    def new_facility_configuration(self) -> FacilityConfiguration:
        """Fresh configuration from the facility preset named in settings."""
        return FacilityConfiguration.preset(self.settings.default_facility_preset)

    def new_building_configuration(self) -> BuildingConfiguration:
        """Fresh configuration from the building preset named in settings."""
        return BuildingConfiguration.preset(self.settings.default_building_preset)

    def get_configuration(self, key: str, expected_type: Type[C] = Configuration) -> Optional[C]:
        return self.store.retrieve(key, expected_type)

    def store_configuration(self, configuration: Configuration, key: str) -> None:
        self.store.store(configuration, key)

    def remove_configuration(self, key: str) -> None:
        self.store.remove(key)

    @property
    def all_configuration_keys(self) -> List[str]:
        return self.store.all_keys


class Foundation:
    """
    The assembled system: settings, persistence, observer and core.

    Facility mutations made through the foundation are written to the
    repository before the in-memory manager is updated.

    Usage:
        foundation = Foundation(load_settings())
        foundation.configure()
        foundation.create_facility(facility)
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or load_settings()
        self.repository = FacilityRepository(self.settings.db_path)
        self.observer = EntityObserver()
        self.core = CoreService(
            facility_manager=FacilityManager(observer=self.observer),
            settings=self.settings,
        )

    @property
    def facility_manager(self) -> FacilityManager:
        return self.core.facility_manager

    def configure(self) -> None:
        """
        Hydrate the core from the repository.

        An empty repository is seeded with the sample facilities in the
        development environment.
        """
        facilities = self.repository.list_facilities()
        if not facilities and self.settings.is_development:
            facilities = sample_facilities()
            for facility in facilities:
                self.repository.create_facility(facility)
            logger.info("Seeded %d sample facilities", len(facilities), extra={"component": "foundation"})
        self.core.configure(facilities)

    def reset(self) -> None:
        """Reset the core; persisted records are kept."""
        self.core.reset()

    def create_facility(self, facility: Facility) -> Facility:
        facility.validate_or_raise()
        if self.facility_manager.facility_exists(facility.id):
            raise EntityAlreadyExists("facility", facility.id)
        self.repository.create_facility(facility)
        return self.facility_manager.create_facility(facility)

    def update_facility(self, facility: Facility) -> Facility:
        """
        Write the facility through to the repository, then the manager.

        Raises:
            EntityNotFound: If the manager does not hold the facility; the
                repository is left untouched
        """
        facility.validate_or_raise()
        self._require_loaded(facility.id)
        self.repository.update_facility(facility)
        return self.facility_manager.update_facility(facility)

    def delete_facility(self, facility_id: str) -> None:
        self._require_loaded(facility_id)
        self.repository.delete_facility(facility_id)
        self.facility_manager.delete_facility(facility_id)

    def _require_loaded(self, facility_id: str) -> None:
        # Reset or unconfigured cores hold no facilities, even when the
        # repository still does.
        if not self.facility_manager.facility_exists(facility_id):
            raise EntityNotFound("facility", facility_id)

    def close(self) -> None:
        self.repository.close()
