"""
Tests for CoreService and Foundation - composition and initialization.
"""

from datetime import time

import pytest

from vivarium_foundation.config_store import ConfigurationStore
from vivarium_foundation.configuration import BuildingConfiguration, FacilityConfiguration
from vivarium_foundation.core import CoreService, Foundation, InitializationStatus
from vivarium_foundation.errors import EntityAlreadyExists, EntityNotFound, ValidationFailed
from vivarium_foundation.facility import Facility, FacilityType
from vivarium_foundation.models import Address, ContactInfo, OperatingHours
from vivarium_foundation.settings import Settings


def make_facility(id: str = "facility_1_1001", **kwargs) -> Facility:
    """Helper to create test facilities."""
    defaults = {
        "name": "Test Facility",
        "facility_type": FacilityType.RESEARCH,
        "contact_info": ContactInfo(email="test@facility.com"),
        "address": Address(street="1 Lab Way", city="Science City", state="CA",
                           zip_code="90210", country="USA"),
        "operating_hours": OperatingHours.weekdays(time(8), time(18)),
    }
    defaults.update(kwargs)
    return Facility(id=id, **defaults)


@pytest.fixture
def settings(tmp_path):
    return Settings(db_path=str(tmp_path / "vivarium.db"))


class TestInitializationStatus:
    """Test status flags."""

    def test_flags(self):
        """Test in-progress, complete and failed flags."""
        assert InitializationStatus.CONFIGURING.is_in_progress
        assert InitializationStatus.RESETTING.is_in_progress
        assert not InitializationStatus.COMPLETED.is_in_progress
        assert InitializationStatus.COMPLETED.is_complete
        assert InitializationStatus.FAILED.is_failed
        assert InitializationStatus.NOT_STARTED.description == "Not Started"


class TestCoreService:
    """Test core configuration and the configuration facade."""

    def test_configure(self):
        """Test that configure loads facilities and stores the presets."""
        core = CoreService()

        core.configure([make_facility()])

        assert core.is_ready
        assert core.status is InitializationStatus.COMPLETED
        assert len(core.facility_manager.facilities) == 1
        assert set(core.all_configuration_keys) == {
            "default_facility_config",
            "minimal_facility_config",
            "secure_facility_config",
            "default_building_config",
            "minimal_building_config",
            "secure_building_config",
        }
        secure = core.get_configuration("secure_facility_config", FacilityConfiguration)
        assert secure == FacilityConfiguration.preset("secure")

    def test_configure_failure(self):
        """Test that a failed load marks the service failed and re-raises."""
        core = CoreService()

        with pytest.raises(EntityAlreadyExists):
            core.configure([make_facility(), make_facility()])

        assert core.status.is_failed
        assert not core.is_ready
        assert isinstance(core.current_error, EntityAlreadyExists)

    def test_reset(self):
        """Test that reset returns to the initial state."""
        core = CoreService()
        core.configure([make_facility()])

        core.reset()

        assert core.status is InitializationStatus.NOT_STARTED
        assert not core.is_ready
        assert core.all_configuration_keys == []
        assert core.facility_manager.facilities == []

    def test_configuration_facade(self):
        """Test store / get / remove through the service."""
        store = ConfigurationStore()
        core = CoreService(store=store)

        core.store_configuration(BuildingConfiguration.preset("secure"), "lab")
        assert core.get_configuration("lab", BuildingConfiguration).has_restricted_hours
        assert core.get_configuration("lab", FacilityConfiguration) is None

        core.remove_configuration("lab")
        assert "lab" not in store

    def test_new_configuration_from_settings(self):
        """Test that new configurations follow the presets named in settings."""
        core = CoreService(settings=Settings(
            default_facility_preset="secure",
            default_building_preset="minimal",
        ))

        assert core.new_facility_configuration().requires_two_factor_auth
        assert core.new_building_configuration().target_temperature_range is None


class TestFoundation:
    """Test the assembled foundation."""

    def test_seeds_samples_in_development(self, settings):
        """Test that an empty development database is seeded."""
        foundation = Foundation(settings)

        foundation.configure()

        assert foundation.core.is_ready
        assert len(foundation.facility_manager.facilities) == 2
        assert len(foundation.repository.list_facilities()) == 2

    def test_no_samples_in_production(self, tmp_path):
        """Test that production starts empty."""
        foundation = Foundation(Settings(db_path=str(tmp_path / "p.db"), environment="production"))

        foundation.configure()

        assert foundation.facility_manager.facilities == []

    def test_hydrates_from_repository(self, settings):
        """Test that stored facilities are loaded on configure."""
        Foundation(settings).repository.create_facility(make_facility())

        foundation = Foundation(settings)
        foundation.configure()

        assert [f.id for f in foundation.facility_manager.facilities] == ["facility_1_1001"]

    def test_write_through(self, settings):
        """Test that mutations reach both the repository and the manager."""
        foundation = Foundation(Settings(db_path=settings.db_path, environment="production"))
        foundation.configure()

        foundation.create_facility(make_facility())
        foundation.update_facility(make_facility(name="Renamed"))

        assert foundation.repository.read_facility("facility_1_1001").name == "Renamed"
        assert foundation.facility_manager.get_facility("facility_1_1001").name == "Renamed"

        foundation.delete_facility("facility_1_1001")

        assert foundation.repository.list_facilities() == []
        assert foundation.facility_manager.facilities == []

    def test_invalid_facility_not_persisted(self, settings):
        """Test that validation runs before the repository is touched."""
        foundation = Foundation(settings)

        with pytest.raises(ValidationFailed):
            foundation.create_facility(make_facility(name=""))

        assert foundation.repository.list_facilities() == []

    def test_delete_missing(self, settings):
        """Test that deleting an unknown facility raises EntityNotFound."""
        foundation = Foundation(settings)

        with pytest.raises(EntityNotFound):
            foundation.delete_facility("facility_1_1001")

    def test_events_observed(self, settings):
        """Test that the foundation's observer sees manager events."""
        foundation = Foundation(Settings(db_path=settings.db_path, environment="production"))
        foundation.configure()

        foundation.create_facility(make_facility())

        assert foundation.observer.get_recent_events()[0].entity_id == "facility_1_1001"

    def test_reset_keeps_persisted_records(self, settings):
        """Test that reset clears the core but not the repository."""
        foundation = Foundation(settings)
        foundation.configure()

        foundation.reset()

        assert foundation.facility_manager.facilities == []
        assert len(foundation.repository.list_facilities()) == 2

    def test_update_after_reset_leaves_repository_untouched(self, settings):
        """Test that an update the manager cannot apply is not persisted."""
        foundation = Foundation(Settings(db_path=settings.db_path, environment="production"))
        foundation.configure()
        foundation.create_facility(make_facility())
        foundation.reset()

        with pytest.raises(EntityNotFound):
            foundation.update_facility(make_facility(name="Renamed"))

        assert foundation.repository.read_facility("facility_1_1001").name == "Test Facility"

    def test_delete_after_reset_leaves_repository_untouched(self, settings):
        """Test that a delete the manager cannot apply keeps the stored record."""
        foundation = Foundation(Settings(db_path=settings.db_path, environment="production"))
        foundation.configure()
        foundation.create_facility(make_facility())
        foundation.reset()

        with pytest.raises(EntityNotFound):
            foundation.delete_facility("facility_1_1001")

        assert [f.id for f in foundation.repository.list_facilities()] == ["facility_1_1001"]

    def test_update_before_configure_is_refused(self, settings):
        """Test that an unconfigured foundation does not write stored records."""
        Foundation(settings).repository.create_facility(make_facility())
        foundation = Foundation(settings)

        with pytest.raises(EntityNotFound):
            foundation.update_facility(make_facility(name="Renamed"))

        assert foundation.repository.read_facility("facility_1_1001").name == "Test Facility"
