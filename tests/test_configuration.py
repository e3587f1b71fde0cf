"""
Tests for configurations - option table, presets, validation and versioning.
"""

from datetime import time

import pytest

from vivarium_foundation.configuration import (
    BuildingConfiguration,
    ConfigurationType,
    FacilityConfiguration,
    Language,
    ThemeType,
    ValueRange,
    describe_options,
)
from vivarium_foundation.errors import ConfigurationError
from vivarium_foundation.models import DayHours, OperatingHours
from vivarium_foundation.validation import ValidationError, ValidationErrorKind


class TestFacilityPresets:
    """Test the canonical facility presets."""

    def test_default(self):
        """Test the default preset values."""
        config = FacilityConfiguration.preset("default")

        assert config.is_default
        assert config.min_password_length == 8
        assert config.session_timeout_minutes == 480
        assert config.audit_log_retention_days == 2555
        assert config.equipment_record_retention_days == 1825
        assert config.default_theme is ThemeType.STANDARD
        assert config.default_language is Language.ENGLISH
        assert config.max_animals is None

    def test_minimal_relaxes(self):
        """Test that minimal applies its overrides on top of the default."""
        config = FacilityConfiguration.preset("minimal")

        assert not config.is_default
        assert config.min_password_length == 6
        assert config.session_timeout_minutes == 60
        assert config.audit_log_retention_days == 30
        assert config.show_debug_info
        # Untouched by the override
        assert config.sends_sms_notifications is False

    def test_secure_hardens(self):
        """Test the secure preset."""
        config = FacilityConfiguration.preset("secure")

        assert config.requires_two_factor_auth
        assert config.min_password_length == 12
        assert config.session_timeout_minutes == 240
        assert config.audit_log_retention_days == 3650

    @pytest.mark.parametrize("name", ["default", "minimal", "secure"])
    def test_presets_validate(self, name):
        """Test that every preset is itself valid."""
        assert FacilityConfiguration.preset(name).validate() == []
        assert BuildingConfiguration.preset(name).validate() == []

    def test_unknown_preset(self):
        """Test that an unknown preset name raises."""
        with pytest.raises(ConfigurationError) as exc_info:
            FacilityConfiguration.preset("paranoid")

        assert "paranoid" in str(exc_info.value)

    def test_preset_names(self):
        """Test listing preset names."""
        assert FacilityConfiguration.preset_names() == ["default", "minimal", "secure"]


class TestFacilityValidation:
    """Test facility configuration ranges."""

    def test_password_length_out_of_range(self):
        """Test that a password length of 150 cites the 6 to 32 range."""
        config = FacilityConfiguration(min_password_length=150)

        errors = config.validate()

        assert errors == [ValidationError.value_out_of_range("min_password_length", "150", "6 to 32")]

    def test_every_range_checked(self):
        """Test that all out-of-range values are reported together."""
        config = FacilityConfiguration(
            session_timeout_minutes=5,
            audit_log_retention_days=10,
            animal_record_retention_days=100,
            equipment_record_retention_days=4000,
            max_animals=0,
            max_users=1001,
        )

        fields = {e.field for e in config.validate()}

        assert fields == {
            "session_timeout_minutes",
            "audit_log_retention_days",
            "animal_record_retention_days",
            "equipment_record_retention_days",
            "max_animals",
            "max_users",
        }

    def test_recipients_checked_per_index(self):
        """Test that each notification recipient is pattern-checked."""
        config = FacilityConfiguration(
            default_notification_recipients=["ops@lab.org", "nope", "vet@lab.org", "also nope"]
        )

        errors = config.validate()

        assert [e.field for e in errors] == [
            "default_notification_recipients[1]",
            "default_notification_recipients[3]",
        ]
        assert all(e.kind is ValidationErrorKind.INVALID_FORMAT for e in errors)


class TestBuildingConfiguration:
    """Test building configuration defaults and rules."""

    def test_defaults(self):
        """Test the default environment and safety values."""
        config = BuildingConfiguration.preset("default")

        assert config.target_temperature_range == ValueRange(18.0, 24.0)
        assert config.target_humidity_range == ValueRange(30.0, 70.0)
        assert config.air_exchange_rate == 10.0
        assert config.number_of_emergency_exits == 2
        assert config.maintenance_schedule_days == 90

    def test_reports_facility_type(self):
        """Test that building configurations share the facility type tag."""
        assert BuildingConfiguration.configuration_type is ConfigurationType.FACILITY

    def test_minimal_switches_off(self):
        """Test that minimal clears optional environment targets."""
        config = BuildingConfiguration.preset("minimal")

        assert config.target_temperature_range is None
        assert config.air_exchange_rate is None
        assert config.number_of_emergency_exits is None

    def test_secure_restricts_hours(self):
        """Test that secure restricts access to weekday hours."""
        config = BuildingConfiguration.preset("secure")

        assert config.has_restricted_hours
        assert config.access_hours.monday == DayHours(is_open=True, open_time=time(7), close_time=time(19))
        assert not config.access_hours.saturday.is_open
        assert config.target_temperature_range == ValueRange(20.0, 22.0)

    def test_restricted_hours_require_access_hours(self):
        """Test that restricted hours without access hours is an error."""
        config = BuildingConfiguration(has_restricted_hours=True)

        assert config.validate() == [ValidationError.required_field_missing("access_hours")]

    def test_access_hours_errors_prefixed(self):
        """Test that access hour errors are qualified with access_hours."""
        config = BuildingConfiguration(
            has_restricted_hours=True,
            access_hours=OperatingHours(monday=DayHours(is_open=True, open_time=time(9))),
        )

        errors = config.validate()

        assert errors == [ValidationError.required_field_missing("access_hours.close_time")]

    def test_range_bounds(self):
        """Test temperature and rate limits."""
        config = BuildingConfiguration(
            target_temperature_range=ValueRange(-60.0, 24.0),
            air_exchange_rate=0.05,
            number_of_emergency_exits=21,
            maintenance_schedule_days=3,
        )

        fields = [e.field for e in config.validate()]

        assert fields == [
            "target_temperature_range",
            "air_exchange_rate",
            "number_of_emergency_exits",
            "maintenance_schedule_days",
        ]


class TestValueRange:
    """Test ValueRange."""

    def test_inverted_bounds_rejected(self):
        """Test that lower > upper is refused."""
        with pytest.raises(ValueError):
            ValueRange(24.0, 18.0)

    def test_contains_and_str(self):
        """Test membership and formatting."""
        r = ValueRange(18.0, 24.0)

        assert 18.0 in r and 24.0 in r and 24.5 not in r
        assert str(r) == "18.0...24.0"


class TestSerialization:
    """Test dict serialization and versioning."""

    def test_round_trip_building(self):
        """Test that the secure building preset survives a round trip."""
        config = BuildingConfiguration.preset("secure")

        assert BuildingConfiguration.from_dict(config.to_dict()) == config

    def test_round_trip_facility(self):
        """Test that enums and lists survive a round trip."""
        config = FacilityConfiguration(
            default_theme=ThemeType.HIGH_CONTRAST,
            default_language=Language.JAPANESE,
            default_notification_recipients=["ops@lab.org"],
        )
        d = config.to_dict()

        assert d["default_theme"] == "highContrast"
        assert d["default_language"] == "ja"
        assert d["configuration_type"] == "facility"
        assert d["version"] == "1.0.0"
        assert FacilityConfiguration.from_dict(d) == config

    def test_missing_options_default(self):
        """Test that absent options take their defaults."""
        config = FacilityConfiguration.from_dict({"version": "1.0.0", "min_password_length": 10})

        assert config.min_password_length == 10
        assert config.session_timeout_minutes == 480

    def test_major_version_mismatch(self):
        """Test that another major version is refused."""
        with pytest.raises(ConfigurationError):
            FacilityConfiguration.from_dict({"version": "2.0.0"})

    def test_replace_is_not_default(self):
        """Test that a modified configuration is no longer the default."""
        config = FacilityConfiguration.preset("default").replace(min_password_length=10)

        assert not config.is_default
        assert config.min_password_length == 10


class TestDescribeOptions:
    """Test the option table surface."""

    def test_facility_options(self):
        """Test one facility option entry."""
        options = {o["name"]: o for o in describe_options("facility")}

        assert options["min_password_length"] == {
            "name": "min_password_length",
            "type": "int",
            "default": 8,
            "min": 6,
            "max": 32,
            "pattern": None,
            "optional": False,
            "description": "Minimum password length",
        }
        assert options["max_animals"]["optional"] is True
        assert options["default_notification_recipients"]["pattern"] is not None

    def test_building_options(self):
        """Test that range defaults are encoded as lists."""
        options = {o["name"]: o for o in describe_options("building")}

        assert options["target_temperature_range"]["default"] == [18.0, 24.0]
        assert options["access_hours"]["optional"] is True

    def test_every_field_described(self):
        """Test that the option table covers every dataclass field."""
        from dataclasses import fields

        for kind, cls in (("facility", FacilityConfiguration), ("building", BuildingConfiguration)):
            described = {o["name"] for o in describe_options(kind)}
            declared = {f.name for f in fields(cls)} - {"is_default"}
            assert described == declared

    def test_unknown_kind(self):
        """Test that an unknown kind raises."""
        with pytest.raises(ConfigurationError):
            describe_options("animal")
