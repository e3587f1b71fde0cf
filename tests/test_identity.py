"""
Tests for entity identity - kinds, scoping flags and id format.
"""

import pytest

from vivarium_foundation.errors import InvalidEntityType
from vivarium_foundation.identity import (
    EntityType,
    entity_type_of,
    generate_id,
    is_valid_id,
    parse_entity_type,
)


class TestEntityType:
    """Test static facts carried by entity types."""

    def test_physical_tree_supports_hierarchy(self):
        """Test that facility, building, location and room are hierarchical."""
        hierarchical = {t for t in EntityType if t.supports_hierarchy}
        assert hierarchical == {
            EntityType.FACILITY,
            EntityType.BUILDING,
            EntityType.LOCATION,
            EntityType.ROOM,
        }

    def test_everything_but_facility_is_scoped(self):
        """Test that only the facility is its own scope."""
        for entity_type in EntityType:
            assert entity_type.requires_facility_scope == (entity_type is not EntityType.FACILITY)

    def test_description(self):
        """Test human-readable descriptions."""
        assert EntityType.EQUIPMENT.description == "Equipment"


class TestIdentifiers:
    """Test id generation and validation."""

    def test_generated_ids_validate_for_their_type(self):
        """Test that every generated id is valid for its own type only."""
        for entity_type in EntityType:
            entity_id = generate_id(entity_type)
            assert is_valid_id(entity_id, entity_type)
            for other in EntityType:
                if other is not entity_type:
                    assert not is_valid_id(entity_id, other)

    def test_generate_with_fixed_clock(self):
        """Test the id shape with an explicit timestamp."""
        entity_id = generate_id(EntityType.ROOM, now_ms=1718000000000)

        prefix, millis, suffix = entity_id.rsplit("_", 2)
        assert prefix == "room"
        assert millis == "1718000000000"
        assert 1000 <= int(suffix) <= 9999

    @pytest.mark.parametrize("entity_id", [
        "facility_123",
        "facility_abc_1234",
        "facility_123_12345",
        "facility_123_123",
        "xfacility_123_1234",
        "facility_123_1234 ",
        "",
    ])
    def test_malformed_ids_rejected(self, entity_id):
        """Test that ids not matching the exact shape are rejected."""
        assert not is_valid_id(entity_id, EntityType.FACILITY)

    def test_non_string_rejected(self):
        """Test that non-string ids are rejected rather than raising."""
        assert not is_valid_id(None, EntityType.FACILITY)
        assert not is_valid_id(12345, EntityType.FACILITY)

    def test_prefix_mismatch(self):
        """Test that a building id is not a facility id."""
        assert not is_valid_id("building_1718000000000_1234", EntityType.FACILITY)


class TestParsing:
    """Test recovering entity types from strings and ids."""

    def test_parse_known_type(self):
        """Test parsing a known type value."""
        assert parse_entity_type("animal") is EntityType.ANIMAL

    def test_parse_unknown_type(self):
        """Test that unknown values raise InvalidEntityType."""
        with pytest.raises(InvalidEntityType) as exc_info:
            parse_entity_type("spaceship")

        assert exc_info.value.value == "spaceship"

    def test_entity_type_of_id(self):
        """Test recovering the type from a generated id."""
        assert entity_type_of(generate_id(EntityType.BUILDING)) is EntityType.BUILDING

    def test_entity_type_of_malformed_id(self):
        """Test that a malformed id raises InvalidEntityType."""
        with pytest.raises(InvalidEntityType):
            entity_type_of("building_12_34")
