"""
Entity identity - kinds, scoping flags and identifier format.

Identifiers have the shape ``<type>_<epoch millis>_<4 digits>``, e.g.
``facility_1718000000000_4821``. They are readable and sortable by creation
time, but NOT collision-resistant: two processes creating the same kind of
entity in the same millisecond have a 1 in 9000 chance of clashing.
Stores detect collisions against their own contents.
"""

import random
import re
import time
from enum import Enum
from typing import Optional

from .errors import InvalidEntityType


class EntityType(Enum):
    """Kinds of entities in a vivarium facility."""
    FACILITY = "facility"
    BUILDING = "building"
    LOCATION = "location"
    ROOM = "room"
    EQUIPMENT = "equipment"
    ANIMAL = "animal"
    USER = "user"
    ROLE = "role"
    CONFIGURATION = "configuration"
    AUDIT = "audit"

    @property
    def description(self) -> str:
        return self.value.capitalize()

    @property
    def supports_hierarchy(self) -> bool:
        """Facility -> building -> location -> room form the physical tree."""
        return self in _HIERARCHICAL

    @property
    def requires_facility_scope(self) -> bool:
        """Everything except the facility itself belongs to one facility."""
        return self is not EntityType.FACILITY


_HIERARCHICAL = frozenset({
    EntityType.FACILITY,
    EntityType.BUILDING,
    EntityType.LOCATION,
    EntityType.ROOM,
})


def generate_id(entity_type: EntityType, now_ms: Optional[int] = None) -> str:
    """
    Generate a fresh identifier for an entity type.

    Args:
        entity_type: Kind of entity the id is for
        now_ms: Override for the millisecond timestamp (defaults to the clock)

    Returns:
        Identifier string ``"{type}_{millis}_{NNNN}"``
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = random.randint(1000, 9999)
    return f"{entity_type.value}_{now_ms}_{suffix}"


def is_valid_id(entity_id: str, entity_type: EntityType) -> bool:
    """Check that an id has the exact shape expected for the entity type."""
    if not isinstance(entity_id, str):
        return False
    pattern = rf"{re.escape(entity_type.value)}_\d+_\d{{4}}"
    return re.fullmatch(pattern, entity_id, re.ASCII) is not None


def parse_entity_type(value: str) -> EntityType:
    """
    Look up an EntityType by its string value.

    Raises:
        InvalidEntityType: If value names no known type
    """
    try:
        return EntityType(value)
    except ValueError:
        raise InvalidEntityType(value) from None


def entity_type_of(entity_id: str) -> EntityType:
    """
    Recover the entity type encoded in a well-formed identifier.

    Raises:
        InvalidEntityType: If the id does not have the shape of any known type
    """
    prefix = entity_id.rsplit("_", 2)[0] if isinstance(entity_id, str) else ""
    entity_type = parse_entity_type(prefix)
    if not is_valid_id(entity_id, entity_type):
        raise InvalidEntityType(prefix)
    return entity_type
