"""
SQLite schema with CHECK constraints.

The database is a second line of defence behind validate(): even rows
written around the managers must have well-formed ids and known enum values.
Full records are kept as JSON in ``data``; the other columns exist for
constraints and filtering.
"""

from .building import BuildingStatus, BuildingType
from .facility import FacilityStatus, FacilityType


def _in_list(values) -> str:
    return ", ".join(f"'{v.value}'" for v in values)


CREATE_FACILITIES_TABLE = f"""
CREATE TABLE IF NOT EXISTS facilities (
    id TEXT PRIMARY KEY CHECK (id GLOB 'facility_[0-9]*_[0-9][0-9][0-9][0-9]'),
    name TEXT NOT NULL,
    facility_type TEXT NOT NULL CHECK (facility_type IN ({_in_list(FacilityType)})),
    status TEXT NOT NULL CHECK (status IN ({_in_list(FacilityStatus)})),
    data TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

CREATE_BUILDINGS_TABLE = f"""
CREATE TABLE IF NOT EXISTS buildings (
    id TEXT PRIMARY KEY CHECK (id GLOB 'building_[0-9]*_[0-9][0-9][0-9][0-9]'),
    facility_id TEXT NOT NULL REFERENCES facilities(id) ON DELETE RESTRICT,
    name TEXT NOT NULL,
    building_type TEXT NOT NULL CHECK (building_type IN ({_in_list(BuildingType)})),
    status TEXT NOT NULL CHECK (status IN ({_in_list(BuildingStatus)})),
    data TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

CREATE_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_facilities_type ON facilities(facility_type);
CREATE INDEX IF NOT EXISTS idx_facilities_status ON facilities(status);
CREATE INDEX IF NOT EXISTS idx_buildings_facility ON buildings(facility_id);
"""


def get_all_schema_sql() -> str:
    """Get all SQL statements to create the schema."""
    return "\n".join([
        CREATE_FACILITIES_TABLE,
        CREATE_BUILDINGS_TABLE,
        CREATE_INDEXES,
    ])
