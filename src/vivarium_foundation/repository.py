"""
FacilityRepository - SQLite persistence for facilities and buildings.

Reference implementation of the persistence contract the managers rely on:
records round-trip unchanged, a missing record is EntityNotFound and a
duplicate id is EntityAlreadyExists. Validation is the caller's job (the
managers validate before they persist); the schema only guards shape.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

from .building import Building
from .errors import (
    EntityAlreadyExists,
    EntityNotFound,
    InvalidRelationship,
    SystemUnavailable,
    ValidationFailed,
)
from .facility import Facility
from .schema import get_all_schema_sql
from .validation import ValidationError

logger = logging.getLogger(__name__)


class FacilityRepository:
    """
    SQLite-backed store keyed by entity id.

    Usage:
        repo = FacilityRepository(db_path="~/.vivarium/vivarium.db")
        repo.create_facility(facility)
        repo.list_buildings(facility_id=facility.id)
    """

    def __init__(self, db_path: str = "~/.vivarium/vivarium.db"):
        """
        Initialize repository with database path.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self._memory = db_path == ":memory:"
        self.db_path = Path(db_path).expanduser() if not self._memory else None
        self._shared_conn: Optional[sqlite3.Connection] = None
        if self._memory:
            self._shared_conn = sqlite3.connect(":memory:", check_same_thread=False)
        else:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Initialize database schema."""
        with self._connection() as conn:
            conn.executescript(get_all_schema_sql())

    @contextmanager
    def _connection(self):
        """Context manager for database connections."""
        try:
            conn = self._shared_conn or sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise SystemUnavailable(f"cannot open database {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except sqlite3.OperationalError as e:
            conn.rollback()
            raise SystemUnavailable(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            if conn is not self._shared_conn:
                conn.close()

    def close(self) -> None:
        """Release the in-memory connection, if any."""
        if self._shared_conn is not None:
            self._shared_conn.close()
            self._shared_conn = None

    # ------------------------------------------------------------------
    # Facilities
    # ------------------------------------------------------------------

    def create_facility(self, facility: Facility) -> Facility:
        """
        Insert a new facility.

        Raises:
            EntityAlreadyExists: If a facility with the same id is stored
            ValidationFailed: If the row violates schema constraints
        """
        with self._connection() as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO facilities (id, name, facility_type, status, data, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        facility.id,
                        facility.name,
                        facility.facility_type.value,
                        facility.status.value,
                        json.dumps(facility.to_dict()),
                        facility.created_at.isoformat(),
                        facility.updated_at.isoformat(),
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise self._integrity_error("facility", facility.id, e) from e
        logger.debug("Persisted facility %s", facility.id)
        return facility

    def read_facility(self, facility_id: str) -> Optional[Facility]:
        """Read a facility by id; None if absent."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT data FROM facilities WHERE id = ?",
                (facility_id,),
            ).fetchone()
        if row is None:
            return None
        return Facility.from_dict(json.loads(row["data"]))

    def update_facility(self, facility: Facility) -> Facility:
        """
        Overwrite a stored facility.

        Raises:
            EntityNotFound: If no facility with that id is stored
        """
        with self._connection() as conn:
            try:
                result = conn.execute(
                    """
                    UPDATE facilities
                    SET name = ?, facility_type = ?, status = ?, data = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        facility.name,
                        facility.facility_type.value,
                        facility.status.value,
                        json.dumps(facility.to_dict()),
                        facility.updated_at.isoformat(),
                        facility.id,
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise self._integrity_error("facility", facility.id, e) from e
            if result.rowcount == 0:
                raise EntityNotFound("facility", facility.id)
        return facility

    def delete_facility(self, facility_id: str) -> None:
        """
        Delete a facility.

        Raises:
            EntityNotFound: If no facility with that id is stored
            InvalidRelationship: If buildings still belong to the facility
        """
        with self._connection() as conn:
            try:
                result = conn.execute("DELETE FROM facilities WHERE id = ?", (facility_id,))
            except sqlite3.IntegrityError as e:
                raise InvalidRelationship(
                    "facility", f"{facility_id} still owns buildings"
                ) from e
            if result.rowcount == 0:
                raise EntityNotFound("facility", facility_id)

    def list_facilities(self) -> List[Facility]:
        """All facilities in insertion order."""
        with self._connection() as conn:
            rows = conn.execute("SELECT data FROM facilities ORDER BY rowid").fetchall()
        return [Facility.from_dict(json.loads(row["data"])) for row in rows]

    # ------------------------------------------------------------------
    # Buildings
    # ------------------------------------------------------------------

    def create_building(self, building: Building) -> Building:
        """
        Insert a new building under an existing facility.

        Raises:
            EntityAlreadyExists: If a building with the same id is stored
            InvalidRelationship: If the owning facility does not exist
            ValidationFailed: If the row violates schema constraints
        """
        with self._connection() as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO buildings (id, facility_id, name, building_type, status, data, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        building.id,
                        building.facility_id,
                        building.name,
                        building.building_type.value,
                        building.status.value,
                        json.dumps(building.to_dict()),
                        building.created_at.isoformat(),
                        building.updated_at.isoformat(),
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise self._integrity_error("building", building.id, e) from e
        return building

    def read_building(self, building_id: str) -> Optional[Building]:
        """Read a building by id; None if absent."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT data FROM buildings WHERE id = ?",
                (building_id,),
            ).fetchone()
        if row is None:
            return None
        return Building.from_dict(json.loads(row["data"]))

    def update_building(self, building: Building) -> Building:
        """
        Overwrite a stored building. The owning facility cannot change.

        Raises:
            EntityNotFound: If no building with that id is stored
            InvalidRelationship: If facility_id differs from the stored one
        """
        with self._connection() as conn:
            row = conn.execute(
                "SELECT facility_id FROM buildings WHERE id = ?",
                (building.id,),
            ).fetchone()
            if row is None:
                raise EntityNotFound("building", building.id)
            if row["facility_id"] != building.facility_id:
                raise InvalidRelationship(
                    "building",
                    f"{building.id} belongs to {row['facility_id']}, not {building.facility_id}",
                )
            try:
                conn.execute(
                    """
                    UPDATE buildings
                    SET name = ?, building_type = ?, status = ?, data = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        building.name,
                        building.building_type.value,
                        building.status.value,
                        json.dumps(building.to_dict()),
                        building.updated_at.isoformat(),
                        building.id,
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise self._integrity_error("building", building.id, e) from e
        return building

    def delete_building(self, building_id: str) -> None:
        """
        Delete a building.

        Raises:
            EntityNotFound: If no building with that id is stored
        """
        with self._connection() as conn:
            result = conn.execute("DELETE FROM buildings WHERE id = ?", (building_id,))
            if result.rowcount == 0:
                raise EntityNotFound("building", building_id)

    def list_buildings(self, facility_id: Optional[str] = None) -> List[Building]:
        """
        List buildings, optionally only those owned by one facility.

        Args:
            facility_id: Owning facility filter
        """
        query = "SELECT data FROM buildings"
        params = []
        if facility_id:
            query += " WHERE facility_id = ?"
            params.append(facility_id)
        query += " ORDER BY rowid"
        with self._connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [Building.from_dict(json.loads(row["data"])) for row in rows]

    # ------------------------------------------------------------------

    def _integrity_error(self, entity_type: str, entity_id: str, error: sqlite3.IntegrityError):
        message = str(error)
        if "UNIQUE constraint failed" in message:
            return EntityAlreadyExists(entity_type, entity_id)
        if "FOREIGN KEY constraint failed" in message:
            return InvalidRelationship(entity_type, f"{entity_id} references an unknown facility")
        return ValidationFailed(
            [ValidationError.custom(f"{entity_type} violates schema constraints: {message}")],
            entity_type=entity_type,
        )
