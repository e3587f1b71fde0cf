"""
FacilityManager - the single coordination point for facility records.

Every mutation is validated first and then committed under one writer
lock. The committed state is an immutable tuple that is swapped in whole,
so readers always see the state after some complete operation and never
a half-applied one, without taking the lock themselves.
"""

import logging
import threading
import time as clock
from collections import Counter
from dataclasses import dataclass
from datetime import time
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import CoreError, EntityAlreadyExists, EntityNotFound, ValidationFailed
from .facility import Facility, FacilityStatus, FacilityType
from .identity import EntityType, generate_id
from .models import Address, ContactInfo, OperatingHours
from .observer import ChangeType, EntityObserver

logger = logging.getLogger(__name__)

ENTITY_TYPE = "facility"


@dataclass(frozen=True)
class FacilityStatistics:
    """Aggregate counts over the facilities in a manager."""
    total: int
    operational: int
    by_type: Dict[FacilityType, int]
    by_status: Dict[FacilityStatus, int]

    @property
    def operational_percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return self.operational / self.total * 100

    @property
    def most_common_type(self) -> Optional[FacilityType]:
        """Type with the highest count; ties go to the type counted first."""
        return _most_common(self.by_type)

    @property
    def most_common_status(self) -> Optional[FacilityStatus]:
        return _most_common(self.by_status)

    def to_dict(self) -> dict:
        most_type = self.most_common_type
        most_status = self.most_common_status
        return {
            "total": self.total,
            "operational": self.operational,
            "operational_percentage": self.operational_percentage,
            "by_type": {k.value: v for k, v in self.by_type.items()},
            "by_status": {k.value: v for k, v in self.by_status.items()},
            "most_common_type": most_type.value if most_type else None,
            "most_common_status": most_status.value if most_status else None,
        }


def _most_common(counts: Dict) -> Optional[object]:
    if not counts:
        return None
    return max(counts, key=counts.get)


class FacilityManager:
    """
    In-memory facility store with validated CRUD.

    Usage:
        manager = FacilityManager(observer=EntityObserver())
        manager.create_facility(facility)
        manager.search_facilities("breeding")
    """

    def __init__(self, observer: Optional[EntityObserver] = None):
        """
        Initialize an empty manager.

        Args:
            observer: Receives an event after each committed mutation
                (a private observer is created if None)
        """
        self.observer = observer or EntityObserver()
        self._facilities: Tuple[Facility, ...] = ()
        self._write_lock = threading.Lock()
        self.is_loading = False
        self.current_error: Optional[CoreError] = None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_facility(self, facility: Facility) -> Facility:
        """
        Add a facility.

        Raises:
            ValidationFailed: If the facility has validation errors
            EntityAlreadyExists: If a facility with the same id is stored
        """
        with self._write_lock:
            try:
                self._check_valid(facility)
                if self._index_of(facility.id) is not None:
                    raise EntityAlreadyExists(ENTITY_TYPE, facility.id)
            except CoreError as e:
                self._fail("create", facility.id, e)
            self._facilities = self._facilities + (facility,)
            self.current_error = None

        logger.info("Created facility %s", facility.id, extra={"facility_id": facility.id})
        self.observer.emit(ChangeType.CREATED, facility)
        return facility

    def update_facility(self, facility: Facility) -> Facility:
        """
        Replace the stored facility that has the same id, keeping its position.

        Raises:
            ValidationFailed: If the facility has validation errors
            EntityNotFound: If no facility with that id is stored
        """
        with self._write_lock:
            try:
                self._check_valid(facility)
                index = self._index_of(facility.id)
                if index is None:
                    raise EntityNotFound(ENTITY_TYPE, facility.id)
            except CoreError as e:
                self._fail("update", facility.id, e)
            old_status = self._facilities[index].status.value
            items = list(self._facilities)
            items[index] = facility
            self._facilities = tuple(items)
            self.current_error = None

        logger.info("Updated facility %s", facility.id, extra={"facility_id": facility.id})
        self.observer.emit(ChangeType.UPDATED, facility, old_status=old_status)
        return facility

    def delete_facility(self, facility_id: str) -> None:
        """
        Remove a facility.

        Raises:
            EntityNotFound: If no facility with that id is stored
        """
        with self._write_lock:
            index = self._index_of(facility_id)
            if index is None:
                self._fail("delete", facility_id, EntityNotFound(ENTITY_TYPE, facility_id))
            removed = self._facilities[index]
            self._facilities = self._facilities[:index] + self._facilities[index + 1:]
            self.current_error = None

        logger.info("Deleted facility %s", facility_id, extra={"facility_id": facility_id})
        self.observer.emit(ChangeType.DELETED, removed)

    def load(self, facilities: Iterable[Facility]) -> None:
        """
        Replace the whole store with the given facilities.

        Every facility is validated and ids must be unique; on failure the
        store is left unchanged and the error is recorded and re-raised.
        """
        with self._write_lock:
            self.is_loading = True
            try:
                loaded: List[Facility] = []
                seen = set()
                for facility in facilities:
                    self._check_valid(facility)
                    if facility.id in seen:
                        raise EntityAlreadyExists(ENTITY_TYPE, facility.id)
                    seen.add(facility.id)
                    loaded.append(facility)
            except CoreError as e:
                self.current_error = e
                logger.warning("Facility load failed: %s", e)
                raise
            finally:
                self.is_loading = False
            self._facilities = tuple(loaded)
            self.current_error = None
        logger.info("Loaded %d facilities", len(loaded))

    def reset(self) -> None:
        """Drop every facility and clear the loading flag and last error."""
        with self._write_lock:
            self._facilities = ()
            self.is_loading = False
            self.current_error = None

    # ------------------------------------------------------------------
    # Queries (lock-free over the committed snapshot)
    # ------------------------------------------------------------------

    @property
    def facilities(self) -> List[Facility]:
        return list(self._facilities)

    def get_facility(self, facility_id: str) -> Optional[Facility]:
        for facility in self._facilities:
            if facility.id == facility_id:
                return facility
        return None

    def get_all_facilities(self) -> List[Facility]:
        return list(self._facilities)

    def get_facilities_of_type(self, facility_type: FacilityType) -> List[Facility]:
        return [f for f in self._facilities if f.facility_type == facility_type]

    def get_operational_facilities(self) -> List[Facility]:
        return [f for f in self._facilities if f.status.is_operational]

    def search_facilities(self, query: str) -> List[Facility]:
        """Case-insensitive substring match on name or description."""
        needle = query.lower()
        return [
            f for f in self._facilities
            if needle in f.name.lower()
            or (f.description is not None and needle in f.description.lower())
        ]

    def facility_exists(self, facility_id: str) -> bool:
        return self.get_facility(facility_id) is not None

    def get_facility_statistics(self) -> FacilityStatistics:
        snapshot = self._facilities
        return FacilityStatistics(
            total=len(snapshot),
            operational=sum(1 for f in snapshot if f.status.is_operational),
            by_type=dict(Counter(f.facility_type for f in snapshot)),
            by_status=dict(Counter(f.status for f in snapshot)),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_valid(self, facility: Facility) -> None:
        errors = facility.validate()
        if errors:
            raise ValidationFailed(errors, entity_type=ENTITY_TYPE)

    def _index_of(self, facility_id: str) -> Optional[int]:
        for index, facility in enumerate(self._facilities):
            if facility.id == facility_id:
                return index
        return None

    def _fail(self, operation: str, facility_id: str, error: CoreError) -> None:
        self.current_error = error
        logger.warning(
            "Rejected %s of facility %s: %s",
            operation,
            facility_id,
            error,
            extra={"facility_id": facility_id},
        )
        raise error


def sample_facilities() -> List[Facility]:
    """Two example facilities (research and breeding) at the same site."""
    # Consecutive timestamps keep the two ids distinct.
    stamp = int(clock.time() * 1000)

    def facility(offset: int, name: str, description: str, facility_type: FacilityType) -> Facility:
        return Facility(
            id=generate_id(EntityType.FACILITY, stamp + offset),
            name=name,
            description=description,
            facility_type=facility_type,
            contact_info=ContactInfo(
                email="admin@researchfacility.com",
                phone="+1-555-0123",
                website="https://researchfacility.com",
            ),
            address=Address(
                street="123 Research Drive",
                city="Science City",
                state="CA",
                zip_code="90210",
                country="USA",
            ),
            operating_hours=OperatingHours.weekdays(time(8, 0), time(18, 0)),
        )

    return [
        facility(0, "Main Research Facility",
                 "Primary research facility for animal studies", FacilityType.RESEARCH),
        facility(1, "Breeding Center",
                 "Specialized facility for animal breeding programs", FacilityType.BREEDING),
    ]
