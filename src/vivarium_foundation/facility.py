"""
Facility - the root tenant of the vivarium system.

A facility owns every building, location, room and other scoped entity
beneath it. It is not scoped itself; its id is the scope.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .configuration import FacilityConfiguration
from .identity import EntityType, generate_id
from .mixins import Configurable, Timestamped, utcnow
from .models import Address, ContactInfo, OperatingHours
from .validation import (
    EMAIL_PATTERN,
    PHONE_PATTERN,
    Rule,
    Validatable,
    nested,
    pattern,
    required,
)


class FacilityType(Enum):
    RESEARCH = "research"
    BREEDING = "breeding"
    QUARANTINE = "quarantine"
    STORAGE = "storage"
    MIXED = "mixed"
    OTHER = "other"

    @property
    def description(self) -> str:
        if self is FacilityType.MIXED:
            return "Mixed Purpose Facility"
        if self is FacilityType.OTHER:
            return "Other"
        return f"{self.value.capitalize()} Facility"


class FacilityStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    EMERGENCY = "emergency"
    DECOMMISSIONED = "decommissioned"

    @property
    def description(self) -> str:
        return {
            FacilityStatus.MAINTENANCE: "Under Maintenance",
            FacilityStatus.EMERGENCY: "Emergency Mode",
        }.get(self, self.value.capitalize())

    @property
    def is_operational(self) -> bool:
        return self in (FacilityStatus.ACTIVE, FacilityStatus.MAINTENANCE)


def _phone_if_present(facility: "Facility"):
    phone = facility.contact_info.phone
    return phone if phone else None


@dataclass
class Facility(Validatable, Timestamped, Configurable):
    """
    A vivarium facility.

    The id is generated when omitted. created_at and updated_at are stamped
    with the construction instant; last_accessed_at stays unset until the
    facility is read through update_last_accessed().
    """

    configuration_class = FacilityConfiguration

    name: str
    facility_type: FacilityType
    contact_info: ContactInfo
    address: Address
    operating_hours: OperatingHours
    description: Optional[str] = None
    status: FacilityStatus = FacilityStatus.ACTIVE
    configuration: FacilityConfiguration = field(
        default_factory=lambda: FacilityConfiguration.preset("default")
    )
    id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None

    def __post_init__(self):
        if self.id is None:
            self.id = generate_id(EntityType.FACILITY)
        if self.updated_at is None:
            self.updated_at = self.created_at

    @property
    def entity_type(self) -> EntityType:
        return EntityType.FACILITY

    def rules(self) -> List[Rule]:
        return [
            required("name", lambda f: f.name),
            required("contact_info.email", lambda f: f.contact_info.email),
            pattern("contact_info.email", lambda f: f.contact_info.email, EMAIL_PATTERN),
            pattern("contact_info.phone", _phone_if_present, PHONE_PATTERN),
            nested("configuration", lambda f: f.configuration),
        ]

    @property
    def is_operational(self) -> bool:
        return self.status.is_operational

    @property
    def is_currently_open(self) -> bool:
        return self.operating_hours.is_currently_open

    @property
    def formatted_address(self) -> str:
        return self.address.formatted_address

    @property
    def formatted_contact_info(self) -> str:
        return self.contact_info.formatted_contact_info

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "entity_type": self.entity_type.value,
            "name": self.name,
            "description": self.description,
            "facility_type": self.facility_type.value,
            "status": self.status.value,
            "contact_info": self.contact_info.to_dict(),
            "address": self.address.to_dict(),
            "operating_hours": self.operating_hours.to_dict(),
            "configuration": self.configuration.to_dict(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "last_accessed_at": self.last_accessed_at.isoformat() if self.last_accessed_at else None,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Facility":
        """Create from dictionary."""
        last_accessed = d.get("last_accessed_at")
        return cls(
            id=d["id"],
            name=d["name"],
            description=d.get("description"),
            facility_type=FacilityType(d["facility_type"]),
            status=FacilityStatus(d.get("status", "active")),
            contact_info=ContactInfo.from_dict(d["contact_info"]),
            address=Address.from_dict(d["address"]),
            operating_hours=OperatingHours.from_dict(d.get("operating_hours", {})),
            configuration=(
                FacilityConfiguration.from_dict(d["configuration"])
                if "configuration" in d
                else FacilityConfiguration.preset("default")
            ),
            created_at=datetime.fromisoformat(d["created_at"]) if "created_at" in d else utcnow(),
            updated_at=datetime.fromisoformat(d["updated_at"]) if "updated_at" in d else None,
            last_accessed_at=datetime.fromisoformat(last_accessed) if last_accessed else None,
        )
