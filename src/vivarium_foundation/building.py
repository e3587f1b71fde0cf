"""
Building - a physical structure inside a facility.

Buildings sit at level 1 of the hierarchy. Their parent is the owning
facility, fixed at construction, so the path is always [facility_id, id].
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .configuration import BuildingConfiguration
from .identity import EntityType, generate_id
from .mixins import Configurable, Hierarchical, Timestamped, utcnow
from .models import Address
from .validation import Rule, Validatable, nested, numeric_range, required


class BuildingType(Enum):
    LABORATORY = "laboratory"
    OFFICE = "office"
    STORAGE = "storage"
    ANIMAL_HOUSING = "animal_housing"
    SUPPORT = "support"
    MIXED = "mixed"
    OTHER = "other"

    @property
    def description(self) -> str:
        return {
            BuildingType.ANIMAL_HOUSING: "Animal Housing",
            BuildingType.MIXED: "Mixed Purpose",
        }.get(self, self.value.capitalize())


class BuildingStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    RENOVATION = "renovation"
    EMERGENCY = "emergency"
    DECOMMISSIONED = "decommissioned"

    @property
    def description(self) -> str:
        return {
            BuildingStatus.MAINTENANCE: "Under Maintenance",
            BuildingStatus.RENOVATION: "Under Renovation",
            BuildingStatus.EMERGENCY: "Emergency Mode",
        }.get(self, self.value.capitalize())

    @property
    def is_operational(self) -> bool:
        return self in (BuildingStatus.ACTIVE, BuildingStatus.MAINTENANCE)


class ConstructionType(Enum):
    CONCRETE = "concrete"
    STEEL = "steel"
    WOOD = "wood"
    MASONRY = "masonry"
    MIXED = "mixed"
    OTHER = "other"

    @property
    def description(self) -> str:
        return self.value.capitalize()


def _current_year() -> int:
    return utcnow().year


@dataclass(frozen=True)
class BuildingSpecifications(Validatable):
    """Physical specifications. Area is in square feet."""
    total_area: float
    number_of_floors: int
    construction_type: ConstructionType
    year_built: Optional[int] = None
    last_renovation: Optional[int] = None
    heating_system: Optional[str] = None
    cooling_system: Optional[str] = None
    ventilation_system: Optional[str] = None
    security_system: Optional[str] = None

    def rules(self) -> List[Rule]:
        # The upper bound for years moves with the calendar.
        year = _current_year()
        return [
            numeric_range("total_area", lambda s: s.total_area, 100.0, 1000000.0),
            numeric_range("number_of_floors", lambda s: s.number_of_floors, 1, 100),
            numeric_range("year_built", lambda s: s.year_built, 1800, year),
            numeric_range("last_renovation", lambda s: s.last_renovation, 1800, year),
        ]

    def to_dict(self) -> dict:
        return {
            "total_area": self.total_area,
            "number_of_floors": self.number_of_floors,
            "construction_type": self.construction_type.value,
            "year_built": self.year_built,
            "last_renovation": self.last_renovation,
            "heating_system": self.heating_system,
            "cooling_system": self.cooling_system,
            "ventilation_system": self.ventilation_system,
            "security_system": self.security_system,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "BuildingSpecifications":
        return cls(
            total_area=float(d["total_area"]),
            number_of_floors=int(d["number_of_floors"]),
            construction_type=ConstructionType(d["construction_type"]),
            year_built=d.get("year_built"),
            last_renovation=d.get("last_renovation"),
            heating_system=d.get("heating_system"),
            cooling_system=d.get("cooling_system"),
            ventilation_system=d.get("ventilation_system"),
            security_system=d.get("security_system"),
        )


@dataclass
class Building(Validatable, Timestamped, Hierarchical, Configurable):
    """A building owned by exactly one facility."""

    configuration_class = BuildingConfiguration
    hierarchy_level = 1

    name: str
    building_type: BuildingType
    facility_id: str
    specifications: BuildingSpecifications
    description: Optional[str] = None
    status: BuildingStatus = BuildingStatus.ACTIVE
    address: Optional[Address] = None
    configuration: BuildingConfiguration = field(
        default_factory=lambda: BuildingConfiguration.preset("default")
    )
    id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None

    def __post_init__(self):
        if self.id is None:
            self.id = generate_id(EntityType.BUILDING)
        if self.updated_at is None:
            self.updated_at = self.created_at

    @property
    def entity_type(self) -> EntityType:
        return EntityType.BUILDING

    @property
    def parent_id(self) -> Optional[str]:
        return self.facility_id

    @property
    def hierarchy_path(self) -> List[str]:
        return [self.facility_id, self.id]

    def rules(self) -> List[Rule]:
        return [
            required("name", lambda b: b.name),
            required("facility_id", lambda b: b.facility_id),
            nested("specifications", lambda b: b.specifications),
            nested("configuration", lambda b: b.configuration),
        ]

    @property
    def is_operational(self) -> bool:
        return self.status.is_operational

    @property
    def formatted_address(self) -> str:
        if self.address is None:
            return "No address specified"
        return self.address.formatted_address

    @property
    def capacity_info(self) -> str:
        return f"{self.specifications.total_area} sq ft, {self.specifications.number_of_floors} floors"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "entity_type": self.entity_type.value,
            "name": self.name,
            "description": self.description,
            "building_type": self.building_type.value,
            "status": self.status.value,
            "facility_id": self.facility_id,
            "address": self.address.to_dict() if self.address else None,
            "specifications": self.specifications.to_dict(),
            "configuration": self.configuration.to_dict(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "last_accessed_at": self.last_accessed_at.isoformat() if self.last_accessed_at else None,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Building":
        """Create from dictionary."""
        address = d.get("address")
        last_accessed = d.get("last_accessed_at")
        return cls(
            id=d["id"],
            name=d["name"],
            description=d.get("description"),
            building_type=BuildingType(d["building_type"]),
            status=BuildingStatus(d.get("status", "active")),
            facility_id=d["facility_id"],
            address=Address.from_dict(address) if address else None,
            specifications=BuildingSpecifications.from_dict(d["specifications"]),
            configuration=(
                BuildingConfiguration.from_dict(d["configuration"])
                if "configuration" in d
                else BuildingConfiguration.preset("default")
            ),
            created_at=datetime.fromisoformat(d["created_at"]) if "created_at" in d else utcnow(),
            updated_at=datetime.fromisoformat(d["updated_at"]) if "updated_at" in d else None,
            last_accessed_at=datetime.fromisoformat(last_accessed) if last_accessed else None,
        )
