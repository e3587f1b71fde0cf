"""
Tests for shared capabilities not covered through Facility and Building.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from vivarium_foundation.mixins import Hierarchical, SoftDeletable, utcnow


@dataclass
class Record(SoftDeletable):
    """Minimal soft-deletable record."""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    last_accessed_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


@dataclass
class Room(Hierarchical):
    """Level-3 node used to exercise hierarchy helpers."""
    id: str
    facility_id: str
    path: List[str]
    hierarchy_level: int = 3

    @property
    def parent_id(self) -> Optional[str]:
        return self.path[-2] if len(self.path) > 1 else None

    @property
    def hierarchy_path(self) -> List[str]:
        return self.path


class TestSoftDeletable:
    """Test deletion by timestamp."""

    def test_soft_delete_and_restore(self):
        """Test marking deleted and restoring."""
        record = Record()

        record.soft_delete()
        assert record.is_deleted
        assert record.days_since_deletion == 0
        assert record.last_accessed_at is not None

        record.restore()
        assert not record.is_deleted
        assert record.days_since_deletion is None

    def test_days_since_deletion(self):
        """Test the deletion age."""
        record = Record(deleted_at=utcnow() - timedelta(days=5, minutes=1))
        assert record.days_since_deletion == 5


class TestHierarchical:
    """Test hierarchy helpers on a deeper node."""

    def test_deep_path(self):
        """Test depth and ancestry for a room."""
        room = Room(
            id="room_1_4001",
            facility_id="facility_1_1001",
            path=["facility_1_1001", "building_1_2001", "location_1_3001", "room_1_4001"],
        )

        assert room.depth == 3
        assert room.parent_id == "location_1_3001"
        assert room.is_descendant_of("building_1_2001")
        assert room.is_descendant_of("room_1_4001")
        assert not room.is_descendant_of("room_1_4002")

    def test_root(self):
        """Test that a single-element path is a root."""
        root = Room(id="facility_1_1001", facility_id="facility_1_1001", path=["facility_1_1001"])

        assert root.is_root
        assert root.depth == 0
