"""
EntityObserver - change notifications for facility-level entities.

Stores emit an event after every committed mutation. Interested parties
(UI bindings, audit trails, sync jobs) register callbacks instead of
polling the store.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional

from .mixins import utcnow

logger = logging.getLogger(__name__)


class ChangeType(Enum):
    """Types of entity changes."""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass
class EntityEvent:
    """An entity change as seen by observers."""
    entity_id: str
    entity_type: str
    change_type: ChangeType
    timestamp: datetime
    entity: Optional[Any] = None  # None for deletes
    old_status: Optional[str] = None  # For updates
    new_status: Optional[str] = None  # For updates and creates


# Type for event callbacks
EventCallback = Callable[[EntityEvent], None]


class EntityObserver:
    """
    Fan-out of entity change events.

    Usage:
        observer = EntityObserver()
        observer.on_change(lambda event: audit.record(event))
        observer.emit(ChangeType.CREATED, facility)
    """

    def __init__(self, max_log_size: int = 1000):
        self._callbacks: List[EventCallback] = []
        self._event_log: List[EntityEvent] = []
        self._max_log_size = max_log_size
        # Stores emit outside their own locks, from any thread.
        self._log_lock = threading.Lock()

    def on_change(self, callback: EventCallback) -> None:
        """Register callback for entity changes."""
        self._callbacks.append(callback)

    def off_change(self, callback: EventCallback) -> None:
        """Unregister callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def emit(
        self,
        change_type: ChangeType,
        entity: Any,
        old_status: Optional[str] = None,
    ) -> EntityEvent:
        """
        Emit an event for an entity change.

        Args:
            change_type: Type of change (created, updated, deleted)
            entity: The entity that changed (anything with id, entity_type, status)
            old_status: Previous status (for updates)

        Returns:
            The emitted event
        """
        event = EntityEvent(
            entity_id=entity.id,
            entity_type=entity.entity_type.value,
            change_type=change_type,
            timestamp=utcnow(),
            entity=entity if change_type != ChangeType.DELETED else None,
            old_status=old_status,
            new_status=entity.status.value,
        )

        with self._log_lock:
            self._event_log.append(event)
            if len(self._event_log) > self._max_log_size:
                del self._event_log[:-self._max_log_size]

        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception:
                # Delivery continues to the remaining callbacks.
                logger.exception(
                    "Event callback failed for %s %s",
                    event.entity_type,
                    event.entity_id,
                    extra={"entity_id": event.entity_id, "component": "observer"},
                )

        return event

    def get_recent_events(
        self,
        entity_type: Optional[str] = None,
        change_type: Optional[ChangeType] = None,
        limit: int = 50,
    ) -> List[EntityEvent]:
        """
        Get recent events from the log, most recent first.

        Args:
            entity_type: Filter by entity type value (e.g. "facility")
            change_type: Filter by change type
            limit: Maximum events to return
        """
        with self._log_lock:
            events = list(self._event_log)

        if entity_type:
            events = [e for e in events if e.entity_type == entity_type]

        if change_type:
            events = [e for e in events if e.change_type == change_type]

        return list(reversed(events))[:limit]

    def clear_log(self) -> None:
        """Clear the event log."""
        with self._log_lock:
            self._event_log.clear()
