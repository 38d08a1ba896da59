"""Pass event logging."""

from goldpass.audit.events import EVENT_TYPES, Event, EventLogger

__all__ = ["EVENT_TYPES", "Event", "EventLogger"]
