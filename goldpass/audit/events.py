"""Pass event side channel.

Appends analytics events (scans, claims, profile activity, issuance) to
the pass_events table and mirrors each one to the "goldpass.events"
logger. Events are best-effort: a failed write is logged and dropped,
never surfaced to the request that produced it.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.orm import sessionmaker

from goldpass.db.models import PassEvent
from goldpass.db.session import session_scope

log = logging.getLogger("goldpass.events")

QR_SCANNED = "qr_scanned"
CLAIM_SUBMITTED = "claim_submitted"
PROFILE_OPENED = "profile_opened"
PROFILE_SAVED = "profile_saved"
PASS_ISSUED = "pass_issued"
API_ERROR = "api_error"

EVENT_TYPES = frozenset({
    QR_SCANNED,
    CLAIM_SUBMITTED,
    PROFILE_OPENED,
    PROFILE_SAVED,
    PASS_ISSUED,
    API_ERROR,
})


@dataclass
class Event:
    """Structured pass event."""

    type: str  # one of EVENT_TYPES
    uid: str | None = None
    meta: dict[str, Any] | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)


class EventLogger:
    """Best-effort writer for pass_events."""

    def __init__(self, session_factory: sessionmaker, enabled: bool = True):
        self._session_factory = session_factory
        self.enabled = enabled

    def emit(self, uid: str | None, type: str, meta: dict[str, Any] | None = None) -> bool:
        """Record one event.

        Returns:
            True if the row was written. Unknown types and store failures
            return False after logging a warning.
        """
        if not self.enabled:
            return False

        if type not in EVENT_TYPES:
            log.warning(f"Rejected unknown event type {type!r}", extra={"uid": uid})
            return False

        event = Event(type=type, uid=uid, meta=meta or None)
        log.info(f"event: {event.type}", extra={"event_type": event.type, "uid": event.uid})

        try:
            with session_scope(self._session_factory) as db:
                db.add(
                    PassEvent(
                        uid=event.uid,
                        type=event.type,
                        meta_json=event.meta,
                        created_at=event.created_at,
                    )
                )
            return True
        except Exception as e:
            log.warning(f"Failed to record {event.type} event: {e}", extra={"uid": uid})
            return False
