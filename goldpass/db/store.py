"""Member store adapter.

Wraps the members table behind a small interface the rest of the service
relies on. Rows never leave this module: callers get detached, typed
MemberRecord values. Every SQLAlchemy failure (including timeouts) is
raised as StoreUnavailableError so callers can tell "we couldn't check"
apart from "not there".
"""

import logging
from dataclasses import dataclass, fields
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from goldpass.db.models import Member, ShortUrl
from goldpass.db.session import session_scope
from goldpass.exceptions import StoreUnavailableError

log = logging.getLogger(__name__)

PASS_STATUS_ACTIVE = "active"
PASS_STATUS_VOIDED = "voided"
PASS_STATUSES = {PASS_STATUS_ACTIVE, PASS_STATUS_VOIDED}


@dataclass
class MemberRecord:
    """Typed view of a members row."""

    uid: str
    name: str
    email: str
    phone_e164: str
    edit_token_hash: str
    public_url: str
    profile_url: str
    tier: str = "gold"
    pass_status: str = PASS_STATUS_ACTIVE
    pass_serial: str | None = None
    pass_last_generated_at: datetime | None = None
    created_at: datetime | None = None
    last_seen_at: datetime | None = None
    profile_city: str | None = None
    profile_state: str | None = None
    profile_zip: str | None = None
    profile_gender: str | None = None
    profile_age: int | None = None
    profile_street1: str | None = None
    profile_last_updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.pass_status == PASS_STATUS_ACTIVE

    @classmethod
    def from_row(cls, row: Member) -> "MemberRecord":
        record = cls(**{f.name: getattr(row, f.name) for f in fields(cls)})
        if record.pass_status not in PASS_STATUSES:
            # Unknown states are never treated as verified
            log.warning(f"Member {record.uid} has unknown pass_status {record.pass_status!r}")
            record.pass_status = PASS_STATUS_VOIDED
        return record

    def to_row(self) -> Member:
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        if values["created_at"] is None:
            values["created_at"] = datetime.utcnow()
        return Member(**values)


UPDATABLE_FIELDS = {
    f.name for f in fields(MemberRecord)
} - {"uid", "created_at"}


class MemberStore:
    """Row-level CRUD on members. Each call is its own transaction."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def find_by_uid(self, uid: str) -> MemberRecord | None:
        try:
            with session_scope(self._session_factory) as db:
                row = db.get(Member, uid)
                return MemberRecord.from_row(row) if row else None
        except SQLAlchemyError as e:
            log.error(f"find_by_uid failed for {uid}: {e}")
            raise StoreUnavailableError() from e

    def insert(self, record: MemberRecord) -> bool:
        """Insert a new member.

        Returns:
            True if inserted, False if a member with this UID already exists
            (a concurrent or repeated claim of the same identity).
        """
        try:
            with session_scope(self._session_factory) as db:
                db.add(record.to_row())
            return True
        except IntegrityError:
            log.info(f"Member {record.uid} already exists", extra={"uid": record.uid})
            return False
        except SQLAlchemyError as e:
            log.error(f"insert failed for {record.uid}: {e}")
            raise StoreUnavailableError() from e

    def update(self, uid: str, **changes) -> bool:
        """Apply a partial update. Returns False if the member does not exist."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update member fields: {sorted(unknown)}")
        try:
            with session_scope(self._session_factory) as db:
                row = db.get(Member, uid)
                if row is None:
                    return False
                for key, value in changes.items():
                    setattr(row, key, value)
                return True
        except SQLAlchemyError as e:
            log.error(f"update failed for {uid}: {e}")
            raise StoreUnavailableError() from e

    def touch_last_seen(self, uid: str) -> bool:
        return self.update(uid, last_seen_at=datetime.utcnow())

    def list_all(self) -> list[MemberRecord]:
        try:
            with session_scope(self._session_factory) as db:
                rows = db.scalars(select(Member).order_by(Member.created_at)).all()
                return [MemberRecord.from_row(r) for r in rows]
        except SQLAlchemyError as e:
            log.error(f"list_all failed: {e}")
            raise StoreUnavailableError() from e

    def list_without_short_links(self) -> list[MemberRecord]:
        """Members that have no short_urls mapping yet."""
        try:
            with session_scope(self._session_factory) as db:
                linked = select(ShortUrl.uid)
                rows = db.scalars(
                    select(Member).where(Member.uid.not_in(linked)).order_by(Member.created_at)
                ).all()
                return [MemberRecord.from_row(r) for r in rows]
        except SQLAlchemyError as e:
            log.error(f"list_without_short_links failed: {e}")
            raise StoreUnavailableError() from e
