"""Database module for the Gold Pass service.

This module provides SQLAlchemy ORM models, engine/session management and
the member store adapter.
"""

from goldpass.db.models import Base, Member, PassEvent, RateLimit, ShortUrl
from goldpass.db.session import (
    create_db_engine,
    create_session_factory,
    init_database,
    session_scope,
)
from goldpass.db.store import (
    PASS_STATUS_ACTIVE,
    PASS_STATUS_VOIDED,
    MemberRecord,
    MemberStore,
)

__all__ = [
    "Base",
    "Member",
    "PassEvent",
    "RateLimit",
    "ShortUrl",
    "create_db_engine",
    "create_session_factory",
    "init_database",
    "session_scope",
    "PASS_STATUS_ACTIVE",
    "PASS_STATUS_VOIDED",
    "MemberRecord",
    "MemberStore",
]
