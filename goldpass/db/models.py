"""SQLAlchemy ORM models for the Gold Pass store.

This module defines the database schema for:
- Members (one row per deterministic UID)
- Short URLs (transport-safe redirect ids for profile completion)
- Pass Events (append-only analytics log)
- Rate Limits (hour-windowed counters per action and client IP)
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Member(Base):
    """Durable member record keyed by deterministic UID."""

    __tablename__ = "members"

    uid = Column(String(32), primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone_e164 = Column(String(16), nullable=False)
    edit_token_hash = Column(String(255), nullable=False)
    tier = Column(String(20), default="gold", nullable=False)
    pass_status = Column(String(20), default="active", nullable=False)  # active | voided
    public_url = Column(String(512), nullable=False)
    profile_url = Column(String(512), nullable=False)
    pass_serial = Column(String(64), nullable=True)
    pass_last_generated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_seen_at = Column(DateTime, nullable=True)

    # Filled in by profile completion
    profile_city = Column(String(50), nullable=True)
    profile_state = Column(String(2), nullable=True)
    profile_zip = Column(String(10), nullable=True)
    profile_gender = Column(String(20), nullable=True)
    profile_age = Column(Integer, nullable=True)
    profile_street1 = Column(String(100), nullable=True)
    profile_last_updated_at = Column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Member(uid={self.uid!r}, pass_status={self.pass_status!r})>"


class ShortUrl(Base):
    """Short redirect id for Apple Wallet text fields.

    Holds the edit token in plaintext so the redirect can rebuild the
    completion link. Only access_count is ever updated.
    """

    __tablename__ = "short_urls"

    short_id = Column(String(16), primary_key=True)
    uid = Column(String(32), ForeignKey("members.uid", ondelete="CASCADE"), nullable=False)
    token = Column(String(128), nullable=False)
    access_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (Index("ix_short_urls_uid", "uid"),)

    def __repr__(self) -> str:
        return f"<ShortUrl(short_id={self.short_id!r}, uid={self.uid!r})>"


class PassEvent(Base):
    """Append-only event row consumed by external analytics."""

    __tablename__ = "pass_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(32), nullable=True)
    type = Column(String(32), nullable=False)
    meta_json = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (Index("ix_pass_events_uid_type", "uid", "type"),)


class RateLimit(Base):
    """Windowed request counter for one (action, client IP) pair."""

    __tablename__ = "rate_limits"

    bucket_key = Column(String(128), primary_key=True)
    count = Column(Integer, default=0, nullable=False)
    reset_at = Column(DateTime, nullable=False)
