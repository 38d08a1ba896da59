"""Per-client request limits backed by the rate_limits table.

Each (action, client IP) pair owns one bucket. A bucket counts requests
until the next top of the hour, then starts over. The check is a plain
read-then-write, so concurrent requests may under-count by one; this is
a spam brake, not an accounting system.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from goldpass.db.models import RateLimit
from goldpass.db.session import session_scope
from goldpass.exceptions import RateLimitedError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_at: datetime

    def retry_after(self, now: datetime | None = None) -> int:
        """Seconds until the bucket resets (at least 1)."""
        now = now or datetime.utcnow()
        return max(1, int((self.reset_at - now).total_seconds()))


def next_hour(now: datetime) -> datetime:
    return now.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)


def bucket_key(action: str, client_ip: str) -> str:
    return f"{action}:{client_ip or 'unknown'}"


class RateLimiter:
    """Hour-windowed counters keyed by action and client IP.

    Args:
        session_factory: Session factory for the rate_limits table.
        limits: Maximum requests per window, by action name. Actions with
            no entry are not limited.
    """

    def __init__(self, session_factory: sessionmaker, limits: dict[str, int]):
        self._session_factory = session_factory
        self._limits = dict(limits)

    def check(self, action: str, client_ip: str, now: datetime | None = None) -> RateLimitDecision:
        """Count one request and report whether it is allowed.

        Store failures fail open: the request is allowed and a warning is
        logged.
        """
        now = now or datetime.utcnow()
        limit = self._limits.get(action)
        if limit is None:
            return RateLimitDecision(allowed=True, remaining=0, reset_at=next_hour(now))

        key = bucket_key(action, client_ip)
        try:
            with session_scope(self._session_factory) as db:
                bucket = db.get(RateLimit, key)
                if bucket is None:
                    bucket = RateLimit(bucket_key=key, count=1, reset_at=next_hour(now))
                    db.add(bucket)
                elif bucket.reset_at <= now:
                    bucket.count = 1
                    bucket.reset_at = next_hour(now)
                elif bucket.count >= limit:
                    return RateLimitDecision(allowed=False, remaining=0, reset_at=bucket.reset_at)
                else:
                    bucket.count += 1
                return RateLimitDecision(
                    allowed=True,
                    remaining=max(0, limit - bucket.count),
                    reset_at=bucket.reset_at,
                )
        except SQLAlchemyError as e:
            log.warning(f"Rate limit check failed for {key}, allowing request: {e}")
            return RateLimitDecision(allowed=True, remaining=0, reset_at=next_hour(now))

    def hit(self, action: str, client_ip: str, now: datetime | None = None) -> RateLimitDecision:
        """Like check(), but raises RateLimitedError when refused."""
        now = now or datetime.utcnow()
        decision = self.check(action, client_ip, now=now)
        if not decision.allowed:
            log.info(f"Rate limit exceeded for {bucket_key(action, client_ip)}")
            raise RateLimitedError(retry_after=decision.retry_after(now))
        return decision
