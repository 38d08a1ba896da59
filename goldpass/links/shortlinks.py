"""Short links for constrained transport channels.

Apple Wallet back fields and barcode text can silently break URLs at
whitespace or hyphen boundaries. A short link is "{base}/s/{8 hex chars}",
which has nothing to break; the redirect handler resolves it back to the
profile-completion URL carrying the member's edit token.
"""

import logging
import re
import secrets
from dataclasses import dataclass

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from goldpass.db.models import ShortUrl
from goldpass.db.session import session_scope
from goldpass.exceptions import NotFoundError, ShortLinkCollisionError, StoreUnavailableError
from goldpass.passes.urls import sanitize_url

log = logging.getLogger(__name__)

SHORT_ID_BYTES = 4  # 8 lowercase hex chars
SHORT_ID_PATTERN = re.compile(r"^[0-9a-f]{8}$")


@dataclass(frozen=True)
class ShortLinkTarget:
    """What a short id resolves to."""

    uid: str
    token: str


def generate_short_id() -> str:
    return secrets.token_hex(SHORT_ID_BYTES)


class ShortLinkResolver:
    """Mints and resolves short ids stored in the short_urls table."""

    def __init__(self, session_factory: sessionmaker, base_url: str):
        self._session_factory = session_factory
        self._base_url = base_url.rstrip("/")

    def create_short_url(self, short_id: str) -> str:
        return sanitize_url(f"{self._base_url}/s/{short_id}")

    def completion_url(self, target: ShortLinkTarget) -> str:
        return f"{self._base_url}/complete/{target.uid}?token={target.token}"

    def create(self, uid: str, token: str, short_id: str | None = None) -> str:
        """Store a mapping and return its short id.

        A short id collision is retried once with a fresh id.

        Raises:
            ShortLinkCollisionError: If the retry collides as well.
            StoreUnavailableError: On any other store failure.
        """
        candidate = short_id or generate_short_id()
        for attempt in (1, 2):
            try:
                with session_scope(self._session_factory) as db:
                    db.add(ShortUrl(short_id=candidate, uid=uid, token=token, access_count=0))
                log.info(f"Created short link {candidate}", extra={"uid": uid})
                return candidate
            except IntegrityError as e:
                log.warning(f"Short id collision on attempt {attempt}: {candidate}", extra={"uid": uid})
                if attempt == 2:
                    raise ShortLinkCollisionError() from e
                candidate = generate_short_id()
            except SQLAlchemyError as e:
                log.error(f"Short link create failed for {uid}: {e}")
                raise StoreUnavailableError() from e
        raise ShortLinkCollisionError()

    def resolve(self, short_id: str) -> ShortLinkTarget:
        """Look up a short id.

        Raises:
            NotFoundError: Unknown or malformed short id.
            StoreUnavailableError: Store failure.
        """
        if not short_id or not SHORT_ID_PATTERN.match(short_id):
            raise NotFoundError.short_link(short_id or "")
        try:
            with session_scope(self._session_factory) as db:
                row = db.get(ShortUrl, short_id)
                if row is None:
                    raise NotFoundError.short_link(short_id)
                return ShortLinkTarget(uid=row.uid, token=row.token)
        except SQLAlchemyError as e:
            log.error(f"Short link resolve failed for {short_id}: {e}")
            raise StoreUnavailableError() from e

    def record_access(self, short_id: str) -> None:
        """Increment access_count. Best-effort: failures are logged only."""
        try:
            with session_scope(self._session_factory) as db:
                db.execute(
                    update(ShortUrl)
                    .where(ShortUrl.short_id == short_id)
                    .values(access_count=ShortUrl.access_count + 1)
                )
        except Exception as e:
            log.warning(f"Failed to record short link access for {short_id}: {e}")
