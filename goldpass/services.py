"""Process-wide service container.

build_services() wires every collaborator once at startup. The app keeps
the container on app.state and handlers reach it through
goldpass.api.deps.get_services; tests build their own container against
an in-memory database and inject it into create_app().
"""

import logging
from dataclasses import dataclass

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from goldpass import config
from goldpass.audit.events import EventLogger
from goldpass.auth.rate_limit import RateLimiter
from goldpass.auth.tokens import TokenManager
from goldpass.db.session import create_db_engine, create_session_factory, init_database
from goldpass.db.store import MemberStore
from goldpass.identity.uid import UidDeriver
from goldpass.links.shortlinks import ShortLinkResolver
from goldpass.passes.payload import PassPayloadBuilder
from goldpass.passes.signer import PassSigner

log = logging.getLogger(__name__)

CLAIM_ACTION = "claim"
PROFILE_ACTION = "profile_complete"


@dataclass
class Services:
    engine: Engine
    session_factory: sessionmaker
    base_url: str
    default_country_code: str
    store: MemberStore
    uids: UidDeriver
    tokens: TokenManager
    short_links: ShortLinkResolver
    events: EventLogger
    rate_limiter: RateLimiter
    gold_passes: PassPayloadBuilder
    signer: PassSigner

    def public_url(self, uid: str) -> str:
        return f"{self.base_url}/u/{uid}"

    def add_to_wallet_url(self, uid: str) -> str:
        return f"{self.base_url}/passes/gold?uid={uid}"

    def close(self) -> None:
        self.engine.dispose()


def build_services(
    database_url: str | None = None,
    *,
    base_url: str | None = None,
    uid_secret: str | None = None,
    token_secret: str | None = None,
    token_rounds: int | None = None,
    signer: PassSigner | None = None,
    rate_limits: dict[str, int] | None = None,
    default_country_code: str | None = None,
) -> Services:
    """Build the container. Arguments left as None come from goldpass.config."""
    engine = create_db_engine(database_url or config.DATABASE_URL, config.STORE_TIMEOUT_SECONDS)
    init_database(engine)
    session_factory = create_session_factory(engine)

    base_url = (base_url or config.BASE_URL).rstrip("/")
    if rate_limits is None:
        rate_limits = {
            CLAIM_ACTION: config.CLAIM_RATE_LIMIT,
            PROFILE_ACTION: config.PROFILE_RATE_LIMIT,
        }

    services = Services(
        engine=engine,
        session_factory=session_factory,
        base_url=base_url,
        default_country_code=default_country_code or config.DEFAULT_COUNTRY_CODE,
        store=MemberStore(session_factory),
        uids=UidDeriver(uid_secret or config.UID_SECRET),
        tokens=TokenManager(
            token_secret or config.TOKEN_SECRET,
            rounds=token_rounds or config.TOKEN_BCRYPT_ROUNDS,
        ),
        short_links=ShortLinkResolver(session_factory, base_url),
        events=EventLogger(session_factory),
        rate_limiter=RateLimiter(session_factory, rate_limits),
        gold_passes=PassPayloadBuilder("gold"),
        signer=signer or PassSigner(config.SIGNER_URL, timeout=config.SIGNER_TIMEOUT_SECONDS),
    )
    log.info(f"Services ready (base_url={base_url})")
    return services
