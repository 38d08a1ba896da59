"""Database engine and session management for the Gold Pass store.

Provides:
- create_db_engine(): engine with per-call timeouts for the configured backend
- create_session_factory(): sessionmaker bound to an engine
- session_scope(): commit/rollback context manager for store code
- init_database(): idempotent table creation at startup

One engine and one session factory exist per process; they are built by
goldpass.services.build_services() and passed to each store component.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from goldpass.db.models import Base

log = logging.getLogger(__name__)


def create_db_engine(database_url: str, timeout_seconds: float = 5.0) -> Engine:
    """Create an engine whose calls are bounded by timeout_seconds.

    SQLite: busy timeout on locks, StaticPool for in-memory databases.
    PostgreSQL: connection pool with checkout timeout, connect timeout and
    a server-side statement_timeout.
    """
    if database_url.startswith("sqlite"):
        engine_kwargs = {
            "echo": False,
            "pool_pre_ping": True,
            "connect_args": {"check_same_thread": False, "timeout": timeout_seconds},
        }
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            engine_kwargs["poolclass"] = StaticPool
        log.info("Using SQLite database (local development mode)")
    else:
        engine_kwargs = {
            "echo": False,
            "pool_pre_ping": True,      # Verify connections before use
            "pool_size": 5,
            "max_overflow": 10,
            "pool_recycle": 1800,       # Recycle connections every 30 min
            "pool_timeout": timeout_seconds,
            "connect_args": {
                "connect_timeout": max(1, int(timeout_seconds)),
                "options": f"-c statement_timeout={int(timeout_seconds * 1000)}",
            },
        }
        log.info("Using PostgreSQL database (production mode)")

    engine = create_engine(database_url, **engine_kwargs)

    if database_url.startswith("sqlite"):
        busy_timeout_ms = int(timeout_seconds * 1000)

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """foreign_keys=ON enforces the short_urls -> members reference."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA busy_timeout={busy_timeout_ms}")
            cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Context manager for database sessions.

    Usage:
        with session_scope(factory) as db:
            member = db.get(Member, uid)

    The session is committed on success and rolled back on exception.
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_database(engine: Engine) -> None:
    """Create all tables (CREATE IF NOT EXISTS).

    For file-backed SQLite, also ensures the database directory exists.
    """
    url = engine.url.render_as_string(hide_password=True)
    log.info(f"Initializing database at {url}")

    if url.startswith("sqlite:///"):
        db_path = url.replace("sqlite:///", "")
        if db_path and db_path != ":memory:":
            db_dir = Path(db_path).parent
            db_dir.mkdir(parents=True, exist_ok=True)

    Base.metadata.create_all(bind=engine)
    log.info("Database tables created successfully")
