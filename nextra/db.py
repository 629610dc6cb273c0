# nextra/db.py
# Database layer: SQLAlchemy engine and per-request sessions
# PostgreSQL when DATABASE_URL is set, SQLite file otherwise

from typing import Generator
from urllib.parse import urlparse

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from nextra.config import DATABASE_PATH, DATABASE_URL, IS_POSTGRES
from nextra.models import Base
from nextra.observability import get_logger

logger = get_logger(__name__)


def database_url() -> str:
    """Resolve the SQLAlchemy URL (SQLAlchemy wants postgresql://, not postgres://)."""
    if IS_POSTGRES:
        if DATABASE_URL.startswith("postgres://"):
            return "postgresql://" + DATABASE_URL[len("postgres://"):]
        return DATABASE_URL
    if DATABASE_URL:
        return DATABASE_URL
    return f"sqlite:///{DATABASE_PATH}"


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"Invalid DATABASE_URL: {url[:20]}...")

    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before use
    )


engine = build_engine(database_url())
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def get_session() -> Generator[Session, None, None]:
    """
    FastAPI dependency: one session (and transaction scope) per request.
    Services commit after each mutation; anything left uncommitted is rolled back.
    """
    session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """Create every table registered on the declarative metadata."""
    Base.metadata.create_all(bind=engine)
    logger.info("database_initialised", backend="postgresql" if IS_POSTGRES else "sqlite")


def drop_db() -> None:
    Base.metadata.drop_all(bind=engine)
