"""Database session management."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from taskflow.config import get_settings
from taskflow.exceptions import StoreUnavailable

logger = logging.getLogger("taskflow")


def connect_args_for(url: str, timeout: float) -> dict:
    """Driver-level deadlines so a store call never blocks indefinitely."""
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": timeout}
    if url.startswith("postgres"):
        return {
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }
    return {}


settings = get_settings()
# SQLite pools ignore checkout timeouts; the driver timeout above covers locking.
pool_kwargs: dict = {} if settings.DATABASE_URL.startswith("sqlite") else {"pool_timeout": settings.DB_TIMEOUT_SECONDS}
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    connect_args=connect_args_for(settings.DATABASE_URL, settings.DB_TIMEOUT_SECONDS),
    **pool_kwargs,
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def get_db() -> Generator[Session, None, None]:
    """Yield a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_guard(db: Session, action: str) -> Iterator[None]:
    """Roll back and raise StoreUnavailable when the database fails or times out."""
    try:
        yield
    except (OperationalError, PoolTimeoutError) as exc:
        db.rollback()
        logger.error("Store failure during %s: %s", action, exc.__class__.__name__)
        raise StoreUnavailable() from exc


LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """Build a LIKE pattern matching ``term`` literally anywhere in the value."""
    escaped = term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", r"\%").replace("_", r"\_")
    return f"%{escaped}%"
