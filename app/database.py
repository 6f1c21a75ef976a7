"""Database engine, session factory, and the per-request session dependency.

The engine is built once by the app lifespan (see main.py) and kept on
``app.state.db``; handlers receive sessions through ``get_db``. Nothing in
the service layer opens its own connection.

All naive datetimes loaded from the store are tagged as UTC so that
comparisons never mix naive and aware values.
"""

from datetime import datetime, timezone
from typing import Any, Callable

from fastapi import Request
from loguru import logger
from sqlalchemy import DateTime, TypeDecorator, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from .config import Settings
from .exceptions import ConflictError, UnexpectedError


class UTCDateTime(TypeDecorator):
    """DateTime type that ensures UTC timezone on load."""
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Database:
    """Owns the engine and session factory for the lifetime of the process."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(
            bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        url = settings.database_url
        kwargs: dict = {"pool_pre_ping": True}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_recycle=3600,
                connect_args={"connect_timeout": 10},
            )
        engine = create_engine(url, **kwargs)
        if engine.dialect.name == "postgresql":
            event.listen(engine, "connect", _set_timezone)
        return cls(engine)

    def create_tables(self) -> None:
        from .models import Base

        Base.metadata.create_all(bind=self.engine, checkfirst=True)
        logger.info("ORM schema sync complete (create_all checkfirst=True)")

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def session(self) -> Session:
        return self.session_factory()

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")


def _set_timezone(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("SET timezone = 'UTC'")
    cursor.close()


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the store rejected a write on a unique index (not FK / NOT NULL)."""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == "23505":
        return True
    msg = str(orig or exc).lower()
    return "unique" in msg or "duplicate" in msg


def commit_unique(db: Session, message: str, lookup: Callable[[], Any] | None = None) -> None:
    """Commit, translating a unique-index violation into ConflictError.

    ``lookup`` runs after the rollback to fetch the record that won the race,
    so the caller can hand it back for reconciliation.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if not is_unique_violation(e):
            logger.error("Write rejected by store: {}", e.orig)
            raise UnexpectedError("Failed to save changes") from e
        existing = lookup() if lookup else None
        logger.warning("Unique constraint rejected write: {}", message)
        raise ConflictError(message, data=existing) from e


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_db(request: Request):
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()
