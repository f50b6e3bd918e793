"""
Database engine and session management.

SQLite is the default backend (a single file next to the service); any
SQLAlchemy URL works. In-memory SQLite shares one connection across
threads so tests and the app see the same data.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import structlog
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from nps_insights.config import Settings
from nps_insights.persistence.exceptions import StoreUnavailableError
from nps_insights.persistence.orm import Base

logger = structlog.get_logger(__name__)


def get_engine_args(database_url: str, echo: bool = False, pool_size: int = 5, max_overflow: int = 10) -> dict[str, Any]:
    """
    Engine arguments per backend.

    SQLite needs check_same_thread=False (sessions are used from the
    event loop thread and from the threadpool); in-memory SQLite also
    needs a single shared connection.
    """
    if database_url.startswith("sqlite"):
        args: dict[str, Any] = {
            "connect_args": {"check_same_thread": False},
            "echo": echo,
        }
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            args["poolclass"] = StaticPool
        return args

    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
        "echo": echo,
    }


def _ensure_sqlite_dir(database_url: str) -> None:
    prefix = "sqlite:///"
    if database_url.startswith(prefix) and ":memory:" not in database_url:
        Path(database_url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the engine and the session factory."""

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
    ):
        self.database_url = database_url
        _ensure_sqlite_dir(database_url)
        self.engine: Engine = create_engine(
            database_url,
            **get_engine_args(database_url, echo, pool_size, max_overflow),
        )
        if database_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info("Database engine created", url=self.engine.url.render_as_string(hide_password=True))

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.DATABASE_URL,
            echo=settings.DB_ECHO,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Transactional session: commit on success, rollback on error."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_tables(self) -> None:
        """Create all tables (idempotent)."""
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Failed to create tables: {e}") from e
        logger.info("Database tables ready")

    def drop_tables(self) -> None:
        """Drop all tables. Only for tests and local resets."""
        Base.metadata.drop_all(bind=self.engine)

    def ping(self) -> bool:
        """True if a trivial query succeeds. Never raises."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Database ping failed", error=str(e))
            return False

    def dispose(self) -> None:
        self.engine.dispose()
