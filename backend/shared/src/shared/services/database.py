"""Relational store access through a pooled SQLAlchemy engine.

The service is constructed once at application startup, passed to the
request handlers that need it, and disposed on shutdown. Every statement
borrows a connection inside a context manager so the connection returns to
the pool on every exit path.

All statements are SQLAlchemy Core constructs, so values are always sent as
bound parameters.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import Executable

from shared.models.tables import metadata
from shared.utils.logging import get_logger

if TYPE_CHECKING:
    from shared.config import Settings

logger = get_logger(__name__)


class DatabaseServiceError(Exception):
    """Raised when a database operation fails."""


class StoreUnavailableError(DatabaseServiceError):
    """The store could not be reached or did not answer in time.

    Callers should treat the operation as not applied and safe to retry.
    """


class IntegrityViolationError(DatabaseServiceError):
    """A write was rejected by a uniqueness or foreign key constraint."""


def _engine_kwargs(
    url: str,
    pool_size: int,
    max_overflow: int,
    pool_timeout: float,
) -> dict[str, Any]:
    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            # One shared connection, otherwise each checkout sees an empty database
            kwargs["poolclass"] = StaticPool
            return kwargs
        kwargs.update(pool_size=pool_size, max_overflow=max_overflow, pool_timeout=pool_timeout)
        return kwargs
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_timeout": pool_timeout,
        "pool_pre_ping": True,
    }


def _serialize_sqlite_writers(engine: Engine) -> None:
    # pysqlite defers BEGIN until the first write, which lets two writers
    # deadlock on lock upgrade. Take the write lock up front instead.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class DatabaseService:
    """Service for parameterized statements against the relational store."""

    def __init__(
        self,
        url: str | None = None,
        *,
        pool_size: int = 10,
        max_overflow: int = 0,
        pool_timeout: float = 15.0,
        engine: Engine | None = None,
    ) -> None:
        """Initialize the database service.

        Args:
            url: SQLAlchemy database URL. Ignored when engine is given.
            pool_size: Connections kept in the pool
            max_overflow: Extra connections allowed beyond pool_size
            pool_timeout: Seconds to wait for a free connection
            engine: Pre-built engine (used by tests)
        """
        if engine is None:
            if url is None:
                raise ValueError("Either url or engine is required")
            engine = create_engine(url, **_engine_kwargs(url, pool_size, max_overflow, pool_timeout))
            if engine.dialect.name == "sqlite" and not isinstance(engine.pool, StaticPool):
                _serialize_sqlite_writers(engine)
        self._engine = engine
        logger.info("Database engine ready (%s)", engine.url.render_as_string(hide_password=True))

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DatabaseService":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            raise IntegrityViolationError(str(e.orig)) from e
        except (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError) as e:
            raise StoreUnavailableError(str(e)) from e
        except SQLAlchemyError as e:
            raise DatabaseServiceError(str(e)) from e

    def execute(self, statement: Executable) -> int:
        """Run a write statement in its own transaction.

        The transaction is committed before this method returns.

        Args:
            statement: Parameterized SQLAlchemy statement

        Returns:
            Number of rows affected
        """
        with self._translate_errors(), self._engine.begin() as conn:
            result = conn.execute(statement)
            return result.rowcount

    def insert(self, statement: Executable) -> int:
        """Run an INSERT and return the new row's primary key."""
        with self._translate_errors(), self._engine.begin() as conn:
            result = conn.execute(statement)
            return int(result.inserted_primary_key[0])

    def fetch_one(self, statement: Executable) -> dict[str, Any] | None:
        """Run a query and return the first row as a dict, or None."""
        with self._translate_errors(), self._engine.connect() as conn:
            row = conn.execute(statement).mappings().first()
            return dict(row) if row is not None else None

    def ping(self) -> bool:
        """Check that the store answers a trivial query."""
        try:
            with self._translate_errors(), self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except DatabaseServiceError as e:
            logger.warning("Database ping failed: %s", e)
            return False

    def create_schema(self) -> None:
        """Create any missing tables (local development and tests)."""
        with self._translate_errors():
            metadata.create_all(self._engine)

    def dispose(self) -> None:
        """Close all pooled connections."""
        self._engine.dispose()
        logger.info("Database engine disposed")
