"""Database engine, session factory and the unit-of-work scope"""

import threading
import time
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator, Optional
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import sessionmaker, Session
from loan_engine.config import settings
from loan_engine.domain.exceptions import OperationCancelledError, SerializationConflictError
from loan_engine.infrastructure.observability.metrics import serialization_conflict_counter

# SQLSTATE / driver error codes for "concurrent transaction lost, retry"
_PG_CONFLICT_CODES = {"40001", "40P01"}
_MYSQL_CONFLICT_CODES = {1205, 1213}


def create_db_engine(database_url: str) -> Engine:
    """Create an engine; SQLite gets thread-safe connections and writer serialization"""
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        _configure_sqlite(engine)
        return engine

    # Connection pool: recycle after an hour to avoid stale connections
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle_seconds,
    )


def _configure_sqlite(engine: Engine) -> None:
    """
    SQLite ignores FOR UPDATE, so every transaction takes the write lock up
    front with BEGIN IMMEDIATE. The driver's own implicit BEGIN is disabled
    so SQLAlchemy controls transaction start.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    """Process-wide session factory bound to the configured database"""
    return create_session_factory(create_db_engine(settings.database_url))


def translate_db_error(exc: DBAPIError) -> Optional[SerializationConflictError]:
    """Map driver-level concurrency failures to SerializationConflictError, None for anything else"""
    orig = exc.orig
    pgcode = getattr(orig, "pgcode", None)
    if pgcode in _PG_CONFLICT_CODES:
        return SerializationConflictError(f"Serialization failure ({pgcode}), retry the operation")

    args = getattr(orig, "args", ())
    if args and args[0] in _MYSQL_CONFLICT_CODES:
        return SerializationConflictError(f"Lock conflict ({args[0]}), retry the operation")

    if "database is locked" in str(orig):
        return SerializationConflictError("Database is locked, retry the operation")

    return None


class CancellationGuard:
    """Raises OperationCancelledError once the event is set or the deadline passes"""

    def __init__(self, cancel_event: Optional[threading.Event] = None, timeout: Optional[float] = None):
        self.cancel_event = cancel_event
        self.deadline = time.monotonic() + timeout if timeout is not None else None

    def check(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelledError("Operation cancelled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise OperationCancelledError("Operation deadline exceeded")

    def on_execute(self, orm_execute_state) -> None:
        self.check()

    def on_flush(self, session, flush_context, instances) -> None:
        self.check()


@contextmanager
def unit_of_work(
    session_factory: Optional[sessionmaker] = None,
    *,
    serializable: Optional[bool] = None,
    cancel_event: Optional[threading.Event] = None,
    timeout: Optional[float] = None,
) -> Iterator[Session]:
    """
    Transactional scope around one operation.

    Commits when the block exits cleanly, rolls back on any exception and
    always closes the session. Every ORM statement and flush first checks
    the cancellation guard, so no storage work happens after cancellation
    is observed. Storage-level concurrency failures surface as
    SerializationConflictError for the caller to retry.
    """
    factory = session_factory or get_session_factory()
    if serializable is None:
        serializable = settings.serializable_transactions
    if timeout is None:
        timeout = settings.operation_timeout_seconds

    guard = CancellationGuard(cancel_event, timeout)
    guard.check()

    db = factory()
    event.listen(db, "do_orm_execute", guard.on_execute)
    event.listen(db, "before_flush", guard.on_flush)
    try:
        # SQLite transactions are already serialized by BEGIN IMMEDIATE
        if serializable and db.get_bind().dialect.name != "sqlite":
            db.connection(execution_options={"isolation_level": "SERIALIZABLE"})
        yield db
        guard.check()
        db.commit()
    except DBAPIError as exc:
        db.rollback()
        conflict = translate_db_error(exc)
        if conflict is not None:
            serialization_conflict_counter.inc()
            raise conflict from exc
        raise
    except BaseException:
        db.rollback()
        raise
    finally:
        db.close()
