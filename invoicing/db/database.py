"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration with an
in-memory SQLite fallback for tests, and exposes the session generator and
the unit-of-work scope used by the repositories.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from invoicing.utils.settings import resolve_database_url

logger = logging.getLogger(__name__)


def _enable_sqlite_savepoints(engine: Engine) -> None:
    # pysqlite emits its own BEGIN lazily, which breaks SAVEPOINT; hand
    # transaction control back to SQLAlchemy.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # pragma: no cover - driver hook
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):  # pragma: no cover - driver hook
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str, **kwargs) -> Engine:
    """Create an engine for ``url``.

    In-memory SQLite URLs get a StaticPool so the schema persists across
    connections.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        if ":memory:" in url:
            kwargs.setdefault("poolclass", StaticPool)
        engine = create_engine(url, **kwargs)
        _enable_sqlite_savepoints(engine)
        return engine
    kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, **kwargs)


_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        url = resolve_database_url()
        _engine = build_engine(url)
        logger.info("database_engine_created: dialect=%s", _engine.dialect.name)
    return _engine


def SessionLocal() -> Session:
    """Open a new session bound to the process-wide engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _session_factory()


def reset_engine() -> None:
    """Dispose the process-wide engine so the next call rebuilds it from settings."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables and seed the default status rows."""
    from invoicing.db import models
    from invoicing.db.seed import ensure_default_statuses

    engine = engine or get_engine()
    models.Base.metadata.create_all(bind=engine)
    db = Session(bind=engine)
    try:
        ensure_default_statuses(db)
    finally:
        db.close()


def get_db() -> Iterator[Session]:
    """Yield a database session and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session, *, commit: bool = True) -> Iterator[Session]:
    """Run a block of statements atomically.

    With ``commit=True`` the block is committed on success and rolled back on
    any error. With ``commit=False`` the caller owns the transaction: the block
    is only flushed and errors propagate to the caller's scope.
    """
    try:
        yield db
        if commit:
            db.commit()
        else:
            db.flush()
    except Exception:
        if commit:
            db.rollback()
        raise
