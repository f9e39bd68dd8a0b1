from unittest.mock import MagicMock

import pytest
from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool

import invoicing.db.database as dbmod
from invoicing.db import models
from invoicing.utils.constants import DEFAULT_INVOICE_STATUSES, DEFAULT_ORDER_STATUSES


@pytest.fixture
def fresh_engine():
    dbmod.reset_engine()
    yield
    dbmod.reset_engine()


def test_build_engine_sqlite_memory_uses_static_pool():
    engine = dbmod.build_engine("sqlite+pysqlite:///:memory:")
    try:
        assert isinstance(engine.pool, StaticPool)
        assert engine.dialect.name == "sqlite"
    finally:
        engine.dispose()


def test_init_db_creates_tables_and_seeds():
    engine = dbmod.build_engine("sqlite+pysqlite:///:memory:")
    try:
        dbmod.init_db(engine)
        dbmod.init_db(engine)
        tables = set(inspect(engine).get_table_names())
        assert {"invoices", "invoice_index", "invoice_items", "orders", "invoice_collection_memberships"} <= tables
        with engine.connect() as conn:
            assert len(conn.execute(models.InvoiceStatus.__table__.select()).fetchall()) == len(DEFAULT_INVOICE_STATUSES)
            assert len(conn.execute(models.OrderStatus.__table__.select()).fetchall()) == len(DEFAULT_ORDER_STATUSES)
    finally:
        engine.dispose()


def test_get_engine_is_lazy_and_resettable(fresh_engine):
    first = dbmod.get_engine()
    assert dbmod.get_engine() is first
    dbmod.reset_engine()
    assert dbmod.get_engine() is not first


def test_get_db_closes_session(fresh_engine, monkeypatch):
    session = MagicMock()
    monkeypatch.setattr(dbmod, "SessionLocal", lambda: session)
    gen = dbmod.get_db()
    assert next(gen) is session
    with pytest.raises(StopIteration):
        next(gen)
    session.close.assert_called_once()


def test_unit_of_work_commits():
    db = MagicMock()
    with dbmod.unit_of_work(db):
        pass
    db.commit.assert_called_once()
    db.rollback.assert_not_called()


def test_unit_of_work_rolls_back_on_error():
    db = MagicMock()
    with pytest.raises(RuntimeError):
        with dbmod.unit_of_work(db):
            raise RuntimeError("boom")
    db.rollback.assert_called_once()
    db.commit.assert_not_called()


def test_unit_of_work_without_commit_only_flushes():
    db = MagicMock()
    with dbmod.unit_of_work(db, commit=False):
        pass
    db.flush.assert_called_once()
    db.commit.assert_not_called()

    db = MagicMock()
    with pytest.raises(RuntimeError):
        with dbmod.unit_of_work(db, commit=False):
            raise RuntimeError("boom")
    db.rollback.assert_not_called()
