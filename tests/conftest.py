import uuid
from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from invoicing.db import models, schemas
from invoicing.db.database import build_engine
from invoicing.db.repositories import InvoiceRepository, OrderRepository
from invoicing.db.seed import ensure_default_statuses
from invoicing.utils.constants import INVOICE_STATUS_UNPAID
from invoicing.utils.settings import SQLITE_MEMORY_URL, refresh_settings_cache

_SETTINGS_ENV_VARS = [
    'DATABASE_URL',
    'POSTGRES_USER',
    'POSTGRES_PASSWORD',
    'POSTGRES_HOST',
    'POSTGRES_PORT',
    'POSTGRES_DB',
    'INVOICE_DEFAULT_PAGE_SIZE',
    'INVOICE_DEFAULT_SORT_FIELD',
    'INVOICE_NOT_FULFILLED_STATUS_KEY',
    'INVOICE_CACHE_MAX_ENTRIES',
    'LOG_LEVEL',
]


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Clear env + cached settings for each test to avoid cross-contamination."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    refresh_settings_cache()
    yield
    refresh_settings_cache()


@pytest.fixture(scope="session")
def engine():
    eng = build_engine(SQLITE_MEMORY_URL)
    models.Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        models.Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    ensure_default_statuses(session)
    try:
        yield session
    finally:
        session.rollback()
        for table in reversed(models.Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()


# Backwards compatibility: some tests expect a 'db' fixture name
@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def repo(db_session):
    return InvoiceRepository(db_session)


@pytest.fixture
def make_invoice():
    def _make(
        name: str = "Jane Doe",
        email: str = "jane@example.com",
        number=None,
        status_key: uuid.UUID = INVOICE_STATUS_UNPAID,
        invoice_date: datetime = None,
        items=None,
        **extra,
    ) -> schemas.Invoice:
        if items is None:
            items = [
                schemas.LineItem(sku="sku-1", name="Widget", quantity=2, price=Decimal("9.99")),
                schemas.LineItem(sku="sku-2", name="Gadget", quantity=1, price=Decimal("24.50")),
            ]
        return schemas.Invoice(
            invoice_number=number,
            bill_to_name=name,
            bill_to_email=email,
            invoice_status_key=status_key,
            invoice_date=invoice_date or datetime(2024, 1, 15, 10, 0),
            items=items,
            **extra,
        )
    return _make


@pytest.fixture
def invoice_factory(repo, make_invoice):
    def _create(**kwargs) -> schemas.Invoice:
        return repo.insert(make_invoice(**kwargs))
    return _create


@pytest.fixture
def order_factory(db_session):
    orders = OrderRepository(db_session)
    counter = {"n": 0}

    def _create(invoice_key: uuid.UUID, status_key: uuid.UUID) -> schemas.Order:
        counter["n"] += 1
        return orders.add(
            schemas.Order(invoice_key=invoice_key, order_number=counter["n"], order_status_key=status_key)
        )
    return _create
