import uuid
from datetime import datetime
from unittest.mock import MagicMock

from invoicing.db import models, schemas
from invoicing.db.repositories import InvoiceAssembler
from invoicing.db.repositories.assembler import build_invoice, materialize_page
from invoicing.search.predicates import InvoicePredicate
from invoicing.utils.constants import INVOICE_STATUS_UNPAID, ORDER_STATUS_OPEN


class JoinedPredicate(InvoicePredicate):
    """Predicate whose query joins orders, so one invoice may yield several rows."""

    def apply(self, query):
        return query.join(models.Order, models.Order.invoice_key == models.Invoice.key)


def test_sub_fetches_use_stored_key(db_session, invoice_factory):
    stored = invoice_factory()
    line_items = MagicMock()
    line_items.load_for_container.return_value = []
    orders = MagicMock()
    orders.find_by_invoice.return_value = []

    invoice = InvoiceAssembler(db_session, line_items, orders).assemble(stored.key)

    assert invoice.key == stored.key
    line_items.load_for_container.assert_called_once_with(stored.key)
    orders.find_by_invoice.assert_called_once_with(stored.key)


def test_missing_header_returns_none_without_sub_fetches(db_session):
    line_items, orders = MagicMock(), MagicMock()
    assert InvoiceAssembler(db_session, line_items, orders).assemble(uuid.uuid4()) is None
    line_items.load_for_container.assert_not_called()
    orders.find_by_invoice.assert_not_called()


def test_assemble_by_predicate_deduplicates(repo, invoice_factory, order_factory):
    first = invoice_factory(number=1)
    second = invoice_factory(number=2)
    invoice_factory(number=3)
    for _ in range(3):
        order_factory(first.key, ORDER_STATUS_OPEN)
    order_factory(second.key, ORDER_STATUS_OPEN)

    got = list(repo.assembler.assemble_by_predicate(JoinedPredicate()))
    assert sorted(inv.invoice_number for inv in got) == [1, 2]
    first_loaded = next(inv for inv in got if inv.key == first.key)
    assert len(first_loaded.orders) == 3


def test_build_invoice_returns_clean_aggregate():
    row = models.Invoice(
        key=uuid.uuid4(),
        invoice_number=5,
        invoice_date=datetime(2024, 1, 1),
        invoice_status_key=INVOICE_STATUS_UNPAID,
        version_key=uuid.uuid4(),
        bill_to_name="Pat",
        total=0,
        exported=False,
        archived=False,
    )
    invoice = build_invoice(row, [schemas.LineItem(sku="a", name="A")], [])
    assert invoice.invoice_number == 5
    assert invoice.bill_to_name == "Pat"
    assert invoice.index_id is None
    assert invoice.invoice_status is None
    assert len(invoice.items) == 1
    assert not invoice.is_dirty


def test_materialize_page_keeps_totals_and_order():
    keys = [uuid.uuid4(), uuid.uuid4(), uuid.uuid4()]
    page = schemas.Page[uuid.UUID](items=keys, current_page=2, items_per_page=3, total_items=9, total_pages=3)
    fetched = []

    def fetch(key):
        fetched.append(key)
        if key == keys[1]:
            return None
        return schemas.Invoice(key=key, invoice_date=datetime(2024, 1, 1), invoice_status_key=INVOICE_STATUS_UNPAID)

    result = materialize_page(page, fetch)
    assert fetched == keys
    assert [inv.key for inv in result.items] == [keys[0], keys[2]]
    assert (result.current_page, result.items_per_page, result.total_items, result.total_pages) == (2, 3, 9, 3)


def test_materialize_empty_page_fetches_nothing():
    page = schemas.Page[uuid.UUID](items=[], current_page=4, items_per_page=3, total_items=9, total_pages=3)
    fetch = MagicMock()
    result = materialize_page(page, fetch)
    assert result.items == []
    fetch.assert_not_called()
