import uuid
from datetime import datetime
from decimal import Decimal

from invoicing.db import schemas
from invoicing.utils.constants import INVOICE_STATUS_UNPAID


def _invoice(**kwargs):
    return schemas.Invoice(invoice_date=datetime(2024, 1, 1), invoice_status_key=INVOICE_STATUS_UNPAID, **kwargs)


def test_new_invoice_is_dirty_and_without_identity():
    invoice = _invoice()
    assert invoice.is_dirty
    assert not invoice.has_identity
    assert invoice.items == []
    assert invoice.orders == ()


def test_field_assignment_marks_dirty():
    invoice = _invoice(key=uuid.uuid4())
    invoice.reset_dirty_properties()
    assert not invoice.is_dirty
    assert invoice.has_identity
    invoice.po_number = "PO-7"
    assert invoice.is_dirty


def test_line_item_defaults():
    item = schemas.LineItem(sku="a", name="A", quantity=3, price=Decimal("2.50"))
    assert item.price * item.quantity == Decimal("7.50")
    assert item.line_item_type == "product"
    assert item.extended_data == {}


def test_page_is_generic():
    page = schemas.Page[int](items=[1, 2], current_page=1, items_per_page=2, total_items=5, total_pages=3)
    assert page.items == [1, 2]
    assert page.total_pages == 3


def test_in_place_item_changes_need_mark_dirty():
    invoice = _invoice()
    invoice.reset_dirty_properties()
    invoice.items.append(schemas.LineItem(sku="b", name="B"))
    assert not invoice.is_dirty
    invoice.mark_dirty()
    assert invoice.is_dirty
