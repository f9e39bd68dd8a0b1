"""
Pydantic schemas exchanged with callers of the invoice store.
"""

from .statuses import InvoiceStatus, OrderStatus
from .line_items import LineItem
from .orders import Order
from .invoices import Invoice, INVOICE_HEADER_FIELDS
from .pages import Page

__all__ = [
    "InvoiceStatus",
    "OrderStatus",
    "LineItem",
    "Order",
    "Invoice",
    "INVOICE_HEADER_FIELDS",
    "Page",
]
