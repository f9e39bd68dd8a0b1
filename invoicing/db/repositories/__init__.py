"""
Per-aggregate repository modules for database access.

`InvoiceRepository` is the facade callers use; the remaining modules are
the collaborators it is composed from and may be injected separately.
"""

from .base import PagedRepository, LineItemStore, OrderStore
from .line_items import LineItemRepository
from .orders import OrderRepository
from .assembler import InvoiceAssembler
from .memberships import MembershipIndex
from .invoices import InvoiceRepository

__all__ = [
    "PagedRepository",
    "LineItemStore",
    "OrderStore",
    "LineItemRepository",
    "OrderRepository",
    "InvoiceAssembler",
    "MembershipIndex",
    "InvoiceRepository",
]
