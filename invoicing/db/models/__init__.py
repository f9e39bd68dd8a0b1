"""
Domain-split SQLAlchemy models.

Exposes `Base`, `now_utc`, and all ORM classes of the invoice store.
"""

from .base import Base, now_utc  # re-export

from .invoices import InvoiceStatus, Invoice, InvoiceIndex, InvoiceItem, AppliedPayment, OfferRedeemed
from .orders import OrderStatus, Order
from .memberships import InvoiceCollectionMembership

__all__ = [
    # base
    "Base",
    "now_utc",
    # invoices
    "InvoiceStatus",
    "Invoice",
    "InvoiceIndex",
    "InvoiceItem",
    "AppliedPayment",
    "OfferRedeemed",
    # orders
    "OrderStatus",
    "Order",
    # collections
    "InvoiceCollectionMembership",
]
