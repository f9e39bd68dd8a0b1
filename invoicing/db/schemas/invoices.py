import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Tuple
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .line_items import LineItem
from .orders import Order
from .statuses import InvoiceStatus


class Invoice(BaseModel):
    """Invoice aggregate: header fields, owned line items and referencing orders.

    Assigning any public field marks the aggregate dirty; repositories clear
    the flag once the state has been persisted or freshly loaded. In-place
    changes such as `invoice.items.append(...)` are not seen; reassign the
    field (`invoice.items = [...]`) or call `mark_dirty()`.
    """
    key: Optional[uuid.UUID] = None
    customer_key: Optional[uuid.UUID] = None
    invoice_number_prefix: Optional[str] = None
    invoice_number: Optional[int] = None
    invoice_date: datetime
    invoice_status_key: uuid.UUID
    invoice_status: Optional[InvoiceStatus] = None
    version_key: Optional[uuid.UUID] = None
    bill_to_name: Optional[str] = None
    bill_to_address1: Optional[str] = None
    bill_to_locality: Optional[str] = None
    bill_to_postal_code: Optional[str] = None
    bill_to_country_code: Optional[str] = None
    bill_to_email: Optional[str] = None
    bill_to_phone: Optional[str] = None
    bill_to_company: Optional[str] = None
    po_number: Optional[str] = None
    currency_code: Optional[str] = None
    total: Decimal = Decimal('0')
    exported: bool = False
    archived: bool = False
    index_id: Optional[int] = None
    create_date: Optional[datetime] = None
    update_date: Optional[datetime] = None
    items: List[LineItem] = Field(default_factory=list)
    orders: Tuple[Order, ...] = ()
    model_config = ConfigDict(from_attributes=True)

    _dirty: bool = PrivateAttr(default=True)

    def __setattr__(self, name, value):
        super().__setattr__(name, value)
        if name in type(self).model_fields:
            self._dirty = True

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        self._dirty = True

    def reset_dirty_properties(self) -> None:
        self._dirty = False

    @property
    def has_identity(self) -> bool:
        return self.key is not None


# Header columns copied between the aggregate and the `invoices` row.
INVOICE_HEADER_FIELDS = (
    'customer_key',
    'invoice_number_prefix',
    'invoice_number',
    'invoice_date',
    'invoice_status_key',
    'bill_to_name',
    'bill_to_address1',
    'bill_to_locality',
    'bill_to_postal_code',
    'bill_to_country_code',
    'bill_to_email',
    'bill_to_phone',
    'bill_to_company',
    'po_number',
    'currency_code',
    'total',
    'exported',
    'archived',
)
