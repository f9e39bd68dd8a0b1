"""
Default status keys and sort field names.

Centralized definitions for the store-resident status enumerations so that
predicates, seeds and tests share the same identifiers.
"""

import uuid
from enum import Enum
from typing import Dict, FrozenSet

# Invoice statuses
INVOICE_STATUS_UNPAID = uuid.UUID("17ada9ac-c893-4c26-aa26-234ece3e7bcb")
INVOICE_STATUS_PAID = uuid.UUID("1235b7f5-0c7e-4a0f-9d3c-0c2c3b6f6d61")
INVOICE_STATUS_PARTIAL = uuid.UUID("c6f5e9b0-9b7f-4b65-9a1c-5d3d2b1f7a42")
INVOICE_STATUS_CANCELLED = uuid.UUID("53077ef3-2ca8-4d1c-a5b0-c1bd6b1a8c6f")
INVOICE_STATUS_FRAUD = uuid.UUID("75e1e5eb-33e8-4904-a8e5-4b64a37d6087")

# Order statuses
ORDER_STATUS_NOT_FULFILLED = uuid.UUID("c54d47e6-d1c9-40d5-9baf-18c6adffd83d")
ORDER_STATUS_OPEN = uuid.UUID("6a0f3a2d-5c1e-4b7a-8d34-2c6f8f2e9b10")
ORDER_STATUS_FULFILLED = uuid.UUID("4ac5f7e0-2f1b-4a67-9d9d-8a1a9f3c2e57")
ORDER_STATUS_CANCELLED = uuid.UUID("77d8d9d2-7a4f-4c0e-bf0a-3e5b1c8d2f64")
ORDER_STATUS_BACK_ORDER = uuid.UUID("c2b1a7f4-6e3d-4f58-b9a2-1d7e4c5f3a89")

# (key, name, alias, sort_order)
DEFAULT_INVOICE_STATUSES = (
    (INVOICE_STATUS_UNPAID, "Unpaid", "unpaid", 1),
    (INVOICE_STATUS_PAID, "Paid", "paid", 2),
    (INVOICE_STATUS_PARTIAL, "Partial", "partial", 3),
    (INVOICE_STATUS_CANCELLED, "Cancelled", "cancelled", 4),
    (INVOICE_STATUS_FRAUD, "Fraud", "fraud", 5),
)

DEFAULT_ORDER_STATUSES = (
    (ORDER_STATUS_NOT_FULFILLED, "Not Fulfilled", "notfulfilled", 1),
    (ORDER_STATUS_OPEN, "Open", "open", 2),
    (ORDER_STATUS_FULFILLED, "Fulfilled", "fulfilled", 3),
    (ORDER_STATUS_CANCELLED, "Cancelled", "cancelled", 4),
    (ORDER_STATUS_BACK_ORDER, "Back Order", "backorder", 5),
)


class SortDirection(str, Enum):
    """Sort direction accepted by paged queries."""
    ascending = "asc"
    descending = "desc"


# Public sort field names mapped to invoice column attribute names.
SORT_FIELDS: Dict[str, str] = {
    "invoiceNumber": "invoice_number",
    "invoiceDate": "invoice_date",
    "billToName": "bill_to_name",
    "billToEmail": "bill_to_email",
    "createDate": "create_date",
    "updateDate": "update_date",
}
SORT_FIELDS.update({column: column for column in list(SORT_FIELDS.values())})

ALL_SORT_FIELDS: FrozenSet[str] = frozenset(SORT_FIELDS)


def is_valid_sort_field(name: str) -> bool:
    """Return True if the provided sort field is one of the supported names."""
    return name in ALL_SORT_FIELDS
