"""
Invoice aggregate assembly.

Builds one invoice aggregate from its header row, the line items owned by
it and the orders referencing it. Bulk variants are generators: each
aggregate is loaded on demand, one round-trip per invoice.
"""
from __future__ import annotations

import logging
import uuid
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from sqlalchemy.orm import Session

from invoicing.db import models, schemas
from invoicing.db.repositories.base import LineItemStore, OrderStore
from invoicing.search.predicates import InvoicePredicate

logger = logging.getLogger(__name__)


def build_invoice(
    row: models.Invoice,
    items: Sequence[schemas.LineItem],
    orders: Sequence[schemas.Order],
) -> schemas.Invoice:
    header = {field: getattr(row, field) for field in schemas.INVOICE_HEADER_FIELDS}
    invoice = schemas.Invoice(
        key=row.key,
        version_key=row.version_key,
        invoice_status=schemas.InvoiceStatus.model_validate(row.status) if row.status is not None else None,
        index_id=row.index_row.id if row.index_row is not None else None,
        create_date=row.create_date,
        update_date=row.update_date,
        items=list(items),
        orders=tuple(orders),
        **header,
    )
    invoice.reset_dirty_properties()
    return invoice


def materialize_page(
    page: schemas.Page[uuid.UUID],
    fetch: Callable[[uuid.UUID], Optional[schemas.Invoice]],
) -> schemas.Page[schemas.Invoice]:
    """Turn a page of keys into a page of aggregates, keeping the key order."""
    items: List[schemas.Invoice] = []
    for key in page.items:
        invoice = fetch(key)
        if invoice is not None:
            items.append(invoice)
    return schemas.Page[schemas.Invoice](
        items=items,
        current_page=page.current_page,
        items_per_page=page.items_per_page,
        total_items=page.total_items,
        total_pages=page.total_pages,
    )


class InvoiceAssembler:
    def __init__(self, db: Session, line_items: LineItemStore, orders: OrderStore):
        self.db = db
        self.line_items = line_items
        self.orders = orders

    def load_header(self, key: uuid.UUID) -> Optional[models.Invoice]:
        return self.db.query(models.Invoice).filter(models.Invoice.key == key).first()

    def assemble(self, key: uuid.UUID) -> Optional[schemas.Invoice]:
        row = self.load_header(key)
        if row is None:
            logger.debug("invoice %s not found", key)
            return None
        # Sub-fetches use the stored key, not the caller's argument.
        items = self.line_items.load_for_container(row.key)
        orders = self.orders.find_by_invoice(row.key)
        return build_invoice(row, items, orders)

    def all_keys(self) -> List[uuid.UUID]:
        rows = self.db.query(models.Invoice.key).order_by(models.Invoice.invoice_number.asc()).all()
        return [key for (key,) in rows]

    def assemble_all(self, keys: Optional[Iterable[uuid.UUID]] = None) -> Iterator[schemas.Invoice]:
        """Yield one aggregate per key; with no keys, every stored invoice.

        Keys that no longer resolve to a header are skipped.
        """
        keys = list(keys or ())
        if not keys:
            keys = self.all_keys()
        for key in keys:
            invoice = self.assemble(key)
            if invoice is not None:
                yield invoice

    def assemble_by_predicate(self, predicate: InvoicePredicate) -> Iterator[schemas.Invoice]:
        rows = predicate.apply(self.db.query(models.Invoice.key)).all()
        distinct_keys = dict.fromkeys(key for (key,) in rows)
        for key in distinct_keys:
            invoice = self.assemble(key)
            if invoice is not None:
                yield invoice
