"""
Invoice line item repository.

Loads and saves the ordered line item collection of one invoice. Writes are
flushed into the caller's unit of work and never committed here.
"""
from __future__ import annotations

import uuid
from typing import Iterable, List

from sqlalchemy.orm import Session

from invoicing.db import models, schemas

_LINE_ITEM_FIELDS = (
    'line_item_type',
    'sku',
    'name',
    'quantity',
    'price',
    'exported',
)


def _to_schema(row: models.InvoiceItem) -> schemas.LineItem:
    return schemas.LineItem(
        key=row.key,
        container_key=row.container_key,
        line_item_type=row.line_item_type,
        sku=row.sku,
        name=row.name,
        quantity=row.quantity,
        price=row.price,
        exported=row.exported,
        extended_data=dict(row.extended_data or {}),
        create_date=row.create_date,
        update_date=row.update_date,
    )


class LineItemRepository:
    def __init__(self, db: Session):
        self.db = db

    def load_for_container(self, container_key: uuid.UUID) -> List[schemas.LineItem]:
        rows = (
            self.db.query(models.InvoiceItem)
            .filter(models.InvoiceItem.container_key == container_key)
            .order_by(models.InvoiceItem.sort_order.asc(), models.InvoiceItem.create_date.asc())
            .all()
        )
        return [_to_schema(row) for row in rows]

    def save(self, line_items: Iterable[schemas.LineItem], invoice_key: uuid.UUID) -> None:
        """Replace the stored collection of ``invoice_key`` with ``line_items``.

        Items keep their keys (new ones get a key assigned); stored items that
        are no longer present are deleted. Position in ``line_items`` becomes
        the persisted sort order.
        """
        existing = {
            row.key: row
            for row in self.db.query(models.InvoiceItem)
            .filter(models.InvoiceItem.container_key == invoice_key)
            .all()
        }
        saved = []
        for position, item in enumerate(line_items):
            if item.key is None:
                item.key = uuid.uuid4()
            item.container_key = invoice_key
            row = existing.pop(item.key, None)
            if row is None:
                row = models.InvoiceItem(key=item.key, container_key=invoice_key)
                self.db.add(row)
            for field in _LINE_ITEM_FIELDS:
                setattr(row, field, getattr(item, field))
            row.extended_data = dict(item.extended_data or {})
            row.sort_order = position
            saved.append((item, row))

        for row in existing.values():
            self.db.delete(row)
        self.db.flush()

        for item, row in saved:
            item.create_date = row.create_date
            item.update_date = row.update_date
