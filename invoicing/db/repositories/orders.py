"""
Order repository functions used by invoice assembly.

Orders have their own lifecycle; the invoice store only reads them by
invoice and offers a minimal write path for callers that own them.
"""
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy.orm import Session

from invoicing.db import models, schemas
from invoicing.db.database import unit_of_work

if TYPE_CHECKING:
    from invoicing.cache import EntityCache

logger = logging.getLogger(__name__)


def _to_schema(row: models.Order) -> schemas.Order:
    return schemas.Order(
        key=row.key,
        invoice_key=row.invoice_key,
        order_number_prefix=row.order_number_prefix,
        order_number=row.order_number,
        order_date=row.order_date,
        order_status_key=row.order_status_key,
        order_status=schemas.OrderStatus.model_validate(row.status) if row.status is not None else None,
        version_key=row.version_key,
        exported=row.exported,
        create_date=row.create_date,
        update_date=row.update_date,
    )


class OrderRepository:
    def __init__(self, db: Session, *, autocommit: bool = True, cache: Optional["EntityCache"] = None):
        self.db = db
        self.autocommit = autocommit
        self.cache = cache

    def find_by_invoice(self, invoice_key: uuid.UUID) -> List[schemas.Order]:
        rows = self.db.query(models.Order).filter(models.Order.invoice_key == invoice_key).all()
        return [_to_schema(row) for row in rows]

    def add(self, order: schemas.Order) -> schemas.Order:
        row = models.Order(
            key=order.key or uuid.uuid4(),
            invoice_key=order.invoice_key,
            order_number_prefix=order.order_number_prefix,
            order_number=order.order_number,
            order_status_key=order.order_status_key,
            exported=order.exported,
        )
        if order.order_date is not None:
            row.order_date = order.order_date
        with unit_of_work(self.db, commit=self.autocommit):
            self.db.add(row)
        self.db.refresh(row)
        # The invoice aggregate embeds its orders.
        if self.cache is not None:
            self.cache.invalidate(row.invoice_key)
        logger.info("order %s added to invoice %s", row.key, row.invoice_key)
        return _to_schema(row)
