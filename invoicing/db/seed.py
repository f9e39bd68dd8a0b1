"""
Seed rows for the store-resident status enumerations.
"""
import logging

from sqlalchemy.orm import Session

from invoicing.db import models
from invoicing.utils.constants import DEFAULT_INVOICE_STATUSES, DEFAULT_ORDER_STATUSES

logger = logging.getLogger(__name__)


def ensure_default_statuses(db: Session) -> int:
    """Insert any missing default invoice/order statuses. Returns the number of rows added."""
    added = 0
    for model, rows in (
        (models.InvoiceStatus, DEFAULT_INVOICE_STATUSES),
        (models.OrderStatus, DEFAULT_ORDER_STATUSES),
    ):
        existing = {key for (key,) in db.query(model.key).all()}
        for key, name, alias, sort_order in rows:
            if key in existing:
                continue
            db.add(model(key=key, name=name, alias=alias, sort_order=sort_order))
            added += 1
    if added:
        db.commit()
        logger.info("seeded %d default status rows", added)
    return added
