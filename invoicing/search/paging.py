"""
Paged key resolution over invoice predicates.
"""
from __future__ import annotations

import logging
import math
import uuid
from typing import Optional, Union

from sqlalchemy.orm import Session

from invoicing.db import models, schemas
from invoicing.errors import InvalidPagingError
from invoicing.search.predicates import InvoicePredicate
from invoicing.utils.constants import SORT_FIELDS, SortDirection, is_valid_sort_field

logger = logging.getLogger(__name__)


def validate_paging(page: int, items_per_page: int) -> None:
    """Reject page numbers below 1 and non-positive page sizes."""
    if items_per_page is None or items_per_page <= 0:
        raise InvalidPagingError(
            f"items_per_page must be positive, got {items_per_page!r}",
            page=page,
            items_per_page=items_per_page,
        )
    if page is None or page < 1:
        raise InvalidPagingError(
            f"page is 1-based, got {page!r}",
            page=page,
            items_per_page=items_per_page,
        )


def _coerce_direction(sort_direction: Union[SortDirection, str, None]) -> SortDirection:
    if isinstance(sort_direction, SortDirection):
        return sort_direction
    if sort_direction and str(sort_direction).lower() in ("asc", "ascending"):
        return SortDirection.ascending
    return SortDirection.descending


class PagedKeyResolver:
    """Executes invoice predicates and returns one page of invoice keys."""

    def __init__(
        self,
        db: Session,
        *,
        default_sort_field: Optional[str] = None,
        default_items_per_page: Optional[int] = None,
    ):
        if default_sort_field is None or default_items_per_page is None:
            from invoicing.utils.settings import get_settings
            settings = get_settings()
            default_sort_field = default_sort_field or settings.default_sort_field
            default_items_per_page = default_items_per_page or settings.default_items_per_page
        self.db = db
        self.default_items_per_page = default_items_per_page
        self.default_sort_field = default_sort_field if is_valid_sort_field(default_sort_field) else "invoiceNumber"

    def _order_column(self, sort_field: Optional[str]):
        name = sort_field or self.default_sort_field
        if not is_valid_sort_field(name):
            logger.warning("unknown sort field %r, using %r", name, self.default_sort_field)
            name = self.default_sort_field
        column = SORT_FIELDS[name]
        return getattr(models.Invoice, column)

    def resolve_keys(
        self,
        predicate: InvoicePredicate,
        page: int,
        items_per_page: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_direction: Union[SortDirection, str, None] = SortDirection.descending,
    ) -> schemas.Page[uuid.UUID]:
        if items_per_page is None:
            items_per_page = self.default_items_per_page
        validate_paging(page, items_per_page)
        direction = _coerce_direction(sort_direction)

        query = predicate.apply(self.db.query(models.Invoice.key))
        total_items = query.count()
        total_pages = math.ceil(total_items / items_per_page)

        keys = []
        if page <= total_pages:
            order_column = self._order_column(sort_field)
            if direction == SortDirection.descending:
                ordering = (order_column.desc(), models.Invoice.key.desc())
            else:
                ordering = (order_column.asc(), models.Invoice.key.asc())
            rows = (
                query.order_by(*ordering)
                .offset((page - 1) * items_per_page)
                .limit(items_per_page)
                .all()
            )
            keys = [key for (key,) in rows]

        logger.debug(
            "resolved %d keys (page %d/%d, total %d)", len(keys), page, total_pages, total_items
        )
        return schemas.Page[uuid.UUID](
            items=keys,
            current_page=page,
            items_per_page=items_per_page,
            total_items=total_items,
            total_pages=total_pages,
        )
