"""
Invoice collection membership index.

Maintains the many-to-many relation between invoices and externally managed
collections and pages over members / non-members of a collection.
"""
from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from invoicing.db import models, schemas
from invoicing.db.database import unit_of_work
from invoicing.db.repositories.assembler import materialize_page
from invoicing.search.paging import PagedKeyResolver
from invoicing.search.predicates import PredicateBuilder
from invoicing.utils.constants import SortDirection

logger = logging.getLogger(__name__)

Membership = models.InvoiceCollectionMembership


class MembershipIndex:
    def __init__(
        self,
        db: Session,
        resolver: PagedKeyResolver,
        builder: PredicateBuilder,
        fetch: Callable[[uuid.UUID], Optional[schemas.Invoice]],
        *,
        autocommit: bool = True,
    ):
        self.db = db
        self.resolver = resolver
        self.builder = builder
        self.fetch = fetch
        self.autocommit = autocommit

    def exists(self, invoice_key: uuid.UUID, collection_key: uuid.UUID) -> bool:
        count = (
            self.db.query(func.count())
            .select_from(Membership)
            .filter(
                Membership.invoice_key == invoice_key,
                Membership.collection_key == collection_key,
            )
            .scalar()
        )
        return count > 0

    def add(self, invoice_key: uuid.UUID, collection_key: uuid.UUID) -> bool:
        """Add the invoice to the collection. Returns False if it was already a member."""
        if self.exists(invoice_key, collection_key):
            return False
        now = models.now_utc()
        try:
            with unit_of_work(self.db, commit=self.autocommit):
                with self.db.begin_nested():
                    self.db.add(
                        Membership(
                            invoice_key=invoice_key,
                            collection_key=collection_key,
                            create_date=now,
                            update_date=now,
                        )
                    )
        except IntegrityError:
            # A concurrent writer may have inserted the same pair after our check.
            if not self.exists(invoice_key, collection_key):
                raise
            logger.info("invoice %s already in collection %s", invoice_key, collection_key)
            return False
        logger.info("invoice %s added to collection %s", invoice_key, collection_key)
        return True

    def remove(self, invoice_key: uuid.UUID, collection_key: uuid.UUID) -> bool:
        """Remove the membership if present. Returns whether a row was deleted."""
        with unit_of_work(self.db, commit=self.autocommit):
            removed = (
                self.db.query(Membership)
                .filter(
                    Membership.invoice_key == invoice_key,
                    Membership.collection_key == collection_key,
                )
                .delete(synchronize_session=False)
            )
        if removed:
            logger.info("invoice %s removed from collection %s", invoice_key, collection_key)
        return removed > 0

    def keys_in(
        self,
        collection_key: uuid.UUID,
        page: int = 1,
        items_per_page: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_direction: SortDirection = SortDirection.descending,
        *,
        term: Optional[str] = None,
    ) -> schemas.Page[uuid.UUID]:
        predicate = self.builder.build_search_predicate(term).with_membership(collection_key)
        return self.resolver.resolve_keys(predicate, page, items_per_page, sort_field, sort_direction)

    def keys_not_in(
        self,
        collection_key: uuid.UUID,
        page: int = 1,
        items_per_page: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_direction: SortDirection = SortDirection.descending,
        *,
        term: Optional[str] = None,
    ) -> schemas.Page[uuid.UUID]:
        predicate = self.builder.build_search_predicate(term).with_non_membership(collection_key)
        return self.resolver.resolve_keys(predicate, page, items_per_page, sort_field, sort_direction)

    def members(self, collection_key: uuid.UUID, *args, **kwargs) -> schemas.Page[schemas.Invoice]:
        return materialize_page(self.keys_in(collection_key, *args, **kwargs), self.fetch)

    def non_members(self, collection_key: uuid.UUID, *args, **kwargs) -> schemas.Page[schemas.Invoice]:
        return materialize_page(self.keys_not_in(collection_key, *args, **kwargs), self.fetch)
