"""
Invoice repository.

Facade over the invoice store: CRUD on invoice aggregates, term/status/
order-status search in keys-only and aggregate form, and collection
membership. Composed from the predicate builder, the paged key resolver,
the aggregate assembler and the membership index; each may be injected.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy.orm import Session

from invoicing.cache import EntityCache, NullCache
from invoicing.db import models, schemas
from invoicing.db.database import unit_of_work
from invoicing.db.repositories.assembler import InvoiceAssembler, materialize_page
from invoicing.db.repositories.base import LineItemStore, OrderStore
from invoicing.db.repositories.line_items import LineItemRepository
from invoicing.db.repositories.memberships import MembershipIndex
from invoicing.db.repositories.orders import OrderRepository
from invoicing.errors import InvoiceNotFoundError, InvoiceStoreError, UnexpectedDataError
from invoicing.search.paging import PagedKeyResolver
from invoicing.search.predicates import InvoicePredicate, PredicateBuilder
from invoicing.utils.constants import SortDirection

logger = logging.getLogger(__name__)

# Dependent rows removed before the header, in this order.
_DELETE_CASCADE = (
    (models.AppliedPayment, models.AppliedPayment.invoice_key),
    (models.InvoiceItem, models.InvoiceItem.container_key),
    (models.InvoiceIndex, models.InvoiceIndex.invoice_key),
    (models.OfferRedeemed, models.OfferRedeemed.invoice_key),
    (models.InvoiceCollectionMembership, models.InvoiceCollectionMembership.invoice_key),
)


def _load_status(db: Session, status_key: uuid.UUID) -> Optional[schemas.InvoiceStatus]:
    row = db.get(models.InvoiceStatus, status_key)
    return schemas.InvoiceStatus.model_validate(row) if row is not None else None


class InvoiceRepository:
    def __init__(
        self,
        db: Session,
        *,
        line_items: Optional[LineItemStore] = None,
        orders: Optional[OrderStore] = None,
        cache: Optional[EntityCache] = None,
        builder: Optional[PredicateBuilder] = None,
        resolver: Optional[PagedKeyResolver] = None,
        autocommit: bool = True,
    ):
        self.db = db
        self.autocommit = autocommit
        self.cache = cache if cache is not None else NullCache()
        self.line_items = line_items if line_items is not None else LineItemRepository(db)
        self.orders = orders if orders is not None else OrderRepository(db, autocommit=autocommit, cache=self.cache)
        self.builder = builder if builder is not None else PredicateBuilder()
        self.resolver = resolver if resolver is not None else PagedKeyResolver(db)
        self.assembler = InvoiceAssembler(db, self.line_items, self.orders)
        self.memberships = MembershipIndex(
            db, self.resolver, self.builder, self.get, autocommit=autocommit
        )

    # ── READ ──────────────────────────────────────────────

    def get(self, key: uuid.UUID) -> Optional[schemas.Invoice]:
        if key is None:
            return None
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        invoice = self.assembler.assemble(key)
        if invoice is not None:
            self.cache.set(key, invoice)
        return invoice

    def get_all(self, *keys: uuid.UUID) -> Iterator[schemas.Invoice]:
        return self.assembler.assemble_all(keys)

    def get_by_query(self, predicate: InvoicePredicate) -> Iterator[schemas.Invoice]:
        return self.assembler.assemble_by_predicate(predicate)

    def exists(self, key: uuid.UUID) -> bool:
        return self.db.query(models.Invoice.key).filter(models.Invoice.key == key).first() is not None

    def max_document_number(self) -> int:
        """Return the highest assigned invoice number, or 0 when there are no invoices."""
        value = (
            self.db.query(models.Invoice.invoice_number)
            .order_by(models.Invoice.invoice_number.desc())
            .limit(1)
            .scalar()
        )
        if value is None:
            return 0
        try:
            return int(str(value))
        except ValueError as e:
            raise UnexpectedDataError(f"Stored invoice number is not numeric: {value!r}") from e

    # ── WRITE ─────────────────────────────────────────────

    def insert(self, invoice: schemas.Invoice) -> schemas.Invoice:
        """Persist a new invoice with its line items and search index row."""
        key = invoice.key or uuid.uuid4()
        invoice_number = invoice.invoice_number
        if invoice_number is None:
            invoice_number = self.max_document_number() + 1
        version_key = uuid.uuid4()
        now = models.now_utc()

        with unit_of_work(self.db, commit=self.autocommit):
            header = {field: getattr(invoice, field) for field in schemas.INVOICE_HEADER_FIELDS}
            header['invoice_number'] = invoice_number
            row = models.Invoice(
                key=key,
                version_key=version_key,
                create_date=now,
                update_date=now,
                **header,
            )
            self.db.add(row)
            self.db.flush()
            index_row = models.InvoiceIndex(invoice_key=key, create_date=now, update_date=now)
            self.db.add(index_row)
            self.db.flush()
            index_id = index_row.id
            self.line_items.save(invoice.items, key)

        invoice.key = key
        invoice.invoice_number = invoice_number
        invoice.version_key = version_key
        invoice.create_date = now
        invoice.update_date = now
        invoice.index_id = index_id
        invoice.invoice_status = _load_status(self.db, invoice.invoice_status_key)
        self.cache.invalidate(key)
        invoice.reset_dirty_properties()
        logger.info(f"Inserted invoice {key} with number {invoice_number}")
        return invoice

    def update(self, invoice: schemas.Invoice) -> schemas.Invoice:
        """Persist header and line item changes of a stored invoice."""
        if not invoice.has_identity:
            raise InvoiceStoreError("Cannot update an invoice that has not been inserted")
        row = self.db.query(models.Invoice).filter(models.Invoice.key == invoice.key).first()
        if row is None:
            raise InvoiceNotFoundError(f"Invoice {invoice.key} does not exist")
        if invoice.invoice_number is not None and invoice.invoice_number != row.invoice_number:
            raise InvoiceStoreError(
                f"Invoice {invoice.key} already has number {row.invoice_number}; it cannot be reassigned"
            )
        version_key = uuid.uuid4()
        now = models.now_utc()

        with unit_of_work(self.db, commit=self.autocommit):
            for field in schemas.INVOICE_HEADER_FIELDS:
                if field == 'invoice_number':
                    continue
                setattr(row, field, getattr(invoice, field))
            row.version_key = version_key
            row.update_date = now
            index_row = (
                self.db.query(models.InvoiceIndex)
                .filter(models.InvoiceIndex.invoice_key == invoice.key)
                .first()
            )
            if index_row is None:
                logger.warning(f"Search index row missing for invoice {invoice.key}; recreating")
                index_row = models.InvoiceIndex(invoice_key=invoice.key, create_date=now)
                self.db.add(index_row)
            index_row.update_date = now
            self.db.flush()
            index_id = index_row.id
            self.line_items.save(invoice.items, invoice.key)

        invoice.invoice_number = row.invoice_number
        invoice.version_key = version_key
        invoice.update_date = now
        invoice.index_id = index_id
        invoice.invoice_status = _load_status(self.db, invoice.invoice_status_key)
        self.cache.invalidate(invoice.key)
        invoice.reset_dirty_properties()
        logger.info(f"Updated invoice {invoice.key}")
        return invoice

    def delete(self, key: uuid.UUID) -> bool:
        """Delete an invoice and its dependent rows. Returns whether the invoice existed."""
        if key is None:
            return False
        with unit_of_work(self.db, commit=self.autocommit):
            for model, column in _DELETE_CASCADE:
                self.db.query(model).filter(column == key).delete(synchronize_session=False)
            removed = (
                self.db.query(models.Invoice)
                .filter(models.Invoice.key == key)
                .delete(synchronize_session=False)
            )
        self.cache.invalidate(key)
        if removed:
            logger.info(f"Deleted invoice {key}")
        else:
            logger.warning(f"Invoice {key} not found for deletion")
        return removed > 0

    # ── SEARCH ────────────────────────────────────────────

    def _paged_keys(self, predicate, page, items_per_page, sort_field, sort_direction):
        return self.resolver.resolve_keys(predicate, page, items_per_page, sort_field, sort_direction)

    def search_keys(
        self,
        term: Optional[str] = None,
        page: int = 1,
        items_per_page: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_direction: SortDirection = SortDirection.descending,
        *,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> schemas.Page[uuid.UUID]:
        predicate = self.builder.build_search_predicate(term)
        if start_date is not None or end_date is not None:
            if start_date is None or end_date is None:
                raise ValueError("start_date and end_date must be given together")
            predicate = predicate.with_date_range(start_date, end_date)
        return self._paged_keys(predicate, page, items_per_page, sort_field, sort_direction)

    def search(self, *args, **kwargs) -> schemas.Page[schemas.Invoice]:
        return materialize_page(self.search_keys(*args, **kwargs), self.get)

    def keys_matching_invoice_status(
        self,
        term: Optional[str],
        invoice_status_key: uuid.UUID,
        page: int = 1,
        items_per_page: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_direction: SortDirection = SortDirection.descending,
    ) -> schemas.Page[uuid.UUID]:
        predicate = self.builder.build_search_predicate(term).with_status_equals(invoice_status_key)
        return self._paged_keys(predicate, page, items_per_page, sort_field, sort_direction)

    def matching_invoice_status(self, *args, **kwargs) -> schemas.Page[schemas.Invoice]:
        return materialize_page(self.keys_matching_invoice_status(*args, **kwargs), self.get)

    def keys_not_matching_invoice_status(
        self,
        term: Optional[str],
        invoice_status_key: uuid.UUID,
        page: int = 1,
        items_per_page: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_direction: SortDirection = SortDirection.descending,
    ) -> schemas.Page[uuid.UUID]:
        predicate = self.builder.build_search_predicate(term).with_status_not_equals(invoice_status_key)
        return self._paged_keys(predicate, page, items_per_page, sort_field, sort_direction)

    def not_matching_invoice_status(self, *args, **kwargs) -> schemas.Page[schemas.Invoice]:
        return materialize_page(self.keys_not_matching_invoice_status(*args, **kwargs), self.get)

    def keys_matching_order_status(
        self,
        order_status_key: uuid.UUID,
        page: int = 1,
        items_per_page: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_direction: SortDirection = SortDirection.descending,
        *,
        term: Optional[str] = None,
    ) -> schemas.Page[uuid.UUID]:
        predicate = self.builder.build_search_predicate(term).with_order_status(order_status_key)
        return self._paged_keys(predicate, page, items_per_page, sort_field, sort_direction)

    def matching_order_status(self, *args, **kwargs) -> schemas.Page[schemas.Invoice]:
        return materialize_page(self.keys_matching_order_status(*args, **kwargs), self.get)

    def keys_not_matching_order_status(
        self,
        order_status_key: uuid.UUID,
        page: int = 1,
        items_per_page: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_direction: SortDirection = SortDirection.descending,
        *,
        term: Optional[str] = None,
    ) -> schemas.Page[uuid.UUID]:
        predicate = self.builder.build_search_predicate(term).with_order_status_not(order_status_key)
        return self._paged_keys(predicate, page, items_per_page, sort_field, sort_direction)

    def not_matching_order_status(self, *args, **kwargs) -> schemas.Page[schemas.Invoice]:
        return materialize_page(self.keys_not_matching_order_status(*args, **kwargs), self.get)

    # ── COLLECTIONS ───────────────────────────────────────

    def exists_in_collection(self, key: uuid.UUID, collection_key: uuid.UUID) -> bool:
        return self.memberships.exists(key, collection_key)

    def add_to_collection(self, key: uuid.UUID, collection_key: uuid.UUID) -> bool:
        return self.memberships.add(key, collection_key)

    def remove_from_collection(self, key: uuid.UUID, collection_key: uuid.UUID) -> bool:
        return self.memberships.remove(key, collection_key)

    def keys_from_collection(self, collection_key: uuid.UUID, *args, **kwargs) -> schemas.Page[uuid.UUID]:
        return self.memberships.keys_in(collection_key, *args, **kwargs)

    def keys_not_in_collection(self, collection_key: uuid.UUID, *args, **kwargs) -> schemas.Page[uuid.UUID]:
        return self.memberships.keys_not_in(collection_key, *args, **kwargs)

    def get_from_collection(self, collection_key: uuid.UUID, *args, **kwargs) -> schemas.Page[schemas.Invoice]:
        return self.memberships.members(collection_key, *args, **kwargs)

    def get_not_in_collection(self, collection_key: uuid.UUID, *args, **kwargs) -> schemas.Page[schemas.Invoice]:
        return self.memberships.non_members(collection_key, *args, **kwargs)
