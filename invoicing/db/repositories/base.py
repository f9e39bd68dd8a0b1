"""
Repository contracts.

Structural protocols for the generic paged repository and for the
collaborators the invoice repository is composed from.
"""
from __future__ import annotations

import uuid
from typing import Iterable, Iterator, List, Optional, Protocol, TypeVar, runtime_checkable

from invoicing.db import schemas
from invoicing.search.predicates import InvoicePredicate
from invoicing.utils.constants import SortDirection

E = TypeVar("E")
K = TypeVar("K")


@runtime_checkable
class PagedRepository(Protocol[E, K]):
    def get(self, key: K) -> Optional[E]: ...

    def get_all(self, *keys: K) -> Iterator[E]: ...

    def get_by_query(self, predicate: InvoicePredicate) -> Iterator[E]: ...

    def insert(self, entity: E) -> E: ...

    def update(self, entity: E) -> E: ...

    def delete(self, key: K) -> bool: ...

    def search_keys(
        self,
        term: Optional[str] = None,
        page: int = 1,
        items_per_page: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_direction: SortDirection = SortDirection.descending,
    ) -> schemas.Page[K]: ...


class LineItemStore(Protocol):
    def load_for_container(self, container_key: uuid.UUID) -> List[schemas.LineItem]: ...

    def save(self, line_items: Iterable[schemas.LineItem], invoice_key: uuid.UUID) -> None: ...


class OrderStore(Protocol):
    def find_by_invoice(self, invoice_key: uuid.UUID) -> List[schemas.Order]: ...
