"""
Composable, parameterized invoice predicates.

A predicate is an immutable tuple of SQLAlchemy clause elements that are
AND-ed together when applied to a query. Every value reaches the store as a
bound parameter; no user input is ever rendered into SQL text.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Sequence, Tuple

from sqlalchemy import or_, select, exists, not_
from sqlalchemy.sql.elements import ColumnElement

from invoicing.db import models
from invoicing.search.terms import ClassifiedTerms, classify
from invoicing.utils.constants import ORDER_STATUS_NOT_FULFILLED

LIKE_ESCAPE = "\\"


def escape_like(token: str) -> str:
    """Escape LIKE metacharacters so ``token`` matches literally."""
    return (
        token.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def text_pattern(tokens: Sequence[str]) -> str:
    """Join text tokens into one substring pattern: ``%first% second%``."""
    return "%" + "% ".join(escape_like(t) for t in tokens) + "%"


def _text_clause(tokens: Sequence[str]) -> ColumnElement:
    pattern = text_pattern(tokens)
    return or_(
        models.Invoice.bill_to_name.ilike(pattern, escape=LIKE_ESCAPE),
        models.Invoice.bill_to_email.ilike(pattern, escape=LIKE_ESCAPE),
    )


def search_clause(terms: ClassifiedTerms) -> Optional[ColumnElement]:
    """Build the base search condition for classified terms, or None for match-all."""
    numbers = sorted(terms.numbers)
    if numbers and terms.text_tokens:
        return or_(_text_clause(terms.text_tokens), models.Invoice.invoice_number.in_(numbers))
    if numbers:
        return models.Invoice.invoice_number.in_(numbers)
    if terms.text_tokens:
        return _text_clause(terms.text_tokens)
    return None


def _order_with_status(order_status_key: uuid.UUID):
    return exists(
        select(models.Order.key).where(
            models.Order.invoice_key == models.Invoice.key,
            models.Order.order_status_key == order_status_key,
        )
    )


def _any_order():
    return exists(select(models.Order.key).where(models.Order.invoice_key == models.Invoice.key))


def _collection_members(collection_key: uuid.UUID):
    return (
        select(models.InvoiceCollectionMembership.invoice_key)
        .where(models.InvoiceCollectionMembership.collection_key == collection_key)
        .distinct()
    )


@dataclass(frozen=True)
class InvoicePredicate:
    conjuncts: Tuple[ColumnElement, ...] = ()
    not_fulfilled_key: uuid.UUID = ORDER_STATUS_NOT_FULFILLED

    @property
    def is_match_all(self) -> bool:
        return not self.conjuncts

    def where(self, *clauses: ColumnElement) -> "InvoicePredicate":
        """Return a new predicate with ``clauses`` added as conjuncts."""
        return replace(self, conjuncts=self.conjuncts + tuple(clauses))

    def apply(self, query):
        """Filter a Query or Select over ``invoices`` by this predicate."""
        if not self.conjuncts:
            return query
        return query.filter(*self.conjuncts)

    def with_date_range(self, start: datetime, end: datetime) -> "InvoicePredicate":
        return self.where(models.Invoice.invoice_date.between(start, end))

    def with_status_equals(self, invoice_status_key: uuid.UUID) -> "InvoicePredicate":
        return self.where(models.Invoice.invoice_status_key == invoice_status_key)

    def with_status_not_equals(self, invoice_status_key: uuid.UUID) -> "InvoicePredicate":
        return self.where(models.Invoice.invoice_status_key != invoice_status_key)

    def order_status_clause(self, order_status_key: uuid.UUID) -> ColumnElement:
        """Invoices with an order in ``order_status_key``.

        For the "not fulfilled" status, invoices without any order match too.
        """
        clause = _order_with_status(order_status_key)
        if order_status_key == self.not_fulfilled_key:
            clause = or_(clause, not_(_any_order()))
        return clause

    def with_order_status(self, order_status_key: uuid.UUID) -> "InvoicePredicate":
        return self.where(self.order_status_clause(order_status_key))

    def with_order_status_not(self, order_status_key: uuid.UUID) -> "InvoicePredicate":
        return self.where(not_(self.order_status_clause(order_status_key)))

    def with_membership(self, collection_key: uuid.UUID) -> "InvoicePredicate":
        return self.where(models.Invoice.key.in_(_collection_members(collection_key)))

    def with_non_membership(self, collection_key: uuid.UUID) -> "InvoicePredicate":
        return self.where(models.Invoice.key.not_in(_collection_members(collection_key)))


class PredicateBuilder:
    """Creates invoice predicates bound to the configured "not fulfilled" order status."""

    def __init__(self, not_fulfilled_key: Optional[uuid.UUID] = None):
        if not_fulfilled_key is None:
            from invoicing.utils.settings import get_settings
            not_fulfilled_key = get_settings().not_fulfilled_order_status_key
        self.not_fulfilled_key = not_fulfilled_key

    def match_all(self) -> InvoicePredicate:
        return InvoicePredicate(not_fulfilled_key=self.not_fulfilled_key)

    def build_search_predicate(self, raw_term: Optional[str]) -> InvoicePredicate:
        predicate = self.match_all()
        clause = search_clause(classify(raw_term))
        if clause is None:
            return predicate
        return predicate.where(clause)
