"""
Invoice search building blocks: term classification, predicates and paging.
"""

from .terms import ClassifiedTerms, classify
from .predicates import InvoicePredicate, PredicateBuilder
from .paging import PagedKeyResolver

__all__ = [
    "ClassifiedTerms",
    "classify",
    "InvoicePredicate",
    "PredicateBuilder",
    "PagedKeyResolver",
]
