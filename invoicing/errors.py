"""Exceptions raised by the invoice persistence layer."""


class InvoiceStoreError(Exception):
    """Base class for errors raised by this package."""


class InvalidPagingError(InvoiceStoreError, ValueError):
    """Raised when page or page size arguments violate the paging contract."""

    def __init__(self, message: str, *, page=None, items_per_page=None):
        super().__init__(message)
        self.page = page
        self.items_per_page = items_per_page


class UnexpectedDataError(InvoiceStoreError):
    """Raised when a stored value cannot be interpreted (e.g. a non-numeric document number)."""


class InvoiceNotFoundError(InvoiceStoreError, LookupError):
    """Raised when a write targets an invoice key that is not stored."""
