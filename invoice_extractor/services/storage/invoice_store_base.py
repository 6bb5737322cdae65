"""
Abstract base class for invoice record stores.

Defines the interface that all invoice stores must implement,
enabling dependency injection and easy swapping of storage backends.
"""

from abc import ABC, abstractmethod
from datetime import datetime, UTC
from typing import Optional

from ...models.invoice import InvoiceRecord, InvoiceRecordIn


def utc_now() -> str:
    return datetime.now(UTC).isoformat()


def matches_query(record: InvoiceRecord, query: Optional[str]) -> bool:
    """Case-insensitive substring match on vendor name or invoice number"""
    if not query:
        return True
    needle = query.casefold()
    return (
        needle in record.vendor.name.casefold()
        or needle in record.invoice.number.casefold()
    )


class InvoiceStoreBase(ABC):
    """
    Abstract base class for invoice persistence.

    Implementations can use:
    - In-memory storage (for testing/demo)
    - SQLite (for single-instance deployments)
    - A document database (for production)
    """

    @abstractmethod
    def create(self, body: InvoiceRecordIn) -> InvoiceRecord:
        """
        Persist a new invoice.

        Args:
            body: Validated, totals-reconciled invoice with identity fields

        Returns:
            Stored record with id, createdAt and updatedAt assigned
        """
        pass

    @abstractmethod
    def get(self, invoice_id: str) -> Optional[InvoiceRecord]:
        """
        Get an invoice by ID.

        Returns:
            The record, or None if not found
        """
        pass

    @abstractmethod
    def list_invoices(self, query: Optional[str] = None) -> list[InvoiceRecord]:
        """
        List invoices in insertion order.

        Args:
            query: Optional substring matched case-insensitively against
                vendor name and invoice number (empty = all invoices)
        """
        pass

    @abstractmethod
    def update(self, invoice_id: str, body: InvoiceRecordIn) -> Optional[InvoiceRecord]:
        """
        Replace the full body of an invoice.

        Returns:
            Updated record (createdAt kept, updatedAt refreshed), or None if not found
        """
        pass

    @abstractmethod
    def delete(self, invoice_id: str) -> bool:
        """
        Delete an invoice.

        Returns:
            True if deleted, False if not found
        """
        pass
