from ...core.config import settings
from .invoice_store_base import InvoiceStoreBase
from .invoices import InMemoryInvoiceStore
from .invoices_sqlite import SQLiteInvoiceStore


def create_invoice_store(backend: str | None = None, db_path: str | None = None) -> InvoiceStoreBase:
    """Build the configured invoice store ("sqlite" or "memory")"""
    backend = (backend or settings.invoice_store_backend).lower()
    if backend == "memory":
        return InMemoryInvoiceStore()
    if backend == "sqlite":
        return SQLiteInvoiceStore(db_path or settings.invoice_db_path)
    raise ValueError(f"Unknown INVOICE_STORE_BACKEND: {backend!r} (expected 'sqlite' or 'memory')")


_invoice_store: InvoiceStoreBase | None = None


def get_default_invoice_store() -> InvoiceStoreBase:
    """Process-wide store, created on first use"""
    global _invoice_store
    if _invoice_store is None:
        _invoice_store = create_invoice_store()
    return _invoice_store


__all__ = [
    "InMemoryInvoiceStore",
    "InvoiceStoreBase",
    "SQLiteInvoiceStore",
    "create_invoice_store",
    "get_default_invoice_store",
]
