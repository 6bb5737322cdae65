"""
In-memory invoice store (for tests and demos).
In production, use the SQLite store or a document database.
"""
from typing import Dict, Optional
import uuid

from ...models.invoice import InvoiceRecord, InvoiceRecordIn
from .invoice_store_base import InvoiceStoreBase, matches_query, utc_now


class InMemoryInvoiceStore(InvoiceStoreBase):
    def __init__(self):
        self._invoices: Dict[str, dict] = {}

    def create(self, body: InvoiceRecordIn) -> InvoiceRecord:
        """Store a new invoice and return it with identity and timestamps"""
        now = utc_now()
        record = InvoiceRecord(
            **body.model_dump(),
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
        )
        self._invoices[record.id] = record.model_dump(by_alias=True)
        return record

    def get(self, invoice_id: str) -> Optional[InvoiceRecord]:
        """Get invoice by ID"""
        stored = self._invoices.get(invoice_id)
        return InvoiceRecord.model_validate(stored) if stored is not None else None

    def list_invoices(self, query: Optional[str] = None) -> list[InvoiceRecord]:
        records = [InvoiceRecord.model_validate(stored) for stored in self._invoices.values()]
        return [record for record in records if matches_query(record, query)]

    def update(self, invoice_id: str, body: InvoiceRecordIn) -> Optional[InvoiceRecord]:
        """Replace an invoice body, keeping its id and creation time"""
        stored = self._invoices.get(invoice_id)
        if stored is None:
            return None

        record = InvoiceRecord(
            **body.model_dump(),
            id=invoice_id,
            created_at=stored["createdAt"],
            updated_at=utc_now(),
        )
        self._invoices[invoice_id] = record.model_dump(by_alias=True)
        return record

    def delete(self, invoice_id: str) -> bool:
        return self._invoices.pop(invoice_id, None) is not None
