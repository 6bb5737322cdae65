from ..services.invoice_types import CamelModel, ExtractedInvoice


class InvoiceRecordIn(ExtractedInvoice):
    """Invoice body plus the identity of the source document, ready to persist"""
    file_id: str | None = None
    file_name: str | None = None


class InvoiceRecord(InvoiceRecordIn):
    id: str
    created_at: str
    updated_at: str


class UploadResponse(CamelModel):
    file_id: str
    file_name: str
    blob_url: str
