from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status
from loguru import logger

from ..deps import get_invoice_store
from ...core.errors import NotFoundError
from ...models.invoice import InvoiceRecord
from ...services.pipeline import prepare_manual_record
from ...services.storage import InvoiceStoreBase

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("", response_model=list[InvoiceRecord])
async def list_invoices(q: str | None = None, store: InvoiceStoreBase = Depends(get_invoice_store)):
    """List all invoices, or those whose vendor name or invoice number contains `q` (case-insensitive)"""
    return store.list_invoices(q)


@router.get("/{invoice_id}", response_model=InvoiceRecord)
async def get_invoice(invoice_id: str, store: InvoiceStoreBase = Depends(get_invoice_store)):
    record = store.get(invoice_id)
    if record is None:
        raise NotFoundError("Invoice not found")
    return record


@router.post("", response_model=InvoiceRecord, status_code=status.HTTP_201_CREATED)
async def create_invoice(payload: Any = Body(...), store: InvoiceStoreBase = Depends(get_invoice_store)):
    """
    Create an invoice from a manually entered body.

    The body is validated strictly and every derived total is recomputed
    before it is stored.
    """
    body = prepare_manual_record(payload)
    record = store.create(body)
    logger.info("Invoice created", invoice_id=record.id)
    return record


@router.put("/{invoice_id}", response_model=InvoiceRecord)
async def update_invoice(invoice_id: str, payload: Any = Body(...),
                         store: InvoiceStoreBase = Depends(get_invoice_store)):
    """Replace the full invoice body (re-validated, totals re-derived)"""
    body = prepare_manual_record(payload)
    record = store.update(invoice_id, body)
    if record is None:
        raise NotFoundError("Invoice not found")
    return record


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(invoice_id: str, store: InvoiceStoreBase = Depends(get_invoice_store)):
    if not store.delete(invoice_id):
        raise NotFoundError("Invoice not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
