"""
Invoice assembly for both creation paths.

AI path:     document -> text -> model adapter (normalized) -> totals -> record body
Manual path: payload -> strict validation -> totals -> record body

Both paths end in the same totals reconciliation so a stored invoice always
satisfies subtotal == sum(line totals) and total == subtotal + tax.
"""

import asyncio
from typing import Any, Awaitable, Callable

from loguru import logger

from ..core.config import settings
from ..core.errors import UpstreamTimeoutError
from ..models.invoice import InvoiceRecordIn
from .documents import fetch_document
from .invoice_types import ExtractedInvoice
from .model_adapters import ModelAdapter
from .pdf_text import extract_text
from .totals import apply_totals
from .validation import validate_manual_invoice


async def run_model_extraction(adapter: ModelAdapter, text: str,
                               timeout_seconds: float | None = None) -> ExtractedInvoice:
    """Run the blocking adapter call in a worker thread under the configured timeout"""
    timeout = timeout_seconds or settings.model_timeout_seconds
    try:
        return await asyncio.wait_for(asyncio.to_thread(adapter.extract, text), timeout=timeout)
    except TimeoutError as e:
        logger.error(f"{adapter.display_name} did not respond in time", timeout_seconds=timeout)
        raise UpstreamTimeoutError(f"{adapter.display_name} did not respond within {timeout:g} seconds") from e


def reconcile_extracted(extracted: ExtractedInvoice) -> ExtractedInvoice:
    """Recompute derived totals; invoices without line items keep the totals the model read"""
    if not extracted.invoice.line_items:
        return extracted
    return extracted.model_copy(update={"invoice": apply_totals(extracted.invoice)})


def build_extracted_record(file_id: str, file_name: str, extracted: ExtractedInvoice) -> InvoiceRecordIn:
    reconciled = reconcile_extracted(extracted)
    return InvoiceRecordIn(
        file_id=file_id,
        file_name=file_name,
        vendor=reconciled.vendor,
        invoice=reconciled.invoice,
    )


async def extract_invoice_record(
    file_id: str,
    file_name: str,
    blob_url: str,
    adapter: ModelAdapter,
    text_extractor: Callable[[bytes], str] = extract_text,
    fetch: Callable[[str], Awaitable[bytes]] = fetch_document,
) -> InvoiceRecordIn:
    """Fetch, read and extract one uploaded document into a record body ready to persist"""
    document = await fetch(blob_url)
    text = text_extractor(document)

    logger.info("Extracting invoice", model=adapter.name, file_id=file_id, file_name=file_name)
    extracted = await run_model_extraction(adapter, text)
    return build_extracted_record(file_id, file_name, extracted)


def prepare_manual_record(payload: Any) -> InvoiceRecordIn:
    """Validate a manual submission and re-derive every computed field"""
    body = validate_manual_invoice(payload)
    return body.model_copy(update={"invoice": apply_totals(body.invoice)})
