from typing import Callable

from fastapi import APIRouter, Depends
from loguru import logger

from ..deps import ExtractRequest, get_adapter_factory, get_invoice_store, get_text_extractor
from ...core.errors import BadRequestError
from ...models.invoice import InvoiceRecord
from ...services.model_adapters import ModelAdapter
from ...services.pipeline import extract_invoice_record
from ...services.storage import InvoiceStoreBase

router = APIRouter(tags=["extract"])


@router.post("/extract", response_model=InvoiceRecord)
async def extract(
    req: ExtractRequest,
    store: InvoiceStoreBase = Depends(get_invoice_store),
    adapter_factory: Callable[[str], ModelAdapter] = Depends(get_adapter_factory),
    text_extractor: Callable[[bytes], str] = Depends(get_text_extractor),
):
    """
    Extract an uploaded invoice with the selected model and persist the result.

    Example request:
    {
        "fileId": "0b6f...",
        "model": "gemini",
        "blobUrl": "http://127.0.0.1:8000/files/0b6f....pdf",
        "fileName": "acme-inv-1001.pdf"
    }

    The model name is checked before the document is fetched, so an
    unsupported model never causes a network call.
    """
    if not req.fileId:
        raise BadRequestError("fileId is required")
    if not req.model:
        raise BadRequestError("model is required (gemini or groq)")
    if not req.blobUrl:
        raise BadRequestError("blobUrl is required")
    if not req.fileName:
        raise BadRequestError("fileName is required")

    adapter = adapter_factory(req.model)

    body = await extract_invoice_record(
        file_id=req.fileId,
        file_name=req.fileName,
        blob_url=req.blobUrl,
        adapter=adapter,
        text_extractor=text_extractor,
    )
    record = store.create(body)

    logger.info("Invoice extracted and saved", file_id=req.fileId, invoice_id=record.id, model=req.model)
    return record
