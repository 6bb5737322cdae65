from typing import Callable

from pydantic import BaseModel

from ..services.blob_storage import FilesystemBlobStore, get_default_blob_store
from ..services.model_adapters import ModelAdapter, get_model_adapter
from ..services.pdf_text import extract_text
from ..services.storage import InvoiceStoreBase, get_default_invoice_store


class ExtractRequest(BaseModel):
    fileId: str | None = None
    model: str | None = None
    blobUrl: str | None = None
    fileName: str | None = None


# Dependency providers (overridden in tests via app.dependency_overrides)

def get_invoice_store() -> InvoiceStoreBase:
    return get_default_invoice_store()


def get_blob_store() -> FilesystemBlobStore:
    return get_default_blob_store()


def get_adapter_factory() -> Callable[[str], ModelAdapter]:
    return get_model_adapter


def get_text_extractor() -> Callable[[bytes], str]:
    return extract_text
