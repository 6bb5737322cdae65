from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from loguru import logger

from ..deps import get_blob_store
from ...core.config import settings
from ...core.errors import BadRequestError, NotFoundError, PayloadTooLargeError, UnsupportedMediaTypeError
from ...models.invoice import UploadResponse
from ...services.blob_storage import FilesystemBlobStore, new_blob_key

router = APIRouter(tags=["documents"])

PDF_MIME_TYPE = "application/pdf"


@router.post("/upload", response_model=UploadResponse)
async def upload(file: UploadFile = File(None), blob_store: FilesystemBlobStore = Depends(get_blob_store)):
    """
    Store an uploaded PDF and return its identity plus a retrievable reference.

    Rejects non-PDF MIME types (415) and files over MAX_UPLOAD_BYTES (413).
    """
    if file is None:
        raise BadRequestError("No file uploaded")
    if file.content_type != PDF_MIME_TYPE:
        raise UnsupportedMediaTypeError("Only PDF files are allowed")

    # Read one byte past the limit so oversize files are detected without buffering them whole
    content = await file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes / (1024 * 1024)
        raise PayloadTooLargeError(f"File exceeds the {limit_mb:g} MB upload limit")
    if not content:
        raise BadRequestError("Uploaded file is empty")

    file_id, blob_key = new_blob_key(file.filename)
    blob_store.save(blob_key, content)
    blob_url = f"{settings.api_base_url.rstrip('/')}/files/{blob_key}"

    logger.info("Document uploaded", file_id=file_id, file_name=file.filename, size_bytes=len(content))
    return UploadResponse(file_id=file_id, file_name=file.filename or blob_key, blob_url=blob_url)


@router.get("/files/{name}")
async def get_file(name: str, blob_store: FilesystemBlobStore = Depends(get_blob_store)):
    """Serve a stored document (the target of blobUrl)"""
    if not blob_store.exists(name):
        raise NotFoundError("File not found")
    return FileResponse(blob_store.get_path(name), media_type=PDF_MIME_TYPE)
