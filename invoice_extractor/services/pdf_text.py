import io

import pdfplumber
from loguru import logger

from ..core.errors import DocumentTextError


def extract_text(file_bytes: bytes) -> str:
    """Extract the plain text of every page of a PDF, pages separated by blank lines"""
    if not file_bytes:
        raise DocumentTextError("Document is empty")

    try:
        with pdfplumber.open(io.BytesIO(file_bytes)) as pdf:
            page_texts = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.error(f"PDF text extraction failed: {e}")
        raise DocumentTextError("Failed to read PDF document") from e

    text = "\n\n".join(page_texts)
    logger.info("Extracted PDF text", pages=len(page_texts), text_chars=len(text))
    return text
