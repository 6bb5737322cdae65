import httpx
from loguru import logger

from ..core.config import settings
from ..core.errors import UpstreamError, UpstreamTimeoutError


async def fetch_document(url: str) -> bytes:
    """Download a stored document by its reference URL"""
    try:
        async with httpx.AsyncClient(timeout=settings.document_fetch_timeout_seconds) as client:
            r = await client.get(url)
    except httpx.TimeoutException as e:
        logger.error(f"Timed out fetching document: {url}")
        raise UpstreamTimeoutError("Timed out fetching PDF from blob") from e
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch document {url}: {e}")
        raise UpstreamError("Failed to fetch PDF from blob") from e

    if r.status_code >= 400:
        logger.error("Document fetch returned an error status", url=url, http_status=r.status_code)
        raise UpstreamError("Failed to fetch PDF from blob")

    return r.content
