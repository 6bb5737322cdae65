"""
HTTP client for the invoice extraction API.

Resilience policy:
- Network failures (no response at all) on idempotent methods are retried
  with exponential backoff (2, 4, 8 seconds) up to `max_retries` times.
  POST is sent once: the server may have stored the invoice before the
  connection dropped.
- 429 responses carrying Retry-After are retried after the advertised delay.

Every failure surfaces as an ApiClientError subclass whose `user_message`
is suitable for showing to a person.
"""

import time
from pathlib import Path
from typing import Callable, Optional

import httpx
from loguru import logger


class ApiClientError(Exception):
    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(message or self.user_message)
        self.status_code = status_code


class NetworkUnavailableError(ApiClientError):
    user_message = "Network error. Please check your connection and try again."


class ServerError(ApiClientError):
    user_message = "Server error. Please try again later."


class ForbiddenError(ApiClientError):
    user_message = "You don't have permission to perform this action."


class NotFoundApiError(ApiClientError):
    user_message = "The requested resource was not found."


class PayloadTooLargeApiError(ApiClientError):
    user_message = "File is too large. Maximum size is 25 MB."


class UnsupportedMediaApiError(ApiClientError):
    user_message = "Unsupported file type. Please upload a PDF."


class RateLimitedError(ApiClientError):
    user_message = "Too many requests. Please wait a moment and try again."

    def __init__(self, message: str | None = None, status_code: int | None = 429,
                 retry_after: float | None = None):
        super().__init__(message, status_code)
        self.retry_after = retry_after


class ApiRequestError(ApiClientError):
    """Any other 4xx; `user_message` is the server's own message"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, status_code)
        self.user_message = message


# Methods safe to resend after a network failure
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})

STATUS_ERRORS = {
    403: ForbiddenError,
    404: NotFoundApiError,
    413: PayloadTooLargeApiError,
    415: UnsupportedMediaApiError,
}


def _retry_after_seconds(response: httpx.Response) -> float | None:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


def _server_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("error")
        if isinstance(detail, str):
            return detail
    return f"HTTP {response.status_code}"


def error_for_response(response: httpx.Response) -> ApiClientError:
    """Map a failed response to the client error for its category"""
    status_code = response.status_code
    message = _server_message(response)

    if status_code == 429:
        return RateLimitedError(message, retry_after=_retry_after_seconds(response))
    if status_code >= 500:
        return ServerError(message, status_code)
    error_cls = STATUS_ERRORS.get(status_code)
    if error_cls is not None:
        return error_cls(message, status_code)
    return ApiRequestError(message, status_code)


class InvoiceApiClient:
    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_retries = max_retries
        self._sleep = sleep
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "InvoiceApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        network_retries = 0
        rate_limit_retries = 0

        while True:
            try:
                response = self._client.request(method, url, **kwargs)
            except httpx.TransportError as e:
                if method.upper() not in IDEMPOTENT_METHODS or network_retries >= self.max_retries:
                    raise NetworkUnavailableError(str(e)) from e
                network_retries += 1
                delay = 2 ** network_retries
                logger.warning(f"Network error, retrying ({network_retries}/{self.max_retries}) in {delay}s: {e}")
                self._sleep(delay)
                continue

            if response.status_code == 429 and rate_limit_retries < self.max_retries:
                retry_after = _retry_after_seconds(response)
                if retry_after is not None:
                    rate_limit_retries += 1
                    logger.info(f"Rate limited. Retrying in {retry_after:g} seconds...")
                    self._sleep(retry_after)
                    continue

            if response.is_error:
                raise error_for_response(response)
            return response

    # Invoice methods

    def list_invoices(self, q: Optional[str] = None) -> list[dict]:
        params = {"q": q} if q else None
        return self._request("GET", "/invoices", params=params).json()

    def get_invoice(self, invoice_id: str) -> dict:
        return self._request("GET", f"/invoices/{invoice_id}").json()

    def create_invoice(self, data: dict) -> dict:
        return self._request("POST", "/invoices", json=data).json()

    def update_invoice(self, invoice_id: str, data: dict) -> dict:
        return self._request("PUT", f"/invoices/{invoice_id}", json=data).json()

    def delete_invoice(self, invoice_id: str) -> None:
        self._request("DELETE", f"/invoices/{invoice_id}")

    # Upload / extract methods

    def upload_file(self, path: str | Path) -> dict:
        path = Path(path)
        with path.open("rb") as f:
            files = {"file": (path.name, f.read(), "application/pdf")}
        return self._request("POST", "/upload", files=files).json()

    def extract_invoice(self, file_id: str, model: str, blob_url: str, file_name: str) -> dict:
        data = {"fileId": file_id, "model": model, "blobUrl": blob_url, "fileName": file_name}
        return self._request("POST", "/extract", json=data).json()

    def upload_and_extract(self, path: str | Path, model: str) -> dict:
        uploaded = self.upload_file(path)
        return self.extract_invoice(
            file_id=uploaded["fileId"],
            model=model,
            blob_url=uploaded["blobUrl"],
            file_name=uploaded["fileName"],
        )
