"""
Abstract base class for language-model extraction backends.

Each backend only knows how to send a prompt and hand back the reply text.
Prompt assembly, error classification, JSON parsing and normalization are
shared here so every backend yields the same result type and the same
error kinds.
"""

import json
import re
from abc import ABC, abstractmethod

import httpx
from loguru import logger

from ...core.errors import MalformedResponseError, UpstreamError, UpstreamTimeoutError
from ..invoice_types import ExtractedInvoice
from ..normalizer import normalize

EXTRACTION_PROMPT = """
Extract invoice data from the following PDF text. Return a valid JSON object with the following structure:
{
  "vendor": {
    "name": "Vendor Name",
    "address": "Vendor Address (if available, otherwise omit)",
    "taxId": "Vendor tax / VAT / GST id (if available, otherwise omit)"
  },
  "invoice": {
    "number": "Invoice Number",
    "date": "Invoice Date (in ISO format if possible)",
    "currency": "ISO 4217 currency code, e.g. USD",
    "subtotal": 123.45,
    "taxPercent": 8.0,
    "total": 123.45,
    "poNumber": "Purchase order number (if available, otherwise omit)",
    "poDate": "Purchase order date in ISO format (if available, otherwise omit)",
    "lineItems": [
      {
        "description": "Item Description",
        "quantity": 1,
        "unitPrice": 123.45,
        "total": 123.45
      }
    ]
  }
}
Handle missing fields by omitting them or setting to null. Ensure the JSON is valid.
PDF Text:
"""

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)


def parse_model_json(response_text: str):
    """Parse the model reply as JSON, tolerating one surrounding Markdown code fence"""
    text = response_text.strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Model response is not valid JSON: {e.msg}") from e
    except ValueError as e:
        # integer literals past the int-string conversion limit
        raise MalformedResponseError(f"Model response is not valid JSON: {e}") from e


class ModelAdapter(ABC):
    """
    One language-model backend.

    Subclasses set `name`/`display_name` and implement `_generate`. Adapters
    never retry; retry policy belongs to the caller.
    """

    name: str = ""
    display_name: str = ""
    timeout_errors: tuple = (TimeoutError, httpx.TimeoutException)

    @abstractmethod
    def _generate(self, prompt: str) -> str | None:
        """Send the prompt to the model service and return the reply text"""

    def extract(self, text: str) -> ExtractedInvoice:
        """
        Extract a canonical invoice from document text.

        Raises:
            UpstreamTimeoutError: the service call timed out
            UpstreamError: the service call failed or returned no content
            MalformedResponseError: the reply is not valid JSON
            InvalidStructureError: the JSON has no vendor/invoice object
        """
        logger.info("Sending document text to model", model=self.name, text_chars=len(text))

        try:
            response_text = self._generate(EXTRACTION_PROMPT + text)
        except self.timeout_errors as e:
            logger.error(f"{self.display_name} request timed out: {e}")
            raise UpstreamTimeoutError(f"{self.display_name} request timed out") from e
        except Exception as e:
            logger.error(f"{self.display_name} extraction error: {e}")
            raise UpstreamError(f"Failed to extract with {self.display_name}: {e}") from e

        if not response_text or not response_text.strip():
            raise UpstreamError(f"No response from {self.display_name}")

        logger.debug(f"{self.display_name} response received", response_chars=len(response_text))
        return normalize(parse_model_json(response_text))
