"""
Integration tests against the real Gemini and Groq APIs.

These tests require model API keys to be configured:
- Set GEMINI_API_KEY in .env
- Set GROQ_API_KEY in .env

Run with `pytest --run-integration`. Backends without a key are skipped.
"""

import pytest

from invoice_extractor.core.config import settings
from invoice_extractor.services.model_adapters import get_model_adapter
from invoice_extractor.services.pipeline import reconcile_extracted

SAMPLE_TEXT = """
ACME SUPPLY CO.
12 Industrial Way, Springfield

INVOICE #: ACME-2024-0042
Date: March 15, 2024
PO Number: PO-7781

Description            Qty   Unit Price   Amount
Steel bolts (box)        3        10.00    30.00
Hex nuts (box)           2         4.50     9.00

Subtotal                                   39.00
Tax (8%)                                    3.12
TOTAL DUE (USD)                            42.12
"""

KEYS = {"gemini": settings.gemini_api_key, "groq": settings.groq_api_key}


@pytest.mark.integration
@pytest.mark.parametrize("model", sorted(KEYS))
def test_extract_sample_invoice(model):
    if not KEYS[model]:
        pytest.skip(f"{model.upper()}_API_KEY not configured")

    extracted = get_model_adapter(model).extract(SAMPLE_TEXT)
    result = reconcile_extracted(extracted)

    assert "acme" in result.vendor.name.lower()
    assert "0042" in result.invoice.number
    assert len(result.invoice.line_items) == 2
    assert result.invoice.subtotal == 39.0
    assert result.invoice.total == pytest.approx(42.12, abs=0.01)

    print(f"\n✓ {model}:")
    print(f"  Vendor: {result.vendor.name}")
    print(f"  Invoice #: {result.invoice.number}")
    print(f"  Total: {result.invoice.currency} {result.invoice.total}")
