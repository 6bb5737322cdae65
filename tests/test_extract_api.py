"""
Tests for POST /extract.

The document fetch is mocked with respx, text extraction and the model
adapters are replaced through dependency overrides (see conftest).
"""

import json

import httpx
import pytest
import respx

from invoice_extractor.core.errors import UpstreamError, UpstreamTimeoutError

BLOB_URL = "http://blobs.test/files/abc.pdf"

MODEL_REPLY = {
    "vendor": {"name": "Acme Corp", "address": "1 Main St"},
    "invoice": {
        "number": "INV-1001",
        "date": "2024-03-15",
        "taxPercent": 8,
        "subtotal": 29,
        "total": 31,
        "lineItems": [{"description": "Widget", "quantity": 3, "unitPrice": 10, "total": 29}],
    },
}


def extract_request(**overrides):
    body = {"fileId": "abc", "model": "gemini", "blobUrl": BLOB_URL, "fileName": "acme.pdf"}
    body.update(overrides)
    return body


@pytest.fixture
def blob_route():
    with respx.mock(assert_all_called=False) as mock:
        route = mock.get(BLOB_URL).mock(return_value=httpx.Response(200, content=b"%PDF-1.4 test"))
        yield route


@pytest.mark.parametrize("model", ["gemini", "groq"])
def test_extract_persists_reconciled_invoice(client, adapter_factory, invoice_store, blob_route, model):
    adapter_factory.response_text = json.dumps(MODEL_REPLY)

    r = client.post("/extract", json=extract_request(model=model))

    assert r.status_code == 200
    data = r.json()
    assert data["id"]
    assert data["fileId"] == "abc"
    assert data["fileName"] == "acme.pdf"
    assert data["vendor"]["name"] == "Acme Corp"
    # model-reported totals are replaced by derived ones
    assert data["invoice"]["lineItems"][0]["total"] == 30.0
    assert data["invoice"]["subtotal"] == 30.0
    assert data["invoice"]["total"] == 32.4
    assert data["invoice"]["date"] == "2024-03-15T00:00:00"

    assert adapter_factory.requested == [model]
    assert blob_route.called
    assert invoice_store.get(data["id"]).model_dump(by_alias=True) == data


def test_extract_sends_document_text_to_model(client, adapter_factory, blob_route):
    adapter_factory.response_text = json.dumps(MODEL_REPLY)

    client.post("/extract", json=extract_request())

    prompt = adapter_factory.adapters[0].prompts[0]
    assert prompt.endswith("INVOICE\nAcme Corp\nTotal: 32.40")


def test_extract_without_line_items_keeps_model_totals(client, adapter_factory, blob_route):
    reply = {"vendor": {"name": "Acme"}, "invoice": {"number": "X", "total": 12.5}}
    adapter_factory.response_text = json.dumps(reply)

    r = client.post("/extract", json=extract_request())

    assert r.status_code == 200
    assert r.json()["invoice"]["total"] == 12.5
    assert r.json()["invoice"]["lineItems"] == []


def test_extract_partial_reply_gets_defaults(client, adapter_factory, blob_route):
    adapter_factory.response_text = '{"vendor": {}, "invoice": {"lineItems": [{}]}}'

    r = client.post("/extract", json=extract_request())

    assert r.status_code == 200
    data = r.json()
    assert data["vendor"]["name"] == "Unknown Vendor"
    assert data["invoice"]["number"] == "Unknown"
    assert data["invoice"]["lineItems"][0] == {
        "description": "Unknown Item", "quantity": 1, "unitPrice": 0.0, "total": 0.0,
    }


@pytest.mark.parametrize("missing,message", [
    ("fileId", "fileId is required"),
    ("model", "model is required (gemini or groq)"),
    ("blobUrl", "blobUrl is required"),
    ("fileName", "fileName is required"),
])
def test_missing_field_is_bad_request(client, adapter_factory, blob_route, missing, message):
    body = extract_request()
    del body[missing]

    r = client.post("/extract", json=body)

    assert r.status_code == 400
    assert r.json() == {"error": "bad_request", "detail": message}
    assert not blob_route.called
    assert adapter_factory.adapters == []


def test_unsupported_model_is_rejected_before_any_fetch(client, adapter_factory, invoice_store, blob_route):
    r = client.post("/extract", json=extract_request(model="openai"))

    assert r.status_code == 400
    assert r.json()["error"] == "unsupported_model"
    assert adapter_factory.adapters == []
    assert not blob_route.called
    assert invoice_store.list_invoices() == []


def test_malformed_model_reply_is_502(client, adapter_factory, invoice_store, blob_route):
    adapter_factory.response_text = "Here is your invoice: vendor Acme"

    r = client.post("/extract", json=extract_request())

    assert r.status_code == 502
    assert r.json()["error"] == "malformed_response"
    assert invoice_store.list_invoices() == []


def test_reply_without_invoice_shape_is_422(client, adapter_factory, blob_route):
    adapter_factory.response_text = '{"result": "ok"}'

    r = client.post("/extract", json=extract_request())

    assert r.status_code == 422
    assert r.json()["error"] == "invalid_structure"


def test_model_service_failure_is_502(client, adapter_factory, blob_route):
    adapter_factory.error = RuntimeError("quota exceeded")

    r = client.post("/extract", json=extract_request(model="groq"))

    assert r.status_code == 502
    assert r.json()["error"] == "upstream_error"
    assert "Groq" in r.json()["detail"]


def test_empty_model_reply_is_502(client, adapter_factory, blob_route):
    adapter_factory.response_text = ""

    r = client.post("/extract", json=extract_request())

    assert r.status_code == 502
    assert r.json() == {"error": "upstream_error", "detail": "No response from Gemini"}


def test_model_timeout_is_504(client, adapter_factory, blob_route):
    adapter_factory.error = TimeoutError("deadline exceeded")

    r = client.post("/extract", json=extract_request())

    assert r.status_code == 504
    assert r.json()["error"] == "upstream_timeout"


def test_document_fetch_error_status_is_502(client, adapter_factory, invoice_store, blob_route):
    blob_route.mock(return_value=httpx.Response(404))

    r = client.post("/extract", json=extract_request())

    assert r.status_code == 502
    assert r.json() == {"error": "upstream_error", "detail": "Failed to fetch PDF from blob"}
    assert adapter_factory.adapters[0].prompts == []
    assert invoice_store.list_invoices() == []


def test_document_fetch_connection_error_is_502(client, blob_route):
    blob_route.mock(side_effect=httpx.ConnectError("connection refused"))

    r = client.post("/extract", json=extract_request())

    assert r.status_code == 502


def test_document_fetch_timeout_is_504(client, blob_route):
    blob_route.mock(side_effect=httpx.ReadTimeout("timed out"))

    r = client.post("/extract", json=extract_request())

    assert r.status_code == 504


def test_error_classes_share_upstream_base():
    assert issubclass(UpstreamTimeoutError, UpstreamError)
