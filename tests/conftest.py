"""
Pytest configuration and shared fixtures.

This file registers custom pytest markers and command-line options, and
wires the API to an in-memory store, a temporary blob directory and fake
model adapters.
"""

import pytest
from fastapi.testclient import TestClient

from invoice_extractor.api.deps import (
    get_adapter_factory,
    get_blob_store,
    get_invoice_store,
    get_text_extractor,
)
from invoice_extractor.api.main import app
from invoice_extractor.core.errors import UnsupportedModelError
from invoice_extractor.services.blob_storage import FilesystemBlobStore
from invoice_extractor.services.model_adapters import SUPPORTED_MODELS, ModelAdapter
from invoice_extractor.services.storage import InMemoryInvoiceStore


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against the real Gemini/Groq APIs"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring real model API keys"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


class FakeAdapter(ModelAdapter):
    """Adapter returning a canned reply (or raising) instead of calling a model service"""

    def __init__(self, name: str, response_text: str | None = None, error: Exception | None = None):
        self.name = name
        self.display_name = name.title()
        self.response_text = response_text
        self.error = error
        self.prompts = []

    def _generate(self, prompt: str) -> str | None:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response_text


class FakeAdapterFactory:
    """Stands in for get_model_adapter; records which backends were requested"""

    def __init__(self, response_text: str | None = None, error: Exception | None = None):
        self.response_text = response_text
        self.error = error
        self.requested = []
        self.adapters = []

    def __call__(self, name):
        self.requested.append(name)
        if name not in SUPPORTED_MODELS:
            raise UnsupportedModelError(name, SUPPORTED_MODELS)
        adapter = FakeAdapter(name, self.response_text, self.error)
        self.adapters.append(adapter)
        return adapter


@pytest.fixture
def invoice_store():
    return InMemoryInvoiceStore()


@pytest.fixture
def blob_store(tmp_path):
    return FilesystemBlobStore(tmp_path / "blobs")


@pytest.fixture
def adapter_factory():
    return FakeAdapterFactory()


@pytest.fixture
def client(invoice_store, blob_store, adapter_factory):
    """TestClient with every external collaborator replaced"""
    app.dependency_overrides[get_invoice_store] = lambda: invoice_store
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_adapter_factory] = lambda: adapter_factory
    app.dependency_overrides[get_text_extractor] = lambda: (lambda data: "INVOICE\nAcme Corp\nTotal: 32.40")
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def manual_invoice():
    """A valid manual-entry body"""
    return {
        "fileId": "file-123",
        "fileName": "acme-1001.pdf",
        "vendor": {"name": "Acme Corp", "address": "1 Main St", "taxId": "US-99"},
        "invoice": {
            "number": "INV-1001",
            "date": "2024-03-15",
            "currency": "USD",
            "taxPercent": 8,
            "total": 0,
            "poNumber": "PO-77",
            "poDate": "2024-03-01",
            "lineItems": [
                {"description": "Widget", "quantity": 3, "unitPrice": 10.0, "total": 0},
            ],
        },
    }
