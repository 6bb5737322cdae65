"""
Tests for POST /upload and the GET /files/{name} document reference.
"""

from urllib.parse import urlparse

from invoice_extractor.core.config import settings

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


def upload(client, content=PDF_BYTES, name="acme-1001.pdf", content_type="application/pdf"):
    return client.post("/upload", files={"file": (name, content, content_type)})


def test_upload_returns_identity_and_reference(client, blob_store):
    r = upload(client)

    assert r.status_code == 200
    data = r.json()
    assert data["fileId"]
    assert data["fileName"] == "acme-1001.pdf"
    assert data["blobUrl"].endswith(f"/files/{data['fileId']}.pdf")
    assert blob_store.load(f"{data['fileId']}.pdf") == PDF_BYTES


def test_reference_is_retrievable(client):
    data = upload(client).json()

    r = client.get(urlparse(data["blobUrl"]).path)

    assert r.status_code == 200
    assert r.content == PDF_BYTES
    assert r.headers["content-type"] == "application/pdf"


def test_each_upload_gets_a_new_id(client):
    first = upload(client).json()
    second = upload(client).json()
    assert first["fileId"] != second["fileId"]


def test_non_pdf_is_unsupported_media_type(client, blob_store):
    r = upload(client, content=b"hello", name="notes.txt", content_type="text/plain")

    assert r.status_code == 415
    assert r.json()["error"] == "unsupported_media_type"
    assert list(blob_store.base_path.iterdir()) == []


def test_oversize_upload_is_rejected(client, blob_store, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 16)

    r = upload(client, content=b"%PDF" + b"x" * 64)

    assert r.status_code == 413
    assert r.json()["error"] == "payload_too_large"
    assert list(blob_store.base_path.iterdir()) == []


def test_upload_at_limit_is_accepted(client, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", len(PDF_BYTES))
    assert upload(client).status_code == 200


def test_empty_upload_is_bad_request(client):
    r = upload(client, content=b"")
    assert r.status_code == 400


def test_missing_file_is_bad_request(client):
    r = client.post("/upload", data={"note": "no file here"})

    assert r.status_code == 400
    assert r.json() == {"error": "bad_request", "detail": "No file uploaded"}


def test_unknown_file_is_not_found(client):
    assert client.get("/files/does-not-exist.pdf").status_code == 404


def test_blob_keys_cannot_escape_storage(blob_store):
    assert blob_store.get_path("../secrets.txt") is None
    assert blob_store.get_path("..") is None
    assert not blob_store.exists("../secrets.txt")
