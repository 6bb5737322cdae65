"""
Filesystem blob storage for uploaded documents.

Blobs are flat files under one base directory, keyed by name
(`<fileId><ext>`). The API serves them back under /files/{name}, which is
the document reference handed out by /upload.
"""

import uuid
from pathlib import Path

from ..core.config import settings
from ..core.errors import PersistenceError


class FilesystemBlobStore:
    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def get_path(self, key: str) -> Path | None:
        """Full path for a blob key, or None for keys that would escape the base directory"""
        if not key or Path(key).name != key or key in (".", ".."):
            return None
        return self.base_path / key

    def save(self, key: str, content: bytes) -> Path:
        path = self.get_path(key)
        if path is None:
            raise PersistenceError(f"Invalid blob key: {key!r}")
        try:
            path.write_bytes(content)
        except OSError as e:
            raise PersistenceError(f"Failed to store document: {e}") from e
        return path

    def exists(self, key: str) -> bool:
        path = self.get_path(key)
        return path is not None and path.is_file()

    def load(self, key: str) -> bytes | None:
        if not self.exists(key):
            return None
        return self.get_path(key).read_bytes()


def new_blob_key(original_name: str | None) -> tuple[str, str]:
    """Return (file_id, blob_key) for a new upload, keeping the original extension"""
    file_id = str(uuid.uuid4())
    extension = Path(original_name or "").suffix.lower()
    return file_id, f"{file_id}{extension}"


_blob_store: FilesystemBlobStore | None = None


def get_default_blob_store() -> FilesystemBlobStore:
    global _blob_store
    if _blob_store is None:
        _blob_store = FilesystemBlobStore(settings.blob_storage_dir)
    return _blob_store
