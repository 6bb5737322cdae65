"""
SQLite-based invoice store for production use.

Each invoice is stored as one JSON document (vendor, invoice body with line
items, identity fields and timestamps) keyed by id. Search filters the
decoded records, so no other column is needed.
"""

import sqlite3
import json
import uuid
from typing import Optional

from loguru import logger

from ...core.errors import PersistenceError
from ...models.invoice import InvoiceRecord, InvoiceRecordIn
from .invoice_store_base import InvoiceStoreBase, matches_query, utc_now


class SQLiteInvoiceStore(InvoiceStoreBase):
    """
    SQLite-backed invoice store with persistent storage.

    Features:
    - Persistent storage across application restarts
    - Insertion-ordered listing (rowid order)
    - Any sqlite3 failure surfaces as PersistenceError
    """

    def __init__(self, db_path: str = "invoices.db"):
        """
        Initialize store with database path.

        Args:
            db_path: Path to SQLite database file (default: invoices.db)
        """
        self.db_path = db_path
        self._init_database()

    def _init_database(self):
        """Create invoices table if it doesn't exist"""
        with self._connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS invoices (
                    id TEXT PRIMARY KEY,
                    document TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

    def _connection(self) -> "_Connection":
        return _Connection(self.db_path)

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> InvoiceRecord:
        return InvoiceRecord.model_validate(json.loads(row["document"]))

    def create(self, body: InvoiceRecordIn) -> InvoiceRecord:
        """
        Store a new invoice.

        Args:
            body: Invoice body with identity fields

        Returns:
            Stored record with UUID id and timestamps
        """
        now = utc_now()
        record = InvoiceRecord(
            **body.model_dump(),
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
        )

        with self._connection() as conn:
            conn.execute("""
                INSERT INTO invoices (id, document, created_at)
                VALUES (?, ?, ?)
            """, (
                record.id,
                record.model_dump_json(by_alias=True),
                record.created_at,
            ))

        logger.info("Invoice stored", invoice_id=record.id, file_id=record.file_id)
        return record

    def get(self, invoice_id: str) -> Optional[InvoiceRecord]:
        """
        Get invoice by ID.

        Returns:
            Invoice record or None if not found
        """
        with self._connection() as conn:
            row = conn.execute(
                "SELECT document FROM invoices WHERE id = ?", (invoice_id,)
            ).fetchone()

        if row is None:
            return None
        return self._row_to_record(row)

    def list_invoices(self, query: Optional[str] = None) -> list[InvoiceRecord]:
        """
        List invoices in insertion order, optionally filtered by search text.

        Filtering happens in Python so the match is a literal, Unicode-aware,
        case-insensitive substring test (SQLite LIKE folds ASCII only).
        """
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT document FROM invoices ORDER BY rowid ASC"
            ).fetchall()

        records = [self._row_to_record(row) for row in rows]
        return [record for record in records if matches_query(record, query)]

    def update(self, invoice_id: str, body: InvoiceRecordIn) -> Optional[InvoiceRecord]:
        """
        Replace an invoice body.

        Returns:
            Updated record or None if not found
        """
        with self._connection() as conn:
            row = conn.execute(
                "SELECT created_at FROM invoices WHERE id = ?", (invoice_id,)
            ).fetchone()
            if row is None:
                return None

            record = InvoiceRecord(
                **body.model_dump(),
                id=invoice_id,
                created_at=row["created_at"],
                updated_at=utc_now(),
            )
            conn.execute("""
                UPDATE invoices
                SET document = ?
                WHERE id = ?
            """, (
                record.model_dump_json(by_alias=True),
                invoice_id,
            ))

        logger.info("Invoice updated", invoice_id=invoice_id)
        return record

    def delete(self, invoice_id: str) -> bool:
        """
        Delete an invoice.

        Returns:
            True if deleted, False if not found
        """
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM invoices WHERE id = ?", (invoice_id,))
            rows_affected = cursor.rowcount

        if rows_affected:
            logger.info("Invoice deleted", invoice_id=invoice_id)
        return rows_affected > 0


class _Connection:
    """Short-lived connection: commit on success, roll back on error, always close"""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.conn: sqlite3.Connection | None = None

    def __enter__(self) -> sqlite3.Connection:
        try:
            self.conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not open invoice database: {e}") from e
        self.conn.row_factory = sqlite3.Row
        return self.conn

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is None:
                self.conn.commit()
            else:
                self.conn.rollback()
        except sqlite3.Error as e:
            logger.error(f"Invoice database error: {e}")
            raise PersistenceError(f"Invoice database error: {e}") from e
        finally:
            self.conn.close()

        if exc_type is not None and issubclass(exc_type, sqlite3.Error):
            logger.error(f"Invoice database error: {exc}")
            raise PersistenceError(f"Invoice database error: {exc}") from exc
        return False
