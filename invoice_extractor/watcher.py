"""
Invoice folder watcher.

Watches a folder for new PDF invoices and sends each one through the API
(upload, then extract with the chosen model). Extracted invoices move to the
processed folder, failures to the failed folder, and every outcome is
appended to processing_log.json next to the watch folder.
"""

import json
import time
from datetime import datetime
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .client import ApiClientError, InvoiceApiClient


class InvoiceHandler(FileSystemEventHandler):
    """Handles new invoice file events"""

    def __init__(self, client: InvoiceApiClient, model: str, watch_folder, processed_folder, failed_folder,
                 settle_seconds: float = 1.0):
        self.client = client
        self.model = model
        self.watch_folder = Path(watch_folder)
        self.processed_folder = Path(processed_folder)
        self.failed_folder = Path(failed_folder)
        self.settle_seconds = settle_seconds
        self.processed_files = set()

        # Create folders if they don't exist
        self.processed_folder.mkdir(parents=True, exist_ok=True)
        self.failed_folder.mkdir(parents=True, exist_ok=True)

    def on_created(self, event):
        """Called when a file is created in the watched folder"""
        if event.is_directory:
            return

        file_path = Path(event.src_path)

        # Only process PDF files
        if file_path.suffix.lower() != '.pdf':
            return

        # Avoid processing the same file multiple times
        if file_path in self.processed_files:
            return

        # Small delay to ensure file is fully written
        time.sleep(self.settle_seconds)

        # Check if file still exists (might have been moved)
        if not file_path.exists():
            return

        self.processed_files.add(file_path)
        self.process_invoice(file_path)

    def process_invoice(self, file_path: Path) -> dict | None:
        """Upload and extract one invoice; returns the stored record or None on failure"""
        print("\n" + "=" * 70)
        print(f"📄 NEW INVOICE DETECTED: {file_path.name}")
        print("=" * 70)
        print(f"Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"Size: {file_path.stat().st_size:,} bytes")
        print(f"Model: {self.model}")
        print()

        try:
            print("🔄 Uploading and extracting...")
            record = self.client.upload_and_extract(file_path, self.model)
        except ApiClientError as e:
            print(f"❌ API Error: {e.user_message}")
            print(f"   {e}")
            self.handle_error(file_path, str(e))
            return None

        self.handle_success(file_path, record)
        return record

    def handle_success(self, file_path: Path, record: dict):
        """Print the extracted fields and move the file to the processed folder"""
        vendor = record["vendor"]
        invoice = record["invoice"]

        print()
        print("📊 EXTRACTION RESULTS:")
        print(f"   Vendor: {vendor['name']}")
        print(f"   Invoice #: {invoice['number']}")
        print(f"   Date: {invoice['date']}")
        print(f"   Line items: {len(invoice['lineItems'])}")
        print(f"   Total: {invoice['currency']} {invoice['total']:.2f}")
        print(f"   Record id: {record['id']}")

        dest_path = self.processed_folder / file_path.name
        file_path.rename(dest_path)
        print(f"\n📁 Moved to: {dest_path}")

        self.log_processing(file_path.name, "extracted", dest_path, invoice_id=record["id"])
        print("=" * 70)

    def handle_error(self, file_path: Path, error_msg: str):
        """Move a failed invoice aside for manual review"""
        print(f"\n❌ Processing failed: {error_msg}")

        dest_path = self.failed_folder / file_path.name
        file_path.rename(dest_path)
        print(f"📁 Moved to: {dest_path}")

        self.log_processing(file_path.name, "failed", dest_path, error=error_msg)
        print("=" * 70)

    def log_processing(self, filename: str, status: str, dest_path: Path, **details):
        """Log processing results to JSON file"""
        log_file = self.watch_folder.parent / "processing_log.json"

        # Load existing log
        if log_file.exists():
            with open(log_file, 'r') as f:
                log_data = json.load(f)
        else:
            log_data = []

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "filename": filename,
            "status": status,
            "model": self.model,
            "destination": str(dest_path),
            **details,
        }
        log_data.append(log_entry)

        with open(log_file, 'w') as f:
            json.dump(log_data, f, indent=2)


def watch(client: InvoiceApiClient, model: str, watch_folder: str, processed_folder: str, failed_folder: str):
    """Block watching `watch_folder` until interrupted"""
    watch_path = Path(watch_folder)
    watch_path.mkdir(parents=True, exist_ok=True)

    event_handler = InvoiceHandler(client, model, watch_folder, processed_folder, failed_folder)
    observer = Observer()
    observer.schedule(event_handler, str(watch_path), recursive=False)
    observer.start()

    print("=" * 70)
    print("🔍 INVOICE WATCHER - AUTOMATIC EXTRACTION")
    print("=" * 70)
    print(f"Watching: {watch_path.absolute()}")
    print(f"Extracted → {Path(processed_folder).absolute()}")
    print(f"Failed    → {Path(failed_folder).absolute()}")
    print(f"Model: {model}")
    print()
    print("💡 Drop PDF invoices into the watch folder to process them")
    print("Press Ctrl+C to stop")
    print("=" * 70)
    print()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n\n👋 Stopping watcher...")
        observer.stop()

    observer.join()
    print("✅ Watcher stopped")
