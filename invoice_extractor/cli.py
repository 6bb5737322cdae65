#!/usr/bin/env python3
"""
Command-line entry point.

Usage:
    invoice-extractor serve --port 8000
    invoice-extractor extract invoice.pdf --model gemini
    invoice-extractor search acme
    invoice-extractor watch ./invoices-incoming --model groq
"""

import argparse
import json
import sys

from .client import ApiClientError, InvoiceApiClient
from .core.config import settings
from .services.model_adapters import SUPPORTED_MODELS


def _cmd_serve(args) -> int:
    import uvicorn

    uvicorn.run("invoice_extractor.api.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _cmd_extract(args) -> int:
    with InvoiceApiClient(args.api_url) as client:
        record = client.upload_and_extract(args.pdf, args.model)
    print(json.dumps(record, indent=2))
    return 0


def _cmd_search(args) -> int:
    with InvoiceApiClient(args.api_url) as client:
        records = client.list_invoices(args.query)

    if args.json:
        print(json.dumps(records, indent=2))
        return 0

    for record in records:
        invoice = record["invoice"]
        print(
            f"{record['id']}  {record['vendor']['name']:<30}  {invoice['number']:<15}  "
            f"{invoice['currency']} {invoice['total']:>12.2f}"
        )
    print(f"{len(records)} invoice(s)")
    return 0


def _cmd_watch(args) -> int:
    from .watcher import watch

    with InvoiceApiClient(args.api_url, timeout=120) as client:
        watch(client, args.model, args.watch_folder, args.processed_folder, args.failed_folder)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="invoice-extractor",
        description="Extract, store and search PDF invoices",
    )
    parser.add_argument(
        '--api-url',
        default=settings.api_base_url,
        help=f'API base URL (default: {settings.api_base_url})'
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=_cmd_serve)

    extract = sub.add_parser("extract", help="Upload a PDF and extract it")
    extract.add_argument("pdf", help="Path to the PDF invoice")
    extract.add_argument("--model", choices=SUPPORTED_MODELS, default="gemini")
    extract.set_defaults(func=_cmd_extract)

    search = sub.add_parser("search", help="List invoices, optionally filtered by vendor/invoice number")
    search.add_argument("query", nargs="?", default=None)
    search.add_argument("--json", action="store_true", help="Print raw JSON records")
    search.set_defaults(func=_cmd_search)

    watch = sub.add_parser("watch", help="Watch a folder and extract new PDFs automatically")
    watch.add_argument('watch_folder', nargs='?', default='./invoices-incoming')
    watch.add_argument('--model', choices=SUPPORTED_MODELS, default="gemini")
    watch.add_argument('--processed-folder', default='./invoices-processed')
    watch.add_argument('--failed-folder', default='./invoices-failed')
    watch.set_defaults(func=_cmd_watch)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except ApiClientError as e:
        print(f"❌ {e.user_message}", file=sys.stderr)
        print(f"   {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
