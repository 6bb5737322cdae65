"""
Normalization of raw model output into a canonical ExtractedInvoice.

Language models return partial, loosely typed JSON. Every field is coerced
on its own and replaced by the default in FIELD_DEFAULTS when it is missing
or unusable. The only non-recoverable case is a payload that is not
invoice-shaped at all (no top-level vendor or invoice).

No cross-field recomputation happens here: line-item totals are passed
through as the model reported them and reconciled later by the totals engine.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Any, Callable

from loguru import logger

from ..core.errors import InvalidStructureError
from .dates import parse_date
from .invoice_types import ExtractedInvoice

# Marker for "use the current timestamp" (invoice date policy)
NOW = object()

_NON_NUMERIC = re.compile(r"[^\d.\-]")
_CURRENCY_CODE = re.compile(r"\b[A-Z]{3}\b")


def _text(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _number(value: Any) -> int | float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        # json.loads yields arbitrarily large ints
        try:
            float(value)
        except OverflowError:
            return None
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        # "$1,200.50", "USD 385.00", "385.00 EUR"
        cleaned = _CURRENCY_CODE.sub("", value).replace(",", "")
        cleaned = _NON_NUMERIC.sub("", cleaned)
        try:
            number = float(cleaned)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def _amount(value: Any) -> int | float | None:
    number = _number(value)
    if number is None or number < 0:
        return None
    return number


def _quantity(value: Any) -> int | float | None:
    number = _number(value)
    if number is None or number <= 0:
        return None
    if float(number).is_integer():
        return int(number)
    return number


def _percent(value: Any) -> int | float | None:
    number = _number(value)
    if number is None or not 0 <= number <= 100:
        return None
    return number


def _date(value: Any) -> str | None:
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


@dataclass(frozen=True)
class FieldRule:
    """How one field is coerced, and what it becomes when coercion yields nothing"""
    coerce: Callable[[Any], Any]
    default: Any = None


VENDOR_FIELDS = {
    "name": FieldRule(_text, "Unknown Vendor"),
    "address": FieldRule(_text),
    "taxId": FieldRule(_text),
}

LINE_ITEM_FIELDS = {
    "description": FieldRule(_text, "Unknown Item"),
    "quantity": FieldRule(_quantity, 1),
    "unitPrice": FieldRule(_amount, 0),
    "total": FieldRule(_amount, 0),
}

INVOICE_FIELDS = {
    "number": FieldRule(_text, "Unknown"),
    "date": FieldRule(_date, NOW),
    "currency": FieldRule(_text, "USD"),
    "subtotal": FieldRule(_amount),
    "taxPercent": FieldRule(_percent, 0),
    "total": FieldRule(_amount, 0),
    "poNumber": FieldRule(_text),
    "poDate": FieldRule(_date),
}

# Single auditable table: section -> field -> rule
FIELD_DEFAULTS = {
    "vendor": VENDOR_FIELDS,
    "invoice": INVOICE_FIELDS,
    "invoice.lineItems[]": LINE_ITEM_FIELDS,
}


def _as_object(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _apply_rules(rules: dict[str, FieldRule], source: dict, now: datetime, path: str, defaulted: list) -> dict:
    result = {}
    for field, rule in rules.items():
        value = rule.coerce(source.get(field))
        if value is None:
            value = now.isoformat() if rule.default is NOW else rule.default
            if field in source:
                defaulted.append(f"{path}.{field}")
        result[field] = value
    return result


def normalize(raw: Any, now: datetime | None = None) -> ExtractedInvoice:
    """
    Turn a parsed model response into a canonical ExtractedInvoice.

    Args:
        raw: Parsed JSON value returned by the model
        now: Timestamp used when the invoice date is missing or unparseable
            (defaults to the current UTC time)

    Returns:
        ExtractedInvoice with every field populated or explicitly absent

    Raises:
        InvalidStructureError: raw is not an object or lacks vendor/invoice
    """
    if not isinstance(raw, dict):
        raise InvalidStructureError("Invalid extracted data structure: expected a JSON object")
    if raw.get("vendor") is None or raw.get("invoice") is None:
        raise InvalidStructureError("Invalid extracted data structure: vendor and invoice are required")

    now = now or datetime.now(UTC)
    defaulted: list[str] = []

    vendor_raw = _as_object(raw["vendor"])
    invoice_raw = _as_object(raw["invoice"])

    vendor = _apply_rules(VENDOR_FIELDS, vendor_raw, now, "vendor", defaulted)
    invoice = _apply_rules(INVOICE_FIELDS, invoice_raw, now, "invoice", defaulted)

    items_raw = invoice_raw.get("lineItems")
    if not isinstance(items_raw, list):
        items_raw = []
    invoice["lineItems"] = [
        _apply_rules(LINE_ITEM_FIELDS, _as_object(item), now, f"invoice.lineItems[{index}]", defaulted)
        for index, item in enumerate(items_raw)
    ]

    if defaulted:
        logger.debug("Replaced unusable extracted fields with defaults", fields=defaulted)

    return ExtractedInvoice.model_validate({"vendor": vendor, "invoice": invoice})
