"""
Strict validation for manually entered invoices (POST/PUT /invoices).

Unlike the normalizer, nothing is defaulted here: the first rule violation
rejects the whole submission.
"""

from typing import Any

from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_core import PydanticCustomError

from ..core.errors import ValidationError
from ..models.invoice import InvoiceRecordIn
from .dates import is_valid_date
from .invoice_types import CamelModel


class LineItemPayload(CamelModel):
    description: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)
    total: float = Field(ge=0)


class VendorPayload(CamelModel):
    name: str = Field(min_length=1)
    address: str | None = None
    tax_id: str | None = None


class InvoiceBodyPayload(CamelModel):
    number: str = Field(min_length=1)
    date: str
    currency: str | None = None
    subtotal: float | None = Field(default=None, ge=0)
    tax_percent: float | None = Field(default=None, ge=0, le=100)
    total: float = Field(ge=0)
    po_number: str | None = None
    po_date: str | None = None
    line_items: list[LineItemPayload] = Field(min_length=1)

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        if not is_valid_date(value):
            raise PydanticCustomError("invalid_date", "Invalid date format")
        return value

    @field_validator("po_date")
    @classmethod
    def _check_po_date(cls, value: str | None) -> str | None:
        if value is not None and not is_valid_date(value):
            raise PydanticCustomError("invalid_date", "Invalid PO date format")
        return value


class ManualInvoicePayload(CamelModel):
    file_id: str | None = None
    file_name: str | None = None
    vendor: VendorPayload
    invoice: InvoiceBodyPayload


def _format_location(loc: tuple) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path


def validate_manual_invoice(payload: Any) -> InvoiceRecordIn:
    """
    Validate a manual-entry invoice and convert it to the canonical record body.

    Raises:
        ValidationError: with the first offending field's location and message
    """
    try:
        parsed = ManualInvoicePayload.model_validate(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = _format_location(first["loc"])
        message = f"{field}: {first['msg']}" if field else first["msg"]
        raise ValidationError(message, field=field or None) from e

    # Unset optionals fall back to the canonical defaults (currency USD, taxPercent 0)
    return InvoiceRecordIn.model_validate(parsed.model_dump(exclude_none=True))
