"""
Derived invoice totals.

All arithmetic is done in Decimal on the string form of each input, and each
derived quantity (line total, subtotal, tax amount, grand total) is rounded
to cents with ROUND_HALF_UP. Because subtotal and tax amount are already on
the cent grid, total == subtotal + tax_amount holds exactly.
"""

from decimal import Decimal, ROUND_HALF_UP

from pydantic import Field

from .invoice_types import CamelModel, InvoiceBody, LineItem

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class InvoiceTotals(CamelModel):
    line_totals: list[float] = Field(default_factory=list)
    subtotal: float = 0.0
    tax_amount: float = 0.0
    total: float = 0.0


def compute_totals(line_items: list[LineItem], tax_percent: float | None = 0) -> InvoiceTotals:
    """Recompute line totals, subtotal, tax amount and grand total"""
    line_totals = [
        round_money(to_decimal(item.quantity) * to_decimal(item.unit_price))
        for item in line_items
    ]
    subtotal = round_money(sum(line_totals, Decimal("0")))
    tax_amount = round_money(subtotal * to_decimal(tax_percent) / HUNDRED)
    total = round_money(subtotal + tax_amount)

    return InvoiceTotals(
        line_totals=[float(value) for value in line_totals],
        subtotal=float(subtotal),
        tax_amount=float(tax_amount),
        total=float(total),
    )


def apply_totals(invoice: InvoiceBody) -> InvoiceBody:
    """Return a copy of the invoice body with every derived field recomputed"""
    totals = compute_totals(invoice.line_items, invoice.tax_percent)
    line_items = [
        item.model_copy(update={"total": line_total})
        for item, line_total in zip(invoice.line_items, totals.line_totals)
    ]
    return invoice.model_copy(update={
        "line_items": line_items,
        "subtotal": totals.subtotal,
        "total": totals.total,
    })
