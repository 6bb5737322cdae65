from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON (fileId, unitPrice, lineItems, ...)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Vendor(CamelModel):
    name: str
    address: str | None = None
    tax_id: str | None = None


class LineItem(CamelModel):
    description: str
    quantity: int | float = 1
    unit_price: float = 0.0
    total: float = 0.0


class InvoiceBody(CamelModel):
    number: str
    date: str
    currency: str = "USD"
    subtotal: float | None = None
    tax_percent: float = 0.0
    total: float = 0.0
    po_number: str | None = None
    po_date: str | None = None
    line_items: list[LineItem] = Field(default_factory=list)


class ExtractedInvoice(CamelModel):
    """Normalizer output: vendor + invoice body, before identity fields are attached"""
    vendor: Vendor
    invoice: InvoiceBody
