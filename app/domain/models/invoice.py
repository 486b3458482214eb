from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


def coerce_amount(value: Any) -> Decimal:
    """Lenient numeric coercion: missing, malformed or negative values become 0."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        text = str(value).strip().replace(",", "").replace("₹", "")
        if not text:
            return Decimal("0")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return Decimal("0")
    if not amount.is_finite() or amount < 0:
        return Decimal("0")
    return amount


def coerce_quantity(value: Any) -> int:
    return int(coerce_amount(value))


class LineItem(BaseModel):
    """One invoice line (a gift hamper, product or shipping charge)."""

    id: str = ""
    name: str = ""
    pre_tax_price: Decimal = Field(default=Decimal("0"))
    quantity: int = 1
    gst_percent: Decimal = Field(default=Decimal("0"))
    # MRP as supplied upstream; display MRP is always derived from price + GST
    supplied_mrp: Optional[Decimal] = None
    config: str = ""

    @field_validator("pre_tax_price", "gst_percent", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> Decimal:
        return coerce_amount(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity(cls, v: Any) -> int:
        return coerce_quantity(v)

    @field_validator("supplied_mrp", mode="before")
    @classmethod
    def _supplied_mrp(cls, v: Any) -> Optional[Decimal]:
        if v is None or v == "":
            return None
        return coerce_amount(v)


class InvoiceTotals(BaseModel):
    taxable_amount: Decimal = Field(default=Decimal("0"))
    tax_amount: Decimal = Field(default=Decimal("0"))
    grand_total: Decimal = Field(default=Decimal("0"))


class InvoiceHeader(BaseModel):
    invoice_number: str
    invoice_date: str = ""
    billing_address: str = ""
    gst: str = ""
    contact_person: str = ""
    mobile: str = ""
    email: str = ""
    record_id: Optional[str] = None


class SellerInfo(BaseModel):
    name: str
    address: str
    gst: str
    phone: str = ""
    email: str = ""


class BankDetails(BaseModel):
    account_name: str
    bank_name: str
    account_number: str
    ifsc: str
    branch: str
    location: str = ""


class InvoiceDocument(BaseModel):
    """Everything the proforma invoice renderer needs."""

    invoice: InvoiceHeader
    items: list[LineItem] = Field(default_factory=list)
    totals: InvoiceTotals = Field(default_factory=InvoiceTotals)
    seller: SellerInfo
    bank_details: BankDetails
    terms: list[str] = Field(default_factory=list)
    payment_terms: list[str] = Field(default_factory=list)


class RecentInvoice(BaseModel):
    sr_no: str = ""
    invoice_number: str = ""
    invoice_date: str = ""
    billing_address: str = ""


class GiftHamper(BaseModel):
    gh_id: str
    name: str = ""
    image: Optional[str] = None
    gh_bom: str = ""
    pre_tax_sale_price_without_shipping: Decimal = Field(default=Decimal("0"))

    @field_validator("pre_tax_sale_price_without_shipping", mode="before")
    @classmethod
    def _price(cls, v: Any) -> Decimal:
        return coerce_amount(v)
