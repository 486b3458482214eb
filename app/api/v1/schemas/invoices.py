# app/api/v1/schemas/invoices.py
"""Request and response schemas for invoice endpoints."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    token: str
    history_limit: int


class LoadInvoiceRequest(BaseModel):
    invoice_number: str = Field(min_length=1, max_length=50)


class AddShippingRequest(BaseModel):
    """Mirrors the shipping dialog: price before GST, GST %, quantity."""

    pre_gst_price: Decimal = Field(ge=0)
    gst_percent: Decimal | None = Field(default=None, ge=0, le=100)
    quantity: int = Field(default=1, ge=1)


class UpdateLineItemRequest(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    pre_tax_price: Decimal | None = Field(default=None, ge=0)
    quantity: int | None = Field(default=None, ge=1)
    gst_percent: Decimal | None = Field(default=None, ge=0, le=100)
    config: str | None = None


class LineItemDetail(BaseModel):
    id: str
    name: str
    pre_tax_price: Decimal
    quantity: int
    gst_percent: Decimal
    mrp: Decimal
    amount: Decimal
    supplied_mrp: Decimal | None
    config: str
    config_items: list[str]


class TotalsDetail(BaseModel):
    taxable_amount: Decimal
    tax_amount: Decimal
    grand_total: Decimal


class InvoiceDetail(BaseModel):
    """Full invoice document returned in responses."""

    invoice: dict
    items: list[LineItemDetail]
    totals: TotalsDetail
    seller: dict
    bank_details: dict
    terms: list[str]
    payment_terms: list[str]
    can_undo: bool = False
