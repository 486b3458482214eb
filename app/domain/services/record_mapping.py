# app/domain/services/record_mapping.py
"""
Map raw Airtable records onto domain models through one field-alias table.

Upstream tables were edited by hand over time, so the same column shows up
under several names (``qty_sold`` vs ``Qty``). Each canonical field lists the
source names to try in order; the first truthy value wins, otherwise the
default applies.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from app.core.config import settings
from app.domain.models.invoice import GiftHamper, InvoiceHeader, LineItem, RecentInvoice

LINE_ITEM_FIELDS: dict[str, Sequence[str]] = {
    "name": ("gift_hamper_name", "Gift Hamper Name"),
    "mrp": ("mrp", "MRP (Selling Price)"),
    "pre_tax_price": ("pre_tax_price", "Pre GST Price"),
    "quantity": ("qty_sold", "Qty"),
    "gst_percent": ("gst", "GST"),
    "config": ("gh_config", "Gift Hamper Config", "Description"),
}

SALE_FIELDS: dict[str, Sequence[str]] = {
    "invoice_number": ("sales_invoice_number", "Invoice Number"),
    "invoice_date": ("Invoice Date", "invoice_date"),
    "billing_address": ("Billing Address", "billing_address"),
    "gst": ("GST", "gst", "GSTIN"),
    "contact_person": ("SPOC Details", "spoc_details", "Contact Person"),
    "mobile": ("Mobile", "mobile", "Phone"),
    "email": ("Email", "email"),
    "sr_no": ("Sr No",),
}

GIFT_HAMPER_FIELDS: dict[str, Sequence[str]] = {
    "name": ("Gift Hamper Name",),
    "gh_bom": ("gh_bom",),
    "pre_tax_sale_price_without_shipping": ("pre_tax_sale_price_without_shipping",),
    "image": ("Image",),
}


def _unwrap(value: Any) -> Any:
    # Lookup / rollup columns arrive as single-element arrays
    if isinstance(value, list) and len(value) == 1 and not isinstance(value[0], dict):
        return value[0]
    return value


def first_present(fields: Mapping[str, Any], aliases: Sequence[str], default: Any = None) -> Any:
    """Return the first truthy value among ``aliases`` in ``fields``."""
    for name in aliases:
        value = _unwrap(fields.get(name))
        if value:
            return value
    return default


def _text(fields: Mapping[str, Any], table: Mapping[str, Sequence[str]], key: str, default: str = "") -> str:
    value = first_present(fields, table[key], default)
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def map_line_item(record: Mapping[str, Any], default_gst: float | None = None) -> LineItem:
    fields = record.get("fields") or {}
    gst_default = settings.DEFAULT_GST_PERCENT if default_gst is None else default_gst
    return LineItem(
        id=str(record.get("id") or ""),
        name=_text(fields, LINE_ITEM_FIELDS, "name"),
        supplied_mrp=first_present(fields, LINE_ITEM_FIELDS["mrp"]),
        pre_tax_price=first_present(fields, LINE_ITEM_FIELDS["pre_tax_price"], 0),
        quantity=first_present(fields, LINE_ITEM_FIELDS["quantity"], 1),
        gst_percent=first_present(fields, LINE_ITEM_FIELDS["gst_percent"], gst_default),
        config=_text(fields, LINE_ITEM_FIELDS, "config"),
    )


def map_sale_header(record: Mapping[str, Any], requested_number: str) -> InvoiceHeader:
    fields = record.get("fields") or {}
    return InvoiceHeader(
        invoice_number=_text(fields, SALE_FIELDS, "invoice_number", requested_number),
        invoice_date=_text(fields, SALE_FIELDS, "invoice_date"),
        billing_address=_text(fields, SALE_FIELDS, "billing_address"),
        gst=_text(fields, SALE_FIELDS, "gst"),
        contact_person=_text(fields, SALE_FIELDS, "contact_person"),
        mobile=_text(fields, SALE_FIELDS, "mobile"),
        email=_text(fields, SALE_FIELDS, "email"),
        record_id=record.get("id"),
    )


def map_recent_invoice(record: Mapping[str, Any]) -> RecentInvoice:
    fields = record.get("fields") or {}
    return RecentInvoice(
        sr_no=_text(fields, SALE_FIELDS, "sr_no"),
        invoice_number=_text(fields, SALE_FIELDS, "invoice_number"),
        invoice_date=_text(fields, SALE_FIELDS, "invoice_date"),
        billing_address=_text(fields, SALE_FIELDS, "billing_address"),
    )


def map_gift_hamper(record: Mapping[str, Any], gh_id: str) -> GiftHamper:
    fields = record.get("fields") or {}
    attachments = fields.get(GIFT_HAMPER_FIELDS["image"][0]) or []
    image = attachments[0].get("url") if attachments and isinstance(attachments[0], dict) else None
    return GiftHamper(
        gh_id=gh_id,
        name=_text(fields, GIFT_HAMPER_FIELDS, "name"),
        image=image,
        gh_bom=_text(fields, GIFT_HAMPER_FIELDS, "gh_bom"),
        pre_tax_sale_price_without_shipping=first_present(
            fields, GIFT_HAMPER_FIELDS["pre_tax_sale_price_without_shipping"], 0
        ),
    )
