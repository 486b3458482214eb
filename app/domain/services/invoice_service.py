# app/domain/services/invoice_service.py
"""
Invoice and gift-hamper lookups against Airtable.

Wraps the low-level ``AirtableClient`` with the table names, formulas and
record mapping the invoice generator needs:

  Sale         one row per invoice, matched on ``sales_invoice_number``
  Sale_LI      line items, linked to the sale through the ``so`` field
  Gift Hamper  catalog rows, matched on ``gh_id``
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from app.domain.models.invoice import (
    GiftHamper,
    InvoiceDocument,
    InvoiceHeader,
    LineItem,
    RecentInvoice,
)
from app.domain.services.invoice_defaults import BANK_DETAILS, PAYMENT_TERMS, SELLER_INFO, TERMS
from app.domain.services.invoice_totals import compute_invoice_totals, warn_on_mrp_divergence
from app.domain.services.record_mapping import (
    map_gift_hamper,
    map_line_item,
    map_recent_invoice,
    map_sale_header,
)
from app.infrastructure.external.airtable_client import (
    AirtableClient,
    equals_formula,
    linked_record_formula,
)

logger = logging.getLogger("invoice_service")

SALE_TABLE = "Sale"
SALE_LINE_ITEM_TABLE = "Sale_LI"
GIFT_HAMPER_TABLE = "Gift Hamper"

SALE_NUMBER_FIELD = "sales_invoice_number"
SALE_LINK_FIELD = "so"
GIFT_HAMPER_ID_FIELD = "gh_id"

RECENT_INVOICE_LIMIT = 20
RECENT_SORT_FIELD = "Invoice Date"


class RecordNotFound(Exception):
    """Raised when the requested invoice or gift hamper does not exist."""


def normalize_lookup_key(value: Any, label: str) -> str:
    key = str(value if value is not None else "").strip()
    if not key:
        raise ValueError(f"{label} is required")
    return key


def build_document(
    invoice: InvoiceHeader,
    items: Iterable[LineItem],
) -> InvoiceDocument:
    """Assemble a document with freshly computed totals and the fixed seller blocks."""
    items = list(items)
    return InvoiceDocument(
        invoice=invoice,
        items=items,
        totals=compute_invoice_totals(items),
        seller=SELLER_INFO,
        bank_details=BANK_DETAILS,
        terms=list(TERMS),
        payment_terms=list(PAYMENT_TERMS),
    )


def with_items(document: InvoiceDocument, items: Iterable[LineItem]) -> InvoiceDocument:
    """Return a copy of ``document`` holding ``items``, totals recomputed."""
    items = list(items)
    return document.model_copy(update={"items": items, "totals": compute_invoice_totals(items)})


async def fetch_invoice(invoice_number: Any, client: AirtableClient | None = None) -> InvoiceDocument:
    """Fetch a sale and its line items and compute proforma totals."""
    number = normalize_lookup_key(invoice_number, "invoiceNumber")
    client = client or AirtableClient.for_sale()

    logger.info("Fetching invoice %s", number)
    sale = await client.find_one(SALE_TABLE, equals_formula(SALE_NUMBER_FIELD, number))
    if sale is None:
        raise RecordNotFound("Invoice not found")

    records = await client.list_records(
        SALE_LINE_ITEM_TABLE,
        formula=linked_record_formula(SALE_LINK_FIELD, sale["id"]),
    )
    items = [map_line_item(r) for r in records]
    warn_on_mrp_divergence(items, number)

    header = map_sale_header(sale, number)
    document = build_document(header, items)
    logger.info(
        "Invoice %s: %d line item(s), grand total %s",
        header.invoice_number, len(items), document.totals.grand_total,
    )
    return document


async def list_recent_invoices(client: AirtableClient | None = None) -> list[RecentInvoice]:
    """The latest sales by invoice date; rows without a serial number are skipped."""
    client = client or AirtableClient.for_sale()
    records = await client.list_records(
        SALE_TABLE,
        max_records=RECENT_INVOICE_LIMIT,
        sort_field=RECENT_SORT_FIELD,
        sort_direction="desc",
    )
    invoices = [map_recent_invoice(r) for r in records]
    return [inv for inv in invoices if inv.sr_no]


async def fetch_gift_hamper(gh_id: Any, client: AirtableClient | None = None) -> GiftHamper:
    key = normalize_lookup_key(gh_id, "gh_id")
    client = client or AirtableClient.for_catalog()

    logger.info("Fetching Gift Hamper %s", key)
    record = await client.find_one(GIFT_HAMPER_TABLE, equals_formula(GIFT_HAMPER_ID_FIELD, key))
    if record is None:
        raise RecordNotFound("Gift Hamper not found")
    return map_gift_hamper(record, key)


async def check_connection(base: str = "", client: AirtableClient | None = None) -> dict:
    """Fetch a single record from the catalog base (or ``base="sale"``) to verify access."""
    is_sale = base.strip().lower() == "sale"
    if client is None:
        client = AirtableClient.for_sale() if is_sale else AirtableClient.for_catalog()
    table = SALE_TABLE if is_sale else GIFT_HAMPER_TABLE

    records = await client.list_records(table, max_records=1)
    return {
        "base": "sale" if is_sale else "catalog",
        "table": table,
        "record_count": len(records),
        "sample_record": records[0] if records else None,
    }
