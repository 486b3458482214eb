# app/domain/services/invoice_totals.py
"""
Proforma invoice arithmetic.

Totals are summed on unrounded per-line values and each aggregate is rounded
to paise once (round-half-up)::

    line_taxable = pre_tax_price * quantity
    line_tax     = line_taxable * gst_percent / 100
    grand_total  = Σ line_taxable + Σ line_tax

The per-line "Amount" shown on documents is ``mrp * quantity`` with the MRP
always derived from pre-tax price and GST, so the Amount column reconciles
with the footer totals even when the record store carries its own MRP.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Union

from app.domain.models.invoice import InvoiceTotals, LineItem, coerce_amount, coerce_quantity

logger = logging.getLogger("invoice_totals")

PAISE = Decimal("0.01")
HUNDRED = Decimal("100")

# Tolerance before a supplied MRP is reported as diverging from the derived one
MRP_TOLERANCE = PAISE

ItemLike = Union[LineItem, Mapping[str, Any]]


def round_currency(value: Decimal) -> Decimal:
    return value.quantize(PAISE, rounding=ROUND_HALF_UP)


def _read(item: ItemLike, field: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(field)
    return getattr(item, field, None)


def derive_mrp(pre_tax_price: Any, gst_percent: Any) -> Decimal:
    """Tax-inclusive unit price: ``pre_tax_price * (1 + gst_percent / 100)``."""
    price = coerce_amount(pre_tax_price)
    rate = coerce_amount(gst_percent)
    return price * (1 + rate / HUNDRED)


def line_taxable(item: ItemLike) -> Decimal:
    return coerce_amount(_read(item, "pre_tax_price")) * coerce_quantity(_read(item, "quantity"))


def line_tax(item: ItemLike) -> Decimal:
    return line_taxable(item) * coerce_amount(_read(item, "gst_percent")) / HUNDRED


def line_amount(item: ItemLike) -> Decimal:
    """Display/export amount for one line (``mrp * quantity``), rounded to paise."""
    mrp = derive_mrp(_read(item, "pre_tax_price"), _read(item, "gst_percent"))
    return round_currency(mrp * coerce_quantity(_read(item, "quantity")))


def compute_invoice_totals(items: Iterable[ItemLike] | None) -> InvoiceTotals:
    """
    Compute taxable amount, tax and grand total for a list of line items.

    Accepts ``LineItem`` models or plain mappings keyed by ``pre_tax_price``,
    ``quantity`` and ``gst_percent``. Missing, malformed or negative values
    count as zero; this never raises.
    """
    taxable = Decimal("0")
    tax = Decimal("0")
    for item in items or ():
        taxable += line_taxable(item)
        tax += line_tax(item)

    return InvoiceTotals(
        taxable_amount=round_currency(taxable),
        tax_amount=round_currency(tax),
        grand_total=round_currency(taxable + tax),
    )


def mrp_divergence(item: LineItem) -> Decimal | None:
    """Difference between the supplied and derived MRP, or None when none was supplied."""
    if item.supplied_mrp is None:
        return None
    return item.supplied_mrp - derive_mrp(item.pre_tax_price, item.gst_percent)


def warn_on_mrp_divergence(items: Iterable[LineItem], invoice_number: str = "") -> int:
    """Log every line whose supplied MRP disagrees with price + GST. Returns the count."""
    count = 0
    for item in items:
        diff = mrp_divergence(item)
        if diff is not None and abs(diff) > MRP_TOLERANCE:
            count += 1
            logger.warning(
                "Invoice %s line %s: supplied MRP %s differs from derived MRP by %s; using derived",
                invoice_number or "-", item.id or item.name, item.supplied_mrp, round_currency(diff),
            )
    return count
