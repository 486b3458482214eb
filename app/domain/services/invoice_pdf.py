# app/domain/services/invoice_pdf.py
"""
Render proforma invoice PDFs.
Uses ReportLab for PDF generation.
"""

from __future__ import annotations

import io
import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from app.domain.models.invoice import InvoiceDocument
from app.domain.services.invoice_totals import derive_mrp, line_amount

logger = logging.getLogger("invoice_pdf")

_CONFIG_ITEM_RE = re.compile(r"\(\d+\)\s*[^|()]+")

_HEADER_BG = colors.Color(0.2, 0.3, 0.5)
_TOTAL_BG = colors.Color(0.9, 0.95, 1.0)
_GRID = colors.Color(0.8, 0.8, 0.8)


def format_inr(value: Any) -> str:
    """Format an amount with Indian digit grouping, e.g. ``1,00,300.00``."""
    try:
        amount = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except (ArithmeticError, ValueError):
        return str(value)

    sign = "-" if amount < 0 else ""
    whole, frac = f"{abs(amount):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}{whole}.{frac}"


def parse_config_items(config: str | list[str] | None) -> list[str]:
    """Split a hamper config string into its ``(n) item`` fragments."""
    if not config:
        return []
    text = config if isinstance(config, str) else " ".join(config)
    return [m.strip() for m in _CONFIG_ITEM_RE.findall(text)]


def _p(text: str, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(text).replace("\n", "<br/>"), style)


def generate_invoice_pdf(document: InvoiceDocument) -> bytes:
    """
    Generate a proforma invoice PDF.

    Args:
        document: Invoice header, line items, totals and seller/bank blocks.

    Returns:
        PDF file as bytes.
    """
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=f"Invoice-{document.invoice.invoice_number}",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "InvoiceTitle",
        parent=styles["Heading1"],
        fontSize=16,
        alignment=1,  # center
        spaceAfter=10,
    )
    section_style = ParagraphStyle(
        "Section",
        parent=styles["Normal"],
        fontSize=9,
        fontName="Helvetica-Bold",
        spaceAfter=4,
    )
    body_style = ParagraphStyle(
        "Body",
        parent=styles["Normal"],
        fontSize=8,
        leading=11,
    )
    cell_style = ParagraphStyle(
        "Cell",
        parent=styles["Normal"],
        fontSize=8,
        leading=10,
    )

    inv = document.invoice
    elements = []

    elements.append(
        _p(f"Invoice Number: {inv.invoice_number}\nInvoice Date: {inv.invoice_date or 'N/A'}", body_style)
    )
    elements.append(Spacer(1, 6))
    elements.append(Paragraph("PROFORMA INVOICE", title_style))

    # Seller & billing blocks
    seller = document.seller
    seller_text = f"{seller.name}\n{seller.address}\nGST # : {seller.gst}"
    billing_text = inv.billing_address or "N/A"
    if inv.gst:
        billing_text += f"\n\nGST IN: {inv.gst}"
    billing_text += (
        f"\nContact person: {inv.contact_person or '-'}"
        f"\nMobile: {inv.mobile or '-'}"
        f"\nEmail: {inv.email or '-'}"
    )

    party_table = Table(
        [
            [Paragraph("Seller:", section_style), Paragraph("Billing Address:", section_style)],
            [_p(seller_text, body_style), _p(billing_text, body_style)],
        ],
        colWidths=[230, 230],
    )
    party_table.setStyle(
        TableStyle(
            [
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LEFTPADDING", (0, 0), (-1, -1), 0),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ]
        )
    )
    elements.append(party_table)
    elements.append(Spacer(1, 12))

    # Line items
    rows = [["No", "Product", "MRP (Rs)", "Pre GST Price (Rs)", "Qty", "Amount (Rs)"]]
    for idx, item in enumerate(document.items, start=1):
        product = escape(item.name)
        config_items = parse_config_items(item.config)
        if config_items:
            product += "".join(f"<br/>&bull; {escape(c)}" for c in config_items)
        rows.append([
            str(idx),
            Paragraph(product, cell_style),
            format_inr(derive_mrp(item.pre_tax_price, item.gst_percent)),
            format_inr(item.pre_tax_price),
            str(item.quantity),
            format_inr(line_amount(item)),
        ])

    item_table = Table(rows, colWidths=[25, 190, 65, 75, 35, 75], repeatRows=1)
    item_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), _HEADER_BG),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("GRID", (0, 0), (-1, -1), 0.5, _GRID),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
                ("FONTNAME", (5, 1), (5, -1), "Helvetica-Bold"),
                ("TOPPADDING", (0, 0), (-1, -1), 5),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
            ]
        )
    )
    elements.append(item_table)
    elements.append(Spacer(1, 10))

    # Totals
    totals = document.totals
    totals_table = Table(
        [
            ["Taxable amount:", format_inr(totals.taxable_amount)],
            ["Tax:", format_inr(totals.tax_amount)],
            ["TOTAL:", format_inr(totals.grand_total)],
        ],
        colWidths=[110, 100],
        hAlign="RIGHT",
    )
    totals_table.setStyle(
        TableStyle(
            [
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("BACKGROUND", (0, -1), (-1, -1), _TOTAL_BG),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("LINEABOVE", (0, -1), (-1, -1), 0.5, _GRID),
                ("TOPPADDING", (0, 0), (-1, -1), 4),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ]
        )
    )
    elements.append(totals_table)
    elements.append(Spacer(1, 14))

    # Bank details
    bank = document.bank_details
    elements.append(Paragraph("BANK DETAILS:", section_style))
    elements.append(
        _p(
            f"Account Name: {bank.account_name}\n"
            f"Bank Name: {bank.bank_name}\n"
            f"Bank Account number: {bank.account_number}\n"
            f"IFSC Code: {bank.ifsc}\n"
            f"Branch: {', '.join(p for p in (bank.branch, bank.location) if p)}",
            body_style,
        )
    )
    elements.append(Spacer(1, 10))

    # Terms
    if document.terms:
        elements.append(Paragraph("TERMS:", section_style))
        for n, term in enumerate(document.terms, start=1):
            elements.append(_p(f"{n}. {term}", body_style))
        elements.append(Spacer(1, 8))

    if document.payment_terms:
        elements.append(Paragraph("PAYMENT TERMS:", section_style))
        for term in document.payment_terms:
            elements.append(_p(f"- {term}", body_style))

    elements.append(Spacer(1, 16))
    elements.append(
        Paragraph(
            "This is a computer-generated proforma invoice.",
            ParagraphStyle(
                "Footer",
                parent=styles["Normal"],
                fontSize=8,
                textColor=colors.grey,
                alignment=1,
            ),
        )
    )

    doc.build(elements)
    logger.info("Rendered invoice %s PDF (%d items)", inv.invoice_number, len(document.items))
    return buf.getvalue()
