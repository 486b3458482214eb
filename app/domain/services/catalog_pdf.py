# app/domain/services/catalog_pdf.py
"""
Render hamper catalog pages to a landscape PDF.

One PDF page per catalog page, 1200x630 px (900x472.5 pt). Template pages put
the hamper image on the left and title, contents, GHID and price on the
right; full-image pages show only the image. Images are passed in as bytes
keyed by URL; a page whose image is missing or unreadable gets a grey
placeholder.
"""

from __future__ import annotations

import io
import logging
from typing import Mapping, Sequence

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from app.domain.models.catalog import CatalogPage
from app.domain.services.invoice_pdf import format_inr

logger = logging.getLogger("catalog_pdf")

PAGE_SIZE = (900.0, 472.5)
MARGIN = 30.0

_TITLE_FONT = ("Helvetica-Bold", 22)
_BODY_FONT = ("Helvetica", 12)
_META_FONT = ("Helvetica", 10)
_ACCENT = colors.Color(0.2, 0.3, 0.5)


def _image_reader(data: bytes | None) -> ImageReader | None:
    if not data:
        return None
    try:
        reader = ImageReader(io.BytesIO(data))
        reader.getSize()
    except (OSError, ValueError) as exc:
        logger.warning("Catalog image unreadable, using placeholder: %s", exc)
        return None
    return reader


def _draw_image(c: canvas.Canvas, reader: ImageReader | None, x: float, y: float, w: float, h: float) -> None:
    if reader is None:
        c.setFillColor(colors.Color(0.92, 0.92, 0.92))
        c.rect(x, y, w, h, stroke=0, fill=1)
        c.setFillColor(colors.grey)
        c.setFont(*_META_FONT)
        c.drawCentredString(x + w / 2, y + h / 2, "Image unavailable")
        return
    c.drawImage(reader, x, y, width=w, height=h, preserveAspectRatio=True, anchor="c", mask="auto")


def _draw_template_page(c: canvas.Canvas, page: CatalogPage, reader: ImageReader | None) -> None:
    width, height = PAGE_SIZE
    img_w = width / 2 - MARGIN * 1.5
    _draw_image(c, reader, MARGIN, MARGIN, img_w, height - 2 * MARGIN)

    x = width / 2 + MARGIN / 2
    text_w = width - x - MARGIN
    y = height - MARGIN - _TITLE_FONT[1]

    c.setFillColor(_ACCENT)
    c.setFont(*_TITLE_FONT)
    for line in simpleSplit(page.title or "Untitled hamper", _TITLE_FONT[0], _TITLE_FONT[1], text_w)[:2]:
        c.drawString(x, y, line)
        y -= _TITLE_FONT[1] + 4

    c.setFillColor(colors.black)
    c.setFont(*_BODY_FONT)
    if page.description:
        for line in simpleSplit(page.description, _BODY_FONT[0], _BODY_FONT[1], text_w)[:3]:
            c.drawString(x, y, line)
            y -= _BODY_FONT[1] + 3
        y -= 6

    # Leave room for the GHID / price footer
    floor = MARGIN + 3 * (_META_FONT[1] + 4)
    items = [i.strip() for i in page.items if i and i.strip()]
    for n, item in enumerate(items):
        if y < floor:
            c.drawString(x, y, f"+ {len(items) - n} more")
            break
        c.drawString(x, y, f"• {simpleSplit(item, _BODY_FONT[0], _BODY_FONT[1], text_w - 12)[0]}")
        y -= _BODY_FONT[1] + 5

    c.setFont(*_META_FONT)
    c.setFillColor(colors.grey)
    footer_y = MARGIN
    if page.carbon_percent or page.plastic_percent:
        c.drawString(
            x, footer_y + 2 * (_META_FONT[1] + 4),
            f"Plastic: {page.plastic_percent or '-'}%   Carbon: {page.carbon_percent or '-'}%",
        )
    if page.pre_tax_price is not None:
        c.drawString(x, footer_y + _META_FONT[1] + 4, f"Price (pre-tax): Rs {format_inr(page.pre_tax_price)}")
    if page.gh_id:
        c.drawString(x, footer_y, f"GHID: {page.gh_id}")


def generate_catalog_pdf(
    pages: Sequence[CatalogPage],
    images: Mapping[str, bytes] | None = None,
) -> bytes:
    """
    Generate the catalog PDF.

    Args:
        pages: Catalog pages in display order.
        images: Downloaded image bytes keyed by the page's image URL.

    Returns:
        PDF file as bytes.
    """
    images = images or {}
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=PAGE_SIZE)
    c.setTitle(f"catalog_{len(pages)}_pages")

    for page in pages:
        reader = _image_reader(images.get(page.image or ""))
        if page.type == "full-image":
            _draw_image(c, reader, 0, 0, *PAGE_SIZE)
        else:
            _draw_template_page(c, page, reader)
        c.showPage()

    c.save()
    logger.info("Catalog PDF rendered: %d page(s)", len(pages))
    return buffer.getvalue()
