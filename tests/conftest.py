"""Shared test fixtures for the gift-desk test suite."""

import asyncio
from decimal import Decimal

import pytest

from app.domain.models.invoice import InvoiceHeader, LineItem
from app.domain.services.invoice_service import build_document


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def sale_record() -> dict:
    """A Sale row as returned by Airtable."""
    return {
        "id": "recSALE001",
        "fields": {
            "sales_invoice_number": "LW-2025-118",
            "Invoice Date": "2025-03-14",
            "Billing Address": "Acme Corp, 4th Floor, BKC, Mumbai - 400051",
            "GSTIN": "27AADCA1234B1Z5",
            "SPOC Details": "Priya Shah",
            "Phone": "9820012345",
            "email": "priya@acme.example",
            "Sr No": "118",
        },
    }


@pytest.fixture
def line_item_records() -> list[dict]:
    """Sale_LI rows using both the snake_case and the display column names."""
    return [
        {
            "id": "recLI001",
            "fields": {
                "gift_hamper_name": "Diwali Delight Hamper",
                "pre_tax_price": 1000,
                "qty_sold": 10,
                "gst": 18,
                "mrp": 1180,
                "gh_config": "(1) Artisan Chocolate Box | (2) Honey Jar | (1) Scented Candle",
            },
        },
        {
            "id": "recLI002",
            "fields": {
                "Gift Hamper Name": "Wellness Box",
                "Pre GST Price": "500",
                "Qty": 4,
                "GST": 12,
                "MRP (Selling Price)": 600,
            },
        },
    ]


@pytest.fixture
def sample_document():
    """A loaded invoice with two lines: 200 @ 18% x2 and 500 @ 12% x1."""
    header = InvoiceHeader(invoice_number="LW-2025-007", invoice_date="2025-02-01", record_id="recSALE007")
    items = [
        LineItem(id="li-1", name="Festive Joy Hamper", pre_tax_price=Decimal("200"), quantity=2, gst_percent=18),
        LineItem(id="li-2", name="Executive Gift Set", pre_tax_price=Decimal("500"), quantity=1, gst_percent=12),
    ]
    return build_document(header, items)
