# app/domain/services/invoice_defaults.py
"""
Fixed seller, bank and terms blocks printed on every proforma invoice.
"""

from __future__ import annotations

from app.domain.models.invoice import BankDetails, SellerInfo

SELLER_INFO = SellerInfo(
    name="Loopify World Private Ltd",
    address=(
        "103-B, Anand Commercial Compound, Gandhi Nagar, LBS Marg, "
        "Vikhroli West, Mumbai - 400083"
    ),
    gst="27AAECL4397C1ZF",
)

BANK_DETAILS = BankDetails(
    account_name="LOOPIFY WORLD PVT LTD",
    bank_name="ICICI Bank Ltd",
    account_number="002005040537",
    ifsc="ICIC0000020",
    branch="Powai",
    location="Mumbai",
)

TERMS = [
    "Prices are inclusive of all taxes, branding and shipping as mentioned above.",
    "Client to share the address, mobile numbers and email ids for dispatch.",
    "Loopify team will dispatch hampers within 10-11 days from receipt of advance for order "
    "confirmation and approval on mock-ups. While we take all efforts to neutralise it, Loopify "
    "won't be responsible in case of unforeseen delays in delivery because of on ground issues, "
    "if any.",
    "The total invoice value, inclusive of GST, must be paid as per the agreed terms. Withholding "
    "or delaying the GST component is not permitted. Loopify will hold dispatch until the full "
    "amount is received.",
]

PAYMENT_TERMS = [
    "50% advance payment at the time of order confirmation.",
    "50% balance payment before dispatch",
]

SHIPPING_LINE_NAME = "Shipping & Handling"
