# app/api/v1/routes/invoices.py
"""
Invoice lookup, session editing (shipping / edit / remove / undo) and PDF
download endpoints.
"""

from __future__ import annotations

import io
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from app.api.v1.deps import (
    LOOKUP_ERRORS,
    get_current_session,
    get_session_registry,
    get_session_token,
    lookup_http_error,
)
from app.api.v1.envelope import ok
from app.api.v1.schemas.invoices import (
    AddShippingRequest,
    InvoiceDetail,
    LineItemDetail,
    LoadInvoiceRequest,
    LoginRequest,
    LoginResponse,
    TotalsDetail,
    UpdateLineItemRequest,
)
from app.domain.models.invoice import InvoiceDocument
from app.domain.services import invoice_service
from app.domain.services.invoice_pdf import parse_config_items
from app.domain.services.invoice_session import (
    AuthError,
    HistoryEmpty,
    InvoiceSession,
    LineItemNotFound,
    SessionRegistry,
)
from app.domain.services.invoice_totals import derive_mrp, line_amount, round_currency

logger = logging.getLogger("api.v1.invoices")

router = APIRouter(tags=["Invoices"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _document_to_detail(doc: InvoiceDocument, session: InvoiceSession | None = None) -> dict:
    """Convert an InvoiceDocument to the InvoiceDetail dict, with derived MRP/amount per line."""
    return InvoiceDetail(
        invoice=doc.invoice.model_dump(),
        items=[
            LineItemDetail(
                id=item.id,
                name=item.name,
                pre_tax_price=item.pre_tax_price,
                quantity=item.quantity,
                gst_percent=item.gst_percent,
                mrp=round_currency(derive_mrp(item.pre_tax_price, item.gst_percent)),
                amount=line_amount(item),
                supplied_mrp=item.supplied_mrp,
                config=item.config,
                config_items=parse_config_items(item.config),
            )
            for item in doc.items
        ],
        totals=TotalsDetail(**doc.totals.model_dump()),
        seller=doc.seller.model_dump(),
        bank_details=doc.bank_details.model_dump(),
        terms=doc.terms,
        payment_terms=doc.payment_terms,
        can_undo=session.can_undo if session else False,
    ).model_dump()


def _current_or_404(session: InvoiceSession) -> InvoiceDocument:
    if session.document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No invoice loaded")
    return session.document


# ---------------------------------------------------------------------------
# Password gate
# ---------------------------------------------------------------------------

@router.post("/session", response_model=dict, status_code=status.HTTP_201_CREATED)
async def open_session(
    body: LoginRequest,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Exchange the invoice admin password for a session token."""
    try:
        token, session = registry.login(body.password)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))

    return ok(
        data=LoginResponse(token=token, history_limit=session.history.maxlen).model_dump(),
        message="Session opened",
    )


@router.delete("/session", response_model=dict)
async def close_session(
    token: str = Depends(get_session_token),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Log out: drop the session and its edit history."""
    if not registry.logout(token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired session")
    return ok(message="Session closed")


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

@router.get("/invoices/recent", response_model=dict)
async def recent_invoices(session: InvoiceSession = Depends(get_current_session)):
    """The latest invoices from the Sale table, newest first."""
    try:
        invoices = await invoice_service.list_recent_invoices()
    except LOOKUP_ERRORS as exc:
        raise lookup_http_error(exc)

    return ok(data=[inv.model_dump() for inv in invoices])


@router.get("/invoices/lookup/{invoice_number}", response_model=dict)
async def lookup_invoice(
    invoice_number: str,
    session: InvoiceSession = Depends(get_current_session),
):
    """Fetch an invoice with computed totals without loading it for editing."""
    try:
        doc = await invoice_service.fetch_invoice(invoice_number)
    except LOOKUP_ERRORS as exc:
        raise lookup_http_error(exc)

    return ok(data=_document_to_detail(doc))


# ---------------------------------------------------------------------------
# Editing session
# ---------------------------------------------------------------------------

@router.post("/invoices/current", response_model=dict)
async def load_invoice(
    body: LoadInvoiceRequest,
    session: InvoiceSession = Depends(get_current_session),
):
    """Fetch an invoice and make it the session's current document."""
    try:
        doc = await invoice_service.fetch_invoice(body.invoice_number)
    except LOOKUP_ERRORS as exc:
        raise lookup_http_error(exc)

    session.load(doc)
    return ok(data=_document_to_detail(doc, session), message="Invoice loaded")


@router.get("/invoices/current", response_model=dict)
async def current_invoice(session: InvoiceSession = Depends(get_current_session)):
    doc = _current_or_404(session)
    return ok(data=_document_to_detail(doc, session))


@router.delete("/invoices/current", response_model=dict)
async def clear_invoice(session: InvoiceSession = Depends(get_current_session)):
    """Close the current invoice; undo brings it back."""
    _current_or_404(session)
    session.clear()
    return ok(data={"can_undo": session.can_undo}, message="Invoice cleared")


@router.post("/invoices/current/shipping", response_model=dict)
async def add_shipping(
    body: AddShippingRequest,
    session: InvoiceSession = Depends(get_current_session),
):
    """Append a Shipping & Handling line and recompute totals."""
    _current_or_404(session)
    doc = session.add_shipping(body.pre_gst_price, body.gst_percent, body.quantity)
    return ok(data=_document_to_detail(doc, session), message="Shipping added")


@router.patch("/invoices/current/items/{item_id}", response_model=dict)
async def update_item(
    item_id: str,
    body: UpdateLineItemRequest,
    session: InvoiceSession = Depends(get_current_session),
):
    _current_or_404(session)
    try:
        doc = session.update_item(item_id, body.model_dump(exclude_none=True))
    except LineItemNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    return ok(data=_document_to_detail(doc, session))


@router.delete("/invoices/current/items/{item_id}", response_model=dict)
async def remove_item(
    item_id: str,
    session: InvoiceSession = Depends(get_current_session),
):
    _current_or_404(session)
    try:
        doc = session.remove_item(item_id)
    except LineItemNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    return ok(data=_document_to_detail(doc, session))


@router.post("/invoices/current/undo", response_model=dict)
async def undo(session: InvoiceSession = Depends(get_current_session)):
    """Restore the document as it was before the last change."""
    try:
        doc = session.undo()
    except HistoryEmpty as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    data = _document_to_detail(doc, session) if doc is not None else None
    return ok(data=data, message="Undone")


# ---------------------------------------------------------------------------
# Download invoice PDF
# ---------------------------------------------------------------------------

@router.get("/invoices/current/pdf")
async def download_pdf(session: InvoiceSession = Depends(get_current_session)):
    """Render the current (possibly edited) invoice as a proforma PDF."""
    doc = _current_or_404(session)

    from app.domain.services.invoice_pdf import generate_invoice_pdf

    pdf_bytes = generate_invoice_pdf(doc)

    return StreamingResponse(
        io.BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="Invoice-{doc.invoice.invoice_number}.pdf"'
        },
    )
