# app/domain/services/invoice_session.py
"""
Per-operator invoice editing state.

An ``InvoiceSession`` holds the password-gate flag, the invoice currently
being edited and a bounded undo history. Every mutation snapshots the
previous document first; once the history is full the oldest snapshot is
dropped. Sessions live in memory only (``SessionRegistry``); concurrent edits
to the same invoice from two sessions are not coordinated.
"""

from __future__ import annotations

import hmac
import logging
import secrets
import time
from collections import deque
from typing import Any, Deque, Dict, Optional

from app.core.config import settings
from app.domain.models.invoice import InvoiceDocument, LineItem, coerce_amount, coerce_quantity
from app.domain.services.invoice_defaults import SHIPPING_LINE_NAME
from app.domain.services.invoice_service import with_items

logger = logging.getLogger("invoice_session")

EDITABLE_FIELDS = frozenset({"name", "pre_tax_price", "quantity", "gst_percent", "config"})


class AuthError(Exception):
    """Wrong or unconfigured invoice admin password."""


class HistoryEmpty(Exception):
    """Nothing left to undo."""


class NoInvoiceLoaded(Exception):
    """A mutation was requested before any invoice was loaded."""


class LineItemNotFound(Exception):
    """The referenced line item id is not on the current invoice."""


def check_password(candidate: str, expected: str | None = None) -> bool:
    expected = settings.INVOICE_ADMIN_PASSWORD if expected is None else expected
    if not expected:
        return False
    return hmac.compare_digest(candidate.encode(), expected.encode())


def make_shipping_item(
    pre_gst_price: Any,
    gst_percent: Any = None,
    quantity: Any = 1,
    now_ms: int | None = None,
) -> LineItem:
    """Build a "Shipping & Handling" line; unparseable input falls back like the UI form."""
    gst = settings.DEFAULT_GST_PERCENT if gst_percent is None else gst_percent
    qty = coerce_quantity(quantity) or 1
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return LineItem(
        id=f"shipping-{stamp}-{secrets.token_hex(3)}",
        name=SHIPPING_LINE_NAME,
        pre_tax_price=coerce_amount(pre_gst_price),
        quantity=qty,
        gst_percent=coerce_amount(gst),
        config="",
    )


class InvoiceSession:
    def __init__(self, history_limit: int | None = None):
        limit = history_limit or settings.EDIT_HISTORY_LIMIT
        self.authenticated = False
        self.document: Optional[InvoiceDocument] = None
        self.history: Deque[Optional[InvoiceDocument]] = deque(maxlen=limit)
        self.last_active_ts = time.time()

    # ── gate ────────────────────────────────────────────────
    def authenticate(self, password: str, expected: str | None = None) -> None:
        if not check_password(password, expected):
            raise AuthError("Incorrect password")
        self.authenticated = True

    def touch(self) -> None:
        self.last_active_ts = time.time()

    def is_idle(self, idle_seconds: float, now: float | None = None) -> bool:
        now = time.time() if now is None else now
        return (now - self.last_active_ts) > idle_seconds

    # ── history ─────────────────────────────────────────────
    @property
    def can_undo(self) -> bool:
        return bool(self.history)

    def _replace(self, document: Optional[InvoiceDocument]) -> Optional[InvoiceDocument]:
        self.history.append(self.document)
        self.document = document
        self.touch()
        return document

    def undo(self) -> Optional[InvoiceDocument]:
        if not self.history:
            raise HistoryEmpty("Nothing to undo")
        self.document = self.history.pop()
        self.touch()
        return self.document

    def _require_document(self) -> InvoiceDocument:
        if self.document is None:
            raise NoInvoiceLoaded("No invoice loaded")
        return self.document

    # ── mutations ───────────────────────────────────────────
    def load(self, document: InvoiceDocument) -> InvoiceDocument:
        logger.info("Session loaded invoice %s", document.invoice.invoice_number)
        return self._replace(document)

    def clear(self) -> None:
        self._replace(None)

    def add_shipping(self, pre_gst_price: Any, gst_percent: Any = None, quantity: Any = 1) -> InvoiceDocument:
        doc = self._require_document()
        item = make_shipping_item(pre_gst_price, gst_percent, quantity)
        return self._replace(with_items(doc, [*doc.items, item]))

    def update_item(self, item_id: str, changes: Dict[str, Any]) -> InvoiceDocument:
        doc = self._require_document()
        updates = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        items = []
        found = False
        for item in doc.items:
            if item.id == item_id:
                item = LineItem.model_validate({**item.model_dump(), **updates})
                found = True
            items.append(item)
        if not found:
            raise LineItemNotFound(f"Line item {item_id} not found")
        return self._replace(with_items(doc, items))

    def remove_item(self, item_id: str) -> InvoiceDocument:
        doc = self._require_document()
        items = [item for item in doc.items if item.id != item_id]
        if len(items) == len(doc.items):
            raise LineItemNotFound(f"Line item {item_id} not found")
        return self._replace(with_items(doc, items))


class SessionRegistry:
    """
    In-memory token → session map.

    Sessions idle longer than ``idle_seconds`` are evicted whenever a session
    is opened or looked up.
    """

    def __init__(self, history_limit: int | None = None, idle_seconds: float | None = None):
        self._sessions: Dict[str, InvoiceSession] = {}
        self._history_limit = history_limit
        self.idle_seconds = idle_seconds if idle_seconds is not None else settings.SESSION_IDLE_SECONDS

    def evict_idle(self, now: float | None = None) -> int:
        now = time.time() if now is None else now
        stale = [t for t, s in self._sessions.items() if s.is_idle(self.idle_seconds, now)]
        for token in stale:
            del self._sessions[token]
        if stale:
            logger.info("Evicted %d idle invoice session(s)", len(stale))
        return len(stale)

    def login(self, password: str, expected: str | None = None) -> tuple[str, InvoiceSession]:
        self.evict_idle()
        session = InvoiceSession(self._history_limit)
        session.authenticate(password, expected)
        token = secrets.token_urlsafe(24)
        self._sessions[token] = session
        logger.info("Invoice session opened (%d active)", len(self._sessions))
        return token, session

    def get(self, token: str) -> Optional[InvoiceSession]:
        self.evict_idle()
        session = self._sessions.get(token)
        if session is not None:
            session.touch()
        return session

    def logout(self, token: str) -> bool:
        removed = self._sessions.pop(token, None) is not None
        if removed:
            logger.info("Invoice session closed (%d active)", len(self._sessions))
        return removed

    def __len__(self) -> int:
        return len(self._sessions)
