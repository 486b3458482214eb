# app/api/v1/deps.py
"""
FastAPI dependencies for the v1 API layer.

Primary dependency: ``get_current_session`` extracts the Bearer session
token from the Authorization header and returns the operator's
:class:`InvoiceSession`.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, status

from app.domain.services.invoice_service import RecordNotFound
from app.domain.services.invoice_session import InvoiceSession, SessionRegistry
from app.infrastructure.external.airtable_client import AirtableError, AirtableNotConfigured

logger = logging.getLogger("api.v1.deps")

_registry = SessionRegistry()

# Failures a record-store lookup can surface to the caller
LOOKUP_ERRORS = (ValueError, RecordNotFound, AirtableError)


def lookup_http_error(exc: Exception) -> HTTPException:
    """Map record-store failures onto HTTP errors the UI can show."""
    if isinstance(exc, RecordNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, AirtableNotConfigured):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    if isinstance(exc, AirtableError):
        logger.warning("Record store error: %s", exc)
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def get_session_registry() -> SessionRegistry:
    return _registry


def get_session_token(authorization: str | None = Header(None)) -> str:
    """Extract the token from ``Authorization: Bearer <token>``; HTTP 401 otherwise."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header. Expected: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return authorization[7:]  # strip "Bearer "


def get_current_session(
    token: str = Depends(get_session_token),
    registry: SessionRegistry = Depends(get_session_registry),
) -> InvoiceSession:
    """
    FastAPI dependency. Returns the authenticated :class:`InvoiceSession` for
    the Bearer token.

    Raises HTTP 401 if the token is missing, unknown or idle-expired.
    """
    session = registry.get(token)
    if session is None or not session.authenticated:
        logger.debug("Rejected unknown session token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session
