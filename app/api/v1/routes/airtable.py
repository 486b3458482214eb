# app/api/v1/routes/airtable.py
"""Airtable connectivity check for either base."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query

from app.api.v1.deps import LOOKUP_ERRORS, lookup_http_error
from app.api.v1.envelope import ok
from app.domain.services import invoice_service

logger = logging.getLogger("api.v1.airtable")

router = APIRouter(prefix="/airtable", tags=["Airtable"])


@router.get("/health", response_model=dict)
async def airtable_health(
    base: str = Query(default="", description='"sale" checks the Sale base, anything else the catalog base'),
):
    try:
        result = await invoice_service.check_connection(base)
    except LOOKUP_ERRORS as exc:
        raise lookup_http_error(exc)

    return ok(data=result, message="Airtable connection successful")
