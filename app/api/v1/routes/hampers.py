# app/api/v1/routes/hampers.py
"""
Hamper designer endpoints: questionnaire → scored candidates, pricing of a
chosen hamper, gift-hamper catalog lookup and catalog page building / PDF.
"""

from __future__ import annotations

import asyncio
import io
import logging
import random

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import StreamingResponse

from app.api.v1.deps import LOOKUP_ERRORS, lookup_http_error
from app.api.v1.envelope import ok
from app.api.v1.schemas.hampers import (
    BulkCatalogRequest,
    CatalogPdfRequest,
    GenerateHampersRequest,
    PriceHamperRequest,
)
from app.domain.models.hamper import Questionnaire
from app.domain.services import catalog_builder, invoice_service
from app.domain.services.hamper_designer import generate_hampers, per_hamper_budget, price_hamper
from app.infrastructure.external import airtable_client

logger = logging.getLogger("api.v1.hampers")

router = APIRouter(prefix="/hampers", tags=["Hampers"])


@router.post("/generate", response_model=dict)
async def generate(body: GenerateHampersRequest):
    """
    Recommend five hamper combinations for a client questionnaire.

    Pass ``seed`` to get the same recommendations for the same input.
    """
    questionnaire = Questionnaire(**body.model_dump(exclude={"seed"}))
    rng = random.Random(body.seed)
    hampers = generate_hampers(questionnaire, rng)

    return ok(
        data={
            "per_hamper_budget": per_hamper_budget(questionnaire),
            "hampers": [h.model_dump() for h in hampers],
        }
    )


@router.post("/pricing", response_model=dict)
async def pricing(body: PriceHamperRequest):
    """Taxable / tax / grand total for a hamper with per-item quantity overrides."""
    totals = price_hamper(body.hamper, body.qty_overrides)
    return ok(data=totals.model_dump())


@router.get("/catalog/{gh_id}", response_model=dict)
async def gift_hamper(gh_id: str):
    """Fetch a Gift Hamper record by ``gh_id``."""
    try:
        hamper = await invoice_service.fetch_gift_hamper(gh_id)
    except LOOKUP_ERRORS as exc:
        raise lookup_http_error(exc)

    return ok(data=hamper.model_dump())


@router.post("/catalog/bulk", response_model=dict)
async def bulk_catalog(body: BulkCatalogRequest):
    """Build catalog pages for up to 10 GHIDs; ids that fail to load are listed separately."""
    try:
        result = await catalog_builder.build_catalog_pages(body.gh_ids)
    except LOOKUP_ERRORS as exc:
        raise lookup_http_error(exc)

    message = f"Loaded {len(result.pages)} hamper(s)"
    if result.failed_gh_ids:
        message += f"; failed to load: {', '.join(result.failed_gh_ids)}"
    return ok(data=result.model_dump(), message=message)


@router.post("/catalog/pdf")
async def catalog_pdf(body: CatalogPdfRequest):
    """Render catalog pages as a landscape PDF (one page per catalog page)."""
    if any(not page.image for page in body.pages):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Please add an image to all {len(body.pages)} pages",
        )

    urls = list(dict.fromkeys(page.image for page in body.pages))
    downloads = await asyncio.gather(*(airtable_client.fetch_attachment(url) for url in urls))
    images = {url: data for url, data in zip(urls, downloads) if data}

    from app.domain.services.catalog_pdf import generate_catalog_pdf

    pdf_bytes = generate_catalog_pdf(body.pages, images)

    return StreamingResponse(
        io.BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="catalog_{len(body.pages)}_pages.pdf"'
        },
    )
