# app/api/v1/schemas/hampers.py
"""Request schemas for hamper designer and catalog endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.models.catalog import CatalogPage
from app.domain.models.hamper import GeneratedHamper, Questionnaire


class GenerateHampersRequest(Questionnaire):
    seed: int | None = Field(
        default=None,
        description="Optional seed for reproducible recommendations",
    )


class PriceHamperRequest(BaseModel):
    hamper: GeneratedHamper
    qty_overrides: dict[str, int] = Field(default_factory=dict)


class BulkCatalogRequest(BaseModel):
    gh_ids: str | list[str] = Field(
        description="GHIDs as a list or one comma/newline separated string",
    )


class CatalogPdfRequest(BaseModel):
    pages: list[CatalogPage] = Field(min_length=1)
