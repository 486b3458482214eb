# app/domain/services/catalog_builder.py
"""
Build catalog pages from Gift Hamper records.

A GHID resolves to one "template" page: the hamper name is the title, the
first attachment is the image, and ``gh_bom`` (comma separated) becomes the
item list. Bulk builds take up to MAX_BULK_GHIDS ids; ids that cannot be
loaded are reported back instead of failing the whole batch.
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import Iterable

from app.domain.models.catalog import CatalogBuildResult, CatalogPage
from app.domain.models.invoice import GiftHamper
from app.domain.services import invoice_service
from app.infrastructure.external.airtable_client import (
    AirtableClient,
    AirtableError,
    AirtableNotConfigured,
)

logger = logging.getLogger("catalog_builder")

MAX_BULK_GHIDS = 10

_GHID_SPLIT_RE = re.compile(r"[,\n]+")


def split_gh_ids(raw: str | Iterable[str]) -> list[str]:
    """Split a comma/newline separated GHID list, dropping blanks."""
    parts = _GHID_SPLIT_RE.split(raw) if isinstance(raw, str) else list(raw)
    return [p.strip() for p in parts if p and p.strip()]


def split_bom(gh_bom: str | None) -> list[str]:
    if not gh_bom:
        return []
    return [item.strip() for item in gh_bom.split(",") if item.strip()]


def page_from_hamper(hamper: GiftHamper) -> CatalogPage:
    return CatalogPage(
        id=str(uuid.uuid4()),
        type="template",
        gh_id=hamper.gh_id,
        title=hamper.name,
        image=hamper.image,
        items=split_bom(hamper.gh_bom),
        pre_tax_price=hamper.pre_tax_sale_price_without_shipping,
    )


async def build_catalog_pages(
    gh_ids: str | Iterable[str],
    client: AirtableClient | None = None,
) -> CatalogBuildResult:
    """Fetch each GHID in order; loaded ones become pages, the rest go to ``failed_gh_ids``."""
    ids = split_gh_ids(gh_ids)
    if not ids:
        raise ValueError("Please enter at least one GHID")
    if len(ids) > MAX_BULK_GHIDS:
        raise ValueError(f"Maximum {MAX_BULK_GHIDS} GHIDs allowed at once")

    client = client or AirtableClient.for_catalog()

    result = CatalogBuildResult()
    for gh_id in ids:
        try:
            hamper = await invoice_service.fetch_gift_hamper(gh_id, client=client)
        except AirtableNotConfigured:
            raise
        except (invoice_service.RecordNotFound, AirtableError) as exc:
            logger.warning("Catalog: could not load GHID %s: %s", gh_id, exc)
            result.failed_gh_ids.append(gh_id)
            continue
        result.pages.append(page_from_hamper(hamper))

    logger.info(
        "Catalog built: %d page(s), %d failed of %d GHID(s)",
        len(result.pages), len(result.failed_gh_ids), len(ids),
    )
    return result
