# app/infrastructure/external/airtable_client.py
"""
Airtable REST API client (read-only).

Two bases are in use:
  catalog  AIRTABLE_BASE_ID / AIRTABLE_TOKEN            → "Gift Hamper"
  sale     AIRTABLE_SALE_BASE_ID / AIRTABLE_SALE_TOKEN  → "Sale", "Sale_LI"

Every query is ``GET /v0/{base}/{table}`` with a Bearer token and an optional
``filterByFormula``, repeated with ``offset`` while Airtable reports more
pages. There is no retry; failures surface as :class:`AirtableError`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings

logger = logging.getLogger("airtable_client")

# Upper bound on followed pages (100 records each)
MAX_PAGES = 50


class AirtableError(Exception):
    """Raised when the Airtable API call fails or returns a non-2xx status."""

    def __init__(self, message: str, status_code: int = 0, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AirtableNotConfigured(AirtableError):
    """Raised when the base id or token for a base is missing."""


def escape_formula_value(value: str) -> str:
    """Escape a value for use inside a double-quoted Airtable formula string."""
    return str(value).replace("\\", "\\\\").replace('"', '\\"')


def equals_formula(field: str, value: str) -> str:
    return f'{{{field}}}="{escape_formula_value(value)}"'


def linked_record_formula(link_field: str, record_id: str) -> str:
    return f'FIND("{escape_formula_value(record_id)}", ARRAYJOIN({{{link_field}}}))'


class AirtableClient:
    """Thin async wrapper over the Airtable list-records endpoint."""

    def __init__(
        self,
        base_id: str,
        token: str,
        *,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        label: str = "catalog",
    ) -> None:
        if not base_id or not token:
            raise AirtableNotConfigured(
                f"Missing Airtable configuration for the {label} base "
                f"(base id set: {bool(base_id)}, token set: {bool(token)})",
                status_code=500,
            )
        self.base_id = base_id
        self.token = token
        self.api_url = (api_url or settings.AIRTABLE_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.AIRTABLE_TIMEOUT_SECONDS
        self.label = label
        self._transport = transport

    @classmethod
    def for_catalog(cls, **kwargs) -> "AirtableClient":
        return cls(settings.AIRTABLE_BASE_ID, settings.AIRTABLE_TOKEN, label="catalog", **kwargs)

    @classmethod
    def for_sale(cls, **kwargs) -> "AirtableClient":
        return cls(settings.AIRTABLE_SALE_BASE_ID, settings.sale_token, label="sale", **kwargs)

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def _table_url(self, table: str) -> str:
        # httpx percent-encodes the path ("Gift Hamper" → "Gift%20Hamper")
        return f"{self.api_url}/{self.base_id}/{table}"

    async def _get_page(self, client: httpx.AsyncClient, table: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            r = await client.get(self._table_url(table), headers=self._headers(), params=params)
        except httpx.HTTPError as exc:
            logger.error("Airtable request failed: %s %s", table, exc)
            raise AirtableError(f"Airtable request failed: {exc}") from exc

        if r.status_code >= 400:
            logger.warning("Airtable error status=%d table=%s body=%.300s", r.status_code, table, r.text)
            raise AirtableError(r.text or f"Airtable returned HTTP {r.status_code}", r.status_code, r.text)

        try:
            data = r.json()
        except ValueError as exc:
            raise AirtableError(f"Airtable returned non-JSON body: {r.text[:200]}", r.status_code, r.text) from exc

        if not isinstance(data, dict):
            raise AirtableError(f"Airtable returned unexpected body: {r.text[:200]}", r.status_code, r.text)
        return data

    async def list_records(
        self,
        table: str,
        *,
        formula: Optional[str] = None,
        max_records: Optional[int] = None,
        sort_field: Optional[str] = None,
        sort_direction: str = "asc",
    ) -> List[Dict[str, Any]]:
        """
        Return the ``records`` array for a table query (``[]`` when none match).

        Airtable pages at 100 records; ``offset`` is followed until the result
        is exhausted, ``max_records`` is reached or MAX_PAGES pages were read.
        """
        params: Dict[str, Any] = {}
        if formula:
            params["filterByFormula"] = formula
        if max_records:
            params["maxRecords"] = max_records
        if sort_field:
            params["sort[0][field]"] = sort_field
            params["sort[0][direction]"] = sort_direction

        logger.info("Airtable GET %s/%s (%s base)", self.base_id, table, self.label)

        records: List[Dict[str, Any]] = []
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for page in range(1, MAX_PAGES + 1):
                data = await self._get_page(client, table, params)
                records.extend(data.get("records") or [])

                offset = data.get("offset")
                if not offset or (max_records and len(records) >= max_records):
                    break
                if page == MAX_PAGES:
                    logger.warning("Airtable %s: stopped after %d pages (%d records)", table, page, len(records))
                    break
                params["offset"] = offset

        if max_records:
            records = records[:max_records]
        logger.info("Airtable %s returned %d record(s)", table, len(records))
        return records

    async def find_one(self, table: str, formula: str) -> Optional[Dict[str, Any]]:
        """Return the first record matching ``formula``, or None."""
        records = await self.list_records(table, formula=formula, max_records=1)
        return records[0] if records else None


async def fetch_attachment(
    url: str,
    *,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Optional[bytes]:
    """Download an attachment (e.g. a hamper image). Returns None when it cannot be fetched."""
    if not url:
        return None
    async with httpx.AsyncClient(
        timeout=timeout if timeout is not None else settings.AIRTABLE_TIMEOUT_SECONDS,
        transport=transport,
        follow_redirects=True,
    ) as client:
        try:
            r = await client.get(url)
        except httpx.HTTPError as exc:
            logger.warning("Attachment download failed: %.120s %s", url, exc)
            return None

    if r.status_code >= 400:
        logger.warning("Attachment download status=%d url=%.120s", r.status_code, url)
        return None
    return r.content
