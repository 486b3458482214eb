"""HTTP-level tests for the v1 invoice, hamper and Airtable endpoints."""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.api.v1.deps import get_session_registry
from app.core.config import settings
from app.domain.models.catalog import CatalogBuildResult, CatalogPage
from app.domain.services.invoice_service import RecordNotFound
from app.domain.services.invoice_session import SessionRegistry
from app.infrastructure.external.airtable_client import AirtableError, AirtableNotConfigured
from app.main import app

PASSWORD = "test-pass"


@pytest.fixture
def client():
    registry = SessionRegistry(history_limit=20)
    app.dependency_overrides[get_session_registry] = lambda: registry
    with patch.object(settings, "INVOICE_ADMIN_PASSWORD", PASSWORD):
        yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    resp = client.post("/api/v1/session", json={"password": PASSWORD})
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


def _amount(value) -> Decimal:
    return Decimal(str(value))


class TestHealth:

    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestSession:

    def test_login(self, client):
        resp = client.post("/api/v1/session", json={"password": PASSWORD})
        body = resp.json()
        assert resp.status_code == 201
        assert body["data"]["history_limit"] == 20

    def test_wrong_password(self, client):
        resp = client.post("/api/v1/session", json={"password": "nope"})
        assert resp.status_code == 401

    def test_missing_token(self, client):
        assert client.get("/api/v1/invoices/current").status_code == 401

    def test_unknown_token(self, client):
        resp = client.get("/api/v1/invoices/current", headers={"Authorization": "Bearer bogus"})
        assert resp.status_code == 401

    def test_logout_invalidates_token(self, client, auth_headers):
        resp = client.delete("/api/v1/session", headers=auth_headers)
        assert resp.status_code == 200
        assert client.get("/api/v1/invoices/current", headers=auth_headers).status_code == 401
        assert client.delete("/api/v1/session", headers=auth_headers).status_code == 401

    def test_idle_session_rejected(self, client, auth_headers):
        registry = app.dependency_overrides[get_session_registry]()
        for session in registry._sessions.values():
            session.last_active_ts -= registry.idle_seconds + 1
        assert client.get("/api/v1/invoices/current", headers=auth_headers).status_code == 401
        assert len(registry) == 0


class TestLoadAndEdit:

    def _load(self, client, auth_headers, document):
        with patch(
            "app.domain.services.invoice_service.fetch_invoice",
            new=AsyncMock(return_value=document),
        ):
            return client.post(
                "/api/v1/invoices/current",
                json={"invoice_number": document.invoice.invoice_number},
                headers=auth_headers,
            )

    def test_nothing_loaded(self, client, auth_headers):
        assert client.get("/api/v1/invoices/current", headers=auth_headers).status_code == 404

    def test_load(self, client, auth_headers, sample_document):
        resp = self._load(client, auth_headers, sample_document)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["invoice"]["invoice_number"] == "LW-2025-007"
        assert _amount(data["totals"]["grand_total"]) == Decimal("1032.00")
        assert _amount(data["items"][0]["mrp"]) == Decimal("236.00")
        assert _amount(data["items"][0]["amount"]) == Decimal("472.00")
        assert data["can_undo"] is True

    def test_load_not_found(self, client, auth_headers):
        with patch(
            "app.domain.services.invoice_service.fetch_invoice",
            new=AsyncMock(side_effect=RecordNotFound("Invoice not found")),
        ):
            resp = client.post(
                "/api/v1/invoices/current", json={"invoice_number": "LW-404"}, headers=auth_headers
            )
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Invoice not found"

    def test_shipping_edit_remove_undo(self, client, auth_headers, sample_document):
        self._load(client, auth_headers, sample_document)

        resp = client.post(
            "/api/v1/invoices/current/shipping",
            json={"pre_gst_price": 100, "gst_percent": 18},
            headers=auth_headers,
        )
        data = resp.json()["data"]
        assert data["items"][-1]["name"] == "Shipping & Handling"
        assert _amount(data["totals"]["grand_total"]) == Decimal("1150.00")

        resp = client.patch(
            "/api/v1/invoices/current/items/li-1", json={"quantity": 5}, headers=auth_headers
        )
        assert _amount(resp.json()["data"]["totals"]["taxable_amount"]) == Decimal("1600.00")

        resp = client.delete("/api/v1/invoices/current/items/li-2", headers=auth_headers)
        assert [i["id"] for i in resp.json()["data"]["items"]][0] == "li-1"
        assert len(resp.json()["data"]["items"]) == 2

        resp = client.post("/api/v1/invoices/current/undo", headers=auth_headers)
        assert len(resp.json()["data"]["items"]) == 3

    def test_money_fields_are_exact_decimal_strings(self, client, auth_headers, sample_document):
        data = self._load(client, auth_headers, sample_document).json()["data"]
        assert data["totals"] == {
            "taxable_amount": "900.00",
            "tax_amount": "132.00",
            "grand_total": "1032.00",
        }
        assert data["items"][0]["amount"] == "472.00"

    def test_clear_current_invoice(self, client, auth_headers, sample_document):
        self._load(client, auth_headers, sample_document)
        resp = client.delete("/api/v1/invoices/current", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["can_undo"] is True
        assert client.get("/api/v1/invoices/current", headers=auth_headers).status_code == 404

        resp = client.post("/api/v1/invoices/current/undo", headers=auth_headers)
        assert resp.json()["data"]["invoice"]["invoice_number"] == "LW-2025-007"

    def test_clear_with_nothing_loaded(self, client, auth_headers):
        assert client.delete("/api/v1/invoices/current", headers=auth_headers).status_code == 404

    def test_edit_unknown_item(self, client, auth_headers, sample_document):
        self._load(client, auth_headers, sample_document)
        resp = client.delete("/api/v1/invoices/current/items/missing", headers=auth_headers)
        assert resp.status_code == 404

    def test_undo_with_empty_history(self, client, auth_headers):
        resp = client.post("/api/v1/invoices/current/undo", headers=auth_headers)
        assert resp.status_code == 409

    def test_pdf_download(self, client, auth_headers, sample_document):
        self._load(client, auth_headers, sample_document)
        resp = client.get("/api/v1/invoices/current/pdf", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert "Invoice-LW-2025-007.pdf" in resp.headers["content-disposition"]
        assert resp.content.startswith(b"%PDF")


class TestLookups:

    def test_recent_upstream_error(self, client, auth_headers):
        with patch(
            "app.domain.services.invoice_service.list_recent_invoices",
            new=AsyncMock(side_effect=AirtableError("boom", 503)),
        ):
            resp = client.get("/api/v1/invoices/recent", headers=auth_headers)
        assert resp.status_code == 502

    def test_lookup_not_configured(self, client, auth_headers):
        with patch(
            "app.domain.services.invoice_service.fetch_invoice",
            new=AsyncMock(side_effect=AirtableNotConfigured("Missing Airtable configuration", 500)),
        ):
            resp = client.get("/api/v1/invoices/lookup/LW-1", headers=auth_headers)
        assert resp.status_code == 500


class TestHampers:

    def test_generate_is_seeded(self, client):
        payload = {"budget": 1500, "hero_preference": "chocolates", "seed": 42}
        first = client.post("/api/v1/hampers/generate", json=payload).json()["data"]
        second = client.post("/api/v1/hampers/generate", json=payload).json()["data"]
        assert len(first["hampers"]) == 5
        assert first == second

    def test_generate_total_budget(self, client):
        payload = {"budget_mode": "total", "budget": 30000, "quantity": 10, "seed": 1}
        data = client.post("/api/v1/hampers/generate", json=payload).json()["data"]
        assert _amount(data["per_hamper_budget"]) == Decimal("3000")

    def test_pricing(self, client):
        hamper = {
            "id": "gen-0",
            "name": "Classic Delight Hamper",
            "hero_product": "Honey Jar",
            "items": [{"name": "Honey Jar", "qty": 1, "unit_price": 220}],
            "gst_percent": 12,
        }
        resp = client.post(
            "/api/v1/hampers/pricing", json={"hamper": hamper, "qty_overrides": {"Honey Jar": 2}}
        )
        data = resp.json()["data"]
        assert _amount(data["taxable_amount"]) == Decimal("440.00")
        assert _amount(data["grand_total"]) == Decimal("492.80")

    def test_catalog_not_found(self, client):
        with patch(
            "app.domain.services.invoice_service.fetch_gift_hamper",
            new=AsyncMock(side_effect=RecordNotFound("Gift Hamper not found")),
        ):
            resp = client.get("/api/v1/hampers/catalog/GH-0")
        assert resp.status_code == 404

    def test_bulk_catalog_reports_failed_ids(self, client):
        result = CatalogBuildResult(
            pages=[CatalogPage(id="p1", gh_id="GH-1", title="One", items=["Mug"])],
            failed_gh_ids=["GH-2"],
        )
        with patch(
            "app.domain.services.catalog_builder.build_catalog_pages",
            new=AsyncMock(return_value=result),
        ) as build:
            resp = client.post("/api/v1/hampers/catalog/bulk", json={"gh_ids": "GH-1, GH-2"})
        body = resp.json()
        assert resp.status_code == 200
        build.assert_awaited_once_with("GH-1, GH-2")
        assert body["data"]["pages"][0]["title"] == "One"
        assert body["data"]["failed_gh_ids"] == ["GH-2"]
        assert "GH-2" in body["message"]

    def test_bulk_catalog_too_many(self, client):
        ids = ",".join(f"GH-{i}" for i in range(11))
        resp = client.post("/api/v1/hampers/catalog/bulk", json={"gh_ids": ids})
        assert resp.status_code == 400
        assert "Maximum 10" in resp.json()["detail"]

    def test_catalog_pdf(self, client):
        pages = [
            {"id": "p1", "gh_id": "GH-1", "title": "One", "image": "https://img.test/a.jpg"},
            {"id": "p2", "type": "full-image", "image": "https://img.test/a.jpg"},
        ]
        with patch(
            "app.infrastructure.external.airtable_client.fetch_attachment",
            new=AsyncMock(return_value=None),
        ) as fetch:
            resp = client.post("/api/v1/hampers/catalog/pdf", json={"pages": pages})
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert "catalog_2_pages.pdf" in resp.headers["content-disposition"]
        assert resp.content.startswith(b"%PDF")
        fetch.assert_awaited_once_with("https://img.test/a.jpg")

    def test_catalog_pdf_requires_images(self, client):
        pages = [{"id": "p1", "title": "One", "image": "https://img.test/a.jpg"}, {"id": "p2"}]
        resp = client.post("/api/v1/hampers/catalog/pdf", json={"pages": pages})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Please add an image to all 2 pages"


class TestAirtableHealth:

    def test_ok(self, client):
        result = {"base": "sale", "table": "Sale", "record_count": 1, "sample_record": {"id": "rec1"}}
        with patch(
            "app.domain.services.invoice_service.check_connection",
            new=AsyncMock(return_value=result),
        ):
            resp = client.get("/api/v1/airtable/health?base=sale")
        assert resp.status_code == 200
        assert resp.json()["data"]["table"] == "Sale"
