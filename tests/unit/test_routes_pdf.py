"""
Unit tests for api/routes/pdf.py: PDF generation endpoints.
"""
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from api.deps import get_notifier, get_pipeline
from api.main import app
from core.services.notifications import FailureNotifier
from tests.conftest import FAKE_PDF


@pytest.fixture
def subscriber():
    return AsyncMock()


@pytest.fixture
def client(pipeline, subscriber):
    notifier = FailureNotifier()
    notifier.subscribe(subscriber)
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestGeneratePdf:
    """Test POST /api/v1/pdf."""

    def test_streams_pdf(self, client, invoice_payload, temp_pdf_dir):
        resp = client.post("/api/v1/pdf", json=invoice_payload)

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.headers["content-disposition"] == 'attachment; filename="invoice.pdf"'
        assert resp.content == FAKE_PDF
        assert list(temp_pdf_dir.glob("*.pdf")) == []

    def test_missing_company_name_is_400(self, client, invoice_payload, subscriber):
        payload = {**invoice_payload, "company": {"address": "nowhere"}}

        resp = client.post("/api/v1/pdf", json=payload)

        assert resp.status_code == 400
        assert resp.json()["field"] == "company.name"
        subscriber.assert_not_awaited()

    def test_malformed_payload_is_400(self, client, invoice_payload):
        payload = {**invoice_payload, "entries": "not-a-list"}

        resp = client.post("/api/v1/pdf", json=payload)

        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_render_failure_is_500_with_correlation_id(self, client, invoice_payload, launcher, subscriber, temp_pdf_dir):
        launcher.failures_remaining = 1

        resp = client.post("/api/v1/pdf", json=invoice_payload)

        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] == "Failed to generate PDF!"
        assert len(body["correlation_id"]) == 32
        assert str(temp_pdf_dir) not in resp.text

        subscriber.assert_awaited_once()
        event = subscriber.await_args.args[0]
        assert event.correlation_id == body["correlation_id"]
        assert event.endpoint == "api/v1/pdf"
        assert event.error_type == "RenderEngineUnavailableError"

    def test_case_insensitive_selectors(self, client, invoice_payload, launcher):
        payload = {**invoice_payload, "templateType": "THERMAL", "voucherType": "sales"}

        resp = client.post("/api/v1/pdf", json=payload)

        assert resp.status_code == 200
        assert launcher.browser.pages[0].content.count("data-slot=") == 1


class TestGenerateAccountStatement:
    """Test POST /api/v1/account-statement."""

    def test_streams_pdf(self, client, account_statement_payload, launcher):
        resp = client.post("/api/v1/account-statement", json=account_statement_payload)

        assert resp.status_code == 200
        assert resp.headers["content-disposition"] == 'attachment; filename="account-statement.pdf"'
        assert resp.content == FAKE_PDF
        assert launcher.browser.pages[0].print_params["marginBottom"] == pytest.approx(25 / 96)

    def test_missing_account_name_is_400(self, client):
        resp = client.post("/api/v1/account-statement", json={"companyName": "Acme"})

        assert resp.status_code == 400
        assert resp.json()["field"] == "accountName"
