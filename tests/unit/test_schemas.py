"""Tests for the PDF request schemas."""

import re

import pytest

from api.schemas.pdf import (
    AccountStatementRequest,
    DisplaySettings,
    InvoicePdfRequest,
    SettingItem,
    map_display_settings,
)
from core.pdf_pipeline import InvalidRequestError, MarginSpec


class TestDisplaySettings:

    def test_known_keys_mapped(self):
        flags = map_display_settings([
            SettingItem(key="showLogo", value=False),
            SettingItem(key="show_signature", value="yes"),
            SettingItem(key="SHOWTERMS", value=0),
        ])
        assert flags.show_logo is False
        assert flags.show_signature is True
        assert flags.show_terms is False

    def test_unknown_keys_ignored(self):
        flags = map_display_settings([SettingItem(key="__class__", value=True), SettingItem(key="colour", value=1)])
        assert flags == DisplaySettings()


class TestInvoicePdfRequest:

    def test_camel_case_payload(self, invoice_payload):
        model = InvoicePdfRequest.model_validate(invoice_payload)
        assert model.company.tax_number == "27AAACA1234A1Z5"
        assert model.totals.grand_total == 472

    def test_render_request_mapping(self, invoice_payload):
        request = InvoicePdfRequest.model_validate(invoice_payload).to_render_request()

        assert request.template_family == "TemplateA"
        assert request.document_kind == "Sales"
        assert request.output_name == "INV-0042"
        assert request.repeat_header_footer is True
        assert request.theme.font_family == "Roboto"
        assert request.theme.margin == MarginSpec(top=5, bottom=30, left=12, right=0)
        assert request.data["display"]["show_logo"] is False
        assert "theme" not in request.data
        assert "settings" not in request.data

    def test_inline_sections(self, invoice_payload):
        payload = {**invoice_payload, "showSectionsInline": True}
        request = InvoicePdfRequest.model_validate(payload).to_render_request()
        assert request.repeat_header_footer is False

    @pytest.mark.parametrize("company", [None, {}, {"name": ""}, {"name": "   "}])
    def test_company_name_required(self, company):
        model = InvoicePdfRequest.model_validate({"company": company})
        with pytest.raises(InvalidRequestError) as exc_info:
            model.to_render_request()
        assert exc_info.value.field == "company.name"


class TestAccountStatementRequest:

    def test_fixed_theme_and_name(self, account_statement_payload):
        request = AccountStatementRequest.model_validate(account_statement_payload).to_render_request()

        assert request.template_family == "account_statement"
        assert request.theme.font_family == "Inter"
        assert request.theme.margin == MarginSpec(top=20, bottom=25, left=20, right=20)
        assert re.fullmatch(r"AccountStatement_Globex Ltd_\d{14}", request.output_name)

    def test_account_name_required(self):
        with pytest.raises(InvalidRequestError):
            AccountStatementRequest.model_validate({"companyName": "Acme"}).to_render_request()
