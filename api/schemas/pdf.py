"""Pydantic schemas for the PDF endpoints.

Payloads arrive as camelCase JSON. Templates receive ``model_dump()`` output
(snake_case keys) with every field present, so markup can reference any
field without existence checks.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.pdf_pipeline import InvalidRequestError, MarginSpec, RenderRequest, ThemeSpec


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# =============================================================================
# Theme
# =============================================================================

class FontInput(CamelModel):
    family: str = "Inter"
    font_size_default: int = Field(14, ge=4, le=72)
    font_size_small: int = Field(10, ge=4, le=72)
    font_size_medium: int = Field(12, ge=4, le=72)


class MarginInput(CamelModel):
    top: int = Field(0, ge=0)
    bottom: int = Field(0, ge=0)
    left: int = Field(0, ge=0)
    right: int = Field(0, ge=0)


class ThemeInput(CamelModel):
    font: FontInput = Field(default_factory=FontInput)
    primary_color: str = "#000000"
    secondary_color: str = "#333333"
    margin: MarginInput = Field(default_factory=MarginInput)

    def to_spec(self) -> ThemeSpec:
        return ThemeSpec(
            font_family=self.font.family,
            font_size_default=self.font.font_size_default,
            font_size_small=self.font.font_size_small,
            font_size_medium=self.font.font_size_medium,
            primary_color=self.primary_color,
            secondary_color=self.secondary_color,
            margin=MarginSpec(**self.margin.model_dump()),
        )


# =============================================================================
# Display settings
# =============================================================================

class SettingItem(CamelModel):
    key: str
    value: Any = None


class DisplaySettings(BaseModel):
    show_logo: bool = True
    show_company_address: bool = True
    show_customer_address: bool = True
    show_shipping_address: bool = True
    show_hsn_code: bool = True
    show_discount: bool = True
    show_tax_column: bool = True
    show_notes: bool = True
    show_terms: bool = True
    show_signature: bool = False


# Incoming setting key (lower-case, separators removed) -> DisplaySettings field
DISPLAY_SETTING_FIELDS: Dict[str, str] = {
    "showlogo": "show_logo",
    "showcompanyaddress": "show_company_address",
    "showcustomeraddress": "show_customer_address",
    "showbillingaddress": "show_customer_address",
    "showshippingaddress": "show_shipping_address",
    "showhsncode": "show_hsn_code",
    "showhsnsac": "show_hsn_code",
    "showdiscount": "show_discount",
    "showtaxcolumn": "show_tax_column",
    "shownotes": "show_notes",
    "showterms": "show_terms",
    "showsignature": "show_signature",
}

_TRUE_STRINGS = {"true", "1", "yes", "on", "y"}


def _coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def map_display_settings(items: List[SettingItem]) -> DisplaySettings:
    """Apply known ``{key, value}`` pairs onto display flags; unknown keys are ignored."""
    flags: Dict[str, bool] = {}
    for item in items:
        field_name = DISPLAY_SETTING_FIELDS.get("".join(ch for ch in item.key.lower() if ch.isalnum()))
        if field_name:
            flags[field_name] = _coerce_flag(item.value)
    return DisplaySettings(**flags)


# =============================================================================
# Invoice payload
# =============================================================================

class CurrencyInput(CamelModel):
    code: str = ""
    symbol: str = ""


class CompanyInput(CamelModel):
    name: Optional[str] = None
    address: str = ""
    tax_number: str = ""
    email: str = ""
    mobile_no: str = ""
    logo_url: str = ""


class PartyInput(CamelModel):
    name: str = ""
    address: str = ""
    shipping_address: str = ""
    tax_number: str = ""
    email: str = ""
    mobile_no: str = ""
    state_name: str = ""


class VoucherInput(CamelModel):
    number: str = ""
    date: str = ""
    due_date: str = ""
    reference: str = ""


class EntryInput(CamelModel):
    description: str = ""
    hsn_code: str = ""
    quantity: Decimal = Decimal("0")
    unit: str = ""
    rate: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    tax_percent: Decimal = Decimal("0")
    amount: Decimal = Decimal("0")


class TaxLineInput(CamelModel):
    name: str = ""
    rate: Decimal = Decimal("0")
    amount: Decimal = Decimal("0")


class TotalsInput(CamelModel):
    sub_total: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")
    amount_in_words: str = ""


class InvoicePdfRequest(CamelModel):
    """Invoice-family payload (invoices, receipts, purchase orders/bills, ...)"""
    template_type: str = "TemplateA"
    voucher_type: str = "Sales"
    pdf_rename: Optional[str] = None
    show_sections_inline: bool = False

    company: Optional[CompanyInput] = None
    customer: PartyInput = Field(default_factory=PartyInput)
    voucher: VoucherInput = Field(default_factory=VoucherInput)
    currency: CurrencyInput = Field(default_factory=CurrencyInput)
    entries: List[EntryInput] = Field(default_factory=list)
    taxes: List[TaxLineInput] = Field(default_factory=list)
    totals: TotalsInput = Field(default_factory=TotalsInput)
    notes: str = ""
    terms: str = ""

    theme: ThemeInput = Field(default_factory=ThemeInput)
    settings: List[SettingItem] = Field(default_factory=list)

    def to_render_request(self) -> RenderRequest:
        if self.company is None or not (self.company.name or "").strip():
            raise InvalidRequestError("company.name")

        data = self.model_dump(exclude={"theme", "settings", "pdf_rename", "template_type"})
        data["display"] = map_display_settings(self.settings).model_dump()

        return RenderRequest(
            data=data,
            template_family=self.template_type,
            document_kind=self.voucher_type,
            theme=self.theme.to_spec(),
            output_name=self.pdf_rename,
            repeat_header_footer=not self.show_sections_inline,
        )


# =============================================================================
# Account statement payload
# =============================================================================

ACCOUNT_STATEMENT_FONT = "Inter"
ACCOUNT_STATEMENT_MARGIN = MarginSpec(top=20, bottom=25, left=20, right=20)


class AmountInput(CamelModel):
    amount: Decimal = Decimal("0")
    type: str = ""
    description: str = ""


class AddressInput(CamelModel):
    address: str = ""
    state_name: str = ""
    country_name: str = ""
    pin_code: str = ""
    tax_number: str = ""
    email: str = ""
    mobile_no: str = ""
    currency: CurrencyInput = Field(default_factory=CurrencyInput)


class ParticularInput(CamelModel):
    name: str = ""
    unique_name: str = ""


class TransactionInput(CamelModel):
    date: str = ""
    voucher_type: str = ""
    voucher_number: str = ""
    description: str = ""
    particular: ParticularInput = Field(default_factory=ParticularInput)
    voucher_amount: AmountInput = Field(default_factory=AmountInput)
    closing_balance: AmountInput = Field(default_factory=AmountInput)


class AccountSummaryInput(CamelModel):
    opening_balance: AmountInput = Field(default_factory=AmountInput)
    debit_total: Decimal = Decimal("0")
    credit_total: Decimal = Decimal("0")
    closing_balance: AmountInput = Field(default_factory=AmountInput)


class AccountStatementRequest(CamelModel):
    """Ledger statement for one account over a date range"""
    account_name: Optional[str] = None
    account_unique_name: str = ""
    company_name: str = ""
    from_date: str = ""
    to_date: str = ""
    account_address: AddressInput = Field(default_factory=AddressInput)
    company_gst_address: AddressInput = Field(default_factory=AddressInput)
    account_summary: AccountSummaryInput = Field(default_factory=AccountSummaryInput)
    transaction_detail_list: List[TransactionInput] = Field(default_factory=list)
    debit_total: Decimal = Decimal("0")
    credit_total: Decimal = Decimal("0")
    page: int = 0
    total_pages: int = 0
    total_items: int = 0

    def to_render_request(self) -> RenderRequest:
        if not (self.account_name or "").strip():
            raise InvalidRequestError("accountName")

        return RenderRequest(
            data=self.model_dump(),
            template_family="account_statement",
            document_kind="account_statement",
            theme=ThemeSpec(font_family=ACCOUNT_STATEMENT_FONT, margin=ACCOUNT_STATEMENT_MARGIN),
            output_name=f"AccountStatement_{self.account_name}_{datetime.now():%Y%m%d%H%M%S}",
        )
