"""
Shared fixtures: an in-process stand-in for the Playwright browser.

The fakes implement only the calls the pipeline makes: browser.new_page /
is_connected / on("disconnected"), page.set_content / emulate_media /
close, and a CDP session answering Page.printToPDF, IO.read and IO.close.
"""

import asyncio
import base64
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

from core.pdf_pipeline import BrowserSession, EngineHandle, build_pipeline


PROJECT_ROOT = Path(__file__).parent.parent
TEMPLATES_DIR = PROJECT_ROOT / "templates"

FAKE_PDF = b"%PDF-1.7\n" + b"0" * 4096 + b"\n%%EOF\n"


# ============================================================
# Fake browser engine
# ============================================================

class FakeCdpSession:
    def __init__(self, page: "FakePage"):
        self.page = page
        self.calls: List[str] = []
        self.detached = False
        self._offset = 0

    async def send(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.calls.append(method)
        browser = self.page.browser
        if method == "Page.printToPDF":
            self.page.print_params = params
            if browser.print_delay:
                await asyncio.sleep(browser.print_delay)
            if browser.print_error is not None:
                raise browser.print_error
            return {"stream": "stream-1"}
        if method == "IO.read":
            size = params.get("size", 1024)
            chunk = browser.pdf_bytes[self._offset:self._offset + size]
            self._offset += len(chunk)
            return {
                "data": base64.b64encode(chunk).decode("ascii"),
                "base64Encoded": True,
                "eof": self._offset >= len(browser.pdf_bytes),
            }
        if method == "IO.close":
            self.page.stream_closed = True
            return {}
        raise AssertionError(f"Unexpected CDP call {method}")

    async def detach(self) -> None:
        self.detached = True


class FakeContext:
    def __init__(self, page: "FakePage"):
        self._page = page

    async def new_cdp_session(self, page: "FakePage") -> FakeCdpSession:
        self._page.cdp = FakeCdpSession(page)
        return self._page.cdp


class FakePage:
    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser
        self.context = FakeContext(self)
        self.content: Optional[str] = None
        self.media: Optional[str] = None
        self.print_params: Optional[Dict[str, Any]] = None
        self.cdp: Optional[FakeCdpSession] = None
        self.stream_closed = False
        self.closed = False

    async def set_content(self, html: str, wait_until: str = "load") -> None:
        self.content = html

    async def emulate_media(self, media: Optional[str] = None) -> None:
        self.media = media

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self):
        self.connected = True
        self.pages: List[FakePage] = []
        self.handlers: Dict[str, List[Callable]] = {}
        self.closed = False
        self.pdf_bytes = FAKE_PDF
        self.print_delay = 0.0
        self.print_error: Optional[BaseException] = None
        self.new_page_error: Optional[BaseException] = None

    def is_connected(self) -> bool:
        return self.connected

    def on(self, event: str, handler: Callable) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def disconnect(self) -> None:
        """Simulate the browser process dying."""
        self.connected = False
        for handler in self.handlers.get("disconnected", []):
            handler(self)

    async def new_page(self) -> FakePage:
        if self.new_page_error is not None:
            raise self.new_page_error
        page = FakePage(self)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.closed = True
        self.connected = False


class FakeLauncher:
    """Async launcher producing FakeBrowsers; can be told to fail or stall."""

    def __init__(self):
        self.launches = 0
        self.browsers: List[FakeBrowser] = []
        self.failures_remaining = 0
        self.delay = 0.0

    async def __call__(self) -> EngineHandle:
        self.launches += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failures_remaining > 0:
            self.failures_remaining -= 1
            raise RuntimeError("chromium failed to start")
        browser = FakeBrowser()
        self.browsers.append(browser)
        return EngineHandle(browser=browser)

    @property
    def browser(self) -> FakeBrowser:
        return self.browsers[-1]


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def launcher():
    return FakeLauncher()


@pytest.fixture
def session(launcher):
    return BrowserSession(launcher=launcher)


@pytest.fixture
def temp_pdf_dir(tmp_path):
    return tmp_path / "pdfs"


@pytest.fixture
def pipeline(tmp_path, session, temp_pdf_dir):
    return build_pipeline(
        templates_dir=TEMPLATES_DIR,
        fonts_dir=tmp_path / "fonts",
        temp_dir=temp_pdf_dir,
        session=session,
    )


@pytest.fixture
def invoice_payload():
    """A camelCase invoice payload as sent by clients."""
    return {
        "templateType": "TemplateA",
        "voucherType": "Sales",
        "pdfRename": "INV-0042",
        "company": {
            "name": "Acme Traders",
            "address": "12 Market Road, Pune",
            "taxNumber": "27AAACA1234A1Z5",
            "email": "billing@acme.test",
        },
        "customer": {
            "name": "Globex Ltd",
            "address": "4 Harbour Street, Mumbai",
            "shippingAddress": "Warehouse 9, Navi Mumbai",
        },
        "voucher": {"number": "INV-0042", "date": "01-10-2026", "dueDate": "15-10-2026"},
        "currency": {"code": "INR", "symbol": "₹"},
        "entries": [
            {"description": "Steel bolts", "hsnCode": "7318", "quantity": 100, "unit": "pcs",
             "rate": "2.50", "taxPercent": 18, "amount": "250.00"},
            {"description": "Washers", "quantity": 200, "unit": "pcs", "rate": "0.75", "amount": "150.00"},
        ],
        "taxes": [{"name": "GST", "rate": 18, "amount": "72.00"}],
        "totals": {"subTotal": "400.00", "tax": "72.00", "grandTotal": "472.00",
                   "amountInWords": "Four Hundred Seventy Two Only"},
        "notes": "Thank you for your business.",
        "terms": "Payment due within 15 days.",
        "theme": {
            "font": {"family": "Roboto", "fontSizeDefault": 14, "fontSizeSmall": 10, "fontSizeMedium": 12},
            "primaryColor": "#0a3d62",
            "secondaryColor": "#333333",
            "margin": {"top": 5, "bottom": 30, "left": 12, "right": 0},
        },
        "settings": [
            {"key": "showLogo", "value": False},
            {"key": "showSignature", "value": "true"},
            {"key": "someUnknownFlag", "value": True},
        ],
    }


@pytest.fixture
def account_statement_payload():
    return {
        "accountName": "Globex Ltd",
        "accountUniqueName": "globexltd",
        "companyName": "Acme Traders",
        "fromDate": "01-04-2026",
        "toDate": "30-09-2026",
        "accountSummary": {
            "openingBalance": {"amount": "1000.00", "type": "DEBIT"},
            "debitTotal": "500.00",
            "creditTotal": "300.00",
            "closingBalance": {"amount": "1200.00", "type": "DEBIT"},
        },
        "transactionDetailList": [
            {"date": "05-04-2026", "voucherType": "sales", "voucherNumber": "INV-1",
             "particular": {"name": "Sales", "uniqueName": "sales"},
             "voucherAmount": {"amount": "500.00", "type": "DEBIT"},
             "closingBalance": {"amount": "1500.00", "type": "DEBIT"}},
            {"date": "10-05-2026", "voucherType": "receipt", "voucherNumber": "RCT-1",
             "particular": {"name": "Bank", "uniqueName": "bank"},
             "voucherAmount": {"amount": "300.00", "type": "CREDIT"},
             "closingBalance": {"amount": "1200.00", "type": "DEBIT"}},
        ],
        "debitTotal": "500.00",
        "creditTotal": "300.00",
    }
