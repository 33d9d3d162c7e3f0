"""
Data models shared across the PDF pipeline.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


# Minimum margins in px. Chromium produces clipped output with zero margins.
MIN_MARGIN_TOP = 10
MIN_MARGIN_BOTTOM = 15
MIN_MARGIN_LEFT = 10
MIN_MARGIN_RIGHT = 10

CSS_PX_PER_INCH = 96.0

# Paper sizes in inches (width, height)
PAPER_FORMATS: Dict[str, tuple] = {
    "A3": (11.69, 16.54),
    "A4": (8.27, 11.69),
    "A5": (5.83, 8.27),
    "LETTER": (8.5, 11.0),
    "LEGAL": (8.5, 14.0),
}
DEFAULT_PAPER_FORMAT = "A4"


@dataclass(frozen=True)
class MarginSpec:
    """Page margins in CSS pixels"""
    top: int = 0
    bottom: int = 0
    left: int = 0
    right: int = 0


@dataclass(frozen=True)
class ThemeSpec:
    """Per-request theme parameters"""
    font_family: str = "Inter"
    font_size_default: int = 14
    font_size_small: int = 10
    font_size_medium: int = 12
    primary_color: str = "#000000"
    secondary_color: str = "#333333"
    margin: MarginSpec = field(default_factory=MarginSpec)


@dataclass(frozen=True)
class RenderRequest:
    """
    One render job. ``data`` is the opaque document payload handed to the
    templates; the pipeline only reads it.
    """
    data: Mapping[str, Any]
    template_family: str = "standard"
    document_kind: str = "invoice"
    theme: ThemeSpec = field(default_factory=ThemeSpec)
    output_name: Optional[str] = None
    repeat_header_footer: bool = True
    paper_format: str = DEFAULT_PAPER_FORMAT

    def __post_init__(self):
        if not isinstance(self.data, MappingProxyType):
            object.__setattr__(self, "data", MappingProxyType(dict(self.data)))


@dataclass(frozen=True)
class PdfOptions:
    """Layout options passed to the rendering engine"""
    paper_format: str = DEFAULT_PAPER_FORMAT
    margin_top: int = MIN_MARGIN_TOP
    margin_bottom: int = MIN_MARGIN_BOTTOM
    margin_left: int = MIN_MARGIN_LEFT
    margin_right: int = MIN_MARGIN_RIGHT
    print_background: bool = True
    display_header_footer: bool = False
    prefer_css_page_size: bool = True
    landscape: bool = False

    @classmethod
    def from_margins(cls, margin: MarginSpec, paper_format: str = DEFAULT_PAPER_FORMAT) -> "PdfOptions":
        """Build options with each margin clamped to its minimum."""
        return cls(
            paper_format=paper_format,
            margin_top=max(margin.top or 0, MIN_MARGIN_TOP),
            margin_bottom=max(margin.bottom or 0, MIN_MARGIN_BOTTOM),
            margin_left=max(margin.left or 0, MIN_MARGIN_LEFT),
            margin_right=max(margin.right or 0, MIN_MARGIN_RIGHT),
        )

    @classmethod
    def for_request(cls, request: RenderRequest) -> "PdfOptions":
        return cls.from_margins(request.theme.margin, request.paper_format)

    def paper_size(self) -> tuple:
        """(width, height) in inches; unknown formats fall back to A4"""
        return PAPER_FORMATS.get(self.paper_format.upper(), PAPER_FORMATS[DEFAULT_PAPER_FORMAT])

    def to_print_params(self) -> Dict[str, Any]:
        """Parameters for Chromium's Page.printToPDF (inches)."""
        width, height = self.paper_size()
        return {
            "landscape": self.landscape,
            "displayHeaderFooter": self.display_header_footer,
            "printBackground": self.print_background,
            "preferCSSPageSize": self.prefer_css_page_size,
            "paperWidth": width,
            "paperHeight": height,
            "marginTop": self.margin_top / CSS_PX_PER_INCH,
            "marginBottom": self.margin_bottom / CSS_PX_PER_INCH,
            "marginLeft": self.margin_left / CSS_PX_PER_INCH,
            "marginRight": self.margin_right / CSS_PX_PER_INCH,
            "transferMode": "ReturnAsStream",
        }


@dataclass(frozen=True)
class StyleBundle:
    """CSS fragments for one request plus the embedded font-face block"""
    font_face: str = ""
    common: str = ""
    header: str = ""
    body: str = ""
    footer: str = ""
    background: str = ""
