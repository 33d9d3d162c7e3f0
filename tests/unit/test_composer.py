"""Tests for final document composition."""

import pytest

from core.pdf_pipeline.composer import build_theme_css, compose_document
from core.pdf_pipeline.models import StyleBundle, ThemeSpec
from core.pdf_pipeline.template_resolver import resolve_template_slots


@pytest.fixture
def styles():
    return StyleBundle(
        font_face="@font-face{x}",
        common=".common{}",
        header=".header{}",
        body=".body{}",
        footer=".footer{}",
        background=".background{}",
    )


class TestBuildThemeCss:

    def test_font_sizes_are_reduced_except_large(self):
        css = build_theme_css(ThemeSpec(font_size_default=16, font_size_small=12, font_size_medium=14))
        assert "--font-size-default: 14px;" in css
        assert "--font-size-large: 16px;" in css
        assert "--font-size-small: 10px;" in css
        assert "--font-size-medium: 12px;" in css

    def test_unsupported_font_family_falls_back(self):
        css = build_theme_css(ThemeSpec(font_family="Wingdings"))
        assert '--font-family: "Inter";' in css

    def test_invalid_colours_replaced(self):
        css = build_theme_css(ThemeSpec(primary_color="red;}</style><script>", secondary_color="#abc"))
        assert "--color-primary: #000000;" in css
        assert "--color-secondary: #abc;" in css


class TestComposeDocument:

    def test_three_slot_document(self, styles):
        slots = resolve_template_slots("Standard", "Invoice")
        html = compose_document(
            slots, {"header": "<h1>H</h1>", "body": "<p>B</p>", "footer": "<p>F</p>"}, styles, ThemeSpec()
        )

        assert html.count("data-slot=") == 3
        assert html.index('data-slot="header"') < html.index('data-slot="body"') < html.index('data-slot="footer"')
        assert html.count("@font-face") == 1
        assert '<body class="repeat-header-footer">' in html
        assert ".background{}" in html

    def test_css_order(self, styles):
        slots = resolve_template_slots("Thermal", "Sales")
        html = compose_document(slots, {"body": "x"}, styles, ThemeSpec())

        order = [html.index(part) for part in (
            "@font-face{x}", ".common{}", ".header{}", ".body{}", ".footer{}", ".background{}", "--font-family"
        )]
        assert order == sorted(order)

    def test_inline_sections_skip_background(self, styles):
        slots = resolve_template_slots("Standard", "Invoice")
        html = compose_document(
            slots, {"header": "h", "body": "b", "footer": "f"}, styles, ThemeSpec(), repeat_header_footer=False
        )
        assert ".background{}" not in html
        assert "repeat-header-footer" not in html

    def test_body_fragment_required(self, styles):
        slots = resolve_template_slots("Standard", "Invoice")
        with pytest.raises(ValueError):
            compose_document(slots, {"header": "h"}, styles, ThemeSpec())
