"""
Final HTML document assembly.
"""

import re
from typing import Mapping

from .models import StyleBundle, ThemeSpec
from .style_builder import resolve_font_family
from .template_resolver import TemplateSlotSet


# Body text is rendered slightly smaller than the requested size for readability
FONT_SIZE_DELTA = 2

DEFAULT_PRIMARY_COLOR = "#000000"
DEFAULT_SECONDARY_COLOR = "#333333"

_CSS_COLOR = re.compile(r"^(#[0-9a-fA-F]{3,8}|[a-zA-Z]+|(rgb|rgba|hsl|hsla)\([0-9.,%\s]+\))$")


def _safe_color(value: str, fallback: str) -> str:
    value = (value or "").strip()
    return value if _CSS_COLOR.match(value) else fallback


def build_theme_css(theme: ThemeSpec) -> str:
    """CSS custom properties derived from the request theme."""
    family = resolve_font_family(theme.font_family)
    return (
        "html, body {"
        f'--font-family: "{family}";'
        f"--font-size-default: {theme.font_size_default - FONT_SIZE_DELTA}px;"
        f"--font-size-large: {theme.font_size_default}px;"
        f"--font-size-small: {theme.font_size_small - FONT_SIZE_DELTA}px;"
        f"--font-size-medium: {theme.font_size_medium - FONT_SIZE_DELTA}px;"
        f"--color-primary: {_safe_color(theme.primary_color, DEFAULT_PRIMARY_COLOR)};"
        f"--color-secondary: {_safe_color(theme.secondary_color, DEFAULT_SECONDARY_COLOR)};"
        "}"
    )


def compose_document(
    slot_set: TemplateSlotSet,
    fragments: Mapping[str, str],
    styles: StyleBundle,
    theme: ThemeSpec,
    repeat_header_footer: bool = True,
) -> str:
    """
    Merge styles, theme variables and rendered fragments into one HTML document.

    Background CSS and the ``repeat-header-footer`` body class are only
    emitted when header and footer repeat on every page.
    """
    if "body" not in fragments:
        raise ValueError(f"No body fragment for template family {slot_set.family.value}")

    css = "".join([
        styles.font_face,
        styles.common,
        styles.header,
        styles.body,
        styles.footer,
        styles.background if repeat_header_footer else "",
        build_theme_css(theme),
    ])

    sections = "\n".join(
        f'<div class="slot slot-{name}" data-slot="{name}">{fragments[name]}</div>'
        for name in slot_set.names
        if name in fragments
    )
    body_class = "repeat-header-footer" if repeat_header_footer else ""

    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="UTF-8">\n'
        f"<style>\n{css}\n</style>\n"
        "</head>\n"
        f'<body class="{body_class}">\n'
        '<div style="display: flex; flex-direction: column; height: -webkit-fill-available;">\n'
        f"{sections}\n"
        "</div>\n"
        "</body>\n"
        "</html>\n"
    )
