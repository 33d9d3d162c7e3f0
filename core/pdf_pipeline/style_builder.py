"""
Font and stylesheet assembly for PDF rendering.

This module handles:
- Embedding font families as base64 @font-face declarations
- Caching the generated font CSS per family for the process lifetime
- Loading the per-family CSS fragments for a request
"""

import asyncio
import base64
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from .exceptions import FontLoadError, TemplateCompileError
from .models import StyleBundle
from .template_resolver import TemplateFamily


logger = logging.getLogger(__name__)


SUPPORTED_FONT_FAMILIES = ("Open Sans", "Roboto", "Lato", "Inter")
DEFAULT_FONT_FAMILY = "Inter"

# (file suffix, font-weight, font-style)
FONT_VARIANTS: Tuple[Tuple[str, int, str], ...] = (
    ("Light", 200, "normal"),
    ("LightItalic", 200, "italic"),
    ("Regular", 400, "normal"),
    ("Italic", 400, "italic"),
    ("Medium", 500, "normal"),
    ("MediumItalic", 500, "italic"),
    ("Bold", 700, "normal"),
    ("BoldItalic", 700, "italic"),
)

FONT_DATA_PREFIX = "data:font/truetype;charset=utf-8;base64,"
FONT_UNICODE_RANGE = "U+0020-007E, U+00A0-00FF"

STYLE_FRAGMENTS = ("common", "header", "body", "footer", "background")


def resolve_font_family(font_family: Optional[str]) -> str:
    """Map a requested family onto a supported one (default: Inter)."""
    if font_family in SUPPORTED_FONT_FAMILIES:
        return font_family
    return DEFAULT_FONT_FAMILY


class FontFaceCache:
    """
    Builds and caches @font-face blocks per font family.

    The vocabulary is fixed and small, so entries are never evicted.
    """

    def __init__(self, fonts_dir: Path):
        self.fonts_dir = Path(fonts_dir)
        self._cache: Dict[str, str] = {}
        self._lock = asyncio.Lock()
        self.builds = 0

    def font_dir_for(self, family: str) -> Path:
        return self.fonts_dir / family.replace(" ", "")

    async def get(self, font_family: Optional[str]) -> str:
        """
        Return the font-face CSS for a family.

        Unknown families fall back to the default family's entry.
        """
        family = resolve_font_family(font_family)
        cached = self._cache.get(family)
        if cached is not None:
            return cached

        async with self._lock:
            cached = self._cache.get(family)
            if cached is None:
                cached = await asyncio.to_thread(self.build_font_css, family)
                self._cache[family] = cached
            return cached

    def build_font_css(self, family: str) -> str:
        """Read and encode every variant of a family. Missing variants are skipped."""
        self.builds += 1
        font_dir = self.font_dir_for(family)
        file_stem = family.replace(" ", "")
        declarations = []

        for variant, weight, style in FONT_VARIANTS:
            path = font_dir / f"{file_stem}-{variant}.ttf"
            try:
                data_url = self._encode_variant(family, path)
            except FontLoadError as e:
                logger.warning("Skipping font variant: %s", e)
                continue

            declarations.append(
                f"@font-face {{ font-family: '{family}'; "
                f"src: url('{data_url}') format('truetype'); "
                f"font-weight: {weight}; font-style: {style}; "
                f"unicode-range: {FONT_UNICODE_RANGE}; }}\n"
            )

        logger.debug(f"Built font CSS for {family}: {len(declarations)}/{len(FONT_VARIANTS)} variants")
        return "".join(declarations)

    @staticmethod
    def _encode_variant(family: str, path: Path) -> str:
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise FontLoadError(family, path, f"({e.strerror or e})") from e
        return FONT_DATA_PREFIX + base64.b64encode(raw).decode("ascii")


class StyleAssembler:
    """Loads CSS fragments for a template family and attaches the font block."""

    def __init__(self, templates_dir: Path, font_cache: FontFaceCache):
        self.templates_dir = Path(templates_dir)
        self.font_cache = font_cache

    def styles_dir_for(self, family: TemplateFamily) -> Path:
        return self.templates_dir / family.value / "styles"

    @staticmethod
    def _read_css(path: Path) -> str:
        if not path.is_file():
            return ""
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateCompileError(str(path), f"unreadable stylesheet: {e}", slot=path.stem) from e

    async def load_bundle(self, family: TemplateFamily, font_family: Optional[str]) -> StyleBundle:
        """Read the family's CSS fragments concurrently and attach the font block."""
        styles_dir = self.styles_dir_for(family)
        css_reads = [
            asyncio.to_thread(self._read_css, styles_dir / f"{name}.css")
            for name in STYLE_FRAGMENTS
        ]
        font_face, *fragments = await asyncio.gather(self.font_cache.get(font_family), *css_reads)
        return StyleBundle(font_face=font_face, **dict(zip(STYLE_FRAGMENTS, fragments)))
