"""
PDF Pipeline - HTML template to PDF rendering through headless Chromium.

This module provides:
- Template slot resolution per template family and document kind
- Jinja2 rendering of header/body/footer fragments
- Font embedding and per-family stylesheet assembly
- A shared, lazily launched browser session
- Temp-file PDF artifacts that are deleted after streaming

Usage:
    from core.pdf_pipeline import build_pipeline, RenderRequest

    pipeline = build_pipeline(templates_dir, fonts_dir, temp_dir)
    path = await pipeline.render_to_file(RenderRequest(data={...}))
    async for chunk in pipeline.artifacts.stream_artifact(path):
        ...

Key components:
- PdfPipeline: Orchestrates one render request
- BrowserSession: Shared browser with relaunch on disconnect
- ArtifactStore: Temp PDF naming, writing and streaming
- TemplateRenderer / StyleAssembler / FontFaceCache: Document assembly
"""

from pathlib import Path
from typing import Optional

from .artifacts import ArtifactStore, sanitize_filename
from .browser_session import BrowserSession, EngineHandle, RenderPage, SessionState, chromium_launcher
from .composer import build_theme_css, compose_document
from .exceptions import (
    PdfPipelineError,
    InvalidRequestError,
    TemplateNotFoundError,
    TemplateCompileError,
    FontLoadError,
    RenderEngineUnavailableError,
    ArtifactWriteError,
    RenderTimeoutError,
)
from .models import MarginSpec, PdfOptions, RenderRequest, StyleBundle, ThemeSpec
from .pipeline import PdfPipeline
from .style_builder import FontFaceCache, StyleAssembler, resolve_font_family
from .template_renderer import TemplateRenderer
from .template_resolver import (
    SlotName,
    TemplateFamily,
    TemplateSlot,
    TemplateSlotSet,
    resolve_template_slots,
)


def build_pipeline(
    templates_dir: Path,
    fonts_dir: Path,
    temp_dir: Path,
    session: Optional[BrowserSession] = None,
    downloads_dir: Optional[Path] = None,
    keep_copies: bool = False,
    render_timeout: Optional[float] = None,
) -> PdfPipeline:
    """Wire a pipeline from directories and an optional browser session."""
    session = session or BrowserSession()
    return PdfPipeline(
        artifacts=ArtifactStore(session, temp_dir, downloads_dir=downloads_dir, keep_copies=keep_copies),
        renderer=TemplateRenderer(templates_dir),
        styles=StyleAssembler(templates_dir, FontFaceCache(fonts_dir)),
        render_timeout=render_timeout,
    )


__all__ = [
    # Pipeline
    'PdfPipeline',
    'build_pipeline',

    # Browser
    'BrowserSession',
    'EngineHandle',
    'RenderPage',
    'SessionState',
    'chromium_launcher',

    # Artifacts
    'ArtifactStore',
    'sanitize_filename',

    # Assembly
    'TemplateRenderer',
    'StyleAssembler',
    'FontFaceCache',
    'resolve_font_family',
    'build_theme_css',
    'compose_document',

    # Templates
    'TemplateFamily',
    'SlotName',
    'TemplateSlot',
    'TemplateSlotSet',
    'resolve_template_slots',

    # Models
    'MarginSpec',
    'ThemeSpec',
    'RenderRequest',
    'PdfOptions',
    'StyleBundle',

    # Errors
    'PdfPipelineError',
    'InvalidRequestError',
    'TemplateNotFoundError',
    'TemplateCompileError',
    'FontLoadError',
    'RenderEngineUnavailableError',
    'ArtifactWriteError',
    'RenderTimeoutError',
]


__version__ = '1.0.0'
