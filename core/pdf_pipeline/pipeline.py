"""
PDF pipeline: request -> slots -> fragments -> document -> PDF artifact.

Timeout policy: callers wait at most ``render_timeout`` seconds. A render
that is still running at that point is not interrupted; it finishes in the
background and its artifact is deleted as soon as it lands, since nobody is
left to stream it. The same applies when the caller itself is cancelled.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from .artifacts import ArtifactStore
from .composer import compose_document
from .exceptions import RenderTimeoutError
from .models import PdfOptions, RenderRequest
from .style_builder import StyleAssembler
from .template_renderer import TemplateRenderer
from .template_resolver import resolve_template_slots


logger = logging.getLogger(__name__)


class PdfPipeline:
    """
    Orchestrates one render request.

    Usage:
        pipeline = PdfPipeline(artifacts, renderer, styles, render_timeout=60)
        path = await pipeline.render_to_file(request)
    """

    def __init__(
        self,
        artifacts: ArtifactStore,
        renderer: TemplateRenderer,
        styles: StyleAssembler,
        render_timeout: Optional[float] = None,
    ):
        self.artifacts = artifacts
        self.renderer = renderer
        self.styles = styles
        self.render_timeout = render_timeout

    async def compose(self, request: RenderRequest) -> str:
        """Build the final HTML document for a request."""
        slot_set = resolve_template_slots(request.template_family, request.document_kind)
        logger.debug(
            f"Resolved {request.template_family!r}/{request.document_kind!r} "
            f"-> {slot_set.family.value} {slot_set.names}"
        )

        styles, fragments = await asyncio.gather(
            self.styles.load_bundle(slot_set.family, request.theme.font_family),
            self.renderer.render_slots(slot_set, request),
        )
        return compose_document(
            slot_set,
            fragments,
            styles,
            request.theme,
            repeat_header_footer=request.repeat_header_footer,
        )

    async def _render(self, request: RenderRequest) -> Path:
        return await self.artifacts.render_to_file(
            lambda: self.compose(request),
            PdfOptions.for_request(request),
            request.output_name,
        )

    async def render_to_file(self, request: RenderRequest) -> Path:
        """
        Render a request to a temp PDF and return its path.

        Raises:
            RenderTimeoutError: the render outlived ``render_timeout``
        """
        if not self.render_timeout:
            return await self._render(request)

        task = asyncio.ensure_future(self._render(request))
        try:
            return await asyncio.wait_for(asyncio.shield(task), self.render_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Render exceeded {self.render_timeout}s; finishing in background")
            task.add_done_callback(self._discard_abandoned)
            raise RenderTimeoutError(self.render_timeout) from None
        except asyncio.CancelledError:
            task.add_done_callback(self._discard_abandoned)
            raise

    def _discard_abandoned(self, task: "asyncio.Future[Path]") -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Abandoned render failed: {error}")
            return
        self.artifacts.discard(task.result())
        logger.info(f"Abandoned render finished; removed {task.result().name}")
