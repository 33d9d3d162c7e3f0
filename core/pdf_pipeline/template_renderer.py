"""
Jinja2 rendering of template slots.

Each slot (header/body/footer) is rendered from its own markup source
against the request data. Slots of one request render concurrently; the
first failure cancels the rest.
"""

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)

from .exceptions import TemplateCompileError, TemplateNotFoundError
from .models import RenderRequest
from .template_resolver import TemplateSlot, TemplateSlotSet, normalize_family


logger = logging.getLogger(__name__)


def format_money(value: Any, places: int = 2) -> str:
    """Format a number with thousands separators: 1234.5 -> '1,234.50'"""
    if value is None or value == "":
        return ""
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return str(value)
    return f"{amount:,.{places}f}"


class TemplateRenderer:
    """
    Renders markup sources under ``templates_dir`` with Jinja2.

    Usage:
        renderer = TemplateRenderer(Path("templates"))
        html = renderer.render("standard/body.html", renderer.build_context(request))
    """

    def __init__(self, templates_dir: Path):
        self.templates_dir = Path(templates_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["money"] = format_money

    @staticmethod
    def build_context(request: RenderRequest) -> Dict[str, Any]:
        """Render model: request data plus theme and selectors."""
        context = dict(request.data)
        context["theme"] = request.theme
        context["document_kind"] = request.document_kind
        context["template_family"] = normalize_family(request.template_family).value
        return context

    def render(self, source: str, context: Dict[str, Any], slot: Optional[str] = None) -> str:
        """Render one markup source to an HTML fragment."""
        try:
            template = self.env.get_template(source)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(source, slot) from e
        except TemplateError as e:
            raise TemplateCompileError(source, str(e), slot) from e

        try:
            return template.render(context)
        except (TemplateError, TypeError, ValueError, AttributeError, KeyError) as e:
            raise TemplateCompileError(source, f"{type(e).__name__}: {e}", slot) from e

    async def render_slot(self, slot: TemplateSlot, context: Dict[str, Any]) -> str:
        return await asyncio.to_thread(self.render, slot.source, context, slot.name.value)

    async def render_slots(self, slot_set: TemplateSlotSet, request: RenderRequest) -> Dict[str, str]:
        """
        Render every slot concurrently.

        Returns:
            Mapping of slot name -> HTML fragment

        Raises:
            TemplateNotFoundError / TemplateCompileError from the first slot
            that fails; the other slots are cancelled.
        """
        context = self.build_context(request)
        tasks = {
            slot.name.value: asyncio.ensure_future(self.render_slot(slot, context))
            for slot in slot_set.slots
        }

        try:
            done, pending = await asyncio.wait(tasks.values(), return_when=asyncio.FIRST_EXCEPTION)
        except asyncio.CancelledError:
            for task in tasks.values():
                task.cancel()
            raise

        failed = [task for task in done if not task.cancelled() and task.exception() is not None]
        if failed:
            for task in pending:
                task.cancel()
            error = failed[0].exception()
            logger.error(f"Slot rendering failed for {slot_set.family.value}: {error}")
            raise error

        return {name: task.result() for name, task in tasks.items()}
