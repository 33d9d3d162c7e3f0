"""
PDF generation endpoints.

Each request is rendered to a temp file and streamed back from disk; the
file is deleted when the response stream closes.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from api.deps import get_notifier, get_pipeline
from api.errors import render_failure_response
from api.schemas.pdf import AccountStatementRequest, InvoicePdfRequest
from config.logging_config import get_logger
from core.pdf_pipeline import PdfPipeline, RenderRequest
from core.services.notifications import FailureNotifier

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["PDF"])


async def _render_and_stream(
    render_request: RenderRequest,
    pipeline: PdfPipeline,
    notifier: FailureNotifier,
    endpoint: str,
    download_name: str,
):
    try:
        path = await pipeline.render_to_file(render_request)
    except Exception as e:
        return render_failure_response(e, endpoint, notifier)

    logger.info(f"{endpoint}: streaming {path.name}")
    return StreamingResponse(
        pipeline.artifacts.stream_artifact(path),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{download_name}"'},
        # Stream close already deletes the file; this covers a body that never started
        background=BackgroundTask(pipeline.artifacts.discard, path),
    )


@router.post("/pdf")
async def generate_pdf(
    payload: InvoicePdfRequest,
    pipeline: PdfPipeline = Depends(get_pipeline),
    notifier: FailureNotifier = Depends(get_notifier),
):
    """
    Render an invoice-family document.

    ``templateType`` selects the template family, ``voucherType`` the
    document kind. ``company.name`` is required.
    """
    render_request = payload.to_render_request()
    return await _render_and_stream(render_request, pipeline, notifier, "api/v1/pdf", "invoice.pdf")


@router.post("/account-statement")
async def generate_account_statement(
    payload: AccountStatementRequest,
    pipeline: PdfPipeline = Depends(get_pipeline),
    notifier: FailureNotifier = Depends(get_notifier),
):
    """Render an account statement. ``accountName`` is required."""
    render_request = payload.to_render_request()
    return await _render_and_stream(
        render_request, pipeline, notifier, "api/v1/account-statement", "account-statement.pdf"
    )
