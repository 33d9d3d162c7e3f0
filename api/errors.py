"""
Error classification for the PDF endpoints.

Invalid input becomes a 400 with the validation message. Everything else
becomes a 500 with a correlation id; the full trace goes to the log and to
the failure notifier, never to the client.
"""

import traceback
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.background import BackgroundTask

from config.logging_config import get_logger
from config.settings import settings
from core.pdf_pipeline import InvalidRequestError
from core.services.notifications import FailureEvent, FailureNotifier

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Failed to generate PDF!"
INVALID_PAYLOAD_MESSAGE = "Invalid request data. Ensure payload matches expected format."


def new_correlation_id() -> str:
    return uuid.uuid4().hex


def render_failure_response(exc: BaseException, endpoint: str, notifier: FailureNotifier) -> JSONResponse:
    """
    Log an unexpected render failure and build the client response.

    The notifier is invoked as a background task after the response is sent.
    """
    correlation_id = new_correlation_id()
    stack_trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(f"[{correlation_id}] {endpoint} failed: {type(exc).__name__}: {exc}\n{stack_trace}")

    event = FailureEvent(
        correlation_id=correlation_id,
        endpoint=endpoint,
        environment=settings.environment,
        error_type=type(exc).__name__,
        message=str(exc),
        stack_trace=stack_trace,
    )
    return JSONResponse(
        status_code=500,
        content={"error": GENERIC_ERROR_MESSAGE, "correlation_id": correlation_id},
        background=BackgroundTask(notifier.publish, event),
    )


async def invalid_request_handler(request: Request, exc: InvalidRequestError) -> JSONResponse:
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"error": str(exc), "field": exc.field})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Rejected {request.method} {request.url.path}: payload failed validation")
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": INVALID_PAYLOAD_MESSAGE, "details": errors})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidRequestError, invalid_request_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
