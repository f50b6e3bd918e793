"""
FastAPI exception handlers for structured error responses.

Maps domain exceptions to HTTP status codes. Every body carries
``success: false``, a machine-readable ``error`` code, a ``message`` and a
UTC ``timestamp``.
"""

from datetime import datetime, timezone

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

from nps_insights.enrichment.exceptions import EnrichmentBusyError, NoActiveRunError
from nps_insights.llm.exceptions import (
    LLMConnectionError,
    LLMModelNotAvailableError,
    LLMTimeoutError,
)
from nps_insights.persistence.exceptions import ResponseNotFoundError, StoreUnavailableError

logger = structlog.get_logger(__name__)


def _error_body(error: str, message: str, details: dict | None = None) -> dict:
    body = {
        "success": False,
        "error": error,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        body["details"] = details
    return body


async def enrichment_busy_handler(request: Request, exc: EnrichmentBusyError) -> JSONResponse:
    """
    Handle a second trigger while a run is active.

    Maps to 409 Conflict; the trigger is rejected, not queued.
    """
    logger.info("Enrichment trigger rejected, run in progress", run_id=exc.run_id)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_error_body("processing_in_progress", exc.message, exc.details),
    )


async def no_active_run_handler(request: Request, exc: NoActiveRunError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_error_body("no_active_run", exc.message),
    )


async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    """
    Handle database failures.

    Maps to 503 Service Unavailable.
    """
    logger.error("Store unavailable", error=exc.message, details=exc.details)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body("store_unavailable", "Response store is unavailable", exc.details),
    )


async def response_not_found_handler(request: Request, exc: ResponseNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=_error_body("not_found", exc.message, exc.details),
    )


async def model_not_available_handler(request: Request, exc: LLMModelNotAvailableError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=_error_body("model_not_available", exc.message, exc.details),
    )


async def llm_connection_error_handler(request: Request, exc: LLMConnectionError) -> JSONResponse:
    """
    Handle LLM connection errors that escape the classifier (model introspection).

    Maps to 502 Bad Gateway (upstream service unavailable).
    """
    logger.error("LLM connection error", error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=_error_body("llm_connection_failed", "Unable to connect to Ollama"),
    )


async def llm_timeout_error_handler(request: Request, exc: LLMTimeoutError) -> JSONResponse:
    logger.error("LLM timeout error", error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        content=_error_body("llm_timeout", "Ollama request timed out"),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.

    Maps to 500 Internal Server Error.
    """
    logger.exception("Unexpected error", error_type=type(exc).__name__)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("internal_error", "An unexpected error occurred"),
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    EnrichmentBusyError: enrichment_busy_handler,
    NoActiveRunError: no_active_run_handler,
    StoreUnavailableError: store_unavailable_handler,
    ResponseNotFoundError: response_not_found_handler,
    LLMModelNotAvailableError: model_not_available_handler,
    LLMTimeoutError: llm_timeout_error_handler,
    LLMConnectionError: llm_connection_error_handler,
    Exception: generic_error_handler,
}
