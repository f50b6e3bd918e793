"""
AI routes: enrichment run control, progress polling and ad-hoc analysis.

The dashboard triggers a run with POST /api/process-ai and then polls
GET /api/ai-status about once a second until ``isProcessing`` is false.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, status

from nps_insights.api.dependencies import (
    get_classifier,
    get_llm_client,
    get_orchestrator,
    get_tracker,
)
from nps_insights.api.models import (
    AnalyzeBatchRequest,
    AnalyzeCommentRequest,
    BatchAnalysisResponse,
    CancelResponse,
    ErrorResponse,
    ProcessAIRequest,
    ProcessAIResponse,
)
from nps_insights.classification.client import ClassificationClient
from nps_insights.enrichment.orchestrator import EnrichmentOrchestrator
from nps_insights.enrichment.progress import ProgressTracker
from nps_insights.llm.base_client import BaseLLMClient
from nps_insights.models.classification_models import CommentAnalysis
from nps_insights.models.progress_models import ProgressSnapshot

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get(
    "/ai-status",
    response_model=ProgressSnapshot,
    summary="Enrichment progress",
    description="""
    Snapshot of the current (or last) enrichment run.

    `progress` is a rounded percentage (0 when nothing was admitted);
    `isProcessing` turns false once the run has completed or was cancelled.
    """,
)
async def ai_status(tracker: ProgressTracker = Depends(get_tracker)) -> ProgressSnapshot:
    return tracker.snapshot()


@router.post(
    "/process-ai",
    response_model=ProcessAIResponse,
    status_code=status.HTTP_200_OK,
    summary="Start an enrichment run",
    description="""
    Classify every stored response that has a comment but no sentiment yet
    (or every response with a comment when `force` is true).

    Returns as soon as the run is admitted; poll GET /api/ai-status for
    progress. Only one run may be active at a time.
    """,
    responses={
        200: {"description": "Run started, or nothing was pending"},
        409: {"model": ErrorResponse, "description": "A run is already in progress"},
        503: {"model": ErrorResponse, "description": "Response store unavailable"},
    },
)
async def process_ai(
    body: Optional[ProcessAIRequest] = None,
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> ProcessAIResponse:
    force = body.force if body else False
    ticket = await orchestrator.start(force=force)

    if not ticket.started:
        return ProcessAIResponse(message="No pending responses to process", total=0)

    logger.info("Enrichment triggered", run_id=ticket.run_id, total=ticket.total, force=force)
    return ProcessAIResponse(
        message="AI processing started",
        run_id=ticket.run_id,
        total=ticket.total,
    )


@router.post(
    "/process-ai/cancel",
    response_model=CancelResponse,
    summary="Cancel the active enrichment run",
    description="""
    Stop the active run after the rows currently being classified.
    Rows already written keep their enrichment; the rest stay pending.
    """,
    responses={
        409: {"model": ErrorResponse, "description": "No run is active"},
    },
)
async def cancel_processing(
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
) -> CancelResponse:
    run_id = orchestrator.cancel()
    return CancelResponse(message="Cancellation requested", run_id=run_id)


@router.post(
    "/analyze-comment",
    response_model=CommentAnalysis,
    summary="Analyze one comment",
    description="""
    Classify sentiment and topics of a single comment without storing it.

    Never fails because of the model: an unreachable model yields a neutral
    safe default, an unparseable reply yields the keyword fallback.
    """,
)
async def analyze_comment(
    request: AnalyzeCommentRequest,
    classifier: ClassificationClient = Depends(get_classifier),
) -> CommentAnalysis:
    outcome = await classifier.classify_comment(request.comment, request.language)
    return outcome.to_analysis()


@router.post(
    "/analyze-batch",
    response_model=BatchAnalysisResponse,
    summary="Analyze several comments",
    description="Classify each comment in order, one at a time, without storing anything.",
)
async def analyze_batch(
    request: AnalyzeBatchRequest,
    classifier: ClassificationClient = Depends(get_classifier),
) -> BatchAnalysisResponse:
    results = []
    for item in request.comments:
        outcome = await classifier.classify_comment(item.comment, item.language)
        results.append(outcome.to_analysis())

    logger.info("Batch analyzed", count=len(results))
    return BatchAnalysisResponse(results=results)


@router.get(
    "/model-info",
    summary="Configured model details",
    description="""
    Ollama metadata (family, parameter size, quantization) for the
    configured model, plus whether it is installed on the server.
    """,
    responses={
        404: {"model": ErrorResponse, "description": "Model not installed on the Ollama server"},
        502: {"model": ErrorResponse, "description": "Ollama unreachable"},
    },
)
async def model_info(llm_client: BaseLLMClient = Depends(get_llm_client)) -> dict:
    info = await llm_client.get_model_info(llm_client.model)
    return {"model": llm_client.model, "available": True, "details": info.get("details", {})}
