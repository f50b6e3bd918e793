"""
Survey response routes: bulk upload, listing, clearing, NPS statistics,
plus the service health check.
"""

from datetime import date, datetime, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from nps_insights.api.dependencies import (
    get_database,
    get_llm_client,
    get_orchestrator,
    get_repository,
    get_settings,
)
from nps_insights.api.models import (
    BulkInsertPayload,
    BulkInsertResponse,
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
)
from nps_insights.config import Settings
from nps_insights.enrichment.exceptions import EnrichmentBusyError
from nps_insights.enrichment.orchestrator import EnrichmentOrchestrator
from nps_insights.llm.base_client import BaseLLMClient
from nps_insights.models.enums import TopicsEnum
from nps_insights.models.survey_models import SurveyResponse
from nps_insights.persistence.database import Database
from nps_insights.persistence.exceptions import StoreUnavailableError
from nps_insights.persistence.repository import ResponseRepository

logger = structlog.get_logger(__name__)

router = APIRouter()
health_router = APIRouter()


@router.post(
    "/nps-responses/bulk",
    response_model=BulkInsertResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload survey responses",
    description="""
    Insert survey rows, given either as a JSON array or as
    `{"responses": [...]}`.

    Ratings must be 0-10; languages are normalized to de/fr/it/en; a
    missing date defaults to today. When enrichment-after-ingest is on,
    an enrichment run is started for the new rows (if none is running).
    """,
    responses={
        422: {"description": "Invalid row (e.g. rating out of range)"},
        503: {"model": ErrorResponse, "description": "Response store unavailable"},
    },
)
async def bulk_insert(
    payload: BulkInsertPayload,
    repository: ResponseRepository = Depends(get_repository),
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
) -> BulkInsertResponse:
    rows = payload if isinstance(payload, list) else payload.responses
    ids = repository.insert_many(rows)

    enrichment_started = False
    if ids and settings.ENRICH_AFTER_INGEST:
        try:
            ticket = await orchestrator.start()
            enrichment_started = ticket.started
        except EnrichmentBusyError as e:
            logger.info("Enrichment already running, new rows wait for the next run", run_id=e.run_id)
        except StoreUnavailableError as e:
            logger.warning("Could not start enrichment after ingest", error=e.message)

    return BulkInsertResponse(inserted=len(ids), enrichment_started=enrichment_started)


@router.get(
    "/nps-responses",
    response_model=list[SurveyResponse],
    summary="List survey responses",
    description="Stored rows, newest first, with derived `responseGroup` and topic mentions.",
)
async def list_responses(
    sentiment: Optional[str] = Query(default=None, description="positive / neutral / negative / N/A"),
    language: Optional[str] = Query(default=None, description="de / fr / it / en"),
    topic: Optional[str] = Query(default=None, description="Topic label from the taxonomy"),
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=10000),
    repository: ResponseRepository = Depends(get_repository),
) -> list[SurveyResponse]:
    if topic:
        known = TopicsEnum.from_label(topic)
        topic = known.value if known else topic
    return repository.list_responses(
        sentiment=sentiment.lower() if sentiment and sentiment != "N/A" else sentiment,
        language=language.lower() if language else None,
        topic=topic,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )


@router.delete(
    "/nps-responses",
    response_model=DeleteResponse,
    summary="Delete all survey responses",
)
async def clear_responses(
    repository: ResponseRepository = Depends(get_repository),
) -> DeleteResponse:
    deleted = repository.clear_all()
    return DeleteResponse(deleted=deleted)


@router.get(
    "/nps-stats",
    summary="NPS statistics",
    description="""
    NPS score (promoter% minus detractor%), segment percentages, sentiment
    counts over enriched rows and topic frequencies with mean confidence.
    """,
)
async def nps_stats(repository: ResponseRepository = Depends(get_repository)) -> dict:
    return repository.nps_stats()


@health_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="""
    Check the health of the service and its dependencies.

    - database unreachable: `unhealthy` (503)
    - Ollama unreachable or model not installed: `degraded` (200);
      enrichment still runs with safe defaults
    """,
    responses={
        200: {"description": "Healthy or degraded"},
        503: {"description": "Database unreachable"},
    },
)
async def health_check(
    settings: Settings = Depends(get_settings),
    database: Database = Depends(get_database),
    llm_client: BaseLLMClient = Depends(get_llm_client),
):
    services = {"database": "ok" if database.ping() else "unreachable"}

    if await llm_client.health_check():
        services["ollama"] = "ok"
        services["model"] = "ok" if await llm_client.is_model_available() else "not_installed"
    else:
        services["ollama"] = "unreachable"
        services["model"] = "unknown"

    if services["database"] != "ok":
        health_status = "unhealthy"
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif services["ollama"] != "ok" or services["model"] != "ok":
        health_status = "degraded"
        status_code = status.HTTP_200_OK
    else:
        health_status = "healthy"
        status_code = status.HTTP_200_OK

    logger.debug("Health check", status=health_status, services=services)

    response = HealthResponse(
        status=health_status,
        version=settings.APP_VERSION,
        services=services,
        model=settings.OLLAMA_MODEL,
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(mode="json", by_alias=True),
    )
