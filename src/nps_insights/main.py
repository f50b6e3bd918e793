"""
FastAPI application entry point for NPS Insights.
"""

from pathlib import Path
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from nps_insights.api.error_handlers import EXCEPTION_HANDLERS
from nps_insights.api.middleware import RequestTracingMiddleware
from nps_insights.api.routes_enrichment import router as enrichment_router
from nps_insights.api.routes_responses import health_router
from nps_insights.api.routes_responses import router as responses_router
from nps_insights.classification.client import ClassificationClient
from nps_insights.config import Settings, settings as default_settings
from nps_insights.enrichment.orchestrator import EnrichmentOrchestrator
from nps_insights.enrichment.progress import ProgressTracker
from nps_insights.llm.base_client import BaseLLMClient
from nps_insights.llm.ollama_client import OllamaClient
from nps_insights.logging_config import configure_logging
from nps_insights.persistence.database import Database
from nps_insights.persistence.repository import ResponseRepository

logger = structlog.get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    llm_client: Optional[BaseLLMClient] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration (defaults to the environment-loaded settings)
        llm_client: Pre-built LLM client; tests pass a stub here.
            When omitted an OllamaClient is created at startup.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)

    app = FastAPI(
        title=settings.APP_NAME,
        description="NPS survey analytics with local-LLM sentiment and topic enrichment",
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings

    # Request tracing middleware (must be first for request_id in all logs)
    app.add_middleware(RequestTracingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    app.include_router(enrichment_router, prefix="/api", tags=["ai"])
    app.include_router(responses_router, prefix="/api", tags=["responses"])
    app.include_router(health_router, tags=["health"])

    @app.on_event("startup")
    async def startup():
        """Application startup - build shared resources and verify services."""
        logger.info(
            "Application startup",
            version=settings.APP_VERSION,
            environment=settings.ENVIRONMENT,
            ollama_base_url=settings.OLLAMA_BASE_URL,
            model=settings.OLLAMA_MODEL,
            database_url=settings.DATABASE_URL.split("@")[-1],
        )

        database = Database.from_settings(settings)
        database.create_tables()
        client = llm_client or OllamaClient(
            base_url=settings.OLLAMA_BASE_URL,
            model=settings.OLLAMA_MODEL,
            timeout=settings.OLLAMA_TIMEOUT,
            max_retries=settings.OLLAMA_MAX_RETRIES,
        )
        repository = ResponseRepository(database)
        classifier = ClassificationClient.from_settings(settings, client)
        tracker = ProgressTracker()

        app.state.database = database
        app.state.llm_client = client
        app.state.repository = repository
        app.state.classifier = classifier
        app.state.tracker = tracker
        app.state.orchestrator = EnrichmentOrchestrator.from_settings(
            settings, repository, classifier, tracker
        )

        if await client.is_model_available():
            logger.info("Ollama model available", model=client.model)
        else:
            logger.warning(
                "Ollama model not available, enrichment will use safe defaults",
                model=client.model,
                hint=f"ollama pull {client.model}",
            )

        templates_dir = Path(settings.PROMPT_TEMPLATES_DIR)
        if not templates_dir.exists():
            logger.error("Prompt templates directory not found", path=str(templates_dir))

        logger.info("Application startup complete")

    @app.on_event("shutdown")
    async def shutdown():
        """Application shutdown - stop the active run and release connections."""
        logger.info("Application shutdown")
        orchestrator = getattr(app.state, "orchestrator", None)
        if orchestrator is not None:
            await orchestrator.shutdown()
        client = getattr(app.state, "llm_client", None)
        if client is not None:
            await client.close()
        database = getattr(app.state, "database", None)
        if database is not None:
            database.dispose()
        logger.info("Application shutdown complete")

    if settings.PROMETHEUS_ENABLED:
        Instrumentator().instrument(app).expose(app)

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint with API documentation links."""
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": "/docs",
            "health": "/health",
            "status": "/api/ai-status",
            "metrics": "/metrics" if settings.PROMETHEUS_ENABLED else None,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "nps_insights.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG,
    )
