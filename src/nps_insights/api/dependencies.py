"""
FastAPI dependency injection for NPS Insights.

Long-lived resources (database, LLM client, tracker, orchestrator) are
built once by the application factory and stored on ``app.state``; these
getters hand them to route handlers. Tests build an app with their own
settings and stubs and get isolated instances.
"""

from fastapi import Request

from nps_insights.classification.client import ClassificationClient
from nps_insights.config import Settings
from nps_insights.enrichment.orchestrator import EnrichmentOrchestrator
from nps_insights.enrichment.progress import ProgressTracker
from nps_insights.llm.base_client import BaseLLMClient
from nps_insights.persistence.database import Database
from nps_insights.persistence.repository import ResponseRepository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_repository(request: Request) -> ResponseRepository:
    """
    Get the response repository bound to the application database.

    Args:
        request: Incoming request (carries the app)

    Returns:
        ResponseRepository instance
    """
    return request.app.state.repository


def get_llm_client(request: Request) -> BaseLLMClient:
    return request.app.state.llm_client


def get_classifier(request: Request) -> ClassificationClient:
    """
    Get the classification client.

    Shares the LLM client (and its connection pool) with the orchestrator.
    """
    return request.app.state.classifier


def get_tracker(request: Request) -> ProgressTracker:
    return request.app.state.tracker


def get_orchestrator(request: Request) -> EnrichmentOrchestrator:
    return request.app.state.orchestrator
