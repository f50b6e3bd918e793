"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import asyncio
from typing import Any, Callable, Dict, Optional, Union

import pytest

from nps_insights.config import Settings
from nps_insights.llm.base_client import BaseLLMClient
from nps_insights.llm.exceptions import LLMConnectionError
from nps_insights.models.llm_models import LLMGenerationRequest, LLMGenerationResponse
from nps_insights.models.survey_models import SurveyResponseCreate
from nps_insights.persistence.database import Database
from nps_insights.persistence.repository import ResponseRepository


NEGATIVE_SENTIMENT_REPLY = (
    '{"sentiment": "negative", "confidence": 0.92, '
    '"explanation": "Complains about crashes and support"}'
)
CRASH_TOPICS_REPLY = (
    '{"topics": [{"topic": "App Performance", "confidence": 0.9}, '
    '{"topic": "Customer Support", "confidence": 0.8}]}'
)

Reply = Union[str, Exception, Callable[[str], str]]


class ScriptedLLMClient(BaseLLMClient):
    """LLM client that answers from fixed replies instead of a server.

    The prompt kind is recognized from the template header, so sentiment and
    topic calls can be scripted independently. A reply may be a string, an
    exception to raise, or a callable receiving the prompt.
    """

    def __init__(
        self,
        sentiment_reply: Reply = NEGATIVE_SENTIMENT_REPLY,
        topics_reply: Reply = CRASH_TOPICS_REPLY,
        models: Optional[list[str]] = None,
        delay: float = 0.0,
    ):
        super().__init__(base_url="http://ollama.test", model="qwen2.5:3b")
        self.sentiment_reply = sentiment_reply
        self.topics_reply = topics_reply
        self.models = ["qwen2.5:3b"] if models is None else models
        self.delay = delay
        self.calls: list[LLMGenerationRequest] = []

    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        self.calls.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)

        reply = self.topics_reply if "topic extractor" in request.prompt else self.sentiment_reply
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(request.prompt)

        return LLMGenerationResponse(
            content=reply,
            model_version=request.model,
            finish_reason="stop",
            prompt_tokens=120,
            completion_tokens=30,
            latency_ms=5,
        )

    async def list_models(self) -> list[str]:
        if not self.models:
            raise LLMConnectionError("Ollama not reachable")
        return self.models

    async def get_model_info(self, model_name: str | None = None) -> Dict[str, Any]:
        return {"details": {"family": "qwen2", "parameter_size": "3B"}}


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.ENRICH_AFTER_INGEST = True
    """
    return Settings(
        # === Application ===
        APP_NAME="NPS Insights (Test)",
        APP_VERSION="0.1.0",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Ollama ===
        OLLAMA_BASE_URL="http://localhost:11434",
        OLLAMA_MODEL="qwen2.5:3b",
        OLLAMA_TIMEOUT=10,

        # === Classification / Enrichment ===
        CLASSIFICATION_TIMEOUT_SECONDS=5.0,
        ENRICHMENT_WORKERS=1,
        ENRICHMENT_ROW_DELAY_SECONDS=0.0,  # No throttling in tests
        ENRICH_AFTER_INGEST=False,

        # === Database ===
        DATABASE_URL="sqlite:///:memory:",  # In-memory for tests

        # === Monitoring ===
        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def database() -> Database:
    """Fresh in-memory database with all tables created."""
    db = Database("sqlite:///:memory:")
    db.create_tables()
    yield db
    db.dispose()


@pytest.fixture
def repository(database: Database) -> ResponseRepository:
    return ResponseRepository(database)


@pytest.fixture
def scripted_llm_client():
    """Factory fixture for ScriptedLLMClient.

    Usage:
        def test_something(scripted_llm_client):
            client = scripted_llm_client(sentiment_reply="no json here")
    """
    def _create(**kwargs) -> ScriptedLLMClient:
        return ScriptedLLMClient(**kwargs)

    return _create


@pytest.fixture
def create_survey_response():
    """Factory fixture to create SurveyResponseCreate with custom values."""
    def _create(
        rating: int = 3,
        comment: Optional[str] = "App crashes constantly, terrible support",
        language: str = "en",
        **kwargs,
    ) -> SurveyResponseCreate:
        return SurveyResponseCreate(rating=rating, comment=comment, language=language, **kwargs)

    return _create
