"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without external dependencies.
"""

from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from nps_insights.classification.client import ClassificationClient
from nps_insights.config import PACKAGE_DIR
from nps_insights.enrichment.progress import ProgressTracker
from nps_insights.llm.prompt_builder import PromptBuilder
from nps_insights.models.llm_models import LLMGenerationResponse
from nps_insights.validation.pipeline import ReplyParser


def make_llm_response(content: str) -> LLMGenerationResponse:
    return LLMGenerationResponse(
        content=content,
        model_version="qwen2.5:3b",
        finish_reason="stop",
        prompt_tokens=150,
        completion_tokens=40,
        latency_ms=800,
        raw_metadata={},
    )


@pytest.fixture
def templates_dir() -> Path:
    return PACKAGE_DIR / "llm" / "templates"


@pytest.fixture
def schemas_dir() -> Path:
    return PACKAGE_DIR / "validation" / "schemas"


@pytest.fixture
def prompt_builder(templates_dir: Path) -> PromptBuilder:
    return PromptBuilder(templates_dir=templates_dir, model="qwen2.5:3b")


@pytest.fixture
def reply_parser(schemas_dir: Path) -> ReplyParser:
    return ReplyParser(schemas_dir)


@pytest.fixture
def mock_ollama_client():
    """Mock OllamaClient for unit tests.

    ``generate`` answers with a neutral sentiment reply by default; tests
    replace ``return_value`` / ``side_effect`` as needed.
    """
    mock = AsyncMock()
    mock.model = "qwen2.5:3b"
    mock.generate = AsyncMock(
        return_value=make_llm_response(
            '{"sentiment": "neutral", "confidence": 0.7, "explanation": "factual"}'
        )
    )
    mock.health_check = AsyncMock(return_value=True)
    mock.list_models = AsyncMock(return_value=["qwen2.5:3b", "llama3.2:3b"])
    mock.is_model_available = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def classification_client(mock_ollama_client, prompt_builder, reply_parser) -> ClassificationClient:
    return ClassificationClient(
        llm_client=mock_ollama_client,
        prompt_builder=prompt_builder,
        reply_parser=reply_parser,
        call_timeout=1.0,
    )


@pytest.fixture
def tracker() -> ProgressTracker:
    return ProgressTracker()


@pytest.fixture
def mock_repository():
    """Mock ResponseRepository (sync methods)."""
    mock = Mock()
    mock.get_pending_for_enrichment = Mock(return_value=[])
    mock.update_enrichment = Mock(return_value=None)
    return mock
