"""Integration test fixtures (service checks and prerequisites).

Provides fixtures for checking if external services are available.
Integration tests are skipped if required services are not running.
"""

import httpx
import pytest


@pytest.fixture(scope="session")
def check_ollama():
    """Check if Ollama is available at localhost:11434.

    Skips tests if Ollama is not reachable.
    """
    try:
        response = httpx.get("http://localhost:11434/api/tags", timeout=5)
        if response.status_code != 200:
            pytest.skip("Ollama not available (non-200 status)")
    except Exception as e:
        pytest.skip(f"Ollama not available: {e}")


@pytest.fixture
def real_ollama_client(check_ollama, test_settings):
    """Real OllamaClient instance for integration tests.

    Requires Ollama to be running (checked by check_ollama fixture).
    """
    from nps_insights.llm.ollama_client import OllamaClient

    return OllamaClient(
        base_url=test_settings.OLLAMA_BASE_URL,
        model=test_settings.OLLAMA_MODEL,
        timeout=60,
        max_retries=2,
    )


@pytest.fixture
def api_client(test_settings, scripted_llm_client):
    """FastAPI TestClient factory over an app wired to a scripted LLM client.

    Usage:
        def test_something(api_client):
            with api_client() as client:
                client.get("/health")
    """
    from fastapi.testclient import TestClient

    from nps_insights.main import create_app

    def _create(settings=None, **llm_kwargs) -> TestClient:
        app = create_app(settings or test_settings, llm_client=scripted_llm_client(**llm_kwargs))
        return TestClient(app)

    return _create
