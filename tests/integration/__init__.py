"""
Integration tests for NPS Insights.

Test components together or against real external services:
- API endpoints (FastAPI TestClient, scripted LLM, in-memory SQLite)
- Ollama client and classification (real calls, marked with @pytest.mark.integration)
"""
