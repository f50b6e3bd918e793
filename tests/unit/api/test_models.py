"""
Unit tests for API request/response models and error handlers.
"""

import json
from datetime import datetime, timezone

import pytest
from pydantic import TypeAdapter, ValidationError

from nps_insights.api.error_handlers import (
    EXCEPTION_HANDLERS,
    enrichment_busy_handler,
    generic_error_handler,
    no_active_run_handler,
    store_unavailable_handler,
)
from nps_insights.api.models import (
    AnalyzeBatchRequest,
    AnalyzeCommentRequest,
    BulkInsertPayload,
    BulkInsertRequest,
    BulkInsertResponse,
    HealthResponse,
    ProcessAIRequest,
    ProcessAIResponse,
)
from nps_insights.enrichment.exceptions import EnrichmentBusyError, NoActiveRunError
from nps_insights.llm.exceptions import LLMConnectionError, LLMTimeoutError
from nps_insights.models.enums import LanguageEnum
from nps_insights.persistence.exceptions import StoreUnavailableError


class TestRequests:
    def test_process_ai_defaults_to_pending_only(self):
        assert ProcessAIRequest().force is False
        assert ProcessAIRequest.model_validate({"force": True}).force is True

    def test_analyze_comment_allows_missing_comment(self):
        request = AnalyzeCommentRequest.model_validate({})
        assert request.comment is None
        assert request.language == "en"

    def test_analyze_batch_limit(self):
        comments = [{"comment": "ok"}] * 101
        with pytest.raises(ValidationError):
            AnalyzeBatchRequest.model_validate({"comments": comments})

    def test_bulk_payload_accepts_both_shapes(self):
        adapter = TypeAdapter(BulkInsertPayload)
        row = {"rating": 9, "comment": "Super App", "language": "de-CH", "customerId": 42}

        as_list = adapter.validate_python([row])
        as_object = adapter.validate_python({"responses": [row]})

        assert isinstance(as_list, list)
        assert as_list[0].language is LanguageEnum.DE
        assert as_list[0].customer_id == "42"
        assert isinstance(as_object, BulkInsertRequest)
        assert as_object.responses[0].rating == 9

    def test_bulk_payload_rejects_bad_rating(self):
        with pytest.raises(ValidationError):
            TypeAdapter(BulkInsertPayload).validate_python([{"rating": 11}])


class TestResponses:
    def test_camel_case_serialization(self):
        body = BulkInsertResponse(inserted=3, enrichment_started=True).model_dump(by_alias=True)
        assert body == {"inserted": 3, "enrichmentStarted": True}

    def test_process_ai_response(self):
        body = ProcessAIResponse(message="AI processing started", run_id="abc", total=4)
        assert body.model_dump(by_alias=True) == {
            "success": True,
            "message": "AI processing started",
            "runId": "abc",
            "total": 4,
        }

    def test_health_timestamp_default(self):
        health = HealthResponse(
            status="healthy",
            version="0.1.0",
            services={"database": "ok"},
            model="qwen2.5:3b",
        )
        assert health.timestamp.tzinfo is not None
        assert health.timestamp <= datetime.now(timezone.utc)


class TestErrorHandlers:
    def test_mapping_covers_domain_errors(self):
        for exc_class in (
            EnrichmentBusyError,
            NoActiveRunError,
            StoreUnavailableError,
            LLMConnectionError,
            LLMTimeoutError,
            Exception,
        ):
            assert exc_class in EXCEPTION_HANDLERS

    @pytest.mark.asyncio
    async def test_busy_is_conflict(self):
        response = await enrichment_busy_handler(None, EnrichmentBusyError("run123"))
        body = json.loads(response.body)

        assert response.status_code == 409
        assert body["success"] is False
        assert body["error"] == "processing_in_progress"
        assert body["details"] == {"run_id": "run123"}

    @pytest.mark.asyncio
    async def test_no_active_run(self):
        response = await no_active_run_handler(None, NoActiveRunError())
        assert response.status_code == 409
        assert json.loads(response.body)["error"] == "no_active_run"

    @pytest.mark.asyncio
    async def test_store_unavailable(self):
        response = await store_unavailable_handler(None, StoreUnavailableError("db locked"))
        body = json.loads(response.body)

        assert response.status_code == 503
        assert body["error"] == "store_unavailable"
        assert "details" not in body

    @pytest.mark.asyncio
    async def test_unexpected_error_hides_message(self):
        response = await generic_error_handler(None, RuntimeError("secret internals"))
        body = json.loads(response.body)

        assert response.status_code == 500
        assert "secret" not in body["message"]
