"""
API-specific request and response models for FastAPI endpoints.

These wrap the domain models (SurveyResponseCreate, CommentAnalysis,
ProgressSnapshot) with the camelCase envelopes the dashboard expects.
"""

from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from nps_insights.models.classification_models import CommentAnalysis
from nps_insights.models.survey_models import SurveyResponseCreate


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeCommentRequest(_ApiModel):
    """Request for ad-hoc analysis of one comment."""

    comment: Optional[str] = Field(
        default=None,
        description="Free-text comment; empty yields neutral with no topics",
        examples=["App crashes constantly, terrible support"],
    )
    language: Optional[str] = Field(
        default="en",
        description="Language code (de, fr, it, en); unknown codes fall back to en",
    )


class AnalyzeBatchRequest(_ApiModel):
    """Request for ad-hoc analysis of several comments (processed sequentially)."""

    comments: list[AnalyzeCommentRequest] = Field(
        description="Comments to analyze",
        max_length=100,
    )


class BatchAnalysisResponse(_ApiModel):
    results: list[CommentAnalysis] = Field(description="One analysis per input, same order")


class ProcessAIRequest(_ApiModel):
    """Optional body of the enrichment trigger."""

    force: bool = Field(
        default=False,
        description="Re-enrich every row with a comment, not only pending ones",
    )


class ProcessAIResponse(_ApiModel):
    """Acknowledgment of an enrichment trigger."""

    success: bool = True
    message: str = Field(examples=["AI processing started", "No pending responses"])
    run_id: Optional[str] = Field(default=None, description="Identifier of the started run")
    total: int = Field(default=0, ge=0, description="Rows admitted into the run")


class CancelResponse(_ApiModel):
    success: bool = True
    message: str
    run_id: str


class BulkInsertRequest(_ApiModel):
    """Object form of the bulk upload: ``{"responses": [...]}``."""

    responses: list[SurveyResponseCreate] = Field(description="Rows to insert")


BulkInsertPayload = Union[list[SurveyResponseCreate], BulkInsertRequest]


class BulkInsertResponse(_ApiModel):
    inserted: int = Field(ge=0, description="Rows written")
    enrichment_started: bool = Field(
        default=False,
        description="True when an enrichment run was started for the new rows",
    )


class DeleteResponse(_ApiModel):
    success: bool = True
    deleted: int = Field(ge=0)


class HealthResponse(_ApiModel):
    """Response for health check endpoint."""

    status: str = Field(
        description="Overall health status",
        examples=["healthy", "degraded", "unhealthy"],
    )
    version: str = Field(description="Service version", examples=["0.1.0"])
    services: dict[str, str] = Field(
        description="Dependency-specific health status",
        examples=[{"ollama": "ok", "model": "ok", "database": "ok"}],
    )
    model: str = Field(description="Configured Ollama model")
    timestamp: datetime = Field(default_factory=_utcnow)


class ErrorResponse(BaseModel):
    """Error body produced by the exception handlers."""

    success: bool = False
    error: str = Field(description="Machine-readable error code", examples=["processing_in_progress"])
    message: str
    details: Optional[dict] = None
    timestamp: datetime
