"""
Data models for NPS Insights.

Includes:
- Enums (TopicsEnum, SentimentEnum, ResponseGroup, LanguageEnum)
- Survey models (SurveyResponseCreate, SurveyResponse, PendingRow, EnrichmentUpdate)
- Classification models (SentimentResult, TopicResult, ParseOutcome variants)
- Progress snapshot
- LLM models (LLMGenerationRequest, LLMGenerationResponse)
"""

from nps_insights.models.enums import (
    SENTIMENT_NOT_AVAILABLE,
    LanguageEnum,
    ResponseGroup,
    SentimentEnum,
    TopicsEnum,
)
from nps_insights.models.classification_models import (
    CommentAnalysis,
    CommentOutcome,
    Fallback,
    FallbackReason,
    ParseOutcome,
    SentimentResult,
    Structured,
    TopicResult,
    TopicScore,
)
from nps_insights.models.survey_models import (
    EnrichmentUpdate,
    PendingRow,
    SurveyResponse,
    SurveyResponseCreate,
    TopicMention,
)
from nps_insights.models.progress_models import ProgressSnapshot
from nps_insights.models.llm_models import LLMGenerationRequest, LLMGenerationResponse

__all__ = [
    # Enums
    "SENTIMENT_NOT_AVAILABLE",
    "LanguageEnum",
    "ResponseGroup",
    "SentimentEnum",
    "TopicsEnum",
    # Classification
    "CommentAnalysis",
    "CommentOutcome",
    "Fallback",
    "FallbackReason",
    "ParseOutcome",
    "SentimentResult",
    "Structured",
    "TopicResult",
    "TopicScore",
    # Survey rows
    "EnrichmentUpdate",
    "PendingRow",
    "SurveyResponse",
    "SurveyResponseCreate",
    "TopicMention",
    # Progress
    "ProgressSnapshot",
    # LLM models
    "LLMGenerationRequest",
    "LLMGenerationResponse",
]
