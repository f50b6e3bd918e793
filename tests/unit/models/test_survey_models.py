"""Unit tests for survey, classification and progress models."""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from nps_insights.models.classification_models import (
    CommentOutcome,
    Fallback,
    FallbackReason,
    SentimentResult,
    Structured,
    TopicResult,
    TopicScore,
)
from nps_insights.models.enums import LanguageEnum, ResponseGroup, SentimentEnum, TopicsEnum
from nps_insights.models.progress_models import ProgressSnapshot
from nps_insights.models.survey_models import SurveyResponse, SurveyResponseCreate


class TestSurveyResponseCreate:
    def test_accepts_camel_case_payload(self):
        item = SurveyResponseCreate.model_validate({
            "rating": 9,
            "comment": "Super App",
            "language": "de-CH",
            "date": "2024-03-15T10:22:00Z",
            "customerId": 12345,
            "visitorId": "v-1",
        })
        assert item.language is LanguageEnum.DE
        assert item.date == date(2024, 3, 15)
        assert item.customer_id == "12345"
        assert item.visitor_id == "v-1"

    @pytest.mark.parametrize("rating", [-1, 11])
    def test_rejects_rating_out_of_range(self, rating):
        with pytest.raises(ValidationError):
            SurveyResponseCreate(rating=rating)

    def test_blank_comment_becomes_none(self):
        assert SurveyResponseCreate(rating=5, comment="   ").comment is None

    def test_datetime_is_reduced_to_date(self):
        item = SurveyResponseCreate(rating=5, date=datetime(2024, 1, 2, 3, 4, 5))
        assert item.date == date(2024, 1, 2)

    @pytest.mark.parametrize("given", ["N/A", "n/a", "", "  ", "Great", None])
    def test_unknown_sentiment_becomes_none(self, given):
        assert SurveyResponseCreate(rating=5, sentiment=given).sentiment is None

    def test_known_sentiment_is_normalized(self):
        assert SurveyResponseCreate(rating=5, sentiment=" Positive ").sentiment == "positive"


class TestSurveyResponse:
    def test_response_group_is_derived(self):
        response = SurveyResponse(id=1, rating=3)
        assert response.response_group is ResponseGroup.DETRACTOR

    def test_serializes_camel_case(self):
        data = SurveyResponse(id=1, rating=10, sentiment_confidence=0.8).model_dump(by_alias=True)
        assert data["responseGroup"] == ResponseGroup.PROMOTER
        assert data["sentimentConfidence"] == 0.8
        assert data["topics"] == []


class TestClassificationModels:
    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            SentimentResult(sentiment=SentimentEnum.POSITIVE, confidence=1.2)

    def test_topic_result_max_three(self):
        scores = [TopicScore(topic=t, confidence=0.5) for t in list(TopicsEnum)[:4]]
        with pytest.raises(ValidationError):
            TopicResult(topics=scores)

    def test_outcome_sources(self):
        result = SentimentResult(sentiment=SentimentEnum.NEUTRAL, confidence=0.3)
        assert Structured(result).source == "model"
        fallback = Fallback(result, FallbackReason.TRANSPORT)
        assert fallback.source == "fallback_transport"

    def test_to_analysis_wire_shape(self):
        outcome = CommentOutcome(
            Structured(SentimentResult(sentiment=SentimentEnum.NEGATIVE, confidence=0.9, explanation="x")),
            Structured(TopicResult(topics=[TopicScore(topic=TopicsEnum.CARDS, confidence=0.7)])),
        )
        data = outcome.to_analysis().model_dump(mode="json")
        assert data == {
            "sentiment": {"sentiment": "negative", "confidence": 0.9, "explanation": "x"},
            "topics": {"topics": [{"topic": "Cards", "confidence": 0.7}]},
        }


class TestProgressSnapshot:
    def test_zero_total_is_zero_percent(self):
        assert ProgressSnapshot().progress == 0

    def test_percent_is_rounded(self):
        assert ProgressSnapshot(total=3, processed=2).progress == 67

    def test_serialized_keys(self):
        data = ProgressSnapshot(total=10, processed=10, in_progress=False).model_dump(by_alias=True)
        assert data["progress"] == 100
        assert data["isProcessing"] is False
        assert data["inProgress"] is False
        assert "startTime" in data
