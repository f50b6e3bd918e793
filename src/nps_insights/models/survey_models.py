"""
Survey response models: ingest payloads, stored rows, and the narrow
views the enrichment pipeline reads and writes.
"""

from dataclasses import dataclass
from datetime import date as dt_date
from datetime import datetime
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from nps_insights.models.classification_models import TopicScore
from nps_insights.models.enums import LanguageEnum, ResponseGroup, SentimentEnum


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SurveyResponseCreate(_CamelModel):
    """One survey row as submitted by the upload form."""

    rating: int = Field(..., ge=0, le=10, description="NPS rating 0-10")
    comment: Optional[str] = Field(default=None, description="Free-text comment, any language")
    language: LanguageEnum = Field(default=LanguageEnum.EN, description="Normalized language code")
    date: Optional[dt_date] = Field(default=None, description="Survey date; defaults to ingest day")
    customer_id: Optional[str] = None
    visitor_id: Optional[str] = None
    platform: Optional[str] = Field(default=None, description="web, ios, android, ...")
    sentiment: Optional[str] = Field(
        default=None,
        description="Pre-labelled sentiment; leave empty to have it enriched",
    )

    @field_validator("language", mode="before")
    @classmethod
    def normalize_language(cls, v: Any) -> LanguageEnum:
        return LanguageEnum.normalize(v)

    @field_validator("date", mode="before")
    @classmethod
    def trim_timestamp(cls, v: Any) -> Any:
        # Accept full ISO timestamps from spreadsheets; keep the date part
        if isinstance(v, str) and len(v) > 10:
            return v[:10]
        if isinstance(v, datetime):
            return v.date()
        return v

    @field_validator("comment")
    @classmethod
    def blank_comment_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v

    @field_validator("sentiment", mode="before")
    @classmethod
    def known_sentiment_or_none(cls, v: Any) -> Optional[str]:
        # "N/A", blanks and labels outside the enum leave the row pending
        if v is None:
            return None
        try:
            return SentimentEnum(str(v).strip().lower()).value
        except ValueError:
            return None

    @field_validator("customer_id", "visitor_id", mode="before")
    @classmethod
    def stringify_ids(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)


class TopicMention(_CamelModel):
    topic: str
    confidence: float


class SurveyResponse(_CamelModel):
    """A stored survey row, as served by the API."""

    id: int
    rating: int
    comment: Optional[str] = None
    language: str = LanguageEnum.EN.value
    date: Optional[str] = None
    customer_id: Optional[str] = None
    visitor_id: Optional[str] = None
    platform: Optional[str] = None
    sentiment: Optional[str] = None
    sentiment_confidence: Optional[float] = None
    topics: list[TopicMention] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field(alias="responseGroup")
    @property
    def response_group(self) -> ResponseGroup:
        return ResponseGroup.from_rating(self.rating)


@dataclass(frozen=True)
class PendingRow:
    """The slice of a stored row the enrichment run needs."""
    id: int
    comment: str
    language: str


@dataclass(frozen=True)
class EnrichmentUpdate:
    """Fields written back by one enrichment pass.

    ``topics=None`` leaves the stored topic mentions untouched.
    """
    sentiment: str
    sentiment_confidence: float
    topics: Optional[list[TopicScore]] = None
