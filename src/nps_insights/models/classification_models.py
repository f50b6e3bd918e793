"""
Classification result models.

SentimentResult / TopicResult are the typed outputs of one comment's
classification. ParseOutcome tags each result with where it came from:
Structured (the model reply parsed and validated) or Fallback (a
deterministic substitute, with the reason it was needed).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from nps_insights.models.enums import SentimentEnum, TopicsEnum


class SentimentResult(BaseModel):
    """Sentiment of a single comment."""
    model_config = ConfigDict(frozen=True)

    sentiment: SentimentEnum = Field(..., description="positive / neutral / negative")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence in [0, 1]")
    explanation: str = Field(default="", description="Short justification (model) or fallback note")


class TopicScore(BaseModel):
    """One topic label with its confidence."""
    model_config = ConfigDict(frozen=True)

    topic: TopicsEnum = Field(..., description="Topic from the closed taxonomy")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence in [0, 1]")


class TopicResult(BaseModel):
    """Topics detected in a single comment, strongest first (max 3)."""
    model_config = ConfigDict(frozen=True)

    topics: list[TopicScore] = Field(default_factory=list, max_length=3)

    @property
    def labels(self) -> list[str]:
        return [t.topic.value for t in self.topics]


class FallbackReason(str, Enum):
    """Why a deterministic substitute replaced the model result."""

    PARSE = "parse"  # reply had no usable JSON or failed the reply schema
    TRANSPORT = "transport"  # model unreachable, non-2xx, or deadline exceeded
    ERROR = "error"  # unexpected exception inside the classification path


T = TypeVar("T")


@dataclass(frozen=True)
class Structured(Generic[T]):
    """Result parsed from a well-formed model reply."""
    value: T

    source = "model"


@dataclass(frozen=True)
class Fallback(Generic[T]):
    """Deterministic substitute result."""
    value: T
    reason: FallbackReason

    @property
    def source(self) -> str:
        return f"fallback_{self.reason.value}"


ParseOutcome = Union[Structured[T], Fallback[T]]


@dataclass(frozen=True)
class CommentOutcome:
    """Both halves of a comment classification, each tagged with its origin."""
    sentiment: ParseOutcome[SentimentResult]
    topics: ParseOutcome[TopicResult]

    def to_analysis(self) -> "CommentAnalysis":
        return CommentAnalysis(sentiment=self.sentiment.value, topics=self.topics.value)


class CommentAnalysis(BaseModel):
    """Wire shape of a classified comment: ``{sentiment: {...}, topics: {topics: [...]}}``."""

    sentiment: SentimentResult
    topics: TopicResult
