"""
Classification client: comment -> sentiment + topics.

Wraps prompt building, the LLM call and reply parsing, and decides what
happens when any of them fails. Public methods never raise; every result
is tagged Structured or Fallback so callers can tell degraded results
apart from model ones.
"""

import asyncio
from typing import Optional

import structlog

from nps_insights.classification.keyword_fallback import keyword_sentiment, keyword_topics
from nps_insights.config import Settings
from nps_insights.llm.base_client import BaseLLMClient
from nps_insights.llm.exceptions import LLMClientError
from nps_insights.llm.prompt_builder import PromptBuilder
from nps_insights.models.classification_models import (
    CommentOutcome,
    Fallback,
    FallbackReason,
    ParseOutcome,
    SentimentResult,
    Structured,
    TopicResult,
)
from nps_insights.models.enums import SentimentEnum
from nps_insights.monitoring.metrics import classification_outcomes_total
from nps_insights.validation.exceptions import ReplyValidationError
from nps_insights.validation.pipeline import ReplyParser

logger = structlog.get_logger(__name__)

TRANSPORT_SENTIMENT_CONFIDENCE = 0.3


def empty_sentiment() -> SentimentResult:
    return SentimentResult(sentiment=SentimentEnum.NEUTRAL, confidence=0.0, explanation="empty")


def unavailable_sentiment() -> SentimentResult:
    return SentimentResult(
        sentiment=SentimentEnum.NEUTRAL,
        confidence=TRANSPORT_SENTIMENT_CONFIDENCE,
        explanation="model unavailable",
    )


class ClassificationClient:
    """
    Sentiment and topic classification for single comments.

    Failure policy:
    - empty comment: neutral/0.0 or no topics, without a model call
    - transport failure or deadline: safe default, tagged transport
    - unparseable reply: keyword fallback, tagged parse
    """

    def __init__(
        self,
        llm_client: BaseLLMClient,
        prompt_builder: PromptBuilder,
        reply_parser: ReplyParser,
        call_timeout: Optional[float] = 45.0,
    ):
        self.llm_client = llm_client
        self.prompt_builder = prompt_builder
        self.reply_parser = reply_parser
        self.call_timeout = call_timeout

    @classmethod
    def from_settings(cls, settings: Settings, llm_client: BaseLLMClient) -> "ClassificationClient":
        return cls(
            llm_client=llm_client,
            prompt_builder=PromptBuilder.from_settings(settings),
            reply_parser=ReplyParser(settings.REPLY_SCHEMAS_DIR),
            call_timeout=settings.CLASSIFICATION_TIMEOUT_SECONDS,
        )

    async def _generate(self, request) -> str:
        """One model call under the per-call deadline."""
        try:
            response = await asyncio.wait_for(
                self.llm_client.generate(request), timeout=self.call_timeout
            )
        except asyncio.TimeoutError as e:
            raise LLMClientError(
                f"Classification call exceeded {self.call_timeout}s deadline",
                details={"timeout": self.call_timeout},
            ) from e
        return response.content

    @staticmethod
    def _count(kind: str, outcome: ParseOutcome) -> None:
        classification_outcomes_total.labels(kind=kind, source=outcome.source).inc()

    async def classify_sentiment(
        self, comment: Optional[str], language: Optional[str] = None
    ) -> ParseOutcome[SentimentResult]:
        """Classify the sentiment of one comment. Never raises."""
        if not comment or not comment.strip():
            classification_outcomes_total.labels(kind="sentiment", source="empty").inc()
            return Structured(empty_sentiment())

        request, metadata = self.prompt_builder.build_sentiment_request(comment, language)
        outcome: ParseOutcome[SentimentResult]
        try:
            content = await self._generate(request)
            outcome = Structured(self.reply_parser.parse_sentiment(content))
        except LLMClientError as e:
            logger.warning("Sentiment call failed, using safe default", error=str(e), language=metadata["language"])
            outcome = Fallback(unavailable_sentiment(), FallbackReason.TRANSPORT)
        except ReplyValidationError as e:
            logger.info("Sentiment reply unusable, using keyword fallback", error=e.message, stage=e.stage)
            outcome = Fallback(keyword_sentiment(comment), FallbackReason.PARSE)

        self._count("sentiment", outcome)
        return outcome

    async def extract_topics(
        self, comment: Optional[str], language: Optional[str] = None
    ) -> ParseOutcome[TopicResult]:
        """Extract up to three taxonomy topics from one comment. Never raises."""
        if not comment or not comment.strip():
            classification_outcomes_total.labels(kind="topics", source="empty").inc()
            return Structured(TopicResult(topics=[]))

        request, metadata = self.prompt_builder.build_topics_request(comment, language)
        outcome: ParseOutcome[TopicResult]
        try:
            content = await self._generate(request)
            outcome = Structured(self.reply_parser.parse_topics(content))
        except LLMClientError as e:
            logger.warning("Topics call failed, using safe default", error=str(e), language=metadata["language"])
            outcome = Fallback(TopicResult(topics=[]), FallbackReason.TRANSPORT)
        except ReplyValidationError as e:
            logger.info("Topics reply unusable, using keyword fallback", error=e.message, stage=e.stage)
            outcome = Fallback(keyword_topics(comment), FallbackReason.PARSE)

        self._count("topics", outcome)
        return outcome

    async def classify_comment(
        self, comment: Optional[str], language: Optional[str] = None
    ) -> CommentOutcome:
        """
        Run sentiment and topic classification concurrently.

        An unexpected exception in one half is replaced by that half's
        safe default; the other half is kept.
        """
        sentiment, topics = await asyncio.gather(
            self.classify_sentiment(comment, language),
            self.extract_topics(comment, language),
            return_exceptions=True,
        )

        if isinstance(sentiment, BaseException):
            if isinstance(sentiment, asyncio.CancelledError):
                raise sentiment
            logger.error("Sentiment classification crashed", exc_info=sentiment)
            sentiment = Fallback(unavailable_sentiment(), FallbackReason.ERROR)
            self._count("sentiment", sentiment)
        if isinstance(topics, BaseException):
            if isinstance(topics, asyncio.CancelledError):
                raise topics
            logger.error("Topic extraction crashed", exc_info=topics)
            topics = Fallback(TopicResult(topics=[]), FallbackReason.ERROR)
            self._count("topics", topics)

        return CommentOutcome(sentiment=sentiment, topics=topics)
