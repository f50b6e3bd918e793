"""
Reply parser: two-stage validation plus normalization.

- Stage 1: locate the JSON object in the reply (hard fail)
- Stage 2: check it against the reply schema (hard fail)
- Normalize: clamp labels and confidences onto the closed vocabularies

Hard failures raise ReplyValidationError subclasses; the classification
client turns them into keyword fallbacks.
"""

import math
from pathlib import Path
from typing import Any

import structlog

from nps_insights.models.classification_models import SentimentResult, TopicResult, TopicScore
from nps_insights.models.enums import SentimentEnum, TopicsEnum
from .exceptions import JSONExtractionError
from .stage1_json_extract import Stage1JSONExtract
from .stage2_schema import Stage2SchemaValidation

logger = structlog.get_logger(__name__)

SENTIMENT_SCHEMA = "sentiment_reply.json"
TOPICS_SCHEMA = "topics_reply.json"

DEFAULT_SENTIMENT_CONFIDENCE = 0.8
DEFAULT_TOPIC_CONFIDENCE = 0.5
MAX_TOPICS = 3


def coerce_confidence(value: Any, default: float) -> float:
    """
    Turn whatever the model put in "confidence" into a float in [0, 1].

    Numbers are clamped, numeric strings are parsed ("0.9", "85%"),
    anything else (null, booleans, words, NaN) gives ``default``.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, str):
        text = value.strip()
        is_percent = text.endswith("%")
        try:
            number = float(text.rstrip("%").strip())
        except ValueError:
            return default
        if is_percent:
            number /= 100.0
    elif isinstance(value, (int, float)):
        number = float(value)
    else:
        return default
    if math.isnan(number):
        return default
    return min(1.0, max(0.0, number))


class ReplyParser:
    """
    Parse raw model replies into SentimentResult / TopicResult.
    """

    def __init__(self, schemas_dir: str | Path):
        schemas_dir = Path(schemas_dir)
        self.stage1 = Stage1JSONExtract()
        self.sentiment_schema = Stage2SchemaValidation(schemas_dir / SENTIMENT_SCHEMA)
        self.topics_schema = Stage2SchemaValidation(schemas_dir / TOPICS_SCHEMA)

    def parse_sentiment(self, content: str) -> SentimentResult:
        """
        Raises:
            JSONExtractionError: no object carrying "sentiment"
            SchemaValidationError: object present but malformed
        """
        data = self.stage1.extract_object(content, required_key="sentiment")
        self.sentiment_schema.validate(data)

        label = SentimentEnum.coerce(data["sentiment"])
        if label.value != str(data["sentiment"]).strip().lower():
            logger.debug("Unknown sentiment label mapped to neutral", label=data["sentiment"])

        explanation = data.get("explanation") or ""
        return SentimentResult(
            sentiment=label,
            confidence=coerce_confidence(data.get("confidence"), DEFAULT_SENTIMENT_CONFIDENCE),
            explanation=str(explanation)[:500],
        )

    def _topic_items(self, content: str) -> list[Any]:
        try:
            data = self.stage1.extract_object(content, required_key="topics")
        except JSONExtractionError:
            # The enclosing object may be cut off; try the bare array
            return self._validated_items(self.stage1.extract_topics_array(content))
        self.topics_schema.validate(data)
        return data["topics"]

    def _validated_items(self, items: list[Any]) -> list[Any]:
        self.topics_schema.validate({"topics": items})
        return items

    def parse_topics(self, content: str) -> TopicResult:
        """
        Keep only taxonomy topics (case-insensitive), merge duplicates by
        max confidence, preserve reply order, cap at three.

        Raises:
            JSONExtractionError: no topics object or array
            SchemaValidationError: topics present but malformed
        """
        items = self._topic_items(content)

        merged: dict[TopicsEnum, float] = {}
        dropped: list[str] = []
        for item in items:
            if isinstance(item, str):
                label, raw_confidence = item, None
            else:
                label, raw_confidence = item.get("topic", ""), item.get("confidence")
            topic = TopicsEnum.from_label(label)
            if topic is None:
                dropped.append(str(label))
                continue
            confidence = coerce_confidence(raw_confidence, DEFAULT_TOPIC_CONFIDENCE)
            merged[topic] = max(confidence, merged.get(topic, 0.0))

        if dropped:
            logger.debug("Dropped topics outside taxonomy", dropped=dropped[:10])

        return TopicResult(
            topics=[
                TopicScore(topic=topic, confidence=confidence)
                for topic, confidence in list(merged.items())[:MAX_TOPICS]
            ]
        )
