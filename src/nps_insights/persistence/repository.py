"""
Repository for survey responses and their AI enrichment.

All methods open their own short transaction. SQLAlchemy errors are
re-raised as StoreUnavailableError so callers never depend on the ORM.

Pending-enrichment rule: the comment is non-empty AND the sentiment is
NULL, "N/A", or "neutral" with a NULL/zero confidence.
"""

from contextlib import contextmanager
from datetime import date as dt_date
from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional

import structlog
from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from nps_insights.models.enums import SENTIMENT_NOT_AVAILABLE, ResponseGroup, SentimentEnum
from nps_insights.models.survey_models import (
    EnrichmentUpdate,
    PendingRow,
    SurveyResponse,
    SurveyResponseCreate,
)
from nps_insights.persistence.database import Database
from nps_insights.persistence.exceptions import ResponseNotFoundError, StoreUnavailableError
from nps_insights.persistence.orm import SurveyResponseRecord, TopicMentionRecord

logger = structlog.get_logger(__name__)


def _has_comment():
    return and_(
        SurveyResponseRecord.comment.is_not(None),
        func.trim(SurveyResponseRecord.comment) != "",
    )


def _needs_sentiment():
    return or_(
        SurveyResponseRecord.sentiment.is_(None),
        SurveyResponseRecord.sentiment == SENTIMENT_NOT_AVAILABLE,
        and_(
            SurveyResponseRecord.sentiment == SentimentEnum.NEUTRAL.value,
            or_(
                SurveyResponseRecord.sentiment_confidence.is_(None),
                SurveyResponseRecord.sentiment_confidence == 0,
            ),
        ),
    )


def _pct(part: int, total: int) -> float:
    return round(100.0 * part / total, 1) if total else 0.0


class ResponseRepository:
    """
    Survey response store backed by SQLAlchemy.
    """

    def __init__(self, database: Database):
        self.database = database

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        try:
            with self.database.session() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error("Store operation failed", operation=operation, error=str(e))
            raise StoreUnavailableError(
                f"Store unavailable during {operation}",
                details={"operation": operation, "error_type": type(e).__name__},
            ) from e

    # === Ingest ===

    @staticmethod
    def _to_record(item: SurveyResponseCreate) -> SurveyResponseRecord:
        return SurveyResponseRecord(
            rating=item.rating,
            comment=item.comment,
            language=item.language.value,
            date=(item.date or datetime.now(timezone.utc).date()).isoformat(),
            customer_id=item.customer_id,
            visitor_id=item.visitor_id,
            platform=item.platform,
            sentiment=item.sentiment or SENTIMENT_NOT_AVAILABLE,
            sentiment_confidence=None if item.sentiment else 0.0,
        )

    def insert_response(self, item: SurveyResponseCreate) -> int:
        """Insert one row and return its id."""
        return self.insert_many([item])[0]

    def insert_many(self, items: Iterable[SurveyResponseCreate]) -> list[int]:
        """Insert rows in one transaction and return their ids."""
        records = [self._to_record(item) for item in items]
        if not records:
            return []
        with self._session("insert_many") as session:
            session.add_all(records)
            session.flush()
            ids = [r.id for r in records]
        logger.info("Inserted survey responses", count=len(ids))
        return ids

    # === Reads ===

    def get_response(self, response_id: int) -> Optional[SurveyResponse]:
        with self._session("get_response") as session:
            record = session.get(SurveyResponseRecord, response_id)
            return SurveyResponse.model_validate(record) if record else None

    def list_responses(
        self,
        sentiment: Optional[str] = None,
        language: Optional[str] = None,
        topic: Optional[str] = None,
        start_date: Optional[dt_date] = None,
        end_date: Optional[dt_date] = None,
        limit: Optional[int] = None,
    ) -> list[SurveyResponse]:
        """Rows newest first, optionally filtered."""
        stmt = select(SurveyResponseRecord)
        if sentiment:
            stmt = stmt.where(SurveyResponseRecord.sentiment == sentiment)
        if language:
            stmt = stmt.where(SurveyResponseRecord.language == language)
        if start_date:
            stmt = stmt.where(SurveyResponseRecord.date >= start_date.isoformat())
        if end_date:
            stmt = stmt.where(SurveyResponseRecord.date <= end_date.isoformat())
        if topic:
            stmt = stmt.where(
                SurveyResponseRecord.topics.any(TopicMentionRecord.topic == topic)
            )
        stmt = stmt.order_by(SurveyResponseRecord.date.desc(), SurveyResponseRecord.id.desc())
        if limit:
            stmt = stmt.limit(limit)

        with self._session("list_responses") as session:
            records = session.scalars(stmt).all()
            return [SurveyResponse.model_validate(r) for r in records]

    def count(self) -> int:
        with self._session("count") as session:
            return session.scalar(select(func.count()).select_from(SurveyResponseRecord)) or 0

    # === Enrichment ===

    def get_pending_for_enrichment(self, force: bool = False) -> list[PendingRow]:
        """
        Rows the next enrichment run should process, oldest first.

        Args:
            force: Ignore existing sentiment and return every row with a comment
        """
        condition = _has_comment() if force else and_(_has_comment(), _needs_sentiment())
        stmt = (
            select(
                SurveyResponseRecord.id,
                SurveyResponseRecord.comment,
                SurveyResponseRecord.language,
            )
            .where(condition)
            .order_by(SurveyResponseRecord.id)
        )
        with self._session("get_pending_for_enrichment") as session:
            rows = session.execute(stmt).all()
        return [PendingRow(id=r.id, comment=r.comment, language=r.language) for r in rows]

    def update_enrichment(self, response_id: int, update: EnrichmentUpdate) -> None:
        """
        Write sentiment (and topics, unless ``update.topics`` is None).

        Raises:
            ResponseNotFoundError: unknown id
            StoreUnavailableError: database failure
        """
        with self._session("update_enrichment") as session:
            record = session.get(SurveyResponseRecord, response_id)
            if record is None:
                raise ResponseNotFoundError(response_id)

            record.sentiment = update.sentiment
            record.sentiment_confidence = update.sentiment_confidence
            record.updated_at = datetime.now(timezone.utc)
            if update.topics is not None:
                record.topics = [
                    TopicMentionRecord(topic=t.topic.value, confidence=t.confidence)
                    for t in update.topics
                ]

        logger.debug(
            "Enrichment stored",
            response_id=response_id,
            sentiment=update.sentiment,
            topics=None if update.topics is None else len(update.topics),
        )

    # === Maintenance ===

    def clear_all(self) -> int:
        """Delete every response (topic mentions cascade). Returns the row count."""
        with self._session("clear_all") as session:
            session.execute(delete(TopicMentionRecord))
            deleted = session.execute(delete(SurveyResponseRecord)).rowcount
        logger.info("Cleared survey responses", deleted=deleted)
        return deleted or 0

    # === Aggregates ===

    def nps_stats(self) -> dict:
        """
        NPS score (promoter% - detractor%) with segment percentages and the
        sentiment / topic distributions.
        """
        group_counts = {group: 0 for group in ResponseGroup}
        with self._session("nps_stats") as session:
            ratings = session.execute(
                select(SurveyResponseRecord.rating, func.count()).group_by(SurveyResponseRecord.rating)
            ).all()
        for rating, n in ratings:
            group_counts[ResponseGroup.from_rating(rating)] += n

        total = sum(group_counts.values())
        promoters = group_counts[ResponseGroup.PROMOTER]
        detractors = group_counts[ResponseGroup.DETRACTOR]
        return {
            "npsScore": round(_pct(promoters, total) - _pct(detractors, total), 1) if total else 0.0,
            "total": total,
            "segments": {
                "promoters": _pct(promoters, total),
                "passives": _pct(group_counts[ResponseGroup.PASSIVE], total),
                "detractors": _pct(detractors, total),
            },
            "sentimentData": self.sentiment_distribution(),
            "topicData": self.topic_distribution(),
        }

    def sentiment_distribution(self) -> list[dict]:
        """``[{name, value}]`` for enriched rows only (N/A and NULL excluded)."""
        stmt = (
            select(SurveyResponseRecord.sentiment, func.count())
            .where(SurveyResponseRecord.sentiment.in_([s.value for s in SentimentEnum]))
            .group_by(SurveyResponseRecord.sentiment)
        )
        with self._session("sentiment_distribution") as session:
            counts = dict(session.execute(stmt).all())
        return [
            {"name": s.value.capitalize(), "value": counts[s.value]}
            for s in SentimentEnum
            if counts.get(s.value)
        ]

    def topic_distribution(self) -> list[dict]:
        """``[{topic, count, avgConfidence}]`` most frequent first."""
        stmt = (
            select(
                TopicMentionRecord.topic,
                func.count(),
                func.avg(TopicMentionRecord.confidence),
            )
            .group_by(TopicMentionRecord.topic)
            .order_by(func.count().desc(), TopicMentionRecord.topic)
        )
        with self._session("topic_distribution") as session:
            rows = session.execute(stmt).all()
        return [
            {"topic": topic, "count": n, "avgConfidence": round(avg or 0.0, 2)}
            for topic, n, avg in rows
        ]
