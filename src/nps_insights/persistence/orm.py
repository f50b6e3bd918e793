"""
SQLAlchemy ORM tables.

- nps_responses: one row per survey submission
- topic_mentions: topics attached to a response (cascade-deleted)
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all tables."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={getattr(self, 'id', None)})>"


class TimestampMixin:
    """created_at set on insert, updated_at bumped on every write."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class SurveyResponseRecord(TimestampMixin, Base):
    __tablename__ = "nps_responses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text)
    language: Mapped[str] = mapped_column(String(8), nullable=False, default="en")
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    customer_id: Mapped[Optional[str]] = mapped_column(String(128))
    visitor_id: Mapped[Optional[str]] = mapped_column(String(128))
    platform: Mapped[Optional[str]] = mapped_column(String(64))
    sentiment: Mapped[Optional[str]] = mapped_column(String(16))
    sentiment_confidence: Mapped[Optional[float]] = mapped_column(Float)

    topics: Mapped[list["TopicMentionRecord"]] = relationship(
        back_populates="response",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TopicMentionRecord.id",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_nps_responses_date", "date"),
        Index("ix_nps_responses_sentiment", "sentiment"),
    )


class TopicMentionRecord(Base):
    __tablename__ = "topic_mentions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    response_id: Mapped[int] = mapped_column(
        ForeignKey("nps_responses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    topic: Mapped[str] = mapped_column(String(64), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)

    response: Mapped[SurveyResponseRecord] = relationship(back_populates="topics")
