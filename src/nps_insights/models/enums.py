"""
Enumerations for NPS Insights data models.

Topic and sentiment enums are closed taxonomies: the prompts, the reply
parser and the keyword fallback all draw from the same sets.
"""

from enum import Enum


SENTIMENT_NOT_AVAILABLE = "N/A"
"""Sentinel stored at ingest for rows that have not been enriched yet."""


class TopicsEnum(str, Enum):
    """
    Closed taxonomy of banking-app feedback topics.

    Multi-label classification: each comment can have 0-3 topics.
    """

    EASE_OF_USE = "Ease of Use"
    ALL_IN_ONE = "All-in-One Features"
    TRADING_FEES = "High Trading Fees"
    CUSTOMER_SUPPORT = "Customer Support"
    INTEREST_RATES = "Interest Rate Issues"
    LIMITED_INVESTMENTS = "Limited Investments"
    ACCOUNT_PROBLEMS = "Account Problems"
    APP_PERFORMANCE = "App Performance"
    PAYMENTS = "Payments & Transfers"
    CARDS = "Cards"
    SECURITY = "Security"
    ONBOARDING = "Onboarding"
    NOTIFICATIONS = "Notifications"

    @classmethod
    def from_label(cls, label: str) -> "TopicsEnum | None":
        """Case- and whitespace-insensitive lookup; None when not in the taxonomy."""
        if isinstance(label, cls):
            return label
        wanted = " ".join(str(label).split()).casefold()
        for topic in cls:
            if topic.value.casefold() == wanted:
                return topic
        return None


class SentimentEnum(str, Enum):
    """
    Comment sentiment classification.

    Sentiment is single-label (exactly one value per comment).
    """

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"

    @classmethod
    def coerce(cls, label: object) -> "SentimentEnum":
        """Map any model-produced label onto the three-way enum (unknown -> neutral)."""
        if isinstance(label, cls):
            return label
        normalized = str(label or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            return cls.NEUTRAL


class ResponseGroup(str, Enum):
    """
    NPS segment derived from the 0-10 rating.
    """

    DETRACTOR = "Detractor"
    PASSIVE = "Passive"
    PROMOTER = "Promoter"

    @classmethod
    def from_rating(cls, rating: int) -> "ResponseGroup":
        """Promoter for 9-10, Passive for 7-8, Detractor for 0-6."""
        if rating >= 9:
            return cls.PROMOTER
        if rating >= 7:
            return cls.PASSIVE
        return cls.DETRACTOR


class LanguageEnum(str, Enum):
    """Languages with dedicated prompt examples."""

    DE = "de"
    FR = "fr"
    IT = "it"
    EN = "en"

    @classmethod
    def normalize(cls, code: str | None) -> "LanguageEnum":
        """Strip region suffixes ("de-CH" -> de); unknown or missing -> en."""
        if isinstance(code, cls):
            return code
        if not code:
            return cls.EN
        primary = str(code).strip().lower().replace("_", "-").split("-")[0]
        try:
            return cls(primary)
        except ValueError:
            return cls.EN
