"""
Deterministic keyword classification.

Used when a model reply cannot be parsed. Labels come from the same closed
vocabularies as the prompts; confidences stay below what model-derived
results are stored with, so degraded rows are easy to tell apart.
"""

import re

from nps_insights.models.classification_models import SentimentResult, TopicResult, TopicScore
from nps_insights.models.enums import SentimentEnum, TopicsEnum


SENTIMENT_FALLBACK_CONFIDENCE = 0.6
SENTIMENT_TIE_CONFIDENCE = 0.5
TOPIC_CONFIDENCE_PER_MATCH = 0.3
TOPIC_CONFIDENCE_CAP = 0.8
MAX_TOPICS = 3

# Stems are matched at word starts, so "crash" also hits "crashes"/"crashed".
# Short words listed in WHOLE_WORD_TERMS must also end at a word boundary.
POSITIVE_TERMS: tuple[str, ...] = (
    # en
    "good", "great", "excellent", "love", "amazing", "perfect", "easy", "fast",
    "helpful", "intuitive", "recommend",
    # de
    "gut", "gute", "super", "toll", "einfach", "schnell", "praktisch", "zufrieden",
    # fr
    "bien", "bon", "bonne", "excellent", "facile", "rapide", "pratique", "parfait",
    # it
    "buon", "ottim", "facile", "veloce", "perfett", "comodo",
)

NEGATIVE_TERMS: tuple[str, ...] = (
    # en
    "bad", "terrible", "awful", "hate", "slow", "crash", "error", "problem",
    "issue", "expensive", "bug", "poor", "worst",
    # de
    "schlecht", "langsam", "teuer", "absturz", "stürzt", "fehler", "problem",
    # fr
    "mauvais", "lent", "lente", "cher", "chers", "chère", "plante", "erreur", "problème",
    "nul", "nulle",
    # it
    "pessim", "lento", "lenta", "caro", "cara", "errore", "blocca", "problema",
)

TOPIC_TERMS: dict[TopicsEnum, tuple[str, ...]] = {
    TopicsEnum.APP_PERFORMANCE: (
        "slow", "crash", "bug", "loading", "freeze", "error", "glitch",
        "langsam", "absturz", "stürzt", "plante", "lent", "blocca", "lento",
    ),
    TopicsEnum.TRADING_FEES: (
        "fee", "fees", "cost", "expensive", "charge", "price", "commission",
        "gebühr", "teuer", "frais", "cher", "chers", "commission", "costo", "caro",
    ),
    TopicsEnum.CUSTOMER_SUPPORT: (
        "support", "help", "service", "contact", "assistance", "hotline",
        "kundendienst", "hilfe", "assistenza", "servizio",
    ),
    TopicsEnum.EASE_OF_USE: (
        "easy", "simple", "intuitive", "user-friendly", "navigation",
        "einfach", "facile", "semplice",
    ),
    TopicsEnum.ACCOUNT_PROBLEMS: (
        "login", "account", "access", "password", "locked",
        "konto", "compte", "conto", "gesperrt", "bloqué",
    ),
    TopicsEnum.PAYMENTS: (
        "payment", "transfer", "twint", "qr-bill", "zahlung", "überweisung",
        "paiement", "virement", "pagamento", "bonifico",
    ),
    TopicsEnum.CARDS: ("card", "karte", "carte", "carta", "debit", "credit"),
    TopicsEnum.INTEREST_RATES: ("interest", "rate", "rates", "zins", "intérêt", "interesse"),
    TopicsEnum.LIMITED_INVESTMENTS: ("etf", "stock", "crypto", "fund", "aktie", "fonds", "azioni"),
    TopicsEnum.SECURITY: ("security", "secure", "fraud", "sicherheit", "sécurité", "sicurezza"),
    TopicsEnum.ONBOARDING: ("onboarding", "registration", "sign up", "eröffnung", "ouverture", "apertura"),
    TopicsEnum.NOTIFICATIONS: ("notification", "push", "alert", "benachrichtigung", "notifica"),
    TopicsEnum.ALL_IN_ONE: ("all-in-one", "everything in one", "alles in einem", "tout-en-un", "tutto in uno"),
}

WHOLE_WORD_TERMS = frozenset({
    "bad", "bon", "cara", "caro", "cher", "fee", "gut", "help", "interest", "lent",
    "lenta", "lento", "nul", "rate",
})


def _pattern(term: str) -> str:
    end = r"(?!\w)" if term in WHOLE_WORD_TERMS else ""
    return r"(?<!\w)" + re.escape(term) + end


def _count_hits(text: str, terms: tuple[str, ...]) -> int:
    return sum(1 for term in set(terms) if re.search(_pattern(term), text))


def keyword_sentiment(comment: str) -> SentimentResult:
    """Majority vote of positive vs negative terms; ties are neutral."""
    text = (comment or "").lower()
    positive = _count_hits(text, POSITIVE_TERMS)
    negative = _count_hits(text, NEGATIVE_TERMS)

    if positive > negative:
        sentiment, confidence = SentimentEnum.POSITIVE, SENTIMENT_FALLBACK_CONFIDENCE
    elif negative > positive:
        sentiment, confidence = SentimentEnum.NEGATIVE, SENTIMENT_FALLBACK_CONFIDENCE
    else:
        sentiment, confidence = SentimentEnum.NEUTRAL, SENTIMENT_TIE_CONFIDENCE

    return SentimentResult(
        sentiment=sentiment,
        confidence=confidence,
        explanation=f"keyword fallback ({positive} positive, {negative} negative terms)",
    )


def keyword_topics(comment: str) -> TopicResult:
    """
    Score every taxonomy topic by matched terms.

    confidence = min(0.3 * matches, 0.8); strongest first, taxonomy order
    breaks ties; at most three; empty when nothing matches.
    """
    text = (comment or "").lower()
    order = {topic: i for i, topic in enumerate(TopicsEnum)}

    scored = []
    for topic, terms in TOPIC_TERMS.items():
        hits = _count_hits(text, terms)
        if hits:
            scored.append((topic, min(hits * TOPIC_CONFIDENCE_PER_MATCH, TOPIC_CONFIDENCE_CAP)))

    scored.sort(key=lambda item: (-item[1], order[item[0]]))
    return TopicResult(
        topics=[TopicScore(topic=t, confidence=round(c, 2)) for t, c in scored[:MAX_TOPICS]]
    )
