"""
Comment classification.

- client.py: ClassificationClient (model call + parse + fallback policy)
- keyword_fallback.py: deterministic keyword sentiment/topics
"""

from nps_insights.classification.client import ClassificationClient
from nps_insights.classification.keyword_fallback import keyword_sentiment, keyword_topics

__all__ = [
    "ClassificationClient",
    "keyword_sentiment",
    "keyword_topics",
]
