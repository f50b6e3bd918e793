"""Unit tests for deterministic keyword classification."""

import pytest

from nps_insights.classification.keyword_fallback import keyword_sentiment, keyword_topics
from nps_insights.models.enums import SentimentEnum, TopicsEnum


class TestKeywordSentiment:
    def test_negative_comment(self):
        result = keyword_sentiment("App crashes constantly, terrible support")
        assert result.sentiment is SentimentEnum.NEGATIVE
        assert result.confidence == 0.6
        assert result.explanation.startswith("keyword fallback")

    def test_positive_comment(self):
        assert keyword_sentiment("Great app, easy and fast").sentiment is SentimentEnum.POSITIVE

    @pytest.mark.parametrize("comment", ["", "It is an app", "good but slow"])
    def test_ties_are_neutral(self, comment):
        result = keyword_sentiment(comment)
        assert result.sentiment is SentimentEnum.NEUTRAL
        assert result.confidence == 0.5

    def test_german(self):
        assert keyword_sentiment("Die App ist langsam und teuer").sentiment is SentimentEnum.NEGATIVE

    def test_matches_word_starts_only(self):
        """Test "bug" does not fire inside "debugging"."""
        assert keyword_sentiment("debugging").sentiment is SentimentEnum.NEUTRAL

    @pytest.mark.parametrize(
        "comment",
        [
            "Il bonifico è arrivato",
            "Le caratteristiche",
            "Il cherche un compte",
            "Gutschrift erhalten",
            "Badge",
        ],
    )
    def test_short_words_need_word_end(self, comment):
        assert keyword_sentiment(comment).explanation == "keyword fallback (0 positive, 0 negative terms)"

    def test_short_word_still_matches_alone(self):
        result = keyword_sentiment("App lento")
        assert result.sentiment is SentimentEnum.NEGATIVE
        assert result.explanation == "keyword fallback (0 positive, 1 negative terms)"

    def test_deterministic(self):
        comment = "Slow transfers and high fees"
        assert keyword_sentiment(comment) == keyword_sentiment(comment)

    def test_confidence_below_model_confidence(self):
        assert keyword_sentiment("bad bad terrible awful worst").confidence < 0.8


class TestKeywordTopics:
    def test_crash_and_support(self):
        result = keyword_topics("App crashes constantly, terrible support")
        assert result.labels == ["Customer Support", "App Performance"]
        assert [t.confidence for t in result.topics] == [0.3, 0.3]

    def test_more_matches_rank_higher(self):
        result = keyword_topics("The app is slow, crashes and is full of bugs. Support helped.")
        assert result.topics[0].topic is TopicsEnum.APP_PERFORMANCE
        assert result.topics[0].confidence == 0.8

    def test_at_most_three(self):
        result = keyword_topics(
            "card payment fees, login problems, slow app, support never answers, security worries"
        )
        assert len(result.topics) == 3

    def test_no_match(self):
        assert keyword_topics("Nothing to say").topics == []

    def test_only_taxonomy_labels(self):
        result = keyword_topics("Frais trop chers pour les virements")
        assert set(result.labels) <= {t.value for t in TopicsEnum}
        assert "High Trading Fees" in result.labels

    def test_helpful_is_not_support(self):
        assert keyword_topics("Very helpful and intuitive app").labels == ["Ease of Use"]

    def test_feedback_and_rated_are_not_fees_or_rates(self):
        assert keyword_topics("Thanks for asking for feedback, I rated it highly").topics == []

    def test_bonifico_is_a_payment(self):
        assert keyword_topics("Il bonifico è arrivato").labels == ["Payments & Transfers"]
