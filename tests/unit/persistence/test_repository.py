"""
Unit tests for ResponseRepository over in-memory SQLite.
"""

from datetime import date, datetime, timezone

import pytest

from nps_insights.models.classification_models import TopicScore
from nps_insights.models.enums import SENTIMENT_NOT_AVAILABLE, ResponseGroup, TopicsEnum
from nps_insights.models.survey_models import EnrichmentUpdate
from nps_insights.persistence.exceptions import ResponseNotFoundError, StoreUnavailableError


def enrichment(sentiment="negative", confidence=0.8, topics=None) -> EnrichmentUpdate:
    return EnrichmentUpdate(sentiment=sentiment, sentiment_confidence=confidence, topics=topics)


class TestIngest:
    def test_insert_defaults(self, repository, create_survey_response):
        response_id = repository.insert_response(create_survey_response(language="fr-CH"))
        stored = repository.get_response(response_id)

        assert stored.language == "fr"
        assert stored.sentiment == SENTIMENT_NOT_AVAILABLE
        assert stored.sentiment_confidence == 0.0
        assert stored.date == datetime.now(timezone.utc).date().isoformat()
        assert stored.response_group is ResponseGroup.DETRACTOR
        assert stored.topics == []

    def test_insert_many_returns_ids(self, repository, create_survey_response):
        ids = repository.insert_many([create_survey_response(rating=r) for r in (1, 8, 10)])
        assert len(ids) == 3
        assert repository.count() == 3

    def test_insert_nothing(self, repository):
        assert repository.insert_many([]) == []

    def test_get_unknown(self, repository):
        assert repository.get_response(999) is None


class TestPendingScan:
    def test_only_unenriched_rows_with_comments(self, repository, create_survey_response):
        pending_id = repository.insert_response(create_survey_response())
        repository.insert_response(create_survey_response(comment=None))
        done_id = repository.insert_response(create_survey_response(comment="Great app"))
        repository.update_enrichment(done_id, enrichment("positive"))

        rows = repository.get_pending_for_enrichment()

        assert [r.id for r in rows] == [pending_id]
        assert rows[0].comment == "App crashes constantly, terrible support"
        assert rows[0].language == "en"

    def test_neutral_without_confidence_is_pending(self, repository, create_survey_response):
        labelled = repository.insert_response(create_survey_response(sentiment="Neutral"))
        assert [r.id for r in repository.get_pending_for_enrichment()] == [labelled]

    @pytest.mark.parametrize("given", ["N/A", "n/a", "", "Great"])
    def test_unlabelled_ingest_is_stored_as_not_available(self, repository, create_survey_response, given):
        row_id = repository.insert_response(create_survey_response(sentiment=given))

        stored = repository.get_response(row_id)
        assert stored.sentiment == SENTIMENT_NOT_AVAILABLE
        assert stored.sentiment_confidence == 0.0
        assert [r.id for r in repository.get_pending_for_enrichment()] == [row_id]

    def test_labelled_ingest_is_not_pending(self, repository, create_survey_response):
        row_id = repository.insert_response(create_survey_response(sentiment="Positive"))

        assert repository.get_response(row_id).sentiment == "positive"
        assert repository.get_pending_for_enrichment() == []

    def test_force_includes_enriched_rows(self, repository, create_survey_response):
        first = repository.insert_response(create_survey_response())
        repository.update_enrichment(first, enrichment())
        second = repository.insert_response(create_survey_response())

        assert [r.id for r in repository.get_pending_for_enrichment()] == [second]
        assert [r.id for r in repository.get_pending_for_enrichment(force=True)] == [first, second]


class TestUpdateEnrichment:
    def test_writes_sentiment_and_topics(self, repository, create_survey_response):
        response_id = repository.insert_response(create_survey_response())
        repository.update_enrichment(response_id, enrichment(topics=[
            TopicScore(topic=TopicsEnum.APP_PERFORMANCE, confidence=0.9),
            TopicScore(topic=TopicsEnum.CUSTOMER_SUPPORT, confidence=0.7),
        ]))

        stored = repository.get_response(response_id)
        assert stored.sentiment == "negative"
        assert stored.sentiment_confidence == 0.8
        assert [t.topic for t in stored.topics] == ["App Performance", "Customer Support"]
        assert stored.updated_at is not None

    def test_topics_replaced(self, repository, create_survey_response):
        response_id = repository.insert_response(create_survey_response())
        repository.update_enrichment(response_id, enrichment(topics=[
            TopicScore(topic=TopicsEnum.CARDS, confidence=0.5),
        ]))
        repository.update_enrichment(response_id, enrichment(topics=[
            TopicScore(topic=TopicsEnum.SECURITY, confidence=0.6),
        ]))
        assert [t.topic for t in repository.get_response(response_id).topics] == ["Security"]

    def test_none_topics_left_untouched(self, repository, create_survey_response):
        response_id = repository.insert_response(create_survey_response())
        repository.update_enrichment(response_id, enrichment(topics=[
            TopicScore(topic=TopicsEnum.CARDS, confidence=0.5),
        ]))
        repository.update_enrichment(response_id, enrichment("neutral", 0.5, topics=None))

        stored = repository.get_response(response_id)
        assert stored.sentiment == "neutral"
        assert [t.topic for t in stored.topics] == ["Cards"]

    def test_unknown_id(self, repository):
        with pytest.raises(ResponseNotFoundError):
            repository.update_enrichment(42, enrichment())


class TestListing:
    def test_filters(self, repository, create_survey_response):
        a = repository.insert_response(create_survey_response(date="2024-01-10", language="de"))
        b = repository.insert_response(create_survey_response(date="2024-02-10"))
        repository.update_enrichment(a, enrichment(topics=[
            TopicScore(topic=TopicsEnum.CARDS, confidence=0.5),
        ]))

        assert [r.id for r in repository.list_responses()] == [b, a]
        assert [r.id for r in repository.list_responses(language="de")] == [a]
        assert [r.id for r in repository.list_responses(sentiment="negative")] == [a]
        assert [r.id for r in repository.list_responses(topic="Cards")] == [a]
        assert [r.id for r in repository.list_responses(start_date=date(2024, 2, 1))] == [b]
        assert [r.id for r in repository.list_responses(end_date=date(2024, 1, 31))] == [a]
        assert len(repository.list_responses(limit=1)) == 1

    def test_clear_all(self, repository, create_survey_response):
        response_id = repository.insert_response(create_survey_response())
        repository.update_enrichment(response_id, enrichment(topics=[
            TopicScore(topic=TopicsEnum.CARDS, confidence=0.5),
        ]))

        assert repository.clear_all() == 1
        assert repository.count() == 0
        assert repository.topic_distribution() == []


class TestStats:
    def test_nps_stats(self, repository, create_survey_response):
        ids = repository.insert_many([
            create_survey_response(rating=10),
            create_survey_response(rating=9),
            create_survey_response(rating=7),
            create_survey_response(rating=2),
        ])
        repository.update_enrichment(ids[0], enrichment("positive", topics=[
            TopicScore(topic=TopicsEnum.EASE_OF_USE, confidence=0.9),
        ]))
        repository.update_enrichment(ids[3], enrichment("negative", topics=[
            TopicScore(topic=TopicsEnum.EASE_OF_USE, confidence=0.5),
            TopicScore(topic=TopicsEnum.CARDS, confidence=0.6),
        ]))

        stats = repository.nps_stats()

        assert stats["total"] == 4
        assert stats["npsScore"] == 25.0
        assert stats["segments"] == {"promoters": 50.0, "passives": 25.0, "detractors": 25.0}
        assert stats["sentimentData"] == [
            {"name": "Positive", "value": 1},
            {"name": "Negative", "value": 1},
        ]
        assert stats["topicData"][0] == {"topic": "Ease of Use", "count": 2, "avgConfidence": 0.7}

    def test_empty_store(self, repository):
        stats = repository.nps_stats()
        assert stats["total"] == 0
        assert stats["npsScore"] == 0.0
        assert stats["sentimentData"] == []


def test_store_errors_are_wrapped(repository, database):
    database.drop_tables()
    with pytest.raises(StoreUnavailableError):
        repository.get_pending_for_enrichment()
