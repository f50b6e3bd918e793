"""
Unit tests for API dependency injection.
"""

from types import SimpleNamespace
from unittest.mock import Mock

from nps_insights.api.dependencies import (
    get_classifier,
    get_database,
    get_llm_client,
    get_orchestrator,
    get_repository,
    get_settings,
    get_tracker,
)
from nps_insights.enrichment.progress import ProgressTracker


def make_request(**state) -> SimpleNamespace:
    """Minimal stand-in for a Starlette request: only ``request.app.state`` is read."""
    return SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(**state)))


def test_get_settings(test_settings):
    request = make_request(settings=test_settings)
    assert get_settings(request) is test_settings


def test_resources_come_from_app_state():
    database, repository, llm_client = Mock(), Mock(), Mock()
    classifier, orchestrator = Mock(), Mock()
    tracker = ProgressTracker()
    request = make_request(
        database=database,
        repository=repository,
        llm_client=llm_client,
        classifier=classifier,
        tracker=tracker,
        orchestrator=orchestrator,
    )

    assert get_database(request) is database
    assert get_repository(request) is repository
    assert get_llm_client(request) is llm_client
    assert get_classifier(request) is classifier
    assert get_tracker(request) is tracker
    assert get_orchestrator(request) is orchestrator


def test_separate_apps_are_isolated():
    """Two apps never share a tracker."""
    first = make_request(tracker=ProgressTracker())
    second = make_request(tracker=ProgressTracker())

    get_tracker(first).start_processing(3)

    assert get_tracker(first).is_processing() is True
    assert get_tracker(second).is_processing() is False
