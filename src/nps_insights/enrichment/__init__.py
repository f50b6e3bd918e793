"""
Background enrichment of stored survey responses.

- orchestrator.py: run admission, worker pool, per-row persistence
- progress.py: ProgressTracker polled by the dashboard
- exceptions.py: EnrichmentBusyError, NoActiveRunError
"""

from nps_insights.enrichment.exceptions import (
    EnrichmentBusyError,
    EnrichmentError,
    NoActiveRunError,
)
from nps_insights.enrichment.orchestrator import (
    EnrichmentOrchestrator,
    EnrichmentReport,
    RunState,
    RunTicket,
)
from nps_insights.enrichment.progress import ProgressTracker

__all__ = [
    "EnrichmentOrchestrator",
    "EnrichmentReport",
    "RunState",
    "RunTicket",
    "ProgressTracker",
    "EnrichmentError",
    "EnrichmentBusyError",
    "NoActiveRunError",
]
