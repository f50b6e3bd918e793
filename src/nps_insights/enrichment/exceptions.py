"""
Enrichment run exceptions.
"""


class EnrichmentError(Exception):
    """Base exception for enrichment run control."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EnrichmentBusyError(EnrichmentError):
    """A run is already scanning or running; the trigger is rejected, not queued."""

    def __init__(self, run_id: str | None = None):
        super().__init__(
            "AI processing already in progress",
            {"run_id": run_id} if run_id else None,
        )
        self.run_id = run_id


class NoActiveRunError(EnrichmentError):
    """Cancel was requested while no run is active."""

    def __init__(self):
        super().__init__("No AI processing run is active")
