"""
Response store exceptions.
"""


class StoreError(Exception):
    """Base exception for response store failures."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StoreUnavailableError(StoreError):
    """
    The database could not be reached or refused the operation.

    Raised instead of raw SQLAlchemy errors so callers (enrichment
    admission, API) can map it to "try again later".
    """


class ResponseNotFoundError(StoreError):
    """No survey response with the given id."""

    def __init__(self, response_id: int):
        super().__init__(f"Survey response {response_id} not found", {"response_id": response_id})
        self.response_id = response_id
