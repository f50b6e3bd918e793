"""
Custom exceptions for the LLM client layer.

The classification client turns every one of these into a safe-default
result, so callers above it never see them. They still surface directly
from diagnostic paths (health, model info) and from the raw client.
"""


class LLMClientError(Exception):
    """
    Base exception for all LLM client errors.

    Catch this to treat any inference failure as a transport failure.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LLMConnectionError(LLMClientError):
    """
    Raised when the inference server cannot be reached.

    Includes refused connections, DNS failures and dropped sockets.
    """
    pass


class LLMTimeoutError(LLMConnectionError):
    """
    Raised when a request exceeds its HTTP timeout or the caller's deadline.
    """
    pass


class LLMGenerationError(LLMClientError):
    """
    Raised when the server answers but the generation is unusable.

    Examples:
    - non-2xx status
    - empty "response" field
    - body that is not JSON
    """
    pass


class LLMModelNotAvailableError(LLMGenerationError):
    """
    Raised when the configured model has not been pulled on the server (404).
    """
    pass
