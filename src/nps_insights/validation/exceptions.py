"""
Reply validation exceptions.

Raised by the reply parser when a model reply cannot be turned into a
classification result. The classification client catches them and
switches to the keyword fallback.
"""

from typing import Any


class ReplyValidationError(Exception):
    """
    Base exception for all reply validation errors.
    """

    stage = "unknown"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Args:
            message: Human-readable error description
            details: Structured error data for logging/metrics
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class JSONExtractionError(ReplyValidationError):
    """
    Stage 1: no usable JSON object could be located in the reply.
    """

    stage = "stage1"

    def __init__(
        self,
        message: str,
        raw_content: str | None = None,
        error_type: str | None = None,
    ):
        """
        Args:
            message: Error description
            raw_content: Reply text; only the first 500 chars are kept
            error_type: Short machine label (empty_content, no_json_object, missing_key)
        """
        details = {}
        if raw_content:
            details["content_snippet"] = raw_content[:500]
        if error_type:
            details["error_type"] = error_type
        super().__init__(message, details)
        self.error_type = error_type or "no_json_object"


class SchemaValidationError(ReplyValidationError):
    """
    Stage 2: the extracted object does not match the reply schema.
    """

    stage = "stage2"
    error_type = "schema_validation_error"

    def __init__(
        self,
        message: str,
        validation_errors: list[str] | None = None,
        schema_path: str | None = None
    ):
        details = {}
        if validation_errors:
            details["validation_errors"] = validation_errors
        if schema_path:
            details["schema_path"] = schema_path
        super().__init__(message, details)
