"""
Stage 2: JSON Schema validation.

Validate the extracted reply object against its reply schema
(sentiment_reply.json or topics_reply.json).
"""

import json
from pathlib import Path

import structlog
from jsonschema import Draft7Validator

from nps_insights.monitoring.metrics import reply_validation_failures_total
from .exceptions import SchemaValidationError

logger = structlog.get_logger(__name__)


class Stage2SchemaValidation:
    """
    Stage 2 validator: check a reply object against a JSON Schema file.

    The schema is loaded lazily and cached.
    """

    def __init__(self, schema_path: str | Path):
        self.schema_path = str(schema_path)
        self._schema: dict | None = None
        self._validator: Draft7Validator | None = None

    def _load_schema(self) -> dict:
        """
        Raises:
            SchemaValidationError: If the schema file is missing or unreadable
        """
        if self._schema is not None:
            return self._schema

        schema_file = Path(self.schema_path)
        if not schema_file.exists():
            raise SchemaValidationError(
                f"JSON Schema file not found: {self.schema_path}",
                schema_path=self.schema_path
            )

        try:
            with open(schema_file, "r", encoding="utf-8") as f:
                self._schema = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SchemaValidationError(
                f"Failed to load JSON Schema: {e}",
                schema_path=self.schema_path
            ) from e

        Draft7Validator.check_schema(self._schema)
        logger.info("Loaded reply schema", path=self.schema_path)
        return self._schema

    def _get_validator(self) -> Draft7Validator:
        if self._validator is None:
            self._validator = Draft7Validator(self._load_schema())
        return self._validator

    def validate(self, data: dict) -> None:
        """
        Raises:
            SchemaValidationError: If data doesn't conform to the schema
        """
        errors = list(self._get_validator().iter_errors(data))
        if not errors:
            return

        error_messages = []
        for error in errors[:10]:
            path = ".".join(str(p) for p in error.path) if error.path else "root"
            error_messages.append(f"{path}: {error.message}")

        reply_validation_failures_total.labels(
            stage="stage2", error_type="schema_validation_error"
        ).inc()
        raise SchemaValidationError(
            f"Reply failed schema validation with {len(errors)} error(s)",
            validation_errors=error_messages,
            schema_path=self.schema_path
        )
