"""
Two-stage reply validation.

- pipeline.py: ReplyParser (extract -> schema -> normalize)
- stage1_json_extract.py: locate JSON inside free-form replies (hard fail)
- stage2_schema.py: JSON Schema check against schemas/*.json (hard fail)
"""

from .exceptions import (
    ReplyValidationError,
    JSONExtractionError,
    SchemaValidationError,
)
from .pipeline import ReplyParser, coerce_confidence

__all__ = [
    "ReplyParser",
    "coerce_confidence",
    "ReplyValidationError",
    "JSONExtractionError",
    "SchemaValidationError",
]
