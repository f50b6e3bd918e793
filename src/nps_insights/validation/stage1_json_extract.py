"""
Stage 1: JSON extraction.

Small models wrap their JSON in prose, code fences or trailing commentary,
and sometimes run out of tokens mid-array. This stage locates the first
decodable top-level JSON object in the reply instead of requiring the whole
reply to be JSON.
"""

import json
import re
from typing import Any, Optional

import structlog

from nps_insights.monitoring.metrics import reply_validation_failures_total
from .exceptions import JSONExtractionError

logger = structlog.get_logger(__name__)

_TOPICS_ARRAY_RE = re.compile(r'"topics"\s*:\s*\[')


class Stage1JSONExtract:
    """
    Stage 1 extractor: reply text -> dict.

    Raises JSONExtractionError when nothing usable is found.
    """

    def __init__(self):
        self._decoder = json.JSONDecoder()

    def _fail(self, message: str, content: str, error_type: str) -> JSONExtractionError:
        reply_validation_failures_total.labels(stage="stage1", error_type=error_type).inc()
        return JSONExtractionError(message, raw_content=content, error_type=error_type)

    def _iter_objects(self, content: str, start: int = 0):
        """Yield every JSON object that decodes starting at a '{' position."""
        for match in re.finditer(r"\{", content[start:]):
            try:
                value, _ = self._decoder.raw_decode(content, start + match.start())
            except json.JSONDecodeError:
                continue
            if isinstance(value, dict):
                yield value

    def extract_object(self, content: str, required_key: Optional[str] = None) -> dict[str, Any]:
        """
        Return the first JSON object in ``content``.

        Args:
            content: Raw reply text
            required_key: Skip objects that do not carry this key

        Raises:
            JSONExtractionError: empty reply, no object, or no object with the key
        """
        if not content or not content.strip():
            raise self._fail("Reply is empty or whitespace-only", content, "empty_content")

        found_any = False
        for obj in self._iter_objects(content):
            found_any = True
            if required_key is None or required_key in obj:
                logger.debug("Stage 1: extracted JSON object", keys=list(obj)[:10])
                return obj

        if found_any:
            raise self._fail(
                f"No JSON object with key '{required_key}' in reply",
                content,
                "missing_key",
            )
        raise self._fail("No JSON object found in reply", content, "no_json_object")

    def extract_topics_array(self, content: str) -> list[Any]:
        """
        Return the ``"topics": [...]`` array even when the enclosing object is broken.

        When the array itself is truncated, the complete ``{...}`` items that
        precede the cut are salvaged.

        Raises:
            JSONExtractionError: no topics array, or nothing salvageable in it
        """
        match = _TOPICS_ARRAY_RE.search(content or "")
        if match is None:
            raise self._fail("No topics array found in reply", content, "no_json_object")

        array_start = match.end() - 1
        try:
            value, _ = self._decoder.raw_decode(content, array_start)
            if isinstance(value, list):
                return value
        except json.JSONDecodeError:
            pass

        salvaged = [obj for obj in self._iter_objects(content, array_start) if "topic" in obj]
        if salvaged:
            logger.debug("Stage 1: salvaged items from truncated topics array", count=len(salvaged))
            return salvaged
        raise self._fail("Topics array is malformed", content, "no_json_object")
