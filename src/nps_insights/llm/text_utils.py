"""
Text processing utilities for prompt construction.
"""

import re


_WHITESPACE_RE = re.compile(r"\s+")
_SENTENCE_END_RE = re.compile(r"[.!?](?:\s|$)")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace (newlines, tabs) into single spaces and strip."""
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def truncate_at_sentence_boundary(text: str, max_chars: int) -> str:
    """
    Truncate text at the last sentence boundary before max_chars.

    Falls back to the last word boundary when it keeps at least 80% of the
    budget, and to a hard cut otherwise.

    Examples:
        >>> truncate_at_sentence_boundary("Hello. World. Test.", 15)
        'Hello. World.'
        >>> truncate_at_sentence_boundary("No period here", 10)
        'No period'
    """
    if max_chars <= 0:
        return ""
    if len(text) <= max_chars:
        return text

    segment = text[:max_chars]

    matches = list(_SENTENCE_END_RE.finditer(segment))
    if matches:
        cutoff = matches[-1].end()
        if segment[cutoff - 1:cutoff].isspace():
            cutoff -= 1
        return text[:cutoff]

    last_space = segment.rfind(" ")
    if last_space > max_chars * 0.8:
        return text[:last_space]

    return segment


def prepare_comment(comment: str, max_chars: int) -> str:
    """Whitespace-normalize and length-cap a comment before it enters a prompt."""
    return truncate_at_sentence_boundary(normalize_whitespace(comment), max_chars)
