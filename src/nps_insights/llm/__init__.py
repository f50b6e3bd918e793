"""
LLM client abstraction and implementations.

Components:
- BaseLLMClient: Abstract base class for LLM clients
- OllamaClient: Implementation for the Ollama inference server
- PromptBuilder: Renders sentiment/topic prompts for a comment
- languages: Per-language example phrases
- text_utils: Comment normalization and truncation
- exceptions: LLM-specific exceptions
"""

from nps_insights.llm.base_client import BaseLLMClient
from nps_insights.llm.ollama_client import OllamaClient
from nps_insights.llm.prompt_builder import PromptBuilder
from nps_insights.llm.exceptions import (
    LLMClientError,
    LLMConnectionError,
    LLMGenerationError,
    LLMTimeoutError,
    LLMModelNotAvailableError,
)

__all__ = [
    "BaseLLMClient",
    "OllamaClient",
    "PromptBuilder",
    "LLMClientError",
    "LLMConnectionError",
    "LLMGenerationError",
    "LLMTimeoutError",
    "LLMModelNotAvailableError",
]
