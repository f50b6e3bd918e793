"""
Abstract base client for LLM inference.

Defines the interface the classification client talks to, so the Ollama
backend can be replaced (or stubbed in tests) without touching parsing or
enrichment code.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import structlog

from nps_insights.models.llm_models import LLMGenerationRequest, LLMGenerationResponse


logger = structlog.get_logger(__name__)


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM inference clients.

    Responsibilities:
    - Send generation requests to the inference server
    - Map transport problems onto the LLMClientError hierarchy
    - Provide health, model listing and model info lookups

    Does NOT handle:
    - Prompt construction (PromptBuilder)
    - Reply parsing (validation.ReplyParser)
    - Fallback decisions (ClassificationClient)
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        timeout: int = 30,
        max_retries: int = 1,
        **kwargs
    ):
        """
        Args:
            base_url: Base URL of the inference server (e.g., http://localhost:11434)
            model: Default model name used for availability checks
            timeout: Request timeout in seconds
            max_retries: Number of connection-level attempts for network errors
            **kwargs: Additional provider-specific config
        """
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.extra_config = kwargs

    @abstractmethod
    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        """
        Generate a completion.

        Raises:
            LLMConnectionError: Network errors
            LLMTimeoutError: Request exceeded timeout
            LLMGenerationError: Non-2xx or unusable body
            LLMModelNotAvailableError: Model not found
        """

    @abstractmethod
    async def list_models(self) -> list[str]:
        """Names of the models installed on the server."""

    @abstractmethod
    async def get_model_info(self, model_name: str) -> Dict[str, Any]:
        """
        Metadata about a specific model (family, size, quantization...).

        Raises:
            LLMModelNotAvailableError: Model not found on server
            LLMConnectionError: Unable to reach server
        """

    async def health_check(self) -> bool:
        """
        True if the server answers a model listing.

        Never raises.
        """
        try:
            await self.list_models()
            return True
        except Exception as e:
            logger.warning("LLM health check failed", error=str(e))
            return False

    async def is_model_available(self, model_name: str | None = None) -> bool:
        """
        True if ``model_name`` (default: the configured model) is installed.

        Matches on the base name, so "qwen2.5" matches "qwen2.5:3b".
        Never raises.
        """
        wanted = (model_name or self.model).split(":")[0]
        try:
            names = await self.list_models()
        except Exception as e:
            logger.warning("Model availability check failed", model=wanted, error=str(e))
            return False
        return any(wanted in name for name in names)

    async def close(self):
        """Release connections. Default implementation does nothing."""

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"model={self.model}, "
            f"timeout={self.timeout}s)"
        )
