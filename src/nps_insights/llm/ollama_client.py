"""
Ollama client implementation for LLM inference.

Communicates with the Ollama HTTP API using httpx AsyncClient:
- POST /api/generate (non-streaming completion)
- GET /api/tags (installed models)
- POST /api/show (model details)
"""

import asyncio
import json
import time
from typing import Any, Dict, Optional

import httpx
import structlog

from nps_insights.llm.base_client import BaseLLMClient
from nps_insights.llm.exceptions import (
    LLMConnectionError,
    LLMGenerationError,
    LLMModelNotAvailableError,
    LLMTimeoutError,
)
from nps_insights.models.llm_models import LLMGenerationRequest, LLMGenerationResponse
from nps_insights.monitoring.metrics import llm_latency_seconds, llm_tokens_total


logger = structlog.get_logger(__name__)


class OllamaClient(BaseLLMClient):
    """
    Ollama-specific LLM client.

    Features:
    - Connection pooling via a persistent AsyncClient
    - Retry on network errors and 5xx with exponential backoff
    - Token and latency metrics per call
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "qwen2.5:3b",
        timeout: int = 30,
        max_retries: int = 1,
        retry_backoff: float = 1.0,
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs
    ):
        """
        Args:
            base_url: Ollama server URL
            model: Default model name
            timeout: Request timeout in seconds
            max_retries: Attempts for network errors and 5xx responses
            retry_backoff: Base delay in seconds, doubled on every retry
            connection_limits: httpx connection pool limits
            transport: Custom httpx transport (tests use httpx.MockTransport)
            **kwargs: Additional config
        """
        super().__init__(base_url, model, timeout, max_retries, **kwargs)
        self.retry_backoff = retry_backoff

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0
            )

        self._client: Optional[httpx.AsyncClient] = None
        self._connection_limits = connection_limits
        self._transport = transport

        logger.info(
            "Ollama client initialized",
            base_url=self.base_url,
            model=model,
            timeout=timeout,
            max_retries=self.max_retries,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._transport,
                follow_redirects=True
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    @staticmethod
    def build_payload(request: LLMGenerationRequest) -> Dict[str, Any]:
        """
        Ollama /api/generate body.

        {
            "model": "qwen2.5:3b",
            "prompt": "...",
            "stream": false,
            "options": {"temperature": 0.1, "top_p": 0.9, "num_predict": 200}
        }
        """
        options: Dict[str, Any] = {
            "temperature": request.temperature,
            "num_predict": request.max_tokens,
        }
        if request.top_p is not None:
            options["top_p"] = request.top_p
        if request.stop_sequences:
            options["stop"] = request.stop_sequences

        return {
            "model": request.model,
            "prompt": request.prompt,
            "stream": False,
            "options": options,
        }

    async def _backoff(self, attempt: int, reason: str) -> None:
        delay = self.retry_backoff * (2 ** (attempt - 1))
        logger.info("Retrying Ollama request", reason=reason, attempt=attempt, delay_s=delay)
        await asyncio.sleep(delay)

    def _record(self, model: str, success: bool, started: float) -> None:
        llm_latency_seconds.labels(
            model=model, success="true" if success else "false"
        ).observe(time.time() - started)

    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        """
        Generate a completion via POST /api/generate.

        Response body:
        {
            "model": "qwen2.5:3b",
            "created_at": "...",
            "response": "...",
            "done": true,
            "prompt_eval_count": 120,
            "eval_count": 40
        }
        """
        start_time = time.time()
        payload = self.build_payload(request)

        logger.debug(
            "Sending generation request to Ollama",
            model=request.model,
            prompt_length=len(request.prompt),
            temperature=request.temperature,
            max_tokens=request.max_tokens,
        )

        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                client = await self._get_client()
                response = await client.post("/api/generate", json=payload)
                response.raise_for_status()
                response_data = response.json()

            except httpx.TimeoutException as e:
                logger.warning(
                    "Ollama request timeout",
                    attempt=attempt,
                    timeout=self.timeout,
                    error=str(e)
                )
                last_error = LLMTimeoutError(
                    f"Request timeout after {self.timeout}s",
                    details={"attempt": attempt, "timeout": self.timeout}
                )
                if attempt < self.max_retries:
                    await self._backoff(attempt, "timeout")
                    continue
                break

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                error_text = e.response.text[:500]
                logger.warning(
                    "Ollama HTTP error",
                    status_code=status_code,
                    error_text=error_text,
                    attempt=attempt
                )
                if status_code == 404:
                    self._record(request.model, False, start_time)
                    raise LLMModelNotAvailableError(
                        f"Model not found: {request.model}",
                        details={"model": request.model, "status": status_code}
                    )
                last_error = LLMGenerationError(
                    f"Ollama returned HTTP {status_code}",
                    details={"status": status_code, "error": error_text}
                )
                if status_code >= 500 and attempt < self.max_retries:
                    await self._backoff(attempt, "server_error")
                    continue
                break

            except (httpx.NetworkError, httpx.ConnectError) as e:
                logger.warning(
                    "Ollama network error",
                    attempt=attempt,
                    error=str(e)
                )
                last_error = LLMConnectionError(
                    f"Network error: {e}",
                    details={"attempt": attempt, "error_type": type(e).__name__}
                )
                if attempt < self.max_retries:
                    await self._backoff(attempt, "network_error")
                    continue
                break

            except json.JSONDecodeError as e:
                last_error = LLMGenerationError(
                    "Invalid JSON body from Ollama",
                    details={"parse_error": str(e)}
                )
                break

            content = response_data.get("response", "")
            if not content:
                last_error = LLMGenerationError(
                    "Empty response from Ollama",
                    details={"done": response_data.get("done")}
                )
                break

            model_version = response_data.get("model", request.model)
            prompt_tokens = response_data.get("prompt_eval_count")
            completion_tokens = response_data.get("eval_count")
            latency_ms = int((time.time() - start_time) * 1000)

            self._record(model_version, True, start_time)
            if prompt_tokens:
                llm_tokens_total.labels(model=model_version, token_type="prompt").inc(prompt_tokens)
            if completion_tokens:
                llm_tokens_total.labels(model=model_version, token_type="completion").inc(completion_tokens)

            logger.debug(
                "Ollama generation successful",
                model=model_version,
                latency_ms=latency_ms,
                completion_tokens=completion_tokens,
                attempt=attempt
            )

            return LLMGenerationResponse(
                content=content,
                model_version=model_version,
                finish_reason="stop" if response_data.get("done", True) else "incomplete",
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                latency_ms=latency_ms,
                created_at=response_data.get("created_at"),
                raw_metadata={
                    "total_duration": response_data.get("total_duration"),
                    "load_duration": response_data.get("load_duration"),
                    "eval_duration": response_data.get("eval_duration"),
                }
            )

        self._record(request.model, False, start_time)
        if last_error is None:
            last_error = LLMGenerationError("Generation failed after all retries")
        raise last_error

    async def list_models(self) -> list[str]:
        """
        List installed models via GET /api/tags.

        Returns:
            Model names (e.g., ["qwen2.5:3b", "llama3.2:3b"])
        """
        try:
            client = await self._get_client()
            response = await client.get("/api/tags", timeout=10.0)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            raise LLMConnectionError(
                f"Failed to list models: {e}",
                details={"error_type": type(e).__name__}
            ) from e

        models = [m.get("name", "") for m in data.get("models", [])]
        logger.debug("Listed available models", count=len(models))
        return models

    async def get_model_info(self, model_name: str | None = None) -> Dict[str, Any]:
        """
        Model information via POST /api/show.

        Payload: {"name": "qwen2.5:3b"}
        """
        name = model_name or self.model
        try:
            client = await self._get_client()
            response = await client.post("/api/show", json={"name": name}, timeout=10.0)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise LLMModelNotAvailableError(
                    f"Model not found: {name}",
                    details={"model": name}
                ) from e
            raise LLMConnectionError(
                f"Failed to get model info: {e}",
                details={"model": name, "status": e.response.status_code}
            ) from e
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            raise LLMConnectionError(
                f"Error getting model info: {e}",
                details={"model": name}
            ) from e

    async def close(self):
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed Ollama client connection")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
