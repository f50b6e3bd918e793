"""
LLM-specific data models for the request/response cycle.

These models are internal to the LLM layer and carry the raw exchange with
the inference server. Classification results live in classification_models.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LLMGenerationRequest(BaseModel):
    """
    Standardized request sent to any LLM client implementation.
    """
    model_config = ConfigDict(frozen=True)

    prompt: str = Field(..., description="Complete prompt sent as a single text field")
    model: str = Field(..., description="Model name/identifier (e.g., 'qwen2.5:3b')")
    temperature: float = Field(default=0.1, ge=0.0, le=2.0, description="Sampling temperature")
    top_p: Optional[float] = Field(default=0.9, ge=0.0, le=1.0, description="Nucleus sampling parameter")
    max_tokens: int = Field(default=200, ge=1, le=8192, description="Maximum tokens to generate (num_predict)")
    stream: bool = Field(default=False, description="Streaming is never used; replies are parsed whole")
    stop_sequences: Optional[list[str]] = Field(default=None, description="Stop sequences for generation")


class LLMGenerationResponse(BaseModel):
    """
    Raw generated text plus metadata for logging and metrics.

    Parsing of the content happens in the validation layer.
    """
    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="Generated text (expected to contain a JSON object)")
    model_version: str = Field(..., description="Model that actually served the request")
    finish_reason: str = Field(..., description="'stop' when done, 'incomplete' otherwise")
    prompt_tokens: Optional[int] = Field(default=None, description="Tokens in prompt")
    completion_tokens: Optional[int] = Field(default=None, description="Tokens in completion")
    latency_ms: int = Field(..., ge=0, description="Generation latency in milliseconds")
    created_at: Optional[str] = Field(default=None, description="ISO timestamp from server")
    raw_metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Provider-specific metadata (durations, for debugging)"
    )

    @property
    def usage_tokens(self) -> Optional[int]:
        if self.prompt_tokens is None or self.completion_tokens is None:
            return None
        return self.prompt_tokens + self.completion_tokens
