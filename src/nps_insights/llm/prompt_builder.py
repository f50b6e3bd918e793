"""
Prompt builder for classification requests.

Responsible for:
- Loading and rendering the Jinja2 templates (sentiment, topics)
- Normalizing and length-capping the comment
- Picking the per-language example phrases
- Constructing the LLMGenerationRequest with the generation options
"""

from pathlib import Path
from typing import Optional

import structlog
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from nps_insights.llm.languages import get_language_profile
from nps_insights.llm.text_utils import prepare_comment
from nps_insights.models.enums import TopicsEnum
from nps_insights.models.llm_models import LLMGenerationRequest


logger = structlog.get_logger(__name__)

SENTIMENT_TEMPLATE = "sentiment_prompt.txt"
TOPICS_TEMPLATE = "topics_prompt.txt"
MAX_TOPICS = 3


class PromptBuilder:
    """
    Build sentiment and topic prompts for one comment.

    Each build_* method returns ``(request, metadata)``; metadata is logged
    and handy in tests (truncation, language actually used).
    """

    def __init__(
        self,
        templates_dir: Path,
        model: str = "qwen2.5:3b",
        temperature: float = 0.1,
        top_p: float = 0.9,
        max_tokens: int = 200,
        comment_truncation_limit: int = 2000,
    ):
        self.templates_dir = Path(templates_dir)
        self.model = model
        self.temperature = temperature
        self.top_p = top_p
        self.max_tokens = max_tokens
        self.comment_truncation_limit = comment_truncation_limit

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,  # plain-text prompts
            undefined=StrictUndefined,
        )

        try:
            self.sentiment_template = self.jinja_env.get_template(SENTIMENT_TEMPLATE)
            self.topics_template = self.jinja_env.get_template(TOPICS_TEMPLATE)
        except Exception as e:
            logger.error("Failed to load prompt templates", error=str(e), templates_dir=str(self.templates_dir))
            raise

        logger.info(
            "PromptBuilder initialized",
            templates_dir=str(self.templates_dir),
            model=model,
            comment_truncation_limit=comment_truncation_limit,
        )

    @classmethod
    def from_settings(cls, settings) -> "PromptBuilder":
        return cls(
            templates_dir=Path(settings.PROMPT_TEMPLATES_DIR),
            model=settings.OLLAMA_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            top_p=settings.LLM_TOP_P,
            max_tokens=settings.LLM_MAX_TOKENS,
            comment_truncation_limit=settings.COMMENT_TRUNCATION_LIMIT,
        )

    def _prepare(self, comment: str, language: Optional[str]):
        profile = get_language_profile(language)
        prepared = prepare_comment(comment, self.comment_truncation_limit)
        context = {
            "language_name": profile.name,
            "comment": prepared,
        }
        metadata = {
            "language": profile.code.value,
            "original_comment_length": len(comment),
            "prompt_comment_length": len(prepared),
            "truncation_applied": len(prepared) < len(comment.strip()),
        }
        return profile, context, metadata

    def _request(self, prompt: str) -> LLMGenerationRequest:
        return LLMGenerationRequest(
            prompt=prompt,
            model=self.model,
            temperature=self.temperature,
            top_p=self.top_p,
            max_tokens=self.max_tokens,
        )

    def build_sentiment_request(
        self, comment: str, language: Optional[str] = None
    ) -> tuple[LLMGenerationRequest, dict]:
        """Render the sentiment prompt for ``comment``."""
        profile, context, metadata = self._prepare(comment, language)
        prompt = self.sentiment_template.render(
            **context,
            positive_examples=profile.positive_examples,
            negative_examples=profile.negative_examples,
            neutral_examples=profile.neutral_examples,
        ).strip()

        logger.debug("Sentiment prompt built", **metadata, prompt_length=len(prompt))
        return self._request(prompt), {**metadata, "kind": "sentiment"}

    def build_topics_request(
        self, comment: str, language: Optional[str] = None
    ) -> tuple[LLMGenerationRequest, dict]:
        """Render the topic-extraction prompt for ``comment``."""
        profile, context, metadata = self._prepare(comment, language)
        prompt = self.topics_template.render(
            **context,
            allowed_topics=[t.value for t in TopicsEnum],
            topic_examples=profile.topic_examples,
            max_topics=MAX_TOPICS,
        ).strip()

        logger.debug("Topics prompt built", **metadata, prompt_length=len(prompt))
        return self._request(prompt), {**metadata, "kind": "topics"}
