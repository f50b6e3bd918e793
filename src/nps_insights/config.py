"""
Configuration settings for NPS Insights.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "NPS Insights"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Ollama Configuration ===
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "qwen2.5:3b"  # Small model, override in .env
    OLLAMA_TIMEOUT: int = 30  # seconds, per HTTP request
    OLLAMA_MAX_RETRIES: int = 1  # Connection-level attempts

    # === LLM Generation Parameters ===
    LLM_TEMPERATURE: float = 0.1  # Low for determinism
    LLM_TOP_P: float = 0.9
    LLM_MAX_TOKENS: int = 200  # Replies are a single small JSON object

    # === Input Processing ===
    COMMENT_TRUNCATION_LIMIT: int = 2000  # chars

    # === Classification ===
    CLASSIFICATION_TIMEOUT_SECONDS: float = 45.0  # Deadline per model call
    MODEL_SENTIMENT_CONFIDENCE: float = 0.8  # Stored for model-derived sentiment
    PROMPT_TEMPLATES_DIR: str = str(PACKAGE_DIR / "llm" / "templates")
    REPLY_SCHEMAS_DIR: str = str(PACKAGE_DIR / "validation" / "schemas")

    # === Enrichment ===
    ENRICHMENT_WORKERS: int = 1  # 1 = strictly sequential
    ENRICHMENT_ROW_DELAY_SECONDS: float = 0.1  # Throttle between rows
    ENRICH_AFTER_INGEST: bool = True

    # === Database ===
    DATABASE_URL: str = "sqlite:///./data/nps_data.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # === API ===
    CORS_ORIGINS: list[str] = ["*"]

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
