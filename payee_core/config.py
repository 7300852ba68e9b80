"""Configuration management for the payee classifier."""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

from payee_core.classification.constants import (
    DEFAULT_AI_CONSENSUS_RUNS,
    DEFAULT_BATCH_CACHE_SIZE,
    DEFAULT_KEYWORD_CACHE_TTL_SECONDS,
    DEFAULT_MAX_RETAINED_BATCHES,
    DEFAULT_MAX_WORKERS,
)

# Load environment variables from .env file in ops folder
env_path = Path(__file__).parent.parent / "ops" / ".env"
load_dotenv(dotenv_path=env_path)


class OpenAIConfig(BaseSettings):
    """OpenAI API configuration."""

    api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    temperature: float = Field(default=0.0, alias="OPENAI_TEMPERATURE")
    max_tokens: Optional[int] = Field(default=None, alias="OPENAI_MAX_TOKENS")
    timeout: int = Field(default=30, alias="OPENAI_TIMEOUT")
    base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


class AnthropicConfig(BaseSettings):
    """Anthropic API configuration."""

    api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")
    model: str = Field(default="claude-3-5-haiku-latest", alias="ANTHROPIC_MODEL")
    temperature: float = Field(default=0.0, alias="ANTHROPIC_TEMPERATURE")
    max_tokens: Optional[int] = Field(default=None, alias="ANTHROPIC_MAX_TOKENS")
    timeout: int = Field(default=30, alias="ANTHROPIC_TIMEOUT")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


class MLflowConfig(BaseSettings):
    """MLflow tracking configuration."""

    tracking_uri: Optional[str] = Field(
        default="sqlite:///mlflow.db", alias="MLFLOW_TRACKING_URI"
    )
    experiment_name: str = Field(default="payee-classifier", alias="MLFLOW_EXPERIMENT_NAME")
    run_name: Optional[str] = Field(default=None, alias="MLFLOW_RUN_NAME")
    enabled: bool = Field(default=True, alias="MLFLOW_ENABLED")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


class ClassificationConfig(BaseSettings):
    """Classification cascade and batch engine settings."""

    offline_mode: bool = Field(default=False, alias="CLASSIFICATION_OFFLINE_MODE")
    ai_consensus_runs: int = Field(default=DEFAULT_AI_CONSENSUS_RUNS, alias="AI_CONSENSUS_RUNS")
    ai_timeout: float = Field(default=30.0, alias="AI_TIMEOUT")
    max_workers: int = Field(default=DEFAULT_MAX_WORKERS, alias="BATCH_MAX_WORKERS")
    batch_cache_size: int = Field(default=DEFAULT_BATCH_CACHE_SIZE, alias="BATCH_CACHE_SIZE")
    keyword_cache_ttl_seconds: float = Field(
        default=DEFAULT_KEYWORD_CACHE_TTL_SECONDS, alias="KEYWORD_CACHE_TTL_SECONDS"
    )
    memory_size: int = Field(default=5000, alias="CLASSIFICATION_MEMORY_SIZE")
    persist_results: bool = Field(default=True, alias="PERSIST_RESULTS")
    max_retained_batches: int = Field(
        default=DEFAULT_MAX_RETAINED_BATCHES, alias="MAX_RETAINED_BATCHES"
    )

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


class AppConfig(BaseSettings):
    """Main application configuration."""

    # Application settings
    app_name: str = Field(default="payee-classifier", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Data paths
    data_dir: Path = Field(default=Path("data"), alias="DATA_DIR")
    results_dir: Path = Field(default=Path("results"), alias="RESULTS_DIR")

    # Database configuration
    database_path: Path = Field(
        default=Path("data/classifications.db"), alias="DATABASE_PATH"
    )

    # LLM provider for the AI classification agent
    payee_classification_llm: str = Field(
        default="openai", alias="PAYEE_CLASSIFICATION_LLM"
    )

    # LLM Provider Settings
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)

    # MLflow configuration
    mlflow: MLflowConfig = Field(default_factory=MLflowConfig)

    # Classification configuration
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)

    # CORS configuration
    cors_origins: str = Field(default="", alias="CORS_ORIGINS")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"

    def __init__(self, **kwargs):
        """Initialize configuration with nested settings."""
        super().__init__(**kwargs)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.results_dir.mkdir(parents=True, exist_ok=True)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)


# Global configuration instance
config = AppConfig()


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    return config


def reload_config() -> AppConfig:
    """Reload configuration from environment variables."""
    global config
    config = AppConfig()
    return config
