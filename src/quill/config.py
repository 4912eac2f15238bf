"""Configuration management with pydantic-settings for the Quill classifier.

- Type-safe settings with validated ranges
- Automatic .env file loading with environment precedence
- ``QUILL_`` environment variable prefix
- SecretStr for the Anthropic API key
- Frozen config (immutable after load, safe to share across tasks)

The local tiers read only ``trigger_window``; everything else tunes the
confidence gate and the optional remote tiers.
"""

import json
import logging
from functools import lru_cache
from typing import Annotated

from pydantic import AliasChoices, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger("quill.config")

__all__ = [
    "DEFAULT_ANTHROPIC_MODEL",
    "DEFAULT_OLLAMA_MODEL",
    "PROVIDER_NAMES",
    "ClassifierConfig",
    "get_config",
    "reset_config",
]

DEFAULT_ANTHROPIC_MODEL = "claude-3-5-haiku-20241022"
DEFAULT_OLLAMA_MODEL = "llama3.2:3b"

PROVIDER_NAMES = ("claude", "ollama")


class ClassifierConfig(BaseSettings):
    """Configuration for note classification and section splitting.

    Loads from (in order of precedence):
    1. Environment variables prefixed with ``QUILL_`` (highest priority)
    2. .env file in the working directory
    3. Default values (lowest priority)

    Attributes:
        trigger_window: Leading characters scanned for classification markers
        confidence_gate: Heuristic confidence below which the remote fallback runs
        auto_split_threshold: Minimum semantic-split confidence to pre-select splitting
        min_semantic_split_chars: Texts this short never go to semantic detection
        llm_enabled: Master switch for every remote tier
        fallback_timeout_seconds: Upper bound on one fallback call
        primary_provider: First provider tried by the default chain
        fallback_providers: Providers tried after the primary, in order
        anthropic_api_key: Anthropic API key (SecretStr)
        anthropic_model: Anthropic model name
        ollama_base_url: Ollama API base URL
        ollama_model: Ollama model name
        max_input_chars: Capture text is truncated to this before prompting
        max_output_tokens: Token cap for remote responses
        circuit_failure_threshold: Consecutive failures before a provider is skipped
        circuit_reset_timeout: Seconds before a skipped provider is retried
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (json for production, text for development)
    """

    model_config = SettingsConfigDict(
        env_prefix="QUILL_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        validate_default=True,
        frozen=True,
        extra="ignore",
    )

    trigger_window: int = Field(
        default=100,
        ge=1,
        le=10_000,
        description="Leading characters scanned for exact and fuzzy markers during classification.",
    )

    confidence_gate: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Heuristic results below this confidence are sent to the remote fallback.",
    )

    auto_split_threshold: float = Field(
        default=0.85,
        ge=0.0,
        le=1.0,
        description="Semantic split proposals at or above this confidence are pre-selected in the preview.",
    )

    min_semantic_split_chars: int = Field(
        default=100,
        ge=0,
        description="Texts of this length or shorter are never sent for semantic section detection.",
    )

    llm_enabled: bool = Field(
        default=True,
        description="Disable to keep classification entirely local.",
    )

    fallback_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=120.0,
        description="Timeout applied around a single remote classification.",
    )

    primary_provider: str = Field(default="claude")

    fallback_providers: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["ollama"]
    )

    anthropic_api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices(
            "anthropic_api_key", "QUILL_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"
        ),
        description="Anthropic API key; the Claude provider is unavailable without it.",
    )

    anthropic_model: str = Field(default=DEFAULT_ANTHROPIC_MODEL)

    ollama_base_url: str = Field(default="http://localhost:11434")

    ollama_model: str = Field(default=DEFAULT_OLLAMA_MODEL)

    max_input_chars: int = Field(default=4000, ge=100, le=100_000)

    max_output_tokens: int = Field(default=500, ge=50, le=4096)

    circuit_failure_threshold: int = Field(default=5, ge=1, le=100)

    circuit_reset_timeout: int = Field(default=60, ge=1, le=3600)

    log_level: str = Field(default="INFO")

    log_format: str = Field(default="json")

    @field_validator("fallback_providers", mode="before")
    @classmethod
    def parse_fallback_providers(cls, v):
        """Parse comma-separated string into list for QUILL_FALLBACK_PROVIDERS."""
        if isinstance(v, str):
            if v.startswith("["):
                return json.loads(v)
            return [p.strip().lower() for p in v.split(",") if p.strip()]
        return v

    @field_validator("primary_provider", mode="before")
    @classmethod
    def normalize_provider(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in {"json", "text"}:
            raise ValueError(f"Invalid log format: {v} (expected json or text)")
        return fmt

    @model_validator(mode="after")
    def validate_providers(self) -> "ClassifierConfig":
        """Validate provider names against the known adapters."""
        for provider in [self.primary_provider, *self.fallback_providers]:
            if provider not in PROVIDER_NAMES:
                raise ValueError(
                    f"Unknown provider '{provider}' (expected one of {', '.join(PROVIDER_NAMES)})"
                )
        return self

    @property
    def provider_order(self) -> list[str]:
        """Primary provider followed by the fallbacks, without duplicates."""
        order: list[str] = []
        for provider in [self.primary_provider, *self.fallback_providers]:
            if provider not in order:
                order.append(provider)
        return order


@lru_cache(maxsize=1)
def get_config() -> ClassifierConfig:
    """Return the process-wide configuration, loading it on first use."""
    config = ClassifierConfig()
    logger.debug(
        "config_loaded",
        extra={
            "trigger_window": config.trigger_window,
            "confidence_gate": config.confidence_gate,
            "llm_enabled": config.llm_enabled,
            "providers": config.provider_order,
        },
    )
    return config


def reset_config() -> None:
    """Clear the cached configuration (used by tests after patching the environment)."""
    get_config.cache_clear()
