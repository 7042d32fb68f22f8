"""
Application configuration and settings.
Centralized configuration management using Pydantic Settings.
"""
import string
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_relay.services.prompts import DEFAULT_SYSTEM_PROMPT_TEMPLATE, PROMPT_PLACEHOLDERS


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Field names map to upper-case environment variables (``openai_api_key``
    is read from ``OPENAI_API_KEY``). The object is frozen: request handlers
    only ever read it.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_file=[".env", ".env.local"],  # .env.local overrides .env
        frozen=True,
    )

    # Application settings
    app_name: str = "Chat Relay API"
    environment: str = "local"
    debug: bool = False  # include exception details in 500 bodies outside production
    host: str = "0.0.0.0"
    port: int = 3000

    # CORS settings
    allowed_origins: List[str] = ["*"]

    # Logging settings
    log_level: str = "INFO"
    enable_request_logging: bool = True

    # Upstream provider settings
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-5-mini"
    upstream_api: Literal["responses", "chat_completions"] = "responses"
    upstream_timeout_seconds: float = 60.0

    # Prompt settings
    system_prompt_template: str = DEFAULT_SYSTEM_PROMPT_TEMPLATE

    @field_validator("openai_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("system_prompt_template")
    @classmethod
    def _check_placeholders(cls, value: str) -> str:
        """Reject templates that reference fields the relay cannot fill.

        Placeholders must be bare names, without conversions or format specs.
        """
        for _, field_name, format_spec, conversion in string.Formatter().parse(value):
            if field_name is None:
                continue
            if field_name not in PROMPT_PLACEHOLDERS:
                raise ValueError(
                    f"Unknown placeholder {{{field_name}}} in system prompt template; "
                    f"allowed: {', '.join(sorted(PROMPT_PLACEHOLDERS))}"
                )
            if conversion or format_spec:
                raise ValueError(
                    f"Placeholder {{{field_name}}} in system prompt template must not "
                    f"use a conversion or format spec"
                )
        return value

    @property
    def has_api_key(self) -> bool:
        """Check whether an upstream credential is configured."""
        return bool(self.openai_api_key.strip())

    @property
    def upstream_timeout(self) -> Optional[float]:
        """Timeout for the outbound call, or None when disabled."""
        if self.upstream_timeout_seconds <= 0:
            return None
        return self.upstream_timeout_seconds

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_local(self) -> bool:
        """Check if running in local development environment."""
        return self.environment == "local"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
