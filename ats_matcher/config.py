"""
Runtime Configuration.

Settings are read from environment variables (optionally populated from a
.env file by the entry points) into explicit objects that are passed to
every component that needs them. API keys are never logged or persisted.
"""

import logging
import os
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ats_matcher.matcher import MatchStrategy, resolve_strategy

logger = logging.getLogger("ats_matcher.config")

# * Defaults
DEFAULT_LLM_MODEL = "gpt-4o-mini"
DEFAULT_LLM_TIMEOUT_SECONDS = 60.0
DEFAULT_APOLLO_BASE_URL = "https://api.apollo.io/v1"
DEFAULT_CONTACT_TIMEOUT_SECONDS = 20.0
DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
)

# * Checked in order; the first non-empty one wins
LLM_API_KEY_VARS = ("LLM_API_KEY", "OPENAI_API_KEY", "GEMINI_API_KEY")


class LLMSettings(BaseModel):
    """Connection settings for the text-generation endpoint."""

    api_key: Optional[str] = Field(default=None, repr=False)
    model: str = DEFAULT_LLM_MODEL
    base_url: Optional[str] = None
    timeout_seconds: float = DEFAULT_LLM_TIMEOUT_SECONDS
    send_top_k: bool = False

    def with_api_key(self, api_key: Optional[str]) -> "LLMSettings":
        """Return a copy using a request-scoped key, if one was supplied."""
        if not api_key or not api_key.strip():
            return self
        return self.model_copy(update={"api_key": api_key.strip()})

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


class ContactSearchSettings(BaseModel):
    """Settings for the people-search endpoint."""

    api_key: Optional[str] = Field(default=None, repr=False)
    base_url: str = DEFAULT_APOLLO_BASE_URL
    timeout_seconds: float = DEFAULT_CONTACT_TIMEOUT_SECONDS


class Settings(BaseModel):
    """Top-level settings object."""

    llm: LLMSettings = Field(default_factory=LLMSettings)
    contacts: ContactSearchSettings = Field(default_factory=ContactSearchSettings)
    match_strategy: MatchStrategy = MatchStrategy.VOCABULARY
    cors_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @field_validator("match_strategy", mode="before")
    @classmethod
    def _parse_strategy(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


def _env_str(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = _env_str(name)
    if raw is None:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: tuple[str, ...]) -> list[str]:
    raw = _env_str(name)
    if raw is None:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


def _env_strategy(name: str) -> MatchStrategy:
    raw = _env_str(name)
    try:
        return resolve_strategy(raw)
    except ValueError:
        logger.warning(
            "Ignoring %s=%r; expected one of %s. Using %s",
            name,
            raw,
            ", ".join(s.value for s in MatchStrategy),
            MatchStrategy.VOCABULARY.value,
        )
        return MatchStrategy.VOCABULARY


def load_settings() -> Settings:
    """
    Build settings from the current environment.

    Returns:
        Settings instance. Missing keys are left as None.
    """
    api_key = None
    for var in LLM_API_KEY_VARS:
        api_key = _env_str(var)
        if api_key:
            break

    llm = LLMSettings(
        api_key=api_key,
        model=_env_str("LLM_MODEL") or DEFAULT_LLM_MODEL,
        base_url=_env_str("LLM_BASE_URL"),
        timeout_seconds=_env_float("LLM_TIMEOUT_SECONDS", DEFAULT_LLM_TIMEOUT_SECONDS),
        send_top_k=_env_bool("LLM_SEND_TOP_K", False),
    )
    contacts = ContactSearchSettings(
        api_key=_env_str("APOLLO_API_KEY"),
        base_url=_env_str("APOLLO_BASE_URL") or DEFAULT_APOLLO_BASE_URL,
        timeout_seconds=_env_float("CONTACT_TIMEOUT_SECONDS", DEFAULT_CONTACT_TIMEOUT_SECONDS),
    )

    return Settings(
        llm=llm,
        contacts=contacts,
        match_strategy=_env_strategy("MATCH_STRATEGY"),
        cors_origins=_env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
        log_level=_env_str("LOG_LEVEL") or "INFO",
    )
