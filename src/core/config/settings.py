# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for Cortex Arena.
Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.oracle.provider)
    'auto'
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Gemini models tried in order when the oracle uses the Gemini family.
DEFAULT_GEMINI_MODELS = [
    "gemini-2.5-flash",
    "gemini-2.0-flash",
    "gemini-2.0-flash-exp",
    "gemini-1.5-flash",
    "gemini-1.5-pro",
]


class OracleSettings(BaseSettings):
    """Remote move oracle (LLM provider) configuration.

    The oracle is an optional remote move generator. When no API key is
    configured every turn is played by the local engines.

    Attributes:
        api_key: Provider credential (Gemini key or OpenAI secret key).
        provider: Provider family, or "auto" to detect from the key prefix.
        gemini_base_url: Base URL of the Generative Language API.
        gemini_api_version: API version segment used for Gemini endpoints.
        gemini_models: Ordered Gemini model names tried during failover.
        openai_base_url: Base URL of the OpenAI-compatible API.
        openai_model: Chat model used for the OpenAI family.
        timeout: Request timeout in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="ORACLE_",
        extra="ignore",
    )

    api_key: SecretStr | None = None
    provider: Literal["auto", "gemini", "openai"] = "auto"
    gemini_base_url: str = "https://generativelanguage.googleapis.com"
    gemini_api_version: str = "v1beta"
    gemini_models: list[str] = Field(default_factory=lambda: list(DEFAULT_GEMINI_MODELS))
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-3.5-turbo"
    timeout: float = 20.0

    @property
    def has_credential(self) -> bool:
        """Check whether a non-empty API key is configured."""
        return bool(self.api_key and self.api_key.get_secret_value().strip())


class GamingSettings(BaseSettings):
    """Difficulty and move selection tuning.

    Attributes:
        connect4_random_override: Chance of a random column at Connect 4 level 1.
        tictactoe_full_depth: Search depth used for unbeatable tic-tac-toe play.
        max_search_depth: Hard cap applied by the search engine.
        chess_max_tier: Highest chess persona tier reachable by the match counter.
        fallback_to_search: Use the search engine instead of a random move
            when a grid-game candidate fails validation.
        personas_file: Optional YAML file overriding the chess personas.
    """

    model_config = SettingsConfigDict(
        env_prefix="GAMING_",
        extra="ignore",
    )

    connect4_random_override: float = Field(default=0.3, ge=0.0, le=1.0)
    tictactoe_full_depth: int = Field(default=9, ge=1)
    max_search_depth: int = Field(default=9, ge=1)
    chess_max_tier: int = Field(default=2, ge=0)
    fallback_to_search: bool = True
    personas_file: Path | None = None


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration subsettings and provides
    environment-level configuration.

    Attributes:
        environment: Current deployment environment.
        debug: Enable debug mode.
        log_level: Logging level.
        oracle: Remote move oracle settings.
        gaming: Difficulty and search settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    oracle: OracleSettings = Field(default_factory=OracleSettings)
    gaming: GamingSettings = Field(default_factory=GamingSettings)

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
