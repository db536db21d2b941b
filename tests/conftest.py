# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across unit tests:
- Settings without an oracle credential
- Seeded random sources
- Board adapters for each game
"""

import random
from collections.abc import Generator

import pytest

from src.core.config.settings import GamingSettings, OracleSettings, Settings, clear_settings_cache
from src.domains.gaming.engines.chess import ChessAdapter
from src.domains.gaming.engines.connect4 import Connect4Adapter
from src.domains.gaming.engines.registry import reset_engine_registry
from src.domains.gaming.engines.tictactoe import TicTacToeAdapter


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _isolated_settings() -> Generator[None, None, None]:
    """Reset cached settings and the default engine registry around each test."""
    clear_settings_cache()
    reset_engine_registry()
    yield
    clear_settings_cache()
    reset_engine_registry()


@pytest.fixture
def offline_settings() -> Settings:
    """Provide settings with no oracle credential."""
    return Settings(
        environment="development",
        oracle=OracleSettings(api_key=None),
        gaming=GamingSettings(),
    )


@pytest.fixture
def gemini_settings() -> OracleSettings:
    """Provide oracle settings with a Gemini-style key and three models."""
    return OracleSettings(
        api_key="AIza-test-key",  # type: ignore[arg-type]
        provider="auto",
        gemini_models=["model-a", "model-b", "model-c"],
        timeout=1.0,
    )


@pytest.fixture
def openai_settings() -> OracleSettings:
    """Provide oracle settings with an OpenAI-style key."""
    return OracleSettings(
        api_key="sk-test-key",  # type: ignore[arg-type]
        provider="auto",
        timeout=1.0,
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def rng() -> random.Random:
    """Provide a seeded random source."""
    return random.Random(1234)


@pytest.fixture
def tictactoe() -> TicTacToeAdapter:
    """Provide a tic-tac-toe adapter."""
    return TicTacToeAdapter()


@pytest.fixture
def connect4() -> Connect4Adapter:
    """Provide a Connect 4 adapter."""
    return Connect4Adapter()


@pytest.fixture
def chess_adapter() -> ChessAdapter:
    """Provide a chess adapter."""
    return ChessAdapter()
