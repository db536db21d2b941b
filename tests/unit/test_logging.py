# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for structured logging setup."""

import logging

import structlog

from src.core.config.settings import Settings
from src.utils.logging import (
    QUIET_LOGGERS,
    bind_context,
    clear_context,
    get_logger,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_sets_application_log_level(self) -> None:
        """Test that the application logger follows the configured level."""
        settings = Settings(environment="production", debug=False, log_level="WARNING")

        assert setup_logging(settings, force=True) is True

        assert logging.getLogger("src").level == logging.WARNING

    def test_quiets_third_party_loggers(self) -> None:
        """Test that chatty libraries are raised to WARNING."""
        setup_logging(Settings(log_level="DEBUG"), force=True)

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_configures_once(self) -> None:
        """Test that later calls keep the first configuration unless forced."""
        setup_logging(Settings(log_level="INFO"), force=True)

        assert setup_logging(Settings(log_level="ERROR")) is False
        assert logging.getLogger("src").level == logging.INFO


class TestContextHelpers:
    """Tests for context binding helpers."""

    def test_bind_and_clear_context(self) -> None:
        """Test that bound values appear in the context and are cleared."""
        clear_context()
        bind_context(game="connect4", session_id="abc")

        assert structlog.contextvars.get_contextvars() == {
            "game": "connect4",
            "session_id": "abc",
        }

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_get_logger_returns_usable_logger(self) -> None:
        """Test that get_logger returns a logger accepting key-value pairs."""
        logger = get_logger(__name__)

        logger.info("test_event", move=3)
