# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application factory.

This module wires settings, logging and the move selection service together
for the surrounding application.
"""

import logging
import random

from src.core.config import Settings, get_settings
from src.domains.gaming.engines import get_engine_registry
from src.domains.gaming.models import GameType, MIN_LEVEL
from src.domains.gaming.oracle.client import MoveOracleClient
from src.domains.gaming.policy import DifficultyPolicy
from src.domains.gaming.service import GameSession, MoveSelector
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_move_selector(
    settings: Settings | None = None,
    rng: random.Random | None = None,
) -> MoveSelector:
    """Create and configure the move selector.

    Configures logging on first use, then builds the difficulty policy,
    oracle client and selector from settings.

    Args:
        settings: Application settings. Defaults to get_settings().
        rng: Optional random source (seed it for reproducible play).

    Returns:
        Configured MoveSelector instance.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    selector = MoveSelector(
        settings=settings,
        registry=get_engine_registry(),
        policy=DifficultyPolicy(settings.gaming),
        oracle=MoveOracleClient(settings.oracle),
        rng=rng,
    )

    logger.info(
        "Move selector ready",
        extra={
            "environment": settings.environment,
            "oracle_configured": settings.oracle.has_credential,
        },
    )
    return selector


def create_game_session(
    game_type: GameType,
    level: int = MIN_LEVEL,
    matches_played: int = 0,
    selector: MoveSelector | None = None,
) -> GameSession:
    """Create a game session at the starting position.

    Args:
        game_type: Game to play.
        level: Difficulty level (1-5).
        matches_played: Completed chess games, for the persona tier.
        selector: Shared selector. Created when omitted.

    Returns:
        New GameSession.
    """
    return GameSession(
        selector or create_move_selector(),
        game_type,
        level=level,
        matches_played=matches_played,
    )
