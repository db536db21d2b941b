# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Level progression rules.

A win raises the player's level for that game (up to the top level); a loss
or draw keeps it and asks for a retry. Every completed chess game also
advances the chess match counter, which drives the oracle persona tier.

The functions here are pure: they return a new PlayerProgress and leave
persistence to the caller.
"""

import logging
from enum import Enum

from pydantic import BaseModel

from src.domains.gaming.models import MAX_LEVEL, GameType, PlayerProgress
from src.domains.gaming.policy import DifficultyPolicy

logger = logging.getLogger(__name__)


class MatchResult(str, Enum):
    """Finished game result from the player's perspective."""

    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


class ProgressUpdate(BaseModel):
    """Outcome of recording a finished game.

    Attributes:
        progress: Updated counters to persist.
        previous_level: Level before the game.
        level: Level after the game.
        level_up: True if the level increased.
        retry: True if the player should replay the same level.
        max_level_reached: True if the player won at the top level.
    """

    progress: PlayerProgress
    previous_level: int
    level: int
    level_up: bool = False
    retry: bool = False
    max_level_reached: bool = False


def record_result(
    progress: PlayerProgress,
    game: GameType,
    result: MatchResult,
) -> ProgressUpdate:
    """Apply a finished game to the player's progress.

    Args:
        progress: Current counters. Not modified.
        game: Game that was played.
        result: Result from the player's perspective.

    Returns:
        ProgressUpdate holding the new counters and the level decision.
    """
    previous = progress.level_for(game)
    levels = dict(progress.levels)
    matches = progress.chess_matches_played

    if game == GameType.CHESS:
        matches += 1

    level_up = False
    max_level_reached = False
    if result == MatchResult.WIN:
        if previous >= MAX_LEVEL:
            max_level_reached = True
        else:
            levels[game] = previous + 1
            level_up = True
            max_level_reached = levels[game] == MAX_LEVEL

    updated = PlayerProgress(levels=levels, chess_matches_played=matches)
    logger.info(
        "Recorded %s %s: level %d -> %d",
        game.value,
        result.value,
        previous,
        updated.level_for(game),
    )

    return ProgressUpdate(
        progress=updated,
        previous_level=previous,
        level=updated.level_for(game),
        level_up=level_up,
        retry=result != MatchResult.WIN,
        max_level_reached=max_level_reached,
    )


def tier_label(matches_played: int, policy: DifficultyPolicy | None = None) -> str:
    """Name the chess phase for a match count.

    Args:
        matches_played: Completed chess games.
        policy: Difficulty policy whose personas and tier cap apply.
            Defaults to a policy built from the application settings.

    Returns:
        The label of the persona the oracle plays at that count.
    """
    return (policy or DifficultyPolicy()).tier_label(matches_played)
