# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Gaming domain for the computer opponent.

This domain provides:
- Board adapters and evaluators (tic-tac-toe, Connect 4, chess)
- Generic alpha-beta search
- Difficulty policy mapping levels to search and oracle parameters
- Remote move oracle client with endpoint failover
- Move arbiter guaranteeing a legal committed move
- Move selection service and game sessions
- Level progression rules

Usage:
    from src.app import create_move_selector
    from src.domains.gaming import GameType

    selector = create_move_selector()
    adapter = selector.registry.get(GameType.CONNECT4)
    turn = await selector.select_move(adapter.initial_position(), level=3)
"""

from src.domains.gaming.models import (
    ChessPersona,
    DifficultyParameters,
    FallbackStrategy,
    GameOutcome,
    GameStatus,
    GameType,
    Move,
    MoveSource,
    MoveStrategy,
    PlayerProgress,
    Position,
    SearchResult,
    TurnResult,
)

__all__ = [
    # Enums
    "GameType",
    "GameOutcome",
    "MoveStrategy",
    "FallbackStrategy",
    "MoveSource",
    # Models
    "GameStatus",
    "Position",
    "Move",
    "SearchResult",
    "ChessPersona",
    "DifficultyParameters",
    "TurnResult",
    "PlayerProgress",
]
