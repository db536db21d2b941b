# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Game engines module.

This module provides the rules and search used by the computer opponent:
- BoardAdapter / Evaluator: Abstract base classes for per-game rules and scoring
- TicTacToeAdapter, Connect4Adapter, ChessAdapter: Per-game rules
- TicTacToeEvaluator, Connect4Evaluator: Per-game scoring
- AlphaBetaSearch: Generic minimax with alpha-beta pruning
- EngineRegistry: Registry of adapters and evaluators

Usage:
    from src.domains.gaming.engines import get_engine_registry, GameType

    registry = get_engine_registry()
    search = registry.search_engine(GameType.CONNECT4)
    result = search.search(position, depth=4)
"""

from src.domains.gaming.engines.base import (
    BoardAdapter,
    EngineError,
    Evaluator,
    IllegalMoveError,
    InvalidPositionError,
    InvariantViolation,
)
from src.domains.gaming.engines.chess import ChessAdapter
from src.domains.gaming.engines.connect4 import Connect4Adapter, Connect4Evaluator
from src.domains.gaming.engines.registry import (
    EngineNotRegisteredError,
    EngineRegistry,
    get_engine_registry,
    reset_engine_registry,
)
from src.domains.gaming.engines.search import AlphaBetaSearch
from src.domains.gaming.engines.tictactoe import TicTacToeAdapter, TicTacToeEvaluator
from src.domains.gaming.models import GameType

__all__ = [
    # Base
    "BoardAdapter",
    "Evaluator",
    "EngineError",
    "IllegalMoveError",
    "InvalidPositionError",
    "InvariantViolation",
    # Registry
    "EngineRegistry",
    "EngineNotRegisteredError",
    "get_engine_registry",
    "reset_engine_registry",
    # Search
    "AlphaBetaSearch",
    # Implementations
    "TicTacToeAdapter",
    "TicTacToeEvaluator",
    "Connect4Adapter",
    "Connect4Evaluator",
    "ChessAdapter",
    "GameType",
]
