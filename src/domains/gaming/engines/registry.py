# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Board adapter registry.

This module provides:
- EngineRegistry: Central registry of board adapters and their evaluators
- get_engine_registry: Factory function for the default registry

Usage:
    from src.domains.gaming.engines import get_engine_registry

    registry = get_engine_registry()
    adapter = registry.get(GameType.CONNECT4)
    search = registry.search_engine(GameType.CONNECT4, max_depth=9)
"""

import logging
from typing import Iterator

from src.domains.gaming.engines.base import BoardAdapter, EngineError, Evaluator
from src.domains.gaming.engines.search import DEFAULT_MAX_DEPTH, AlphaBetaSearch
from src.domains.gaming.models import GameType

logger = logging.getLogger(__name__)


class EngineNotRegisteredError(EngineError):
    """Raised when attempting to get an unregistered adapter.

    Attributes:
        available: List of available game types.
    """

    def __init__(self, game_type: GameType, available: list[GameType]) -> None:
        self.available = available
        available_str = ", ".join(t.value for t in available)
        super().__init__(
            message=(
                f"Adapter for '{game_type.value}' not registered. "
                f"Available: {available_str or 'none'}"
            ),
            game_type=game_type,
        )


class EngineRegistry:
    """Registry mapping game types to board adapters and evaluators.

    Games without a local evaluator (chess) are registered with
    evaluator=None and cannot be searched.

    Example:
        registry = EngineRegistry()
        registry.register(Connect4Adapter(), Connect4Evaluator())
        registry.register(ChessAdapter())

        adapter = registry.get(GameType.CHESS)
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._adapters: dict[GameType, BoardAdapter] = {}
        self._evaluators: dict[GameType, Evaluator] = {}

    def register(self, adapter: BoardAdapter, evaluator: Evaluator | None = None) -> None:
        """Register an adapter and its optional evaluator.

        Args:
            adapter: Adapter instance to register.
            evaluator: Evaluator for the same game, if the game is searchable.

        Raises:
            ValueError: If an adapter for this game type already exists.
        """
        game_type = adapter.game_type

        if game_type in self._adapters:
            raise ValueError(f"Adapter for '{game_type.value}' is already registered.")

        self._adapters[game_type] = adapter
        if evaluator is not None:
            self._evaluators[game_type] = evaluator

        logger.info(
            "Registered board adapter: %s (%s, searchable=%s)",
            adapter.name,
            game_type.value,
            evaluator is not None,
        )

    def get(self, game_type: GameType) -> BoardAdapter:
        """Get an adapter by game type.

        Raises:
            EngineNotRegisteredError: If no adapter is registered.
        """
        if game_type not in self._adapters:
            raise EngineNotRegisteredError(
                game_type=game_type,
                available=list(self._adapters.keys()),
            )

        return self._adapters[game_type]

    def get_evaluator(self, game_type: GameType) -> Evaluator | None:
        """Get the evaluator for a game type, or None if it has no local evaluation."""
        return self._evaluators.get(game_type)

    def is_searchable(self, game_type: GameType) -> bool:
        """Check if a game type has a local evaluator."""
        return game_type in self._evaluators

    def search_engine(
        self,
        game_type: GameType,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> AlphaBetaSearch:
        """Build a search engine for a registered game.

        Args:
            game_type: Type of game.
            max_depth: Depth cap for the engine.

        Returns:
            AlphaBetaSearch over the game's adapter and evaluator.

        Raises:
            EngineNotRegisteredError: If no adapter is registered.
            EngineError: If the game has no local evaluator.
        """
        adapter = self.get(game_type)
        evaluator = self._evaluators.get(game_type)
        if evaluator is None:
            raise EngineError(
                message=f"No local evaluation for '{game_type.value}'",
                game_type=game_type,
            )

        return AlphaBetaSearch(adapter, evaluator, max_depth=max_depth)

    def list_types(self) -> list[GameType]:
        """List all registered game types."""
        return list(self._adapters.keys())

    def clear(self) -> None:
        """Remove all adapters from the registry."""
        self._adapters.clear()
        self._evaluators.clear()
        logger.info("Engine registry cleared")

    def __len__(self) -> int:
        """Get number of registered adapters."""
        return len(self._adapters)

    def __contains__(self, game_type: GameType) -> bool:
        """Check if a game type is registered."""
        return game_type in self._adapters

    def __iter__(self) -> Iterator[GameType]:
        """Iterate over registered game types."""
        return iter(self._adapters)

    def __repr__(self) -> str:
        """Return string representation."""
        types = ", ".join(t.value for t in self._adapters.keys())
        return f"EngineRegistry([{types}])"


# Global default registry instance (lazy-loaded)
_default_registry: EngineRegistry | None = None


def get_engine_registry() -> EngineRegistry:
    """Get or create the global default registry with all three games.

    Returns:
        The default engine registry.
    """
    global _default_registry

    if _default_registry is None:
        _default_registry = _create_default_registry()

    return _default_registry


def _create_default_registry() -> EngineRegistry:
    """Create the default registry with every bundled adapter."""
    from src.domains.gaming.engines.chess import ChessAdapter
    from src.domains.gaming.engines.connect4 import Connect4Adapter, Connect4Evaluator
    from src.domains.gaming.engines.tictactoe import TicTacToeAdapter, TicTacToeEvaluator

    registry = EngineRegistry()
    registry.register(TicTacToeAdapter(), TicTacToeEvaluator())
    registry.register(Connect4Adapter(), Connect4Evaluator())
    registry.register(ChessAdapter())

    logger.info("Created default EngineRegistry with %d adapters", len(registry))
    return registry


def reset_engine_registry() -> None:
    """Reset the global default registry.

    Useful for testing or reconfiguration.
    """
    global _default_registry
    _default_registry = None
    logger.info("Engine registry reset")
