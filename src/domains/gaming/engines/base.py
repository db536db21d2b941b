# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Abstract base classes for board adapters and evaluators.

This module defines the two capabilities the search engine is parameterized by:
- BoardAdapter: legal-move enumeration, move application, terminal test,
  move parsing and display notation for one game
- Evaluator: scoring of terminal and non-terminal positions from the
  maximizing side's perspective

Adapters are stateless. All state lives in immutable Position values, so one
adapter instance can be shared by every game session.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from src.domains.gaming.models import (
    GameOutcome,
    GameStatus,
    GameType,
    Move,
    Position,
)

logger = logging.getLogger(__name__)


class EngineError(Exception):
    """Base exception for game engine errors.

    Attributes:
        message: Error description.
        game_type: Type of game that raised the error.
        details: Additional error details.
    """

    def __init__(
        self,
        message: str,
        game_type: GameType | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.game_type = game_type
        self.details = details or {}
        super().__init__(self.message)


class InvalidPositionError(EngineError):
    """Raised when a position is malformed or belongs to another game."""

    pass


class IllegalMoveError(EngineError):
    """Raised when a move is not in the position's legal-move list."""

    pass


class InvariantViolation(EngineError):
    """Raised when search or arbitration is invoked on a terminal position."""

    pass


class BoardAdapter(ABC):
    """Abstract base class for per-game rules.

    Subclasses enumerate legal moves in a fixed order. The search engine
    relies on that order for tie-breaking, so it must be deterministic.

    Attributes:
        uses_notation: True when moves are written in a notation that can be
            picked out of free text (chess SAN/UCI).

    Example:
        class TicTacToeAdapter(BoardAdapter):
            @property
            def game_type(self) -> GameType:
                return GameType.TIC_TAC_TOE

            # ... implement other abstract methods
    """

    uses_notation: bool = False

    @property
    @abstractmethod
    def game_type(self) -> GameType:
        """Get the game type this adapter handles."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the human-readable adapter name."""
        pass

    @abstractmethod
    def initial_position(self) -> Position:
        """Get the starting position for a new game."""
        pass

    @abstractmethod
    def legal_moves(self, position: Position) -> list[Move]:
        """Get all legal moves in enumeration order.

        Args:
            position: Current game position.

        Returns:
            Ordered, duplicate-free list of moves. Empty when the game is over.

        Raises:
            InvalidPositionError: If the position is malformed.
        """
        pass

    @abstractmethod
    def apply(self, position: Position, move: Move) -> Position:
        """Apply a move and return the resulting position.

        The input position is never modified.

        Args:
            position: Current game position.
            move: Move to apply.

        Returns:
            New Position after the move.

        Raises:
            IllegalMoveError: If the move is not legal in the position.
        """
        pass

    @abstractmethod
    def status(self, position: Position) -> GameStatus:
        """Get the terminal status of a position."""
        pass

    @abstractmethod
    def opponent(self, side: str) -> str:
        """Get the side playing against the given side."""
        pass

    @abstractmethod
    def parse_move(self, position: Position, text: str) -> Move:
        """Parse move text into a legal move.

        Args:
            position: Position the move is played in.
            text: Move text (cell/column index, or SAN/UCI for chess).

        Returns:
            A move that is a member of legal_moves(position).

        Raises:
            IllegalMoveError: If the text does not denote a legal move.
        """
        pass

    @abstractmethod
    def move_to_text(self, position: Position, move: Move) -> str:
        """Render a move in the game's display notation."""
        pass

    def side_to_move(self, position: Position) -> str:
        """Get the side whose turn it is."""
        return position.side_to_move

    def moves_unchecked(self, position: Position) -> list[Move]:
        """Get the moves of a position already known to be non-terminal.

        Used by the search, which has just computed the status. Adapters
        whose legal_moves repeats the terminal test override this to skip it.
        """
        return self.legal_moves(position)

    def apply_unchecked(self, position: Position, move: Move) -> Position:
        """Apply a move taken from moves_unchecked(position) without validating it."""
        return self.apply(position, move)

    def _check_game_type(self, position: Position) -> None:
        if position.game_type != self.game_type:
            raise InvalidPositionError(
                message=f"Position for {position.game_type.value} passed to {self.name}",
                game_type=self.game_type,
            )


class Evaluator(ABC):
    """Abstract base class for position evaluation.

    Terminal positions are scored with a depth-sensitive formula so the
    search prefers faster wins and slower losses.

    Attributes:
        LARGE: Magnitude of a won position at the search root.
    """

    LARGE: float = 10

    def terminal_score(self, status: GameStatus, max_side: str, ply: int) -> float:
        """Score a terminal position.

        Args:
            status: Terminal status of the position.
            max_side: Side the search is maximizing for.
            ply: Distance from the search root.

        Returns:
            LARGE - ply for a win, -LARGE + ply for a loss, 0 for a draw.
        """
        if status.outcome != GameOutcome.WIN:
            return 0
        if status.winner == max_side:
            return self.LARGE - ply
        return -self.LARGE + ply

    @abstractmethod
    def evaluate(self, position: Position, max_side: str) -> float:
        """Score a non-terminal position from the maximizing side's view."""
        pass
