# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Generic minimax search with alpha-beta pruning.

One search implementation serves every game. It is parameterized by a
BoardAdapter (legal moves, move application, terminal test) and an Evaluator
(terminal and heuristic scores).

The search is deterministic: moves are visited in the adapter's enumeration
order and the first move reaching the best score is kept. Depth and any
randomness come from the caller.

Example:
    >>> from src.domains.gaming.engines.tictactoe import TicTacToeAdapter, TicTacToeEvaluator
    >>> adapter = TicTacToeAdapter()
    >>> engine = AlphaBetaSearch(adapter, TicTacToeEvaluator())
    >>> result = engine.search(adapter.initial_position(), depth=9)
    >>> result.score
    0.0
"""

import logging
from dataclasses import dataclass, replace

from src.domains.gaming.engines.base import (
    BoardAdapter,
    Evaluator,
    InvariantViolation,
)
from src.domains.gaming.models import Move, Position, SearchResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 9


@dataclass
class _SearchStats:
    """Per-call counters, kept off the engine so searches stay reentrant."""

    nodes: int = 0


class AlphaBetaSearch:
    """Depth-limited minimax with alpha-beta pruning.

    Attributes:
        adapter: Rules of the game being searched.
        evaluator: Scoring for terminal and non-terminal positions.
        max_depth: Upper bound applied to every requested depth.
    """

    def __init__(
        self,
        adapter: BoardAdapter,
        evaluator: Evaluator,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        """Initialize the search engine.

        Args:
            adapter: Board adapter for the game.
            evaluator: Evaluator for the same game.
            max_depth: Upper bound applied to every requested depth.

        Raises:
            ValueError: If max_depth is less than 1.
        """
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")

        self.adapter = adapter
        self.evaluator = evaluator
        self.max_depth = max_depth

    def search(
        self,
        position: Position,
        depth: int,
        maximizing: bool = True,
    ) -> SearchResult:
        """Find the best move for the side to move.

        Args:
            position: Root position. Never modified.
            depth: Search depth in plies. Clamped to max_depth.
            maximizing: If True, scores are from the side to move's
                perspective; otherwise from its opponent's.

        Returns:
            SearchResult with the chosen move, its score and node count.

        Raises:
            ValueError: If depth is less than 1.
            InvariantViolation: If the root position is terminal.
        """
        if depth < 1:
            raise ValueError(f"Search depth must be at least 1, got {depth}")

        if depth > self.max_depth:
            logger.debug("Clamping search depth %d to %d", depth, self.max_depth)
            depth = self.max_depth

        status = self.adapter.status(position)
        if status.is_terminal:
            raise InvariantViolation(
                message="Search invoked on a terminal position",
                game_type=self.adapter.game_type,
                details={"outcome": status.outcome.value, "winner": status.winner},
            )

        side = self.adapter.side_to_move(position)
        max_side = side if maximizing else self.adapter.opponent(side)
        stats = _SearchStats()

        best_move: Move | None = None
        alpha = float("-inf")
        beta = float("inf")

        if maximizing:
            best_score = float("-inf")
        else:
            best_score = float("inf")

        for move in self.adapter.moves_unchecked(position):
            child = self.adapter.apply_unchecked(position, move)
            score = self._alphabeta(child, depth - 1, 1, alpha, beta, not maximizing, max_side, stats)

            if maximizing:
                if score > best_score:
                    best_score = score
                    best_move = move
                alpha = max(alpha, score)
            else:
                if score < best_score:
                    best_score = score
                    best_move = move
                beta = min(beta, score)

            if alpha >= beta:
                break

        logger.debug(
            "Search %s depth=%d move=%s score=%s nodes=%d",
            self.adapter.game_type.value,
            depth,
            best_move,
            best_score,
            stats.nodes,
        )

        return SearchResult(
            move=best_move,
            score=best_score,
            depth=depth,
            nodes=stats.nodes,
        )

    def find_immediate_win(self, position: Position, side: str) -> Move | None:
        """Find the first legal move that wins on the spot for a side.

        When side is not the side to move, the move is the cell or column the
        opponent would win with, i.e. the move that blocks it.

        Args:
            position: Current position.
            side: Side to test for.

        Returns:
            The first winning move in enumeration order, or None.
        """
        as_side = position
        if self.adapter.side_to_move(position) != side:
            as_side = replace(position, side_to_move=side)

        for move in self.adapter.legal_moves(as_side):
            status = self.adapter.status(self.adapter.apply_unchecked(as_side, move))
            if status.is_terminal and status.winner == side:
                return move

        return None

    def _alphabeta(
        self,
        position: Position,
        depth: int,
        ply: int,
        alpha: float,
        beta: float,
        maximizing: bool,
        max_side: str,
        stats: _SearchStats,
    ) -> float:
        """Minimax algorithm with alpha-beta pruning."""
        stats.nodes += 1

        status = self.adapter.status(position)
        if status.is_terminal:
            return self.evaluator.terminal_score(status, max_side, ply)

        if depth == 0:
            return self.evaluator.evaluate(position, max_side)

        if maximizing:
            best_score = float("-inf")
            for move in self.adapter.moves_unchecked(position):
                child = self.adapter.apply_unchecked(position, move)
                score = self._alphabeta(child, depth - 1, ply + 1, alpha, beta, False, max_side, stats)
                best_score = max(best_score, score)
                alpha = max(alpha, score)
                if alpha >= beta:
                    break
            return best_score

        best_score = float("inf")
        for move in self.adapter.moves_unchecked(position):
            child = self.adapter.apply_unchecked(position, move)
            score = self._alphabeta(child, depth - 1, ply + 1, alpha, beta, True, max_side, stats)
            best_score = min(best_score, score)
            beta = min(beta, score)
            if alpha >= beta:
                break
        return best_score
