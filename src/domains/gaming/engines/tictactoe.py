# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tic-tac-toe board adapter and evaluator.

The board is a tuple of 9 cells in row-major order:

    0 | 1 | 2
    3 | 4 | 5
    6 | 7 | 8

X always moves first. Moves are cell indices.
"""

import logging
from collections.abc import Sequence

from src.domains.gaming.engines.base import (
    BoardAdapter,
    Evaluator,
    IllegalMoveError,
    InvalidPositionError,
)
from src.domains.gaming.models import (
    ONGOING,
    GameOutcome,
    GameStatus,
    GameType,
    Move,
    Position,
)

logger = logging.getLogger(__name__)

CELLS = 9
PLAYER_X = "X"
PLAYER_O = "O"

WIN_LINES = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


class TicTacToeAdapter(BoardAdapter):
    """Rules for 3x3 three-in-a-row.

    Example:
        adapter = TicTacToeAdapter()
        position = adapter.initial_position()
        position = adapter.apply(position, 4)
    """

    @property
    def game_type(self) -> GameType:
        """Get the game type."""
        return GameType.TIC_TAC_TOE

    @property
    def name(self) -> str:
        """Get the adapter name."""
        return "Tic-Tac-Toe Board"

    def initial_position(self) -> Position:
        """Get the empty starting board with X to move."""
        return Position(
            game_type=GameType.TIC_TAC_TOE,
            board=(None,) * CELLS,
            side_to_move=PLAYER_X,
        )

    def from_cells(
        self,
        cells: Sequence[str | None],
        side_to_move: str | None = None,
    ) -> Position:
        """Build a position from a list of cells.

        Args:
            cells: 9 cells, each "X", "O", or None/"" for empty.
            side_to_move: Side to move. Inferred from piece counts when omitted.

        Returns:
            Position for the given board.

        Raises:
            InvalidPositionError: If the board has the wrong size or unknown marks.
        """
        if len(cells) != CELLS:
            raise InvalidPositionError(
                message=f"Expected {CELLS} cells, got {len(cells)}",
                game_type=GameType.TIC_TAC_TOE,
            )

        board = tuple(cell or None for cell in cells)
        unknown = {cell for cell in board if cell not in (None, PLAYER_X, PLAYER_O)}
        if unknown:
            raise InvalidPositionError(
                message=f"Unknown marks: {sorted(unknown)}",
                game_type=GameType.TIC_TAC_TOE,
            )

        filled = sum(1 for cell in board if cell is not None)
        if side_to_move is None:
            x_count = board.count(PLAYER_X)
            side_to_move = PLAYER_O if x_count > board.count(PLAYER_O) else PLAYER_X

        return Position(
            game_type=GameType.TIC_TAC_TOE,
            board=board,
            side_to_move=side_to_move,
            move_count=filled,
        )

    def legal_moves(self, position: Position) -> list[Move]:
        """Get empty cells in index order, or [] if the game is over."""
        self._check_game_type(position)
        if self.status(position).is_terminal:
            return []
        return self.moves_unchecked(position)

    def apply(self, position: Position, move: Move) -> Position:
        """Place the side-to-move's mark on a cell."""
        if move not in self.legal_moves(position):
            raise IllegalMoveError(
                message=f"Illegal move: {move!r}",
                game_type=GameType.TIC_TAC_TOE,
                details={"legal_moves": self.legal_moves(position)},
            )

        return self.apply_unchecked(position, move)

    def moves_unchecked(self, position: Position) -> list[Move]:
        """Get empty cells in index order without the terminal test."""
        return [i for i, cell in enumerate(position.board) if cell is None]

    def apply_unchecked(self, position: Position, move: Move) -> Position:
        """Place the mark on a cell known to be empty."""
        board = list(position.board)
        board[move] = position.side_to_move

        return Position(
            game_type=GameType.TIC_TAC_TOE,
            board=tuple(board),
            side_to_move=self.opponent(position.side_to_move),
            move_count=position.move_count + 1,
            history=(*position.history, str(move)),
        )

    def status(self, position: Position) -> GameStatus:
        """Check the 8 lines for a winner, then for a full board."""
        board = position.board
        for a, b, c in WIN_LINES:
            if board[a] is not None and board[a] == board[b] == board[c]:
                return GameStatus(GameOutcome.WIN, winner=board[a], reason="three_in_a_row")

        if all(cell is not None for cell in board):
            return GameStatus(GameOutcome.DRAW, reason="board_full")

        return ONGOING

    def opponent(self, side: str) -> str:
        """Get the other mark."""
        return PLAYER_O if side == PLAYER_X else PLAYER_X

    def parse_move(self, position: Position, text: str) -> Move:
        """Parse a cell index ("0".."8")."""
        try:
            move = int(text.strip())
        except (AttributeError, ValueError) as e:
            raise IllegalMoveError(
                message=f"Not a cell index: {text!r}",
                game_type=GameType.TIC_TAC_TOE,
            ) from e

        if move not in self.legal_moves(position):
            raise IllegalMoveError(
                message=f"Cell {move} is not playable",
                game_type=GameType.TIC_TAC_TOE,
            )
        return move

    def move_to_text(self, position: Position, move: Move) -> str:
        """Render the cell index."""
        return str(move)


class TicTacToeEvaluator(Evaluator):
    """Terminal-only evaluation.

    Non-terminal positions score 0; the full game tree is small enough that
    the top levels search to the end.
    """

    LARGE = 10

    def evaluate(self, position: Position, max_side: str) -> float:
        """Score a non-terminal position (always 0)."""
        return 0
