# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Connect 4 board adapter and evaluator.

The board is a tuple of 42 cells in row-major order with row 0 at the top and
row 5 at the bottom. Columns are 0-6 (left to right). Red ("R") moves first.

Legal moves are enumerated center-first so alpha-beta search examines the
strongest columns early and prunes more.
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

# Board dimensions
ROWS = 6
COLS = 7
CONNECT = 4
CENTER_COL = COLS // 2

# Player symbols
PLAYER_RED = "R"
PLAYER_YELLOW = "Y"
EMPTY_MARKS = (None, "", ".", " ", "_")

# Enumeration order for legal moves
COLUMN_ORDER = (3, 2, 4, 1, 5, 0, 6)

# Window weights for the maximizing side and its opponent
OWN_FOUR = 100
OWN_THREE = 5
OWN_TWO = 2
OPP_THREE = -80
OPP_TWO = -10
CENTER_WEIGHT = 3


def _build_windows() -> tuple[tuple[int, ...], ...]:
    """Precompute every 4-cell line as a tuple of cell indices."""
    windows = []
    # Horizontal, vertical, diagonal down-right, diagonal up-right
    directions = [(0, 1), (1, 0), (1, 1), (-1, 1)]

    for row in range(ROWS):
        for col in range(COLS):
            for dr, dc in directions:
                end_row = row + dr * (CONNECT - 1)
                end_col = col + dc * (CONNECT - 1)
                if 0 <= end_row < ROWS and 0 <= end_col < COLS:
                    windows.append(
                        tuple((row + dr * k) * COLS + (col + dc * k) for k in range(CONNECT))
                    )

    return tuple(windows)


WINDOWS = _build_windows()
CENTER_CELLS = tuple(row * COLS + CENTER_COL for row in range(ROWS))


class Connect4Adapter(BoardAdapter):
    """Rules for 6x7 Connect 4 with gravity.

    Example:
        adapter = Connect4Adapter()
        position = adapter.initial_position()
        position = adapter.apply(position, 3)  # red drops into the center
    """

    @property
    def game_type(self) -> GameType:
        """Get the game type."""
        return GameType.CONNECT4

    @property
    def name(self) -> str:
        """Get the adapter name."""
        return "Connect 4 Board"

    def initial_position(self) -> Position:
        """Get the empty starting board with red to move."""
        return Position(
            game_type=GameType.CONNECT4,
            board=(None,) * (ROWS * COLS),
            side_to_move=PLAYER_RED,
        )

    def from_rows(
        self,
        rows: Sequence[Sequence[str | None]],
        side_to_move: str | None = None,
    ) -> Position:
        """Build a position from rows, top row first.

        Args:
            rows: 6 rows of 7 cells. "R"/"Y" for pieces, None/"."/" "/"_" for empty.
                Strings such as "...R..." are accepted as rows.
            side_to_move: Side to move. Inferred from piece counts when omitted.

        Returns:
            Position for the given board.

        Raises:
            InvalidPositionError: If the board has the wrong shape, unknown marks,
                or pieces floating above empty cells.
        """
        if len(rows) != ROWS or any(len(row) != COLS for row in rows):
            raise InvalidPositionError(
                message=f"Expected {ROWS} rows of {COLS} cells",
                game_type=GameType.CONNECT4,
            )

        cells: list[str | None] = []
        for row in rows:
            for cell in row:
                if cell in EMPTY_MARKS:
                    cells.append(None)
                elif cell in (PLAYER_RED, PLAYER_YELLOW):
                    cells.append(cell)
                else:
                    raise InvalidPositionError(
                        message=f"Unknown mark: {cell!r}",
                        game_type=GameType.CONNECT4,
                    )

        for col in range(COLS):
            for row in range(ROWS - 1):
                if cells[row * COLS + col] is not None and cells[(row + 1) * COLS + col] is None:
                    raise InvalidPositionError(
                        message=f"Floating piece in column {col}",
                        game_type=GameType.CONNECT4,
                    )

        board = tuple(cells)
        if side_to_move is None:
            red = board.count(PLAYER_RED)
            side_to_move = PLAYER_YELLOW if red > board.count(PLAYER_YELLOW) else PLAYER_RED

        return Position(
            game_type=GameType.CONNECT4,
            board=board,
            side_to_move=side_to_move,
            move_count=sum(1 for cell in board if cell is not None),
        )

    def legal_moves(self, position: Position) -> list[Move]:
        """Get non-full columns in center-first order, or [] if the game is over."""
        self._check_game_type(position)
        if self.status(position).is_terminal:
            return []
        return self.moves_unchecked(position)

    def apply(self, position: Position, move: Move) -> Position:
        """Drop the side-to-move's piece into a column."""
        if move not in self.legal_moves(position):
            raise IllegalMoveError(
                message=f"Illegal move: {move!r}",
                game_type=GameType.CONNECT4,
                details={"legal_moves": self.legal_moves(position)},
            )

        return self.apply_unchecked(position, move)

    def moves_unchecked(self, position: Position) -> list[Move]:
        """Get non-full columns in center-first order without the terminal test."""
        return [col for col in COLUMN_ORDER if position.board[col] is None]

    def apply_unchecked(self, position: Position, move: Move) -> Position:
        """Drop a piece into a column known to have room."""
        row = self._landing_row(position.board, move)
        board = list(position.board)
        board[row * COLS + move] = position.side_to_move

        return Position(
            game_type=GameType.CONNECT4,
            board=tuple(board),
            side_to_move=self.opponent(position.side_to_move),
            move_count=position.move_count + 1,
            history=(*position.history, str(move)),
        )

    def status(self, position: Position) -> GameStatus:
        """Check for four in a row, then for a full board.

        When the position carries history, only lines through the last
        dropped piece are checked; any earlier win would have ended the game.
        """
        board = position.board
        winner = None

        if position.history:
            col = int(position.history[-1])
            row = self._top_row(board, col)
            if row is not None and self._check_win(board, row, col, board[row * COLS + col]):
                winner = board[row * COLS + col]
        else:
            for window in WINDOWS:
                first = board[window[0]]
                if first is not None and all(board[i] == first for i in window[1:]):
                    winner = first
                    break

        if winner is not None:
            return GameStatus(GameOutcome.WIN, winner=winner, reason="four_in_a_row")

        if all(board[col] is not None for col in range(COLS)):
            return GameStatus(GameOutcome.DRAW, reason="board_full")

        return ONGOING

    def opponent(self, side: str) -> str:
        """Get the other color."""
        return PLAYER_YELLOW if side == PLAYER_RED else PLAYER_RED

    def parse_move(self, position: Position, text: str) -> Move:
        """Parse a column index ("0".."6")."""
        try:
            move = int(text.strip())
        except (AttributeError, ValueError) as e:
            raise IllegalMoveError(
                message=f"Not a column index: {text!r}",
                game_type=GameType.CONNECT4,
            ) from e

        if move not in self.legal_moves(position):
            raise IllegalMoveError(
                message=f"Column {move} is not playable",
                game_type=GameType.CONNECT4,
            )
        return move

    def move_to_text(self, position: Position, move: Move) -> str:
        """Render the column index."""
        return str(move)

    # =========================================================================
    # Board helpers
    # =========================================================================

    def _landing_row(self, board: tuple, col: int) -> int:
        """Get the lowest empty row in a non-full column."""
        for row in range(ROWS - 1, -1, -1):
            if board[row * COLS + col] is None:
                return row
        raise IllegalMoveError(message=f"Column {col} is full", game_type=GameType.CONNECT4)

    def _top_row(self, board: tuple, col: int) -> int | None:
        """Get the row of the topmost piece in a column."""
        for row in range(ROWS):
            if board[row * COLS + col] is not None:
                return row
        return None

    def _check_win(self, board: tuple, row: int, col: int, player: str) -> bool:
        """Check if the player has four in a row through (row, col)."""
        directions = [(0, 1), (1, 0), (1, 1), (1, -1)]

        for dr, dc in directions:
            count = 1

            r, c = row + dr, col + dc
            while 0 <= r < ROWS and 0 <= c < COLS and board[r * COLS + c] == player:
                count += 1
                r += dr
                c += dc

            r, c = row - dr, col - dc
            while 0 <= r < ROWS and 0 <= c < COLS and board[r * COLS + c] == player:
                count += 1
                r -= dr
                c -= dc

            if count >= CONNECT:
                return True

        return False


class Connect4Evaluator(Evaluator):
    """Window-based heuristic for Connect 4.

    Every 4-cell window contributes according to how many of the maximizing
    side's pieces, the opponent's pieces and empty cells it holds. Opponent
    threats weigh more than own chances.
    """

    LARGE = 1_000_000

    def evaluate(self, position: Position, max_side: str) -> float:
        """Score a non-terminal position from max_side's perspective."""
        board = position.board
        opp_side = PLAYER_YELLOW if max_side == PLAYER_RED else PLAYER_RED
        score = 0

        for window in WINDOWS:
            cells = [board[i] for i in window]
            score += self._score_window(
                cells.count(max_side),
                cells.count(opp_side),
                cells.count(None),
            )

        score += CENTER_WEIGHT * sum(1 for i in CENTER_CELLS if board[i] == max_side)
        return score

    def _score_window(self, own: int, opp: int, empty: int) -> int:
        if own == 4:
            return OWN_FOUR
        if own == 3 and empty == 1:
            return OWN_THREE
        if own == 2 and empty == 2:
            return OWN_TWO
        if opp == 3 and empty == 1:
            return OPP_THREE
        if opp == 2 and empty == 2:
            return OPP_TWO
        return 0
