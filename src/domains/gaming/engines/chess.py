# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Chess board adapter using python-chess.

Chess legality, move application and termination predicates are delegated to
python-chess. The Position board is the FEN string; moves are UCI strings and
history holds SAN.

There is no local chess evaluator. Chess difficulty comes from the oracle
persona and from fallback randomness.
"""

import logging
from collections.abc import Sequence

import chess

from src.domains.gaming.engines.base import (
    BoardAdapter,
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

WHITE = "w"
BLACK = "b"

# Zero-for-O castling spellings commonly produced by language models
CASTLE_ZERO = {
    "0-0": "O-O",
    "0-0-0": "O-O-O",
    "0-0+": "O-O+",
    "0-0-0+": "O-O-O+",
}


class ChessAdapter(BoardAdapter):
    """Chess rules backed by python-chess.

    Threefold repetition is not detected: the position only carries the FEN,
    which does not record earlier positions. The fifty-move and seventy-five
    move rules are detected from the halfmove clock.

    Example:
        adapter = ChessAdapter()
        position = adapter.initial_position()
        move = adapter.parse_move(position, "e4")  # "e2e4"
        position = adapter.apply(position, move)
    """

    uses_notation = True

    @property
    def game_type(self) -> GameType:
        """Get the game type."""
        return GameType.CHESS

    @property
    def name(self) -> str:
        """Get the adapter name."""
        return "python-chess Board"

    def initial_position(self) -> Position:
        """Get the standard starting position."""
        return self.from_fen(chess.STARTING_FEN)

    def from_fen(self, fen: str, history: Sequence[str] = ()) -> Position:
        """Build a position from a FEN string.

        Args:
            fen: Position in Forsyth-Edwards Notation.
            history: SAN moves that led to this position, if known.

        Returns:
            Position for the FEN.

        Raises:
            InvalidPositionError: If the FEN cannot be parsed or is not a valid position.
        """
        try:
            board = chess.Board(fen)
        except ValueError as e:
            raise InvalidPositionError(
                message=f"Invalid FEN: {e}",
                game_type=GameType.CHESS,
                details={"fen": fen},
            ) from e

        if not board.is_valid():
            raise InvalidPositionError(
                message=f"Invalid position: {board.status()!r}",
                game_type=GameType.CHESS,
                details={"fen": fen},
            )

        return self._board_to_position(board, tuple(history))

    def legal_moves(self, position: Position) -> list[Move]:
        """Get legal moves as UCI strings, or [] if the game is over."""
        board = self._position_to_board(position)
        if self._status_of(board).is_terminal:
            return []
        return [move.uci() for move in board.legal_moves]

    def apply(self, position: Position, move: Move) -> Position:
        """Play a UCI move and append its SAN to the history."""
        board = self._position_to_board(position)
        if self._status_of(board).is_terminal:
            raise IllegalMoveError(
                message="Game is over",
                game_type=GameType.CHESS,
                details={"fen": position.board},
            )

        chess_move = self._legal_move(board, move)
        san = board.san(chess_move)
        board.push(chess_move)
        return self._board_to_position(board, (*position.history, san))

    def status(self, position: Position) -> GameStatus:
        """Get checkmate, stalemate and claimable draw status."""
        return self._status_of(self._position_to_board(position))

    def opponent(self, side: str) -> str:
        """Get the other color."""
        return BLACK if side == WHITE else WHITE

    def parse_move(self, position: Position, text: str) -> Move:
        """Parse UCI or SAN text into a legal UCI move.

        Args:
            position: Position the move is played in.
            text: Move such as "e2e4", "e7e8q", "Nf3", "O-O" or "0-0".

        Returns:
            The UCI string of the legal move.

        Raises:
            IllegalMoveError: If the text is neither a legal UCI nor a legal SAN move.
        """
        board = self._position_to_board(position)
        if self._status_of(board).is_terminal:
            raise IllegalMoveError(message="Game is over", game_type=GameType.CHESS)

        notation = CASTLE_ZERO.get(text.strip(), text.strip())

        # Try UCI notation first (e2e4)
        try:
            candidate = chess.Move.from_uci(notation.lower())
        except ValueError:
            candidate = None
        if candidate is not None and candidate in board.legal_moves:
            return candidate.uci()

        # Try SAN notation (e4, Nf3, O-O)
        try:
            candidate = board.parse_san(notation)
        except ValueError as e:
            raise IllegalMoveError(
                message=f"Not a legal move: {text!r}",
                game_type=GameType.CHESS,
                details={"fen": position.board},
            ) from e

        # parse_san accepts null-move spellings such as "--"
        if candidate not in board.legal_moves:
            raise IllegalMoveError(
                message=f"Not a legal move: {text!r}",
                game_type=GameType.CHESS,
                details={"fen": position.board},
            )
        return candidate.uci()

    def move_to_text(self, position: Position, move: Move) -> str:
        """Render a UCI move in SAN."""
        board = self._position_to_board(position)
        return board.san(self._legal_move(board, move))

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    def _board_to_position(self, board: chess.Board, history: tuple[str, ...]) -> Position:
        """Convert chess.Board to Position."""
        return Position(
            game_type=GameType.CHESS,
            board=board.fen(),
            side_to_move=WHITE if board.turn == chess.WHITE else BLACK,
            move_count=len(history),
            history=history,
        )

    def _position_to_board(self, position: Position) -> chess.Board:
        """Convert Position to chess.Board."""
        self._check_game_type(position)
        try:
            return chess.Board(position.board)
        except (TypeError, ValueError) as e:
            raise InvalidPositionError(
                message=f"Invalid FEN: {e}",
                game_type=GameType.CHESS,
            ) from e

    def _legal_move(self, board: chess.Board, move: Move) -> chess.Move:
        """Resolve a UCI string to a legal chess.Move."""
        try:
            chess_move = chess.Move.from_uci(str(move))
        except ValueError as e:
            raise IllegalMoveError(
                message=f"Malformed UCI move: {move!r}",
                game_type=GameType.CHESS,
            ) from e

        if chess_move not in board.legal_moves:
            raise IllegalMoveError(
                message=f"Illegal move: {move!r}",
                game_type=GameType.CHESS,
                details={"fen": board.fen()},
            )
        return chess_move

    def _status_of(self, board: chess.Board) -> GameStatus:
        """Check if game is over and determine winner."""
        if board.is_checkmate():
            winner = BLACK if board.turn == chess.WHITE else WHITE
            return GameStatus(GameOutcome.WIN, winner=winner, reason="checkmate")

        if board.is_stalemate():
            return GameStatus(GameOutcome.DRAW, reason="stalemate")

        if board.is_insufficient_material():
            return GameStatus(GameOutcome.DRAW, reason="insufficient_material")

        if board.is_seventyfive_moves() or board.is_fifty_moves():
            return GameStatus(GameOutcome.DRAW, reason="fifty_moves")

        return ONGOING
