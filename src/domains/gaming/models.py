# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data models for the gaming domain.

This module defines the values exchanged between board adapters, the search
engine, the difficulty policy, the move arbiter and game sessions:
- Game types, terminal outcomes and move sources
- Position (immutable board snapshot) and Move
- Search results, difficulty parameters and turn results
- Player progress counters

Position and GameStatus are frozen dataclasses because the search engine
creates one per visited node; everything crossing a service boundary is a
Pydantic model.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

# Cell index (tic-tac-toe), column index (Connect 4) or UCI string (chess).
Move = Union[int, str]

MIN_LEVEL = 1
MAX_LEVEL = 5


class GameType(str, Enum):
    """Supported game types."""

    TIC_TAC_TOE = "tictactoe"
    CONNECT4 = "connect4"
    CHESS = "chess"


class GameOutcome(str, Enum):
    """Terminal state of a position."""

    ONGOING = "ongoing"
    WIN = "win"
    DRAW = "draw"


class MoveStrategy(str, Enum):
    """How the computer opponent picks its move at a given difficulty.

    - RANDOM: uniform random legal move
    - WIN_OR_BLOCK: take an immediate win, else block one, else random
    - SEARCH: depth-limited alpha-beta search
    - ORACLE: ask the remote move oracle, validated by the arbiter
    """

    RANDOM = "random"
    WIN_OR_BLOCK = "win_or_block"
    SEARCH = "search"
    ORACLE = "oracle"


class FallbackStrategy(str, Enum):
    """What the arbiter commits when a candidate is rejected."""

    RANDOM = "random"
    SEARCH = "search"


class MoveSource(str, Enum):
    """Where a committed move came from."""

    ORACLE = "oracle"
    SEARCH = "search"
    HEURISTIC = "heuristic"
    RANDOM = "random"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class GameStatus:
    """Terminal test result for a position.

    Attributes:
        outcome: Ongoing, win or draw.
        winner: Winning side when outcome is WIN.
        reason: Engine-specific termination reason (e.g. "checkmate").
    """

    outcome: GameOutcome
    winner: str | None = None
    reason: str | None = None

    @property
    def is_terminal(self) -> bool:
        """Check whether the game is over."""
        return self.outcome != GameOutcome.ONGOING


ONGOING = GameStatus(GameOutcome.ONGOING)


@dataclass(frozen=True)
class Position:
    """Immutable game position.

    Attributes:
        game_type: Game this position belongs to.
        board: Row-major cells (None = empty) for grid games, FEN for chess.
        side_to_move: Side whose turn it is ("X"/"O", "R"/"Y", "w"/"b").
        move_count: Number of moves committed so far.
        history: Committed moves as text (SAN for chess).
    """

    game_type: GameType
    board: tuple[str | None, ...] | str
    side_to_move: str
    move_count: int = 0
    history: tuple[str, ...] = ()


class SearchResult(BaseModel):
    """Outcome of a search call.

    Attributes:
        move: Best move found (first in enumeration order on ties).
        score: Score from the maximizing side's perspective.
        depth: Depth actually searched.
        nodes: Number of positions visited below the root.
    """

    move: int | str = Field(description="Chosen move")
    score: float = Field(description="Score from the maximizing side's view")
    depth: int = Field(ge=1, description="Depth actually searched")
    nodes: int = Field(default=0, ge=0, description="Positions visited")


class ChessPersona(BaseModel):
    """Skill narrative handed to the move oracle for chess.

    Attributes:
        tier: Match-counter tier this persona is used for.
        label: Short display label for the tier.
        narrative: Instruction text describing the expected playing strength.
    """

    tier: int = Field(ge=0)
    label: str
    narrative: str


class DifficultyParameters(BaseModel):
    """Search and oracle parameters resolved for one turn.

    Attributes:
        game_type: Game the parameters apply to.
        level: Difficulty level (1-5) after clamping.
        strategy: How the move is chosen.
        search_depth: Search depth (0 when no local search applies).
        random_override_probability: Chance of replacing the strategy by a random move.
        use_oracle: Whether the remote oracle is consulted first.
        oracle_style: Persona narrative sent to the oracle.
        tier: Chess persona tier (None for grid games).
        tier_label: Display label of the chess persona tier.
        fallback: What the arbiter commits when a candidate is rejected.
    """

    game_type: GameType
    level: int = Field(ge=MIN_LEVEL, le=MAX_LEVEL)
    strategy: MoveStrategy
    search_depth: int = Field(default=0, ge=0)
    random_override_probability: float = Field(default=0.0, ge=0.0, le=1.0)
    use_oracle: bool = False
    oracle_style: str | None = None
    tier: int | None = None
    tier_label: str | None = None
    fallback: FallbackStrategy = FallbackStrategy.RANDOM


class TurnResult(BaseModel):
    """A committed computer move.

    Attributes:
        move: The committed move.
        move_text: Display notation (SAN for chess).
        position: Position after the move.
        source: Where the move came from.
        status_message: Transient message for the player, if any.
        score: Search score when the move came from the search engine.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    move: int | str
    move_text: str
    position: Position
    source: MoveSource
    status_message: str | None = None
    score: float | None = None


class PlayerProgress(BaseModel):
    """Level counters owned and persisted by the surrounding application.

    Attributes:
        levels: Current level per game (1-5).
        chess_matches_played: Completed chess games, any outcome.
    """

    levels: dict[GameType, int] = Field(
        default_factory=lambda: {game: MIN_LEVEL for game in GameType},
    )
    chess_matches_played: int = Field(default=0, ge=0)

    def level_for(self, game_type: GameType) -> int:
        """Get the stored level for a game, defaulting to the first level."""
        return self.levels.get(game_type, MIN_LEVEL)
