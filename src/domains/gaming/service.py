# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Move selection service and game sessions.

MoveSelector plays one computer turn:
1. The difficulty policy resolves the level into DifficultyParameters
2. Oracle games ask the remote oracle; grid games use search or heuristics
3. The arbiter validates the candidate and falls back when it is illegal

Every oracle failure is recovered here. The player only sees a transient
status message on the TurnResult; a turn always ends with a legal move.

GameSession owns one position and serializes turns on it: a human move
cannot be submitted while a computer turn is pending, and a reset discards
any computer move that arrives afterwards.

Example:
    >>> selector = create_move_selector()
    >>> session = GameSession(selector, GameType.CONNECT4, level=3)
    >>> session.submit_move("3")
    >>> turn = await session.play_ai_turn()
"""

import logging
import random
from uuid import uuid4

from src.core.config.settings import Settings, get_settings
from src.domains.gaming.arbiter import Arbitration, FallbackFn, MoveArbiter
from src.domains.gaming.engines.base import BoardAdapter
from src.domains.gaming.engines.registry import EngineRegistry, get_engine_registry
from src.domains.gaming.engines.search import AlphaBetaSearch
from src.domains.gaming.models import (
    MIN_LEVEL,
    DifficultyParameters,
    FallbackStrategy,
    GameOutcome,
    GameStatus,
    GameType,
    MoveSource,
    MoveStrategy,
    Position,
    TurnResult,
)
from src.domains.gaming.oracle.client import MoveOracleClient
from src.domains.gaming.oracle.exceptions import ConfigurationError, OracleError
from src.domains.gaming.oracle.models import OracleRequest
from src.domains.gaming.policy import DifficultyPolicy
from src.domains.gaming.progression import MatchResult
from src.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

STATUS_ORACLE_OFFLINE = "Cortex offline. Random move."
STATUS_ORACLE_GLITCH = "Cortex glitch. Random move."

SIDE_NAMES = {
    "w": "white",
    "b": "black",
}


class SessionError(Exception):
    """Base exception for game session errors."""

    pass


class TurnInProgressError(SessionError):
    """Raised when a move is submitted while a computer turn is pending."""

    pass


class GameOverError(SessionError):
    """Raised when a move is submitted after the game has ended."""

    pass


class MoveSelector:
    """Chooses the computer's move for a position.

    The selector holds no per-game state and can be shared by every session.

    Attributes:
        registry: Board adapters and evaluators.
        policy: Difficulty policy.
        oracle: Remote move oracle, or None to play locally only.
        arbiter: Move validation and fallback.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        registry: EngineRegistry | None = None,
        policy: DifficultyPolicy | None = None,
        oracle: MoveOracleClient | None = None,
        arbiter: MoveArbiter | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the selector.

        Args:
            settings: Application settings. Defaults to get_settings().
            registry: Engine registry. Defaults to the global registry.
            policy: Difficulty policy. Built from settings when omitted.
            oracle: Oracle client. Built from settings when omitted.
            arbiter: Move arbiter. Built around rng when omitted.
            rng: Random source for random overrides and fallbacks.
        """
        self.settings = settings or get_settings()
        self.registry = registry or get_engine_registry()
        self.policy = policy or DifficultyPolicy(self.settings.gaming)
        self.oracle = oracle if oracle is not None else MoveOracleClient(self.settings.oracle)
        self.rng = rng or random.Random()
        self.arbiter = arbiter or MoveArbiter(self.rng)
        self._engines: dict[GameType, AlphaBetaSearch] = {}

    async def select_move(
        self,
        position: Position,
        level: int,
        matches_played: int = 0,
    ) -> TurnResult:
        """Select and commit the computer's move.

        Args:
            position: Current position. Never modified.
            level: Difficulty level (1-5).
            matches_played: Completed chess games, for the persona tier.

        Returns:
            TurnResult with a legal move and the resulting position.

        Raises:
            EngineNotRegisteredError: If the game has no adapter.
            InvariantViolation: If the position is already terminal.
        """
        adapter = self.registry.get(position.game_type)
        params = self.policy.resolve(position.game_type, level, matches_played)
        fallback = self._fallback_for(params)

        score = None
        status_message = None

        if params.use_oracle:
            arbitration, status_message = await self._oracle_turn(adapter, position, params, fallback)
        else:
            arbitration, score = self._local_turn(adapter, position, params, fallback)

        move_text = adapter.move_to_text(position, arbitration.move)
        logger.info(
            "Committed %s move %s (source=%s, level=%d)",
            position.game_type.value,
            move_text,
            arbitration.source.value,
            params.level,
        )

        return TurnResult(
            move=arbitration.move,
            move_text=move_text,
            position=arbitration.position,
            source=arbitration.source,
            status_message=status_message,
            score=score,
        )

    def search_engine(self, game_type: GameType) -> AlphaBetaSearch:
        """Get the cached search engine for a game."""
        if game_type not in self._engines:
            self._engines[game_type] = self.registry.search_engine(
                game_type,
                max_depth=self.settings.gaming.max_search_depth,
            )
        return self._engines[game_type]

    # =========================================================================
    # Turn strategies
    # =========================================================================

    def _local_turn(
        self,
        adapter: BoardAdapter,
        position: Position,
        params: DifficultyParameters,
        fallback: FallbackFn | None,
    ) -> tuple[Arbitration, float | None]:
        """Play a turn with local search or heuristics."""
        override = params.random_override_probability
        if params.strategy == MoveStrategy.RANDOM or (override > 0 and self.rng.random() < override):
            move = self.arbiter.random_move(adapter, position)
            return self.arbiter.arbitrate_move(adapter, position, move, source=MoveSource.RANDOM), None

        engine = self.search_engine(position.game_type)

        if params.strategy == MoveStrategy.WIN_OR_BLOCK:
            side = adapter.side_to_move(position)
            move = engine.find_immediate_win(position, side)
            if move is None:
                move = engine.find_immediate_win(position, adapter.opponent(side))
            if move is None:
                move = self.arbiter.random_move(adapter, position)
                return self.arbiter.arbitrate_move(adapter, position, move, source=MoveSource.RANDOM), None
            return self.arbiter.arbitrate_move(adapter, position, move, fallback, MoveSource.HEURISTIC), None

        result = engine.search(position, params.search_depth)
        arbitration = self.arbiter.arbitrate_move(adapter, position, result.move, fallback, MoveSource.SEARCH)
        return arbitration, result.score

    async def _oracle_turn(
        self,
        adapter: BoardAdapter,
        position: Position,
        params: DifficultyParameters,
        fallback: FallbackFn | None,
    ) -> tuple[Arbitration, str | None]:
        """Play a turn through the oracle, falling back locally on any failure."""
        request = OracleRequest(
            fen=str(position.board),
            history=list(position.history),
            persona=params.oracle_style,
            side=SIDE_NAMES.get(adapter.side_to_move(position), adapter.side_to_move(position)),
        )

        try:
            response = await self.oracle.request_move(request)
        except ConfigurationError:
            logger.debug("Oracle not configured, playing locally")
            return self.arbiter.fallback_move(adapter, position, fallback, "oracle not configured"), None
        except OracleError as e:
            logger.warning("Oracle unavailable, falling back: %s", e)
            return self.arbiter.fallback_move(adapter, position, fallback, str(e)), STATUS_ORACLE_OFFLINE

        arbitration = self.arbiter.arbitrate_text(
            adapter,
            position,
            response.text,
            fallback,
            MoveSource.ORACLE,
        )
        if not arbitration.accepted:
            return arbitration, STATUS_ORACLE_GLITCH
        return arbitration, None

    def _fallback_for(self, params: DifficultyParameters) -> FallbackFn | None:
        """Build the search fallback, or None for a random fallback."""
        if params.fallback != FallbackStrategy.SEARCH or params.search_depth < 1:
            return None
        if not self.registry.is_searchable(params.game_type):
            return None

        engine = self.search_engine(params.game_type)
        depth = params.search_depth
        return lambda position: engine.search(position, depth).move


class GameSession:
    """One game against the computer, owning its position.

    Attributes:
        session_id: Identifier used in logs.
        game_type: Game being played.
        level: Difficulty level for computer turns.
        matches_played: Completed chess games, for the persona tier.
        human_side: Side played by the human.
        position: Current position.
    """

    def __init__(
        self,
        selector: MoveSelector,
        game_type: GameType,
        level: int = MIN_LEVEL,
        matches_played: int = 0,
        human_side: str | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize a session at the starting position.

        Args:
            selector: Move selector for computer turns.
            game_type: Game to play.
            level: Difficulty level (1-5).
            matches_played: Completed chess games, for the persona tier.
            human_side: Side played by the human. Defaults to the side that moves first.
            session_id: Optional identifier. Generated when omitted.
        """
        self.selector = selector
        self.adapter = selector.registry.get(game_type)
        self.game_type = game_type
        self.level = level
        self.matches_played = matches_played
        self.session_id = session_id or uuid4().hex
        self.position = self.adapter.initial_position()
        self.human_side = human_side or self.adapter.side_to_move(self.position)
        self._pending = False
        self._generation = 0

    @property
    def is_turn_pending(self) -> bool:
        """Check whether a computer turn is in flight."""
        return self._pending

    @property
    def status(self) -> GameStatus:
        """Get the status of the current position."""
        return self.adapter.status(self.position)

    def submit_move(self, move_text: str) -> Position:
        """Apply a human move.

        Args:
            move_text: Move text (cell/column index, or SAN/UCI for chess).

        Returns:
            The new position.

        Raises:
            TurnInProgressError: If a computer turn is pending.
            GameOverError: If the game has ended.
            IllegalMoveError: If the move is not legal.
        """
        if self._pending:
            raise TurnInProgressError(f"Session {self.session_id}: computer turn in progress")
        if self.status.is_terminal:
            raise GameOverError(f"Session {self.session_id}: game is over")

        move = self.adapter.parse_move(self.position, move_text)
        self.position = self.adapter.apply(self.position, move)
        return self.position

    async def play_ai_turn(self) -> TurnResult | None:
        """Play the computer's move on the current position.

        Returns:
            The committed TurnResult, or None if the session was reset while
            the move was being computed (the late result is discarded).

        Raises:
            TurnInProgressError: If a computer turn is already pending.
            GameOverError: If the game has ended.
        """
        if self._pending:
            raise TurnInProgressError(f"Session {self.session_id}: computer turn in progress")
        if self.status.is_terminal:
            raise GameOverError(f"Session {self.session_id}: game is over")

        bind_context(session_id=self.session_id, game=self.game_type.value)

        generation = self._generation
        self._pending = True
        try:
            result = await self.selector.select_move(self.position, self.level, self.matches_played)
        finally:
            if generation == self._generation:
                self._pending = False
            clear_context()

        if generation != self._generation:
            logger.info("Session %s reset during computer turn, discarding move", self.session_id)
            return None

        self.position = result.position
        return result

    def reset(self) -> Position:
        """Start over from the initial position, discarding any pending computer move."""
        self._generation += 1
        self._pending = False
        self.position = self.adapter.initial_position()
        logger.debug("Session %s reset", self.session_id)
        return self.position

    def result_for_human(self) -> MatchResult | None:
        """Get the finished game's result from the human's perspective, or None if ongoing."""
        status = self.status
        if not status.is_terminal:
            return None
        if status.outcome == GameOutcome.DRAW:
            return MatchResult.DRAW
        return MatchResult.WIN if status.winner == self.human_side else MatchResult.LOSS
