# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Difficulty policy for the computer opponent.

Maps a (game, level) pair to an explicit DifficultyParameters value:
- Connect 4: search depth per level, with a random-move override at level 1
- Tic-tac-toe: random, win-or-block heuristic, or full-depth search
- Chess: oracle persona chosen by the match-counter tier

Chess personas can be overridden from a YAML file:

    personas:
      - tier: 0
        label: "MATCH TEST (CALIBRATION)"
        narrative: "You are a beginner/intermediate chess player ..."
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from src.core.config.settings import GamingSettings, get_settings
from src.core.config.yaml_loader import YAMLLoadError, load_yaml_list
from src.domains.gaming.models import (
    MAX_LEVEL,
    MIN_LEVEL,
    ChessPersona,
    DifficultyParameters,
    FallbackStrategy,
    GameType,
    MoveStrategy,
)
from src.utils.logging import get_logger

logger = logging.getLogger(__name__)
struct_logger = get_logger(__name__)

# Search depth per Connect 4 level
CONNECT4_DEPTHS = {
    1: 1,
    2: 2,
    3: 4,
    4: 5,
    5: 7,
}

# Strategy per tic-tac-toe level
TICTACTOE_STRATEGIES = {
    1: MoveStrategy.RANDOM,
    2: MoveStrategy.WIN_OR_BLOCK,
    3: MoveStrategy.WIN_OR_BLOCK,
    4: MoveStrategy.SEARCH,
    5: MoveStrategy.SEARCH,
}

DEFAULT_CHESS_PERSONAS = [
    ChessPersona(
        tier=0,
        label="MATCH TEST (CALIBRATION)",
        narrative=(
            "You are a beginner/intermediate chess player (Elo 1000). "
            "You are testing the opponent. Play a standard opening. "
            "Make occasional minor mistakes but generally play valid moves."
        ),
    ),
    ChessPersona(
        tier=1,
        label="CORTEX LEVEL 1",
        narrative=(
            "You are a strong intermediate chess player (Elo 1600). "
            "Play solid tactical moves. Punish blunders. Do not make simple mistakes."
        ),
    ),
    ChessPersona(
        tier=2,
        label="CORTEX LEVEL 2 (MAX)",
        narrative=(
            "You are a Grandmaster chess engine (Elo 2800+). "
            "Play the absolute best optimal move. Calculate deep variations. "
            "Show no mercy. Win as fast as possible."
        ),
    ),
]


class PersonaLoadError(Exception):
    """Raised when the chess persona file fails to load or validate."""

    pass


def load_personas(path: Path) -> list[ChessPersona]:
    """Load chess personas from a YAML file.

    Args:
        path: YAML file with a top-level "personas" list.

    Returns:
        Personas sorted by tier.

    Raises:
        PersonaLoadError: If the file cannot be read or an entry is invalid.
    """
    try:
        entries = load_yaml_list(path, "personas")
    except YAMLLoadError as e:
        raise PersonaLoadError(str(e)) from e

    if not entries:
        raise PersonaLoadError(f"No personas defined in {path}")

    try:
        personas = [ChessPersona.model_validate(entry) for entry in entries]
    except ValidationError as e:
        raise PersonaLoadError(f"Validation failed for personas in {path}: {e}") from e

    tiers = [persona.tier for persona in personas]
    if len(set(tiers)) != len(tiers):
        raise PersonaLoadError(f"Duplicate persona tiers in {path}: {tiers}")

    struct_logger.debug("loaded_chess_personas", path=str(path), tiers=sorted(tiers))
    return sorted(personas, key=lambda persona: persona.tier)


def clamp_level(level: int) -> int:
    """Clamp a level into the supported range, logging out-of-range values."""
    if level < MIN_LEVEL or level > MAX_LEVEL:
        clamped = min(max(level, MIN_LEVEL), MAX_LEVEL)
        logger.warning("Difficulty level %d out of range, using %d", level, clamped)
        return clamped
    return level


class DifficultyPolicy:
    """Resolves difficulty levels into search and oracle parameters.

    Attributes:
        settings: Gaming tuning values.
        personas: Chess personas sorted by tier.
    """

    def __init__(
        self,
        settings: GamingSettings | None = None,
        personas: list[ChessPersona] | None = None,
    ) -> None:
        """Initialize the policy.

        Args:
            settings: Gaming settings. Defaults to the application settings.
            personas: Chess personas. Defaults to the personas file from
                settings, or the built-in ladder when no file is configured.

        Raises:
            PersonaLoadError: If a configured personas file is invalid.
        """
        self.settings = settings or get_settings().gaming

        if personas is None:
            if self.settings.personas_file is not None:
                personas = load_personas(self.settings.personas_file)
            else:
                personas = DEFAULT_CHESS_PERSONAS

        if not personas:
            raise PersonaLoadError("At least one chess persona is required")

        self.personas = sorted(personas, key=lambda persona: persona.tier)

    def resolve(
        self,
        game: GameType,
        level: int,
        matches_played: int = 0,
    ) -> DifficultyParameters:
        """Resolve the parameters for one turn.

        Args:
            game: Game being played.
            level: Difficulty level (1-5). Out-of-range values are clamped.
            matches_played: Completed chess games, used for the persona tier.

        Returns:
            DifficultyParameters for the turn.
        """
        level = clamp_level(level)

        if game == GameType.CONNECT4:
            params = self._resolve_connect4(level)
        elif game == GameType.TIC_TAC_TOE:
            params = self._resolve_tictactoe(level)
        else:
            params = self._resolve_chess(level, matches_played)

        logger.debug(
            "Resolved %s level %d: strategy=%s depth=%d oracle=%s",
            game.value,
            level,
            params.strategy.value,
            params.search_depth,
            params.use_oracle,
        )
        return params

    def chess_tier(self, matches_played: int) -> int:
        """Get the persona tier for a match count, capped at the configured maximum."""
        return min(max(matches_played, 0), self.settings.chess_max_tier)

    def persona_for_tier(self, tier: int) -> ChessPersona:
        """Get the highest persona whose tier does not exceed the given tier."""
        chosen = self.personas[0]
        for persona in self.personas:
            if persona.tier <= tier:
                chosen = persona
        return chosen

    def tier_label(self, matches_played: int) -> str:
        """Get the label of the persona played at a match count."""
        return self.persona_for_tier(self.chess_tier(matches_played)).label

    def _resolve_connect4(self, level: int) -> DifficultyParameters:
        depth = CONNECT4_DEPTHS[level]
        override = self.settings.connect4_random_override if level == 1 else 0.0

        return DifficultyParameters(
            game_type=GameType.CONNECT4,
            level=level,
            strategy=MoveStrategy.SEARCH,
            search_depth=depth,
            random_override_probability=override,
            fallback=self._grid_fallback(depth),
        )

    def _resolve_tictactoe(self, level: int) -> DifficultyParameters:
        strategy = TICTACTOE_STRATEGIES[level]

        if strategy == MoveStrategy.SEARCH:
            depth = self.settings.tictactoe_full_depth
        elif strategy == MoveStrategy.WIN_OR_BLOCK:
            depth = 1
        else:
            depth = 0

        return DifficultyParameters(
            game_type=GameType.TIC_TAC_TOE,
            level=level,
            strategy=strategy,
            search_depth=depth,
            fallback=self._grid_fallback(depth),
        )

    def _resolve_chess(self, level: int, matches_played: int) -> DifficultyParameters:
        tier = self.chess_tier(matches_played)
        persona = self.persona_for_tier(tier)

        return DifficultyParameters(
            game_type=GameType.CHESS,
            level=level,
            strategy=MoveStrategy.ORACLE,
            use_oracle=True,
            oracle_style=persona.narrative,
            tier=tier,
            tier_label=persona.label,
            fallback=FallbackStrategy.RANDOM,
        )

    def _grid_fallback(self, depth: int) -> FallbackStrategy:
        if self.settings.fallback_to_search and depth > 0:
            return FallbackStrategy.SEARCH
        return FallbackStrategy.RANDOM
