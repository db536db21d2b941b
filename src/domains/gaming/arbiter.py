# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Move arbiter: validation and fallback for candidate moves.

Every move committed to a position passes through the arbiter. Candidates
come from the oracle (raw text) or from local search and heuristics (moves).
A candidate that is not legal is replaced by a fallback: a configured
callable (usually the search engine) or a uniform-random legal move.

The arbiter always returns exactly one legal move and never modifies the
position it is given. The only exception it lets through is
InvariantViolation for a position that has no legal moves.
"""

import logging
import random
import re
from collections.abc import Callable
from dataclasses import dataclass

from src.domains.gaming.engines.base import (
    BoardAdapter,
    EngineError,
    IllegalMoveError,
    InvariantViolation,
)
from src.domains.gaming.models import Move, MoveSource, Position

logger = logging.getLogger(__name__)

# Produces a move for a position; may raise
FallbackFn = Callable[[Position], Move]

# Formatting artifacts removed before tokenizing
ARTIFACT_PATTERN = re.compile(r"```[A-Za-z]*|[*\[\]`\"']")

# Leading move numbers such as "12." or "12..."
MOVE_NUMBER_PATTERN = re.compile(r"^\d+\.+")

TRAILING_PUNCTUATION = ".,;:!?)"

ZERO_CASTLING = {
    "0-0": "O-O",
    "0-0-0": "O-O-O",
}

# Coordinate (e7e5, e7e8q) or SAN (e5, Nf3, exd5, e8=Q+, O-O) tokens in free text
NOTATION_PATTERN = re.compile(
    r"(?<![A-Za-z0-9])"
    r"([a-h][1-8][a-h][1-8][qrbnQRBN]?"
    r"|O-O(?:-O)?"
    r"|[KQRBN]?[a-h]?[1-8]?x?[a-h][1-8](?:=[QRBN])?)"
    r"[+#]?(?![A-Za-z0-9])"
)


@dataclass(frozen=True)
class Arbitration:
    """Result of arbitrating one candidate.

    Attributes:
        move: The committed move.
        position: Position after the move.
        source: Where the committed move came from.
        accepted: True if the candidate itself was committed.
        reason: Why the candidate was rejected, if it was.
    """

    move: Move
    position: Position
    source: MoveSource
    accepted: bool
    reason: str | None = None


class MoveArbiter:
    """Validates candidate moves and falls back when they are illegal.

    Attributes:
        rng: Random source for uniform-random fallback moves.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def normalize(self, raw: str | None) -> str:
        """Reduce raw model text to a single move token.

        Strips code fences, emphasis, brackets and quotes, takes the first
        whitespace-delimited token that is not a bare move number, drops a
        leading move number and trailing punctuation, and spells
        zero-castling with letters.

        Args:
            raw: Raw text, possibly None or empty.

        Returns:
            The normalized token, or "" if nothing is left.
        """
        if not isinstance(raw, str):
            return ""

        tokens = ARTIFACT_PATTERN.sub("", raw).split()

        for index, token in enumerate(tokens):
            rest = MOVE_NUMBER_PATTERN.sub("", token)
            # A bare move number ("1...") is skipped unless nothing follows it
            if not rest and index < len(tokens) - 1:
                continue
            token = (rest or token).rstrip(TRAILING_PUNCTUATION)
            return ZERO_CASTLING.get(token, token)

        return ""

    def extract_candidates(self, raw: str | None) -> list[str]:
        """Find every notation-looking token in raw text, in order of appearance."""
        if not isinstance(raw, str):
            return []

        cleaned = ARTIFACT_PATTERN.sub(" ", raw).replace("0-0-0", "O-O-O").replace("0-0", "O-O")
        return [match.group(1) for match in NOTATION_PATTERN.finditer(cleaned)]

    def random_move(self, adapter: BoardAdapter, position: Position) -> Move:
        """Pick a uniform-random legal move.

        Raises:
            InvariantViolation: If the position has no legal moves.
        """
        return self.rng.choice(self._legal_moves_or_raise(adapter, position))

    def arbitrate_text(
        self,
        adapter: BoardAdapter,
        position: Position,
        raw: str | None,
        fallback: FallbackFn | None = None,
        source: MoveSource = MoveSource.ORACLE,
    ) -> Arbitration:
        """Commit the move denoted by raw text, or a fallback move.

        Args:
            adapter: Rules of the game.
            position: Position the move is played in. Never modified.
            raw: Raw candidate text.
            fallback: Optional fallback move producer.
            source: Source reported when the candidate is accepted.

        Returns:
            Arbitration with a legal move and the resulting position.

        Raises:
            InvariantViolation: If the position has no legal moves.
        """
        self._legal_moves_or_raise(adapter, position)

        attempts = [self.normalize(raw)]
        if adapter.uses_notation:
            attempts.extend(c for c in self.extract_candidates(raw) if c not in attempts)

        for text in attempts:
            if not text:
                continue
            try:
                move = adapter.parse_move(position, text)
            except IllegalMoveError:
                continue
            logger.debug("Accepted %s candidate %r as %s", source.value, text, move)
            return Arbitration(
                move=move,
                position=adapter.apply(position, move),
                source=source,
                accepted=True,
            )

        reason = f"No legal move in candidate text {raw!r}"
        logger.warning("Rejected %s candidate: %s", source.value, reason)
        return self.fallback_move(adapter, position, fallback, reason)

    def arbitrate_move(
        self,
        adapter: BoardAdapter,
        position: Position,
        candidate: Move | None,
        fallback: FallbackFn | None = None,
        source: MoveSource = MoveSource.SEARCH,
    ) -> Arbitration:
        """Commit a locally produced move, or a fallback move if it is illegal.

        Raises:
            InvariantViolation: If the position has no legal moves.
        """
        legal = self._legal_moves_or_raise(adapter, position)

        if candidate is not None and candidate in legal:
            return Arbitration(
                move=candidate,
                position=adapter.apply(position, candidate),
                source=source,
                accepted=True,
            )

        reason = f"Candidate {candidate!r} is not a legal move"
        logger.warning("Rejected %s candidate: %s", source.value, reason)
        return self.fallback_move(adapter, position, fallback, reason)

    def fallback_move(
        self,
        adapter: BoardAdapter,
        position: Position,
        fallback: FallbackFn | None,
        reason: str | None = None,
    ) -> Arbitration:
        """Commit the fallback move, degrading to a random move if the fallback fails.

        Raises:
            InvariantViolation: If the position has no legal moves.
        """
        legal = self._legal_moves_or_raise(adapter, position)

        if fallback is not None:
            try:
                move = fallback(position)
            except (EngineError, ValueError) as e:
                logger.warning("Fallback failed, using a random move: %s", e)
            else:
                if move in legal:
                    return Arbitration(
                        move=move,
                        position=adapter.apply(position, move),
                        source=MoveSource.FALLBACK,
                        accepted=False,
                        reason=reason,
                    )
                logger.warning("Fallback produced illegal move %r, using a random move", move)

        move = self.rng.choice(legal)
        return Arbitration(
            move=move,
            position=adapter.apply(position, move),
            source=MoveSource.RANDOM,
            accepted=False,
            reason=reason,
        )

    def _legal_moves_or_raise(self, adapter: BoardAdapter, position: Position) -> list[Move]:
        legal = adapter.legal_moves(position)
        if not legal:
            raise InvariantViolation(
                message="No legal moves: the game is already over",
                game_type=adapter.game_type,
            )
        return legal
