# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Prompt construction for oracle move requests."""

from src.domains.gaming.oracle.models import OracleRequest

MOVE_INSTRUCTION = (
    "Reply ONLY with the best move in Standard Algebraic Notation (SAN) "
    "or coordinate notation (e.g., e5, Nf3, e7e5). DO NOT EXPLAIN."
)


def build_move_prompt(request: OracleRequest) -> str:
    """Build the single-prompt text sent to the provider.

    Args:
        request: Position, history, persona and side to play.

    Returns:
        Prompt text.
    """
    lines = []
    if request.persona:
        lines.append(request.persona)

    lines.append(f"Current FEN: {request.fen}")
    lines.append(f"History: {' '.join(request.history) if request.history else '(none)'}")
    lines.append(f"You play as {request.side.upper()}.")
    lines.append(MOVE_INSTRUCTION)

    return "\n".join(lines)
