"""Cortex Arena Backend.

Move selection for a computer opponent in tic-tac-toe, Connect 4 and chess,
combining local alpha-beta search with an optional remote LLM move oracle.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
