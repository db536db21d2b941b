# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for Cortex Arena.

Domains:
    gaming: Board rules, search, difficulty policy, move oracle and game sessions.
"""
