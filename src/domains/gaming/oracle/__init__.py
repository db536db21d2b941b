# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Remote move oracle.

This package provides:
- MoveOracleClient: Async HTTP client with ordered endpoint failover
- classify_response / extract_text: Pure response classification
- build_move_prompt: Prompt construction
- OracleError hierarchy

Usage:
    from src.domains.gaming.oracle import MoveOracleClient, OracleRequest

    client = MoveOracleClient()
    response = await client.request_move(OracleRequest(fen=fen))
"""

from src.domains.gaming.oracle.classify import classify_response, extract_text
from src.domains.gaming.oracle.client import MoveOracleClient, detect_provider
from src.domains.gaming.oracle.exceptions import (
    ConfigurationError,
    ExhaustedEndpointsError,
    OracleEmptyResponseError,
    OracleError,
    OracleUnavailableError,
)
from src.domains.gaming.oracle.models import (
    EndpointAttempt,
    EndpointCandidate,
    EndpointOutcome,
    OracleRequest,
    OracleResponse,
    ProviderFamily,
)
from src.domains.gaming.oracle.prompts import build_move_prompt

__all__ = [
    # Client
    "MoveOracleClient",
    "detect_provider",
    # Classification
    "classify_response",
    "extract_text",
    "build_move_prompt",
    # Models
    "EndpointAttempt",
    "EndpointCandidate",
    "EndpointOutcome",
    "OracleRequest",
    "OracleResponse",
    "ProviderFamily",
    # Exceptions
    "OracleError",
    "OracleUnavailableError",
    "OracleEmptyResponseError",
    "ExhaustedEndpointsError",
    "ConfigurationError",
]
