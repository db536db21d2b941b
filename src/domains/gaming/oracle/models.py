# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data models for the move oracle.

This module defines:
- ProviderFamily: Which provider API shape is spoken
- EndpointOutcome: Classification of a single endpoint call
- EndpointCandidate: One (API version, model) pair in the failover list
- OracleRequest / OracleResponse: Input and output of a move request
- EndpointAttempt: Record of one endpoint call, for diagnostics
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProviderFamily(str, Enum):
    """Supported oracle provider families."""

    GEMINI = "gemini"
    OPENAI = "openai"


class EndpointOutcome(str, Enum):
    """Classification of one endpoint call.

    - OK: usable text returned
    - EMPTY: success status but no text (e.g. safety block); stops the chain
    - NOT_FOUND: model or version unknown; try the next endpoint
    - RATE_LIMITED / SERVICE_UNAVAILABLE: try the next endpoint
    - ERROR: any other failure; stops the chain
    """

    OK = "ok"
    EMPTY = "empty"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVICE_UNAVAILABLE = "service_unavailable"
    ERROR = "error"

    @property
    def advances(self) -> bool:
        """Check whether the failover loop moves on to the next endpoint."""
        return self in (
            EndpointOutcome.NOT_FOUND,
            EndpointOutcome.RATE_LIMITED,
            EndpointOutcome.SERVICE_UNAVAILABLE,
        )


class EndpointCandidate(BaseModel):
    """One endpoint in the ordered failover list.

    Attributes:
        version: API version segment (e.g. "v1beta").
        model: Model identifier (e.g. "gemini-2.5-flash").
    """

    model_config = ConfigDict(frozen=True)

    version: str
    model: str

    @property
    def name(self) -> str:
        """Get a display name for logs and diagnostics."""
        return f"{self.version}/{self.model}"


class OracleRequest(BaseModel):
    """A move request for the oracle.

    Attributes:
        fen: Position in Forsyth-Edwards Notation.
        history: Moves played so far, in SAN.
        persona: Skill narrative for the requested playing strength.
        side: Side the oracle plays ("white" or "black").
    """

    fen: str
    history: list[str] = Field(default_factory=list)
    persona: str | None = None
    side: str = "black"


class OracleResponse(BaseModel):
    """Raw, unparsed text produced by an endpoint.

    Attributes:
        text: Raw text returned by the model.
        endpoint: Endpoint that produced the text.
        provider: Provider family used.
    """

    text: str
    endpoint: EndpointCandidate
    provider: ProviderFamily


class EndpointAttempt(BaseModel):
    """Record of one endpoint call.

    Attributes:
        endpoint: Endpoint called.
        outcome: Classification of the call.
        status_code: HTTP status, or None for transport errors.
        error: Provider error message or transport error text.
    """

    endpoint: EndpointCandidate
    outcome: EndpointOutcome
    status_code: int | None = None
    error: str | None = None
