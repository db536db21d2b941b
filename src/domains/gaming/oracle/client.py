# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Move oracle HTTP client with ordered endpoint failover.

The client asks a remote LLM for a chess move. Gemini keys walk an ordered
list of model endpoints; OpenAI keys use a single chat-completions endpoint.
Each call is classified by classify_response and the loop decides:
- OK: return the raw text
- NOT_FOUND, RATE_LIMITED, SERVICE_UNAVAILABLE: try the next endpoint
- EMPTY, ERROR: stop and raise

When every endpoint is not-found, one model-listing call is made and its
result is attached to the error.

Example:
    async with MoveOracleClient(get_settings().oracle) as client:
        response = await client.request_move(
            OracleRequest(fen=fen, history=["e4"], persona=narrative)
        )
        print(response.text)
"""

import logging
from typing import Any

import httpx

from src.core.config.settings import OracleSettings, get_settings
from src.domains.gaming.oracle.classify import (
    block_reason,
    classify_response,
    error_message,
    extract_text,
)
from src.domains.gaming.oracle.exceptions import (
    ConfigurationError,
    ExhaustedEndpointsError,
    OracleEmptyResponseError,
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

logger = logging.getLogger(__name__)

# Key prefixes used for provider auto-detection
GEMINI_KEY_PREFIX = "AIza"
OPENAI_KEY_PREFIX = "sk-"

MAX_BODY_CHARS = 500


def detect_provider(api_key: str) -> ProviderFamily:
    """Detect the provider family from a key prefix.

    Unrecognized prefixes are treated as Gemini keys.
    """
    if api_key.startswith(OPENAI_KEY_PREFIX):
        return ProviderFamily.OPENAI
    if not api_key.startswith(GEMINI_KEY_PREFIX):
        logger.debug("Unrecognized API key prefix, assuming Gemini")
    return ProviderFamily.GEMINI


class MoveOracleClient:
    """Async client for the remote move oracle.

    The client holds no per-request state apart from its connection pool,
    so one instance can serve every game session.

    Attributes:
        settings: Oracle settings (credential, provider, endpoints, timeout).
    """

    def __init__(
        self,
        settings: OracleSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the oracle client.

        Args:
            settings: Oracle settings. Defaults to the application settings.
            http_client: Optional pre-built HTTP client (used by tests with
                httpx.MockTransport). Created lazily when omitted.
        """
        self.settings = settings or get_settings().oracle
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def is_configured(self) -> bool:
        """Check whether a credential is available."""
        return self.settings.has_credential

    @property
    def provider(self) -> ProviderFamily:
        """Get the provider family in use.

        Raises:
            ConfigurationError: If no credential is configured.
        """
        api_key = self._api_key()
        if self.settings.provider == "auto":
            return detect_provider(api_key)
        return ProviderFamily(self.settings.provider)

    def endpoints(self) -> list[EndpointCandidate]:
        """Get the ordered endpoint candidates for the provider in use."""
        if self.provider == ProviderFamily.OPENAI:
            return [EndpointCandidate(version="v1", model=self.settings.openai_model)]

        return [
            EndpointCandidate(version=self.settings.gemini_api_version, model=model)
            for model in self.settings.gemini_models
        ]

    async def request_move(self, request: OracleRequest) -> OracleResponse:
        """Ask the oracle for a move.

        Args:
            request: Position, history, persona and side to play.

        Returns:
            OracleResponse with the raw, unparsed move text.

        Raises:
            ConfigurationError: If no credential is configured.
            OracleEmptyResponseError: If an endpoint answered with no text.
            OracleUnavailableError: On a non-retryable error, or when the
                retryable endpoints are all exhausted.
            ExhaustedEndpointsError: If every endpoint was not found.
        """
        provider = self.provider
        endpoints = self.endpoints()
        prompt = build_move_prompt(request)
        attempts: list[EndpointAttempt] = []

        for endpoint in endpoints:
            attempt, payload, body = await self._call_endpoint(provider, endpoint, prompt)
            attempts.append(attempt)

            if attempt.outcome == EndpointOutcome.OK:
                logger.debug("Oracle answered via %s", endpoint.name)
                return OracleResponse(
                    text=extract_text(payload) or "",
                    endpoint=endpoint,
                    provider=provider,
                )

            if attempt.outcome.advances:
                logger.warning(
                    "Oracle endpoint %s failed (%s), trying next",
                    endpoint.name,
                    attempt.outcome.value,
                )
                continue

            if attempt.outcome == EndpointOutcome.EMPTY:
                reason = block_reason(payload)
                raise OracleEmptyResponseError(
                    message=(
                        f"Oracle returned no move text ({reason})"
                        if reason
                        else "Oracle returned no move text"
                    ),
                    block_reason=reason,
                    status_code=attempt.status_code,
                    response_body=body,
                    details={"endpoint": endpoint.name},
                )

            raise OracleUnavailableError(
                message=f"Oracle error from {endpoint.name}: {attempt.error or 'unknown error'}",
                status_code=attempt.status_code,
                response_body=body,
                details={"endpoint": endpoint.name},
            )

        names = [attempt.endpoint.name for attempt in attempts]

        if attempts and all(a.outcome == EndpointOutcome.NOT_FOUND for a in attempts):
            diagnostic = await self._diagnose(provider)
            raise ExhaustedEndpointsError(
                message="No oracle model endpoint was found",
                attempts=names,
                diagnostic=diagnostic,
            )

        last = attempts[-1] if attempts else None
        raise OracleUnavailableError(
            message="All oracle endpoints failed",
            status_code=last.status_code if last else None,
            details={
                "attempts": [f"{a.endpoint.name}: {a.outcome.value}" for a in attempts],
            },
        )

    async def list_models(self) -> list[str]:
        """List model names available to the credential.

        Returns:
            Model names, with the "models/" prefix removed for Gemini.

        Raises:
            ConfigurationError: If no credential is configured.
            OracleUnavailableError: If the listing call fails.
        """
        provider = self.provider
        client = self._get_client()

        if provider == ProviderFamily.OPENAI:
            url = f"{self.settings.openai_base_url.rstrip('/')}/models"
            kwargs: dict[str, Any] = {"headers": self._openai_headers()}
        else:
            url = (
                f"{self.settings.gemini_base_url.rstrip('/')}/"
                f"{self.settings.gemini_api_version}/models"
            )
            kwargs = {"params": {"key": self._api_key()}}

        try:
            response = await client.get(url, **kwargs)
        except httpx.RequestError as e:
            raise OracleUnavailableError(
                message=f"Model listing failed: {e}",
                details={"error_type": type(e).__name__},
            ) from e

        payload = self._decode(response)
        if response.status_code != 200:
            raise OracleUnavailableError(
                message=f"Model listing failed: {error_message(payload) or response.reason_phrase}",
                status_code=response.status_code,
                response_body=response.text[:MAX_BODY_CHARS],
            )

        if provider == ProviderFamily.OPENAI:
            entries = payload.get("data", []) if isinstance(payload, dict) else []
            return [str(entry.get("id")) for entry in entries if isinstance(entry, dict)]

        entries = payload.get("models", []) if isinstance(payload, dict) else []
        return [
            str(entry.get("name", "")).removeprefix("models/")
            for entry in entries
            if isinstance(entry, dict)
        ]

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MoveOracleClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    def _api_key(self) -> str:
        """Get the credential or raise ConfigurationError."""
        if not self.settings.has_credential:
            raise ConfigurationError("No oracle API key configured")
        return self.settings.api_key.get_secret_value().strip()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.settings.timeout,
                headers={"Content-Type": "application/json"},
            )
            self._owns_client = True
        return self._client

    def _openai_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key()}"}

    async def _call_endpoint(
        self,
        provider: ProviderFamily,
        endpoint: EndpointCandidate,
        prompt: str,
    ) -> tuple[EndpointAttempt, Any, str | None]:
        """Call one endpoint and classify the outcome.

        Returns:
            The attempt record, decoded payload and truncated raw body.
        """
        client = self._get_client()

        if provider == ProviderFamily.OPENAI:
            url = f"{self.settings.openai_base_url.rstrip('/')}/chat/completions"
            kwargs: dict[str, Any] = {
                "headers": self._openai_headers(),
                "json": {
                    "model": endpoint.model,
                    "messages": [{"role": "user", "content": prompt}],
                },
            }
        else:
            url = (
                f"{self.settings.gemini_base_url.rstrip('/')}/"
                f"{endpoint.version}/models/{endpoint.model}:generateContent"
            )
            kwargs = {
                "params": {"key": self._api_key()},
                "json": {"contents": [{"parts": [{"text": prompt}]}]},
            }

        try:
            response = await client.post(url, **kwargs)
        except httpx.RequestError as e:
            logger.warning("Oracle endpoint %s unreachable: %s", endpoint.name, e)
            attempt = EndpointAttempt(
                endpoint=endpoint,
                outcome=EndpointOutcome.SERVICE_UNAVAILABLE,
                error=f"{type(e).__name__}: {e}",
            )
            return attempt, None, None

        payload = self._decode(response)
        outcome = classify_response(response.status_code, payload)
        attempt = EndpointAttempt(
            endpoint=endpoint,
            outcome=outcome,
            status_code=response.status_code,
            error=None if outcome == EndpointOutcome.OK else error_message(payload),
        )
        return attempt, payload, response.text[:MAX_BODY_CHARS]

    async def _diagnose(self, provider: ProviderFamily) -> str:
        """Describe which models the credential can reach."""
        try:
            models = await self.list_models()
        except OracleUnavailableError as e:
            logger.warning("Oracle model listing failed: %s", e)
            return f"Model listing failed: {e}"

        if not models:
            return f"No {provider.value} models are available for this key"
        return f"Available models: {', '.join(models)}"

    def _decode(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None
