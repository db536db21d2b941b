# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the move oracle client.

HTTP is served by httpx.MockTransport, so no network access is needed.
"""

import json
from collections.abc import Callable

import httpx
import pytest

from src.core.config.settings import OracleSettings
from src.domains.gaming.oracle.client import MoveOracleClient, detect_provider
from src.domains.gaming.oracle.exceptions import (
    ConfigurationError,
    ExhaustedEndpointsError,
    OracleEmptyResponseError,
    OracleUnavailableError,
)
from src.domains.gaming.oracle.models import OracleRequest, ProviderFamily
from src.domains.gaming.oracle.prompts import MOVE_INSTRUCTION, build_move_prompt

START_FEN = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"


def gemini_ok(text: str) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def gemini_error(status: int, message: str = "error") -> httpx.Response:
    return httpx.Response(status, json={"error": {"code": status, "message": message}})


def model_of(request: httpx.Request) -> str:
    """Get the model name from a generateContent URL."""
    return request.url.path.rsplit("/", 1)[-1].split(":")[0]


class Recorder:
    """MockTransport handler that records requests and answers per model."""

    def __init__(self, answers: dict[str, Callable[[], httpx.Response]]) -> None:
        self.answers = answers
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            return self.answers["list"]()
        return self.answers[model_of(request)]()

    @property
    def models_called(self) -> list[str]:
        return [model_of(r) for r in self.requests if r.method == "POST"]


def make_client(settings: OracleSettings, recorder: Recorder) -> MoveOracleClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return MoveOracleClient(settings, http_client=http_client)


@pytest.fixture
def request_move() -> OracleRequest:
    """Provide a move request after 1. e4."""
    return OracleRequest(fen=START_FEN, history=["e4"], persona="Play solid chess.")


class TestDetectProvider:
    """Tests for detect_provider."""

    @pytest.mark.parametrize(
        "key,provider",
        [
            ("sk-abc", ProviderFamily.OPENAI),
            ("AIzaSyExample", ProviderFamily.GEMINI),
            ("something-else", ProviderFamily.GEMINI),
        ],
    )
    def test_prefixes(self, key: str, provider: ProviderFamily) -> None:
        """OpenAI keys start with sk-; everything else is Gemini."""
        assert detect_provider(key) == provider


class TestGeminiFailover:
    """Tests for the ordered Gemini endpoint chain."""

    @pytest.mark.asyncio
    async def test_not_found_advances_in_order(
        self, gemini_settings: OracleSettings, request_move: OracleRequest
    ) -> None:
        """A and B are not found, C answers."""
        recorder = Recorder({
            "model-a": lambda: gemini_error(404),
            "model-b": lambda: gemini_error(404),
            "model-c": lambda: gemini_ok("e5"),
        })
        client = make_client(gemini_settings, recorder)

        response = await client.request_move(request_move)

        assert response.text == "e5"
        assert response.endpoint.model == "model-c"
        assert response.provider == ProviderFamily.GEMINI
        assert recorder.models_called == ["model-a", "model-b", "model-c"]

    @pytest.mark.asyncio
    async def test_first_success_stops_chain(
        self, gemini_settings: OracleSettings, request_move: OracleRequest
    ) -> None:
        """Later endpoints are not called after a success."""
        recorder = Recorder({
            "model-a": lambda: gemini_ok("Nf6"),
            "model-b": lambda: gemini_ok("d5"),
            "model-c": lambda: gemini_ok("c5"),
        })
        client = make_client(gemini_settings, recorder)

        response = await client.request_move(request_move)

        assert response.text == "Nf6"
        assert recorder.models_called == ["model-a"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [429, 503])
    async def test_retryable_status_advances(
        self, gemini_settings: OracleSettings, request_move: OracleRequest, status: int
    ) -> None:
        """Rate limiting and unavailability try the next endpoint."""
        recorder = Recorder({
            "model-a": lambda: gemini_error(status),
            "model-b": lambda: gemini_ok("e5"),
            "model-c": lambda: gemini_ok("d5"),
        })
        client = make_client(gemini_settings, recorder)

        response = await client.request_move(request_move)

        assert response.text == "e5"
        assert recorder.models_called == ["model-a", "model-b"]

    @pytest.mark.asyncio
    async def test_transport_error_advances(
        self, gemini_settings: OracleSettings, request_move: OracleRequest
    ) -> None:
        """A connection failure counts as service unavailable."""

        def refuse() -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        recorder = Recorder({
            "model-a": refuse,
            "model-b": lambda: gemini_ok("e5"),
            "model-c": lambda: gemini_ok("d5"),
        })
        client = make_client(gemini_settings, recorder)

        response = await client.request_move(request_move)

        assert response.endpoint.model == "model-b"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            httpx.DecodingError("bad gzip stream"),
            httpx.TooManyRedirects("redirect loop"),
            httpx.ReadTimeout("read timed out"),
        ],
    )
    async def test_request_error_advances(
        self,
        gemini_settings: OracleSettings,
        request_move: OracleRequest,
        error: httpx.RequestError,
    ) -> None:
        """Any request error on one endpoint moves on to the next."""

        def fail() -> httpx.Response:
            raise error

        recorder = Recorder({
            "model-a": fail,
            "model-b": lambda: gemini_ok("e5"),
            "model-c": lambda: gemini_ok("d5"),
        })
        client = make_client(gemini_settings, recorder)

        response = await client.request_move(request_move)

        assert response.text == "e5"
        assert recorder.models_called == ["model-a", "model-b"]

    @pytest.mark.asyncio
    async def test_request_errors_everywhere_raise_unavailable(
        self, gemini_settings: OracleSettings, request_move: OracleRequest
    ) -> None:
        """Request errors on every endpoint surface as OracleUnavailableError."""

        def fail() -> httpx.Response:
            raise httpx.DecodingError("bad gzip stream")

        recorder = Recorder({"model-a": fail, "model-b": fail, "model-c": fail})
        client = make_client(gemini_settings, recorder)

        with pytest.raises(OracleUnavailableError, match="All oracle endpoints failed"):
            await client.request_move(request_move)

        assert recorder.models_called == ["model-a", "model-b", "model-c"]

    @pytest.mark.asyncio
    async def test_undecodable_listing_after_not_found(
        self, gemini_settings: OracleSettings, request_move: OracleRequest
    ) -> None:
        """A listing request error still ends in ExhaustedEndpointsError."""

        def fail() -> httpx.Response:
            raise httpx.DecodingError("bad gzip stream")

        recorder = Recorder({
            "model-a": lambda: gemini_error(404),
            "model-b": lambda: gemini_error(404),
            "model-c": lambda: gemini_error(404),
            "list": fail,
        })
        client = make_client(gemini_settings, recorder)

        with pytest.raises(ExhaustedEndpointsError) as exc_info:
            await client.request_move(request_move)

        assert exc_info.value.diagnostic.startswith("Model listing failed")

    @pytest.mark.asyncio
    async def test_other_error_stops_chain(
        self, gemini_settings: OracleSettings, request_move: OracleRequest
    ) -> None:
        """A 500 stops without trying later endpoints."""
        recorder = Recorder({
            "model-a": lambda: gemini_error(500, "internal"),
            "model-b": lambda: gemini_ok("e5"),
            "model-c": lambda: gemini_ok("d5"),
        })
        client = make_client(gemini_settings, recorder)

        with pytest.raises(OracleUnavailableError) as exc_info:
            await client.request_move(request_move)

        assert exc_info.value.status_code == 500
        assert "internal" in str(exc_info.value)
        assert recorder.models_called == ["model-a"]

    @pytest.mark.asyncio
    async def test_blocked_answer_stops_chain(
        self, gemini_settings: OracleSettings, request_move: OracleRequest
    ) -> None:
        """A success with no text is final and reports the block reason."""
        recorder = Recorder({
            "model-a": lambda: httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}}),
            "model-b": lambda: gemini_ok("e5"),
            "model-c": lambda: gemini_ok("d5"),
        })
        client = make_client(gemini_settings, recorder)

        with pytest.raises(OracleEmptyResponseError) as exc_info:
            await client.request_move(request_move)

        assert exc_info.value.block_reason == "SAFETY"
        assert recorder.models_called == ["model-a"]

    @pytest.mark.asyncio
    async def test_all_not_found_lists_models(
        self, gemini_settings: OracleSettings, request_move: OracleRequest
    ) -> None:
        """When nothing is found, one listing call is attached as a diagnostic."""
        recorder = Recorder({
            "model-a": lambda: gemini_error(404),
            "model-b": lambda: gemini_error(404),
            "model-c": lambda: gemini_error(404),
            "list": lambda: httpx.Response(
                200,
                json={"models": [{"name": "models/gemini-pro"}, {"name": "models/embedding-001"}]},
            ),
        })
        client = make_client(gemini_settings, recorder)

        with pytest.raises(ExhaustedEndpointsError) as exc_info:
            await client.request_move(request_move)

        error = exc_info.value
        assert error.attempts == ["v1beta/model-a", "v1beta/model-b", "v1beta/model-c"]
        assert error.diagnostic == "Available models: gemini-pro, embedding-001"
        assert [r.method for r in recorder.requests].count("GET") == 1

    @pytest.mark.asyncio
    async def test_mixed_failures_exhaust_without_listing(
        self, gemini_settings: OracleSettings, request_move: OracleRequest
    ) -> None:
        """Retryable failures that are not all not-found raise OracleUnavailableError."""
        recorder = Recorder({
            "model-a": lambda: gemini_error(404),
            "model-b": lambda: gemini_error(429),
            "model-c": lambda: gemini_error(503),
        })
        client = make_client(gemini_settings, recorder)

        with pytest.raises(OracleUnavailableError, match="All oracle endpoints failed"):
            await client.request_move(request_move)

        assert all(r.method == "POST" for r in recorder.requests)

    @pytest.mark.asyncio
    async def test_request_shape(
        self, gemini_settings: OracleSettings, request_move: OracleRequest
    ) -> None:
        """The key is a query parameter and the prompt is a single text part."""
        recorder = Recorder({"model-a": lambda: gemini_ok("e5")})
        client = make_client(gemini_settings, recorder)

        await client.request_move(request_move)

        sent = recorder.requests[0]
        assert sent.url.path == "/v1beta/models/model-a:generateContent"
        assert sent.url.params["key"] == "AIza-test-key"
        body = json.loads(sent.content)
        assert body["contents"][0]["parts"][0]["text"] == build_move_prompt(request_move)


class TestOpenAIProvider:
    """Tests for the OpenAI provider family."""

    @pytest.mark.asyncio
    async def test_chat_completion(
        self, openai_settings: OracleSettings, request_move: OracleRequest
    ) -> None:
        """OpenAI keys use one chat-completions endpoint with a bearer token."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"choices": [{"message": {"content": "e7e5"}}]})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = MoveOracleClient(openai_settings, http_client=http_client)

        response = await client.request_move(request_move)

        assert response.text == "e7e5"
        assert response.provider == ProviderFamily.OPENAI
        assert len(requests) == 1
        assert requests[0].url.path == "/v1/chat/completions"
        assert requests[0].headers["Authorization"] == "Bearer sk-test-key"
        body = json.loads(requests[0].content)
        assert body["model"] == "gpt-3.5-turbo"
        assert body["messages"][0]["role"] == "user"

    @pytest.mark.asyncio
    async def test_list_models(self, openai_settings: OracleSettings) -> None:
        """Model listing reads the data ids."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [{"id": "gpt-4o"}, {"id": "gpt-3.5-turbo"}]})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = MoveOracleClient(openai_settings, http_client=http_client)

        assert await client.list_models() == ["gpt-4o", "gpt-3.5-turbo"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [httpx.DecodingError("bad gzip stream"), httpx.TooManyRedirects("redirect loop")],
    )
    async def test_list_models_request_error(
        self, openai_settings: OracleSettings, error: httpx.RequestError
    ) -> None:
        """A request error during listing raises OracleUnavailableError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise error

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = MoveOracleClient(openai_settings, http_client=http_client)

        with pytest.raises(OracleUnavailableError, match="Model listing failed"):
            await client.list_models()


class TestConfiguration:
    """Tests for missing or explicit provider configuration."""

    @pytest.mark.asyncio
    async def test_missing_key_makes_no_call(self, request_move: OracleRequest) -> None:
        """No credential raises ConfigurationError before any HTTP call."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return gemini_ok("e5")

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = MoveOracleClient(OracleSettings(api_key=None), http_client=http_client)

        assert client.is_configured is False
        with pytest.raises(ConfigurationError):
            await client.request_move(request_move)
        assert requests == []

    def test_blank_key_is_not_configured(self) -> None:
        """A whitespace-only key counts as missing."""
        client = MoveOracleClient(OracleSettings(api_key="   "))  # type: ignore[arg-type]

        assert client.is_configured is False

    def test_explicit_provider_overrides_detection(self) -> None:
        """An explicit provider wins over the key prefix."""
        settings = OracleSettings(api_key="sk-test", provider="gemini")  # type: ignore[arg-type]

        assert MoveOracleClient(settings).provider == ProviderFamily.GEMINI

    def test_gemini_endpoints_follow_model_order(self, gemini_settings: OracleSettings) -> None:
        """Endpoints are built from the configured models, in order."""
        names = [e.name for e in MoveOracleClient(gemini_settings).endpoints()]

        assert names == ["v1beta/model-a", "v1beta/model-b", "v1beta/model-c"]

    @pytest.mark.asyncio
    async def test_context_manager_closes_own_client(self, gemini_settings: OracleSettings) -> None:
        """The lazily created client is closed on exit."""
        async with MoveOracleClient(gemini_settings) as client:
            http_client = client._get_client()

        assert http_client.is_closed


class TestBuildMovePrompt:
    """Tests for prompt construction."""

    def test_contains_position_and_persona(self, request_move: OracleRequest) -> None:
        """The prompt carries persona, FEN, history, side and instruction."""
        prompt = build_move_prompt(request_move)

        assert prompt.splitlines()[0] == "Play solid chess."
        assert f"Current FEN: {START_FEN}" in prompt
        assert "History: e4" in prompt
        assert "You play as BLACK." in prompt
        assert prompt.endswith(MOVE_INSTRUCTION)

    def test_empty_history(self) -> None:
        """An empty history is spelled out."""
        prompt = build_move_prompt(OracleRequest(fen=START_FEN))

        assert "History: (none)" in prompt
