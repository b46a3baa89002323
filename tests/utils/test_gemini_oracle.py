"""Tests for the Gemini dimension oracle using httpx.MockTransport."""

import json
from collections.abc import Callable

import httpx
import pytest

from cl_batch_fit.common.dimension_oracle import DimensionOracle
from cl_batch_fit.common.errors import DimensionOracleError
from cl_batch_fit.utils.gemini_oracle import (
    DEFAULT_MODEL,
    RESPONSE_SCHEMA,
    GeminiDimensionOracle,
    build_prompt,
)

Handler = Callable[[httpx.Request], httpx.Response]


def gemini_reply(text: str) -> dict[str, object]:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def make_oracle(handler: Handler, **kwargs: object) -> GeminiDimensionOracle:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiDimensionOracle("test-key", client=client, **kwargs)  # pyright: ignore[reportArgumentType]


# ============================================================================
# SUCCESS TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_suggest_dimensions_success():
    """Test a well-formed reply becomes a DimensionSuggestion."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=gemini_reply('{"width": 1080, "height": 1920, "reasoning": "Formato vertical 9:16"}'),
        )

    suggestion = await make_oracle(handler).suggest_dimensions("  Instagram story ")

    assert (suggestion.width, suggestion.height) == (1080, 1920)
    assert suggestion.reasoning == "Formato vertical 9:16"

    [request] = seen
    assert request.method == "POST"
    assert request.url.path.endswith(f"/models/{DEFAULT_MODEL}:generateContent")
    assert request.headers["x-goog-api-key"] == "test-key"

    body = json.loads(request.content)
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert body["generationConfig"]["responseSchema"] == RESPONSE_SCHEMA
    assert '"Instagram story"' in body["contents"][0]["parts"][0]["text"]


@pytest.mark.asyncio
async def test_reasoning_optional():
    """Test a reply without reasoning is still usable."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=gemini_reply('{"width": 1280, "height": 720}'))

    suggestion = await make_oracle(handler).suggest_dimensions("YouTube thumbnail")

    assert (suggestion.width, suggestion.height) == (1280, 720)
    assert suggestion.reasoning == ""


def test_oracle_satisfies_protocol():
    """Test the Gemini oracle implements the DimensionOracle protocol."""
    assert isinstance(GeminiDimensionOracle("k"), DimensionOracle)


def test_prompt_language():
    """Test the prompt embeds the query and the reasoning language."""
    prompt = build_prompt("4K wallpaper", "English")

    assert '"4K wallpaper"' in prompt
    assert "English" in prompt


def test_custom_model_endpoint():
    """Test the endpoint follows the configured model."""
    oracle = GeminiDimensionOracle("k", model="gemini-custom")

    assert oracle.endpoint.endswith("/models/gemini-custom:generateContent")


def test_api_key_required():
    """Test an empty key is rejected at construction."""
    with pytest.raises(ValueError):
        _ = GeminiDimensionOracle("")


# ============================================================================
# FAILURE TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_empty_query_rejected():
    """Test a blank query fails without a request."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=gemini_reply("{}"))

    with pytest.raises(DimensionOracleError):
        _ = await make_oracle(handler).suggest_dimensions("   ")

    assert calls == []


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": {"message": "internal"}}),
        httpx.Response(403, json={"error": {"message": "bad key"}}),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"candidates": []}),
        httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}}),
        httpx.Response(200, json=gemini_reply("")),
        httpx.Response(200, json=gemini_reply("width is 1080")),
        httpx.Response(200, json=gemini_reply('{"width": 0, "height": 1080}')),
        httpx.Response(200, json=gemini_reply('{"width": 1080}')),
    ],
    ids=[
        "server-error",
        "forbidden",
        "non-json",
        "no-candidates",
        "blocked",
        "empty-text",
        "prose",
        "zero-width",
        "missing-height",
    ],
)
@pytest.mark.asyncio
async def test_unusable_replies_raise(response: httpx.Response):
    """Test every unusable reply surfaces as DimensionOracleError."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            response.status_code,
            content=response.content,
            headers={"content-type": response.headers.get("content-type", "text/plain")},
        )

    with pytest.raises(DimensionOracleError):
        _ = await make_oracle(handler).suggest_dimensions("Instagram post")


@pytest.mark.asyncio
async def test_network_error_wrapped():
    """Test transport errors surface as DimensionOracleError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DimensionOracleError):
        _ = await make_oracle(handler).suggest_dimensions("Instagram post")
