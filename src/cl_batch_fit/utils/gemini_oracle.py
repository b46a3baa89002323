"""Gemini-backed dimension oracle.

Asks a Gemini model, through the public ``generateContent`` REST endpoint,
for the usual pixel dimensions of a platform or use case ("Instagram story",
"4K wallpaper", ...). The response is constrained to a JSON schema and
validated before it reaches the caller.
"""

import json
from typing import cast

from typing_extensions import override

import httpx
from loguru import logger
from pydantic import ValidationError

from ..common.dimension_oracle import DimensionOracle, DimensionSuggestion
from ..common.errors import DimensionOracleError

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"

RESPONSE_SCHEMA: dict[str, object] = {
    "type": "OBJECT",
    "properties": {
        "width": {"type": "INTEGER", "description": "Recommended width in pixels"},
        "height": {"type": "INTEGER", "description": "Recommended height in pixels"},
        "reasoning": {
            "type": "STRING",
            "description": "Short explanation (max 10 words)",
        },
    },
    "required": ["width", "height", "reasoning"],
}


def build_prompt(query: str, language: str = "Spanish") -> str:
    return (
        "Suggest the best image width and height for this platform or use case: "
        + f'"{query}". Return standard pixel dimensions used in 2024/2025. '
        + f"Write the reasoning in {language}."
    )


class GeminiDimensionOracle(DimensionOracle):
    """DimensionOracle implementation calling the Gemini REST API with httpx."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        timeout: float = 30.0,
        language: str = "Spanish",
        client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            api_key: Gemini API key
            model: Model name, e.g. "gemini-2.5-flash"
            timeout: Request timeout in seconds
            language: Language of the returned reasoning
            client: Optional pre-configured client (tests inject a MockTransport)
        """
        if not api_key:
            raise ValueError("A Gemini API key is required")

        self.api_key: str = api_key
        self.model: str = model
        self.timeout: float = timeout
        self.language: str = language
        self._client: httpx.AsyncClient | None = client

    @property
    def endpoint(self) -> str:
        return f"{GEMINI_API_BASE}/models/{self.model}:generateContent"

    def _request_body(self, query: str) -> dict[str, object]:
        return {
            "contents": [{"role": "user", "parts": [{"text": build_prompt(query, self.language)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    async def _post(self, query: str) -> httpx.Response:
        headers = {"x-goog-api-key": self.api_key}
        body = self._request_body(query)

        if self._client is not None:
            return await self._client.post(self.endpoint, json=body, headers=headers, timeout=self.timeout)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.endpoint, json=body, headers=headers)

    @staticmethod
    def _extract_text(payload: object) -> str:
        try:
            candidates = cast(list[dict[str, object]], cast(dict[str, object], payload)["candidates"])
            content = cast(dict[str, object], candidates[0]["content"])
            parts = cast(list[dict[str, object]], content["parts"])
            text = "".join(str(part.get("text", "")) for part in parts)
        except (KeyError, IndexError, TypeError) as exc:
            raise DimensionOracleError(f"Unexpected response shape: {exc}") from exc

        if not text.strip():
            raise DimensionOracleError("No suggestion was returned")
        return text

    @override
    async def suggest_dimensions(self, query: str) -> DimensionSuggestion:
        query = query.strip()
        if not query:
            raise DimensionOracleError("Query is empty")

        try:
            response = await self._post(query)
            _ = response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.error(f"Gemini request failed: {exc}")
            raise DimensionOracleError(f"Gemini request failed: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise DimensionOracleError("Gemini returned a non-JSON body") from exc

        text = self._extract_text(payload)

        try:
            suggestion = DimensionSuggestion.model_validate_json(text)
        except ValidationError as exc:
            logger.error(f"Gemini returned an unusable suggestion: {text!r}")
            raise DimensionOracleError(f"Invalid suggestion: {exc}") from exc

        logger.info(f"Suggested {suggestion.width}x{suggestion.height} for {query!r}")
        return suggestion
