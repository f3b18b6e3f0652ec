"""Google Gemini provider (structured JSON output)."""
import logging
from typing import Any

import httpx

from synapse.intent.schema import RESPONSE_SCHEMA
from synapse.llm.base import LLMProvider, ProviderResponse

logger = logging.getLogger(__name__)

# Constants
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_GEMINI_TIMEOUT = 30.0
DEFAULT_GEMINI_TEMPERATURE = 0.2
SAFETY_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII"}


class GeminiProvider(LLMProvider):
    """Gemini generateContent provider forced into JSON mode."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        timeout: float = DEFAULT_GEMINI_TIMEOUT,
        temperature: float = DEFAULT_GEMINI_TEMPERATURE,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize Gemini provider.

        Args:
            api_key: Google AI Studio API key
            model: Model name (default: gemini-1.5-flash)
            base_url: API base URL
            timeout: Request timeout in seconds
            temperature: Sampling temperature, kept low for schema compliance
            client: Pre-built HTTP client (tests inject a mock transport)
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.temperature = temperature
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
                "temperature": self.temperature,
            },
        }

    async def invoke(self, prompt: str) -> ProviderResponse:
        """Call generateContent and return the first candidate's text."""
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            response = await self.client.post(
                url,
                json=self._payload(prompt),
                headers={"x-goog-api-key": self.api_key},
            )
        except httpx.HTTPError as e:
            logger.error(f"Gemini API error: {e!r}")
            return ProviderResponse.transport_error(f"Failed to call Gemini: {e!r}")

        if response.is_error:
            body = response.text
            # Gemini rejects some prompts outright with a SAFETY status message
            if "SAFETY" in body.upper():
                logger.warning("Gemini refused prompt (HTTP %s)", response.status_code)
                return ProviderResponse.safety_blocked(f"Gemini HTTP {response.status_code}: safety")
            logger.error("Gemini API error: HTTP %s %s", response.status_code, body[:500])
            return ProviderResponse.transport_error(f"Gemini HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Gemini returned a non-JSON envelope: {e}")
            return ProviderResponse.transport_error("Gemini returned a non-JSON envelope")

        try:
            return self._parse_envelope(data)
        except (AttributeError, TypeError, KeyError, IndexError) as e:
            logger.error(f"Gemini returned an unexpected envelope: {e!r}")
            return ProviderResponse.transport_error("Gemini returned an unexpected envelope")

    def _parse_envelope(self, data: dict[str, Any]) -> ProviderResponse:
        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            logger.warning("Gemini blocked prompt: %s", block_reason)
            return ProviderResponse.safety_blocked(f"Prompt blocked: {block_reason}")

        candidates = data.get("candidates") or []
        if not candidates:
            return ProviderResponse(raw_output="", detail="Gemini returned no candidates")

        candidate = candidates[0]
        finish_reason = candidate.get("finishReason")
        if finish_reason in SAFETY_FINISH_REASONS:
            logger.warning("Gemini stopped generation: %s", finish_reason)
            return ProviderResponse.safety_blocked(f"Response blocked: {finish_reason}")

        parts = (candidate.get("content") or {}).get("parts") or []
        raw_content = "".join(part.get("text", "") for part in parts)
        logger.info("LLM raw response: %s", raw_content)
        return ProviderResponse(raw_output=raw_content)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
