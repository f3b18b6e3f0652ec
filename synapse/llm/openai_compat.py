"""OpenAI-compatible chat completions provider (Ollama on localhost by default)."""
import logging
import os
from typing import Any

import httpx

from synapse.llm.base import LLMProvider, ProviderResponse

logger = logging.getLogger(__name__)

# Constants
DEFAULT_BASE_URL = "http://localhost:11434/v1"
DEFAULT_MODEL = "llama3.2"
DEFAULT_TIMEOUT = 30.0
DEFAULT_TEMPERATURE = 0.1
SYSTEM_MESSAGE = "You are a precise JSON-only intent parser. Return only valid JSON."
SAFETY_ERROR_CODES = {"content_filter", "content_policy_violation"}


class ChatCompletionsProvider(LLMProvider):
    """Free-text provider speaking the /chat/completions protocol.

    Works with OpenAI, Azure-style gateways and Ollama's /v1 endpoint. Output
    is not guaranteed to be clean JSON and often arrives inside markdown fences.
    """

    name = "openai"

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        temperature: float = DEFAULT_TEMPERATURE,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize chat completions provider.

        Args:
            base_url: API base URL (default: http://localhost:11434/v1)
            model: Model name to use (default: llama3.2)
            api_key: Bearer key, optional for local servers
            timeout: Request timeout in seconds
            temperature: Sampling temperature
            client: Pre-built HTTP client (tests inject a mock transport)
        """
        self.base_url = (base_url or os.getenv("OPENAI_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        self.model = model or os.getenv("OPENAI_MODEL", DEFAULT_MODEL)
        self.api_key = api_key
        self.timeout = timeout
        self.temperature = temperature
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _headers(self) -> dict[str, str]:
        if self.api_key:
            return {"Authorization": f"Bearer {self.api_key}"}
        return {}

    async def invoke(self, prompt: str) -> ProviderResponse:
        """Send the prompt as a single user turn and return the first choice."""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.temperature,
            "stream": False,
        }

        try:
            response = await self.client.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.error(f"Chat completions API error: {e!r}")
            return ProviderResponse.transport_error(f"Failed to call {self.base_url}: {e!r}")

        if response.is_error:
            code = _error_code(response)
            if code in SAFETY_ERROR_CODES:
                logger.warning("Provider refused prompt: %s", code)
                return ProviderResponse.safety_blocked(f"Prompt rejected: {code}")
            logger.error("Chat completions API error: HTTP %s %s", response.status_code, response.text[:500])
            return ProviderResponse.transport_error(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Chat completions returned a non-JSON envelope: {e}")
            return ProviderResponse.transport_error("Non-JSON envelope")

        try:
            return self._parse_envelope(data)
        except (AttributeError, TypeError, KeyError, IndexError) as e:
            logger.error(f"Chat completions returned an unexpected envelope: {e!r}")
            return ProviderResponse.transport_error("Unexpected envelope")

    def _parse_envelope(self, data: dict[str, Any]) -> ProviderResponse:
        choices = data.get("choices") or []
        if not choices:
            return ProviderResponse(raw_output="", detail="No choices in response")

        choice = choices[0]
        message = choice.get("message") or {}
        if choice.get("finish_reason") == "content_filter" or message.get("refusal"):
            logger.warning("Provider filtered response (finish_reason=%s)", choice.get("finish_reason"))
            return ProviderResponse.safety_blocked("Response filtered by provider")

        raw_content = message.get("content") or ""
        if not isinstance(raw_content, str):
            raise TypeError(f"message content is {type(raw_content).__name__}, expected str")
        logger.info("LLM raw response: %s", raw_content)
        return ProviderResponse(raw_output=raw_content)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _error_code(response: httpx.Response) -> str | None:
    """Extract `error.code` from an OpenAI-style error body."""
    try:
        body = response.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("code")
    return None
