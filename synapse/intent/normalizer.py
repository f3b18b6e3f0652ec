"""Turns raw provider output into a candidate object."""
import json
import re
from typing import Any

from synapse.intent.errors import PipelineError, PipelineErrorKind
from synapse.llm.base import ProviderErrorTag, ProviderResponse

# Opening fence with optional language tag, closing fence at the very end
_OPEN_FENCE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\r?\n?")
_CLOSE_FENCE = re.compile(r"\r?\n?```\s*$")


def strip_code_fences(text: str) -> str:
    """
    Remove leading/trailing markdown code fences, if any.

    Accepts both fenced (```json ... ```) and plain input.
    """
    text = text.strip()
    if text.startswith("```"):
        text = _OPEN_FENCE.sub("", text, count=1)
        text = _CLOSE_FENCE.sub("", text, count=1)
    return text.strip()


def normalize(response: ProviderResponse) -> dict[str, Any]:
    """
    Normalize a provider response into a candidate dict.

    Args:
        response: Result of one provider invocation

    Returns:
        Parsed JSON object, not yet schema-validated

    Raises:
        PipelineError: safety-blocked / provider-unavailable when the provider
            tagged the response, malformed-output when the text is not a JSON object
    """
    if response.error_tag is ProviderErrorTag.SAFETY_BLOCKED:
        raise PipelineError(
            PipelineErrorKind.SAFETY_BLOCKED,
            response.detail or "Provider refused the content",
        )
    if response.error_tag is ProviderErrorTag.TRANSPORT_ERROR:
        raise PipelineError(
            PipelineErrorKind.PROVIDER_UNAVAILABLE,
            response.detail or "Provider call failed",
        )

    cleaned = strip_code_fences(response.raw_output)
    try:
        candidate = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise PipelineError(
            PipelineErrorKind.MALFORMED_OUTPUT,
            f"Failed to parse LLM response as JSON: {e}",
            raw_output=response.raw_output,
        ) from e

    if not isinstance(candidate, dict):
        raise PipelineError(
            PipelineErrorKind.MALFORMED_OUTPUT,
            f"Expected a JSON object, got {type(candidate).__name__}",
            raw_output=response.raw_output,
        )
    return candidate
