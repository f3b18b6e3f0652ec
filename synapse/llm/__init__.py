"""LLM providers for intent extraction."""

from synapse.llm.base import LLMProvider, ProviderErrorTag, ProviderResponse
from synapse.llm.factory import build_provider
from synapse.llm.gemini import GeminiProvider
from synapse.llm.openai_compat import ChatCompletionsProvider
from synapse.llm.rules import RuleBasedProvider

__all__ = [
    "LLMProvider",
    "ProviderErrorTag",
    "ProviderResponse",
    "GeminiProvider",
    "ChatCompletionsProvider",
    "RuleBasedProvider",
    "build_provider",
]
