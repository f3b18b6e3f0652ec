"""Provider selection from configuration."""
import logging

from synapse.config import Config
from synapse.llm.base import LLMProvider
from synapse.llm.gemini import GeminiProvider
from synapse.llm.openai_compat import ChatCompletionsProvider
from synapse.llm.rules import RuleBasedProvider

logger = logging.getLogger(__name__)


def build_provider(config: Config) -> LLMProvider:
    """
    Create the primary LLM provider named by LLM_PROVIDER.

    Raises:
        ValueError: Unknown provider name or missing credentials
    """
    name = config.llm_provider
    if name == "gemini":
        if not config.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required when LLM_PROVIDER=gemini")
        provider: LLMProvider = GeminiProvider(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            timeout=config.llm_timeout,
        )
    elif name == "openai":
        provider = ChatCompletionsProvider(
            base_url=config.openai_base_url,
            model=config.openai_model,
            api_key=config.openai_api_key,
            timeout=config.llm_timeout,
        )
    elif name == "rules":
        provider = RuleBasedProvider()
    else:
        raise ValueError(f"Unknown LLM_PROVIDER: {name!r}")

    logger.info("Using LLM provider: %s", provider.name)
    return provider
