"""Intent extraction pipeline: prompt -> provider -> normalize -> validate."""
import asyncio
import logging
from typing import Any, Mapping

from synapse.intent.errors import PipelineError, PipelineErrorKind
from synapse.intent.normalizer import normalize
from synapse.intent.prompt import PROMPT_VERSION, PromptBuilder
from synapse.intent.schema import Intent, validate_intent
from synapse.llm.base import LLMProvider, ProviderResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class IntentExtractionPipeline:
    """Turns free text into a validated Intent using one LLM provider.

    The pipeline never retries and never records usage; both are caller
    decisions.
    """

    def __init__(
        self,
        provider: LLMProvider,
        timeout: float = DEFAULT_TIMEOUT,
        prompt_builder: PromptBuilder | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            provider: LLM provider to call
            timeout: Upper bound in seconds for one provider call
            prompt_builder: Override prompt builder (defaults to packaged template)
        """
        self.provider = provider
        self.timeout = timeout
        self.prompt_builder = prompt_builder or PromptBuilder()

    async def _invoke(self, prompt: str) -> ProviderResponse:
        try:
            return await asyncio.wait_for(self.provider.invoke(prompt), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("LLM call timed out after %.1fs (provider=%s)", self.timeout, self.provider.name)
            return ProviderResponse.transport_error(f"Timed out after {self.timeout}s")
        except Exception as e:
            logger.exception("LLM call failed unexpectedly (provider=%s)", self.provider.name)
            return ProviderResponse.transport_error(f"Provider raised {type(e).__name__}")

    async def extract(
        self,
        raw_text: str | None,
        context: Mapping[str, Any] | None = None,
        identity: Any = None,
    ) -> Intent:
        """
        Extract an intent from user text.

        Args:
            raw_text: User text; empty or whitespace-only input is rejected
                before the provider is called
            context: Optional client context, serialized into the prompt
            identity: Resolved caller identity, used for log correlation only

        Returns:
            Validated Intent

        Raises:
            PipelineError: First failure encountered
        """
        if not raw_text or not raw_text.strip():
            raise PipelineError(PipelineErrorKind.EMPTY_INPUT, "Text input is required")

        user_id = getattr(identity, "user_id", None)
        prompt = self.prompt_builder.build(raw_text, context)
        logger.info(
            "Calling LLM for intent extraction (user_id=%s, provider=%s, prompt_version=%s, text=%r)",
            user_id,
            self.provider.name,
            PROMPT_VERSION,
            raw_text[:80] + "..." if len(raw_text) > 80 else raw_text,
        )

        response = await self._invoke(prompt)

        try:
            candidate = normalize(response)
            intent = validate_intent(candidate)
        except PipelineError as e:
            if e.kind is PipelineErrorKind.SAFETY_BLOCKED:
                logger.warning("Extraction blocked by provider safety filter (user_id=%s): %s", user_id, e)
            elif e.kind is PipelineErrorKind.PROVIDER_UNAVAILABLE:
                logger.error("Provider unavailable (user_id=%s): %s", user_id, e)
            else:
                if e.raw_output is None:
                    e.raw_output = response.raw_output
                logger.error("Provider broke output contract (user_id=%s): %s\nResponse: %s", user_id, e, e.raw_output)
            raise

        logger.info("Intent extracted (user_id=%s): %s confidence=%.2f", user_id, intent.intent, intent.confidence)
        return intent
