"""Intent extraction: prompt building, output normalization and schema validation."""

from synapse.intent.errors import PipelineError, PipelineErrorKind, ValidationReason
from synapse.intent.normalizer import normalize, strip_code_fences
from synapse.intent.pipeline import IntentExtractionPipeline
from synapse.intent.prompt import PROMPT_VERSION, PromptBuilder, build_prompt
from synapse.intent.schema import INTENT_VALUES, Intent, IntentData, validate_intent

__all__ = [
    "IntentExtractionPipeline",
    "PipelineError",
    "PipelineErrorKind",
    "ValidationReason",
    "PromptBuilder",
    "build_prompt",
    "normalize",
    "strip_code_fences",
    "validate_intent",
    "Intent",
    "IntentData",
    "INTENT_VALUES",
    "PROMPT_VERSION",
]
