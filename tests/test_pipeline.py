"""Tests for the intent extraction pipeline."""
import asyncio

import pytest

from synapse.intent.errors import PipelineError, PipelineErrorKind, ValidationReason
from synapse.intent.pipeline import IntentExtractionPipeline
from synapse.intent.prompt import PROMPT_VERSION
from synapse.llm.base import LLMProvider, ProviderErrorTag, ProviderResponse
from synapse.models import Identity

MEETING_JSON = '{"intent":"create_event","confidence":0.9,"data":{"title":"Meeting","datetime":"2025-01-02T15:00:00Z"}}'
IDENTITY = Identity(user_id=7, subscription_tier="free")


class SlowProvider(LLMProvider):
    name = "slow"

    async def invoke(self, prompt: str) -> ProviderResponse:
        await asyncio.sleep(5)
        return ProviderResponse(raw_output=MEETING_JSON)


class RaisingProvider(LLMProvider):
    name = "raising"

    async def invoke(self, prompt: str) -> ProviderResponse:
        raise RuntimeError("adapter bug")


async def _kind(pipeline, text="Meeting tomorrow at 3pm") -> PipelineError:
    with pytest.raises(PipelineError) as excinfo:
        await pipeline.extract(text, {}, IDENTITY)
    return excinfo.value


@pytest.mark.asyncio
async def test_meeting_scenario(stub_provider):
    """Clean JSON from the provider comes back as the same intent."""
    provider = stub_provider(MEETING_JSON)
    intent = await IntentExtractionPipeline(provider).extract("Meeting tomorrow at 3pm", {}, IDENTITY)
    assert intent.to_dict() == {
        "intent": "create_event",
        "confidence": 0.9,
        "data": {"title": "Meeting", "datetime": "2025-01-02T15:00:00Z"},
    }
    assert len(provider.prompts) == 1
    assert '"Meeting tomorrow at 3pm"' in provider.prompts[0]


@pytest.mark.asyncio
async def test_fenced_none_intent(stub_provider):
    provider = stub_provider('```json\n{"intent":"none","confidence":0.1,"data":{"title":"","datetime":null}}\n```')
    intent = await IntentExtractionPipeline(provider).extract("hello there", None, IDENTITY)
    assert intent.intent == "none"
    assert intent.data.datetime is None


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   \n", None])
async def test_empty_input_never_calls_provider(stub_provider, text):
    provider = stub_provider(MEETING_JSON)
    error = await _kind(IntentExtractionPipeline(provider), text)
    assert error.kind is PipelineErrorKind.EMPTY_INPUT
    assert error.http_status == 400
    assert provider.prompts == []


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_output", [MEETING_JSON, "", "not json"])
async def test_safety_block_always_wins(stub_provider, raw_output):
    provider = stub_provider(ProviderResponse(raw_output=raw_output, error_tag=ProviderErrorTag.SAFETY_BLOCKED))
    error = await _kind(IntentExtractionPipeline(provider))
    assert error.kind is PipelineErrorKind.SAFETY_BLOCKED
    assert error.http_status == 400
    assert error.public_message == "Content flagged as unsafe"


@pytest.mark.asyncio
async def test_transport_error_is_provider_unavailable(stub_provider):
    provider = stub_provider(ProviderResponse.transport_error("HTTP 503"))
    error = await _kind(IntentExtractionPipeline(provider))
    assert error.kind is PipelineErrorKind.PROVIDER_UNAVAILABLE
    assert error.http_status == 500


@pytest.mark.asyncio
async def test_timeout_is_provider_unavailable():
    pipeline = IntentExtractionPipeline(SlowProvider(), timeout=0.05)
    error = await _kind(pipeline)
    assert error.kind is PipelineErrorKind.PROVIDER_UNAVAILABLE


@pytest.mark.asyncio
async def test_malformed_output(stub_provider):
    error = await _kind(IntentExtractionPipeline(stub_provider("I think it's a meeting")))
    assert error.kind is PipelineErrorKind.MALFORMED_OUTPUT
    assert error.http_status == 500
    assert error.public_message == "Parsing failed"


@pytest.mark.asyncio
async def test_schema_violation_wraps_reason(stub_provider):
    provider = stub_provider('{"intent":"delete_event","confidence":0.9,"data":{"title":"x","datetime":null}}')
    error = await _kind(IntentExtractionPipeline(provider))
    assert error.kind is PipelineErrorKind.INVALID_SCHEMA
    assert error.reason is ValidationReason.INVALID_INTENT
    assert "delete_event" in error.raw_output


@pytest.mark.asyncio
async def test_no_retry_on_failure(stub_provider):
    provider = stub_provider(ProviderResponse.transport_error("boom"))
    await _kind(IntentExtractionPipeline(provider))
    assert len(provider.prompts) == 1


@pytest.mark.asyncio
async def test_provider_exception_is_provider_unavailable():
    """An adapter that raises instead of tagging its response still maps to a 500 error."""
    error = await _kind(IntentExtractionPipeline(RaisingProvider()))
    assert error.kind is PipelineErrorKind.PROVIDER_UNAVAILABLE
    assert error.http_status == 500
    assert error.public_message == "Parsing failed"


@pytest.mark.asyncio
async def test_prompt_version_is_logged(stub_provider, caplog):
    caplog.set_level("INFO", logger="synapse.intent.pipeline")
    await IntentExtractionPipeline(stub_provider(MEETING_JSON)).extract("Meeting tomorrow at 3pm", {}, IDENTITY)
    assert any(f"prompt_version={PROMPT_VERSION}" in r.getMessage() for r in caplog.records)
