"""Tests for provider output normalization."""
import pytest

from synapse.intent.errors import PipelineError, PipelineErrorKind
from synapse.intent.normalizer import normalize, strip_code_fences
from synapse.llm.base import ProviderErrorTag, ProviderResponse

RAW = '{"intent":"none","confidence":0.1,"data":{"title":"","datetime":null}}'


@pytest.mark.parametrize(
    "wrapped",
    [
        f"```json\n{RAW}\n```",
        f"```\n{RAW}\n```",
        f"  ```JSON\n{RAW}\n```  \n",
        f"```json {RAW}```",
        f"\n\n{RAW}\n",
    ],
)
def test_fenced_and_plain_give_same_candidate(wrapped):
    """Fences and surrounding whitespace are ignored."""
    assert normalize(ProviderResponse(raw_output=wrapped)) == normalize(ProviderResponse(raw_output=RAW))


def test_strip_code_fences_leaves_plain_text():
    assert strip_code_fences(" {\"a\": 1} ") == '{"a": 1}'


def test_safety_tag_short_circuits_parsing():
    """A safety block wins even when the output is valid JSON."""
    response = ProviderResponse(raw_output=RAW, error_tag=ProviderErrorTag.SAFETY_BLOCKED)
    with pytest.raises(PipelineError) as excinfo:
        normalize(response)
    assert excinfo.value.kind is PipelineErrorKind.SAFETY_BLOCKED


def test_transport_tag_is_provider_unavailable():
    with pytest.raises(PipelineError) as excinfo:
        normalize(ProviderResponse.transport_error("connection refused"))
    assert excinfo.value.kind is PipelineErrorKind.PROVIDER_UNAVAILABLE


def test_malformed_output_keeps_raw_text():
    """Unparseable output is reported with the offending text attached."""
    raw = "Sure! Here is the intent: create_event"
    with pytest.raises(PipelineError) as excinfo:
        normalize(ProviderResponse(raw_output=raw))
    assert excinfo.value.kind is PipelineErrorKind.MALFORMED_OUTPUT
    assert excinfo.value.raw_output == raw
    assert raw not in excinfo.value.public_message


def test_json_array_is_malformed():
    with pytest.raises(PipelineError) as excinfo:
        normalize(ProviderResponse(raw_output="[1, 2]"))
    assert excinfo.value.kind is PipelineErrorKind.MALFORMED_OUTPUT
