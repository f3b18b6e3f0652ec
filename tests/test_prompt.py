"""Tests for prompt construction."""
import json

import pytest

from synapse.intent.prompt import PromptBuilder, build_prompt, serialize_context


def test_build_is_deterministic():
    """Identical inputs give byte-identical prompts."""
    context = {"url": "https://mail.example.com", "timezone": "Europe/Rome", "nested": {"b": 1, "a": 2}}
    first = build_prompt("Meeting tomorrow at 3pm", context)
    second = build_prompt("Meeting tomorrow at 3pm", dict(context))
    assert first == second


def test_context_key_order_does_not_change_prompt():
    """Context is serialized with sorted keys."""
    a = build_prompt("Call mom", {"a": 1, "b": 2})
    b = build_prompt("Call mom", {"b": 2, "a": 1})
    assert a == b


def test_prompt_contains_text_context_and_schema():
    """Prompt embeds the input, the context and the schema description."""
    text = 'Say "hi"\nto Bob'
    prompt = build_prompt(text, {"page": "inbox"})
    assert f"Text: {json.dumps(text)}" in prompt
    assert 'Context: {"page": "inbox"}' in prompt
    for value in ("create_event", "create_task", '"none"', '"title"', '"datetime"'):
        assert value in prompt


def test_missing_context_is_empty_object():
    """None context renders as {}."""
    assert "Context: {}" in build_prompt("Buy milk")
    assert build_prompt("Buy milk") == build_prompt("Buy milk", {})


def test_non_json_context_values_use_str():
    """Values json can't encode are stringified instead of failing."""
    class Marker:
        def __str__(self):
            return "marker"

    assert serialize_context({"x": Marker()}) == '{"x": "marker"}'


def test_empty_text_rejected():
    """Callers must validate text before building a prompt."""
    with pytest.raises(ValueError):
        PromptBuilder().build("")


def test_custom_template():
    """Template override is used as-is."""
    builder = PromptBuilder(template="T={text} C={context}")
    assert builder.build("x", {"k": "v"}) == 'T="x" C={"k": "v"}'


def test_mixed_type_keys_serialize_like_json():
    """Non-str keys are spelled the way json.dumps spells them, at any depth."""
    context = {1: "a", "b": 2, "nested": {True: None, 2.5: [{None: "x"}]}}
    assert serialize_context(context) == (
        '{"1": "a", "b": 2, "nested": {"2.5": [{"null": "x"}], "true": null}}'
    )
    assert build_prompt("hi", context) == build_prompt("hi", dict(context))
