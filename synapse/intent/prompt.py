"""Prompt construction for intent extraction."""
import json
from pathlib import Path
from typing import Any, Mapping

PROMPT_VERSION = "1"


def _prompt_path(*parts: str) -> Path:
    """Return path under the packaged prompts/ directory."""
    return Path(__file__).resolve().parent / "prompts" / Path(*parts)


def load_prompt_template() -> str:
    """Load the intent extraction prompt template."""
    path = _prompt_path("intent_extraction.txt")
    if not path.exists():
        raise FileNotFoundError(f"Intent prompt file not found: {path}")
    return path.read_text(encoding="utf-8").strip()


def _json_key(key: Any) -> str:
    # Same key spelling json.dumps uses for non-str keys
    if isinstance(key, str):
        return key
    if key is None or isinstance(key, (bool, int, float)):
        return json.dumps(key)
    return str(key)


def _stringify_keys(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {_json_key(k): _stringify_keys(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_stringify_keys(v) for v in value]
    return value


def serialize_context(context: Mapping[str, Any] | None) -> str:
    """Render context as JSON with sorted keys; non-JSON values fall back to str()."""
    return json.dumps(_stringify_keys(context or {}), sort_keys=True, ensure_ascii=False, default=str)


class PromptBuilder:
    """Renders raw text and context into a provider-agnostic instruction string."""

    def __init__(self, template: str | None = None):
        """
        Initialize prompt builder.

        Args:
            template: Override template with {text} and {context} placeholders
                      (defaults to prompts/intent_extraction.txt)
        """
        self._template = template if template is not None else load_prompt_template()

    def build(self, raw_text: str, context: Mapping[str, Any] | None = None) -> str:
        """
        Build the prompt for one extraction.

        The text is embedded as a JSON string literal so quotes and newlines
        cannot break out of the Text line.

        Args:
            raw_text: User text (must be non-empty, validated by the caller)
            context: Optional client context (page title, url, timezone...)

        Returns:
            Prompt string, identical for identical inputs
        """
        if not raw_text:
            raise ValueError("raw_text must be non-empty")
        return self._template.format(
            text=json.dumps(raw_text, ensure_ascii=False),
            context=serialize_context(context),
        )


_default_builder: PromptBuilder | None = None


def build_prompt(raw_text: str, context: Mapping[str, Any] | None = None) -> str:
    """Build a prompt with the packaged template."""
    global _default_builder
    if _default_builder is None:
        _default_builder = PromptBuilder()
    return _default_builder.build(raw_text, context)
