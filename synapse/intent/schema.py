"""Canonical intent shape and its validator."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from synapse.intent.errors import SchemaValidationError, ValidationReason

INTENT_VALUES = ("create_event", "create_task", "none")

# Gemini structured-output schema (OpenAPI subset) mirroring Intent
RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "intent": {"type": "STRING", "enum": list(INTENT_VALUES)},
        "confidence": {"type": "NUMBER"},
        "data": {
            "type": "OBJECT",
            "properties": {
                "title": {"type": "STRING"},
                "datetime": {"type": "STRING", "nullable": True},
            },
            "required": ["title", "datetime"],
        },
    },
    "required": ["intent", "confidence", "data"],
}


@dataclass(frozen=True)
class IntentData:
    title: str
    datetime: str | None = None


@dataclass(frozen=True)
class Intent:
    """A fully validated extraction result."""

    intent: str
    confidence: float
    data: IntentData

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent": self.intent,
            "confidence": self.confidence,
            "data": {"title": self.data.title, "datetime": self.data.datetime},
        }


def _is_iso8601(value: str) -> bool:
    try:
        datetime.fromisoformat(value)
    except ValueError:
        return False
    return True


def validate_intent(candidate: Any) -> Intent:
    """
    Validate a parsed provider candidate against the intent schema.

    Rules are checked in order and the first violation is raised as a
    `SchemaValidationError`. Unknown fields are dropped and `datetime` is
    passed through without timezone normalization.

    Args:
        candidate: Object produced by the response normalizer

    Returns:
        Validated Intent
    """
    if not isinstance(candidate, dict):
        raise SchemaValidationError(ValidationReason.INVALID_INTENT, "Candidate is not an object")

    intent = candidate.get("intent")
    if not isinstance(intent, str) or intent not in INTENT_VALUES:
        raise SchemaValidationError(ValidationReason.INVALID_INTENT, f"Invalid intent value: {intent!r}")

    confidence = candidate.get("confidence")
    # bool is an int subclass but never a confidence
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise SchemaValidationError(ValidationReason.INVALID_CONFIDENCE, f"Confidence is not a number: {confidence!r}")
    if not 0.0 <= confidence <= 1.0:
        raise SchemaValidationError(ValidationReason.INVALID_CONFIDENCE, f"Confidence out of range: {confidence!r}")

    data = candidate.get("data")
    if not isinstance(data, dict):
        raise SchemaValidationError(ValidationReason.INVALID_DATA, "Missing data object")
    title = data.get("title")
    if not isinstance(title, str):
        raise SchemaValidationError(ValidationReason.INVALID_DATA, f"data.title is not a string: {title!r}")

    when = data.get("datetime")
    if when is not None and (not isinstance(when, str) or not _is_iso8601(when)):
        raise SchemaValidationError(ValidationReason.INVALID_DATETIME, f"data.datetime is not ISO-8601: {when!r}")

    return Intent(
        intent=intent,
        confidence=float(confidence),
        data=IntentData(title=title, datetime=when),
    )
