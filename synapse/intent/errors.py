"""Error taxonomy for the intent extraction pipeline.

Every failure the pipeline can produce is a `PipelineError` carrying a stable
`kind`. The HTTP layer maps kinds to status codes and client-safe messages;
`raw_output` holds the offending provider text for logs only and is never
sent to clients.
"""

from __future__ import annotations

from enum import Enum


class PipelineErrorKind(str, Enum):
    EMPTY_INPUT = "empty-input"
    SAFETY_BLOCKED = "safety-blocked"
    MALFORMED_OUTPUT = "malformed-output"
    INVALID_SCHEMA = "invalid-schema"
    PROVIDER_UNAVAILABLE = "provider-unavailable"


class ValidationReason(str, Enum):
    """Sub-kind of an `invalid-schema` failure."""

    INVALID_INTENT = "invalid-intent"
    INVALID_CONFIDENCE = "invalid-confidence"
    INVALID_DATA = "invalid-data"
    INVALID_DATETIME = "invalid-datetime"


_CLIENT_ERRORS = {PipelineErrorKind.EMPTY_INPUT, PipelineErrorKind.SAFETY_BLOCKED}

_PUBLIC_MESSAGES = {
    PipelineErrorKind.EMPTY_INPUT: "Text input is required",
    PipelineErrorKind.SAFETY_BLOCKED: "Content flagged as unsafe",
}


class PipelineError(Exception):
    """Terminal outcome of a failed extraction."""

    def __init__(
        self,
        kind: PipelineErrorKind,
        message: str,
        reason: ValidationReason | None = None,
        raw_output: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.reason = reason
        self.raw_output = raw_output

    @property
    def http_status(self) -> int:
        return 400 if self.kind in _CLIENT_ERRORS else 500

    @property
    def public_message(self) -> str:
        """Message safe to show to end users."""
        return _PUBLIC_MESSAGES.get(self.kind, "Parsing failed")

    def __str__(self) -> str:
        if self.reason is not None:
            return f"{self.kind.value} ({self.reason.value}): {self.message}"
        return f"{self.kind.value}: {self.message}"


class SchemaValidationError(PipelineError):
    def __init__(self, reason: ValidationReason, message: str) -> None:
        super().__init__(PipelineErrorKind.INVALID_SCHEMA, message, reason=reason)
