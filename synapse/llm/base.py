"""Base interface for LLM providers."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class ProviderErrorTag(str, Enum):
    NONE = "none"
    SAFETY_BLOCKED = "safety-blocked"
    TRANSPORT_ERROR = "transport-error"


@dataclass(frozen=True)
class ProviderResponse:
    """Raw outcome of one provider call."""

    raw_output: str
    error_tag: ProviderErrorTag = ProviderErrorTag.NONE
    detail: str | None = None

    @classmethod
    def safety_blocked(cls, detail: str) -> "ProviderResponse":
        return cls(raw_output="", error_tag=ProviderErrorTag.SAFETY_BLOCKED, detail=detail)

    @classmethod
    def transport_error(cls, detail: str) -> "ProviderResponse":
        return cls(raw_output="", error_tag=ProviderErrorTag.TRANSPORT_ERROR, detail=detail)


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    name = "base"

    @abstractmethod
    async def invoke(self, prompt: str) -> ProviderResponse:
        """
        Send a prompt to the LLM.

        Implementations report content-safety refusals and transport failures
        through `ProviderResponse.error_tag` instead of raising.

        Args:
            prompt: Fully rendered instruction string

        Returns:
            ProviderResponse with the first text segment of the model output
        """
        pass

    async def close(self) -> None:
        """Release network resources, if any."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
