"""LLM Port - interface for text-generation providers."""

from typing import Protocol

from pydantic import BaseModel


class LLMMessage(BaseModel):
    """Single message in a conversation."""

    role: str  # "system" | "user" | "assistant"
    content: str


class LLMResponse(BaseModel):
    """Response from LLM (non-streaming)."""

    content: str
    model: str
    done: bool = True


class LLMPort(Protocol):
    """Interface for OpenAI-compatible completion providers.

    Implementations raise TransientGenerationError for rate limit / quota /
    overload responses and FatalGenerationError for other rejected requests.
    """

    async def generate(
        self,
        messages: list[LLMMessage],
        model: str | None = None,
        temperature: float = 0.7,
        api_key: str | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate a single response using the given credential."""
        ...

    async def is_available(self) -> bool:
        """Check if the LLM provider is available."""
        ...
