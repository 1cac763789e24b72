"""LLM service protocol and data types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from polyvoice.core.catalog import ProviderDescriptor


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """A single-turn prompt. No conversation history is carried."""

    prompt: str
    user_name: str


class ReplyGenerator(Protocol):
    """Protocol for response generation adapters."""

    descriptor: ProviderDescriptor

    async def invoke(self, request: GenerationRequest) -> str:
        """Generate a reply.

        Returns:
            Trimmed reply text (empty when the provider returned an empty field)

        Raises:
            GenerationError: When the provider call fails
        """
        ...
