"""Response generation services (OpenAI, Gemini)."""

from polyvoice.services.llm.exceptions import GenerationError
from polyvoice.services.llm.gemini import GeminiService
from polyvoice.services.llm.openai import OpenAIChatService
from polyvoice.services.llm.protocol import GenerationRequest, ReplyGenerator

__all__ = [
    # Protocol and types
    "ReplyGenerator",
    "GenerationRequest",
    # Implementations
    "OpenAIChatService",
    "GeminiService",
    # Exceptions
    "GenerationError",
]
