"""Custom exceptions for LLM services."""

from polyvoice.services.exceptions import ProviderCallError


class GenerationError(ProviderCallError):
    """Raised when a response generation provider call fails."""

    pass
