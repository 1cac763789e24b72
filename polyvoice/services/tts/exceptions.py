"""Custom exceptions for TTS services."""

from polyvoice.services.exceptions import ProviderCallError


class SynthesisError(ProviderCallError):
    """Raised when a text-to-speech provider call or playback fails."""

    pass
