"""TTS (Text-to-Speech) service protocol and data types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from polyvoice.core.catalog import ProviderDescriptor


@dataclass(frozen=True, slots=True)
class SynthesisRequest:
    """Text to speak plus per-user voice overrides.

    Empty overrides fall back to the configured default voice.
    """

    text: str
    elevenlabs_voice_id: str = ""
    murf_voice_id: str = ""


@dataclass(frozen=True, slots=True)
class SynthesizedAudio:
    """Encoded audio returned by a provider, ready for playback."""

    data: bytes
    mime_type: str = "audio/mpeg"

    @property
    def format(self) -> str:
        """Container name for the decoder (mp3, wav, ogg)."""
        mime = self.mime_type.lower()
        if "wav" in mime:
            return "wav"
        if "ogg" in mime:
            return "ogg"
        return "mp3"


class Synthesizer(Protocol):
    """Protocol for TTS provider adapters."""

    descriptor: ProviderDescriptor

    async def invoke(self, request: SynthesisRequest) -> SynthesizedAudio:
        """Synthesize speech.

        Raises:
            SynthesisError: When the provider call fails or returns no audio
        """
        ...


class AudioPlayer(Protocol):
    """Protocol for playing provider audio on the local output device."""

    async def play(self, audio: SynthesizedAudio) -> None:
        """Play until finished.

        Raises:
            SynthesisError: When decoding or playback fails
        """
        ...


class LocalVoice(Protocol):
    """Protocol for the on-device voice used as the terminal fallback.

    speak() never raises: the fallback must not abort the turn.
    """

    async def speak(self, text: str) -> None:
        """Speak text with the local voice, best effort."""
        ...
