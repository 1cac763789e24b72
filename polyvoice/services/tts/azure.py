"""Azure Text-to-Speech REST adapter (SSML in, MP3 out)."""

from __future__ import annotations

from typing import Any
from xml.sax.saxutils import escape

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter
from polyvoice.services.tts.exceptions import SynthesisError
from polyvoice.services.tts.protocol import SynthesisRequest, SynthesizedAudio

logger: Any = get_logger(__name__)

AZURE_OUTPUT_FORMAT = "audio-16khz-32kbitrate-mono-mp3"

_SSML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def build_ssml(text: str, voice: str, language: str = "en-US") -> str:
    """Wrap text in a single-voice SSML document, escaping XML special characters."""
    return (
        f"<speak version='1.0' xml:lang='{language}'>"
        f"<voice xml:lang='{language}' xml:gender='Female' name='{voice}'>"
        f"{escape(text, _SSML_ENTITIES)}"
        "</voice></speak>"
    )


class AzureTTSService(HttpProviderAdapter):
    provider = ProviderId.AZURE_TTS
    label = "Azure TTS"
    error_cls = SynthesisError

    async def invoke(self, request: SynthesisRequest) -> SynthesizedAudio:
        region = self._secret("AZURE_TTS_REGION")
        response = await self._request(
            "POST",
            f"https://{region}.tts.speech.microsoft.com/cognitiveservices/v1",
            headers={
                "Ocp-Apim-Subscription-Key": self._secret("AZURE_TTS_KEY"),
                "Content-Type": "application/ssml+xml",
                "X-Microsoft-OutputFormat": AZURE_OUTPUT_FORMAT,
            },
            content=build_ssml(
                request.text, self._settings.azure_tts_voice, self._settings.stt_language
            ).encode("utf-8"),
        )
        if not response.content:
            raise self._error("Azure TTS returned no audio.")
        return SynthesizedAudio(data=response.content, mime_type="audio/mpeg")
