"""ElevenLabs TTS adapter."""

from __future__ import annotations

from typing import Any

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter
from polyvoice.services.tts.exceptions import SynthesisError
from polyvoice.services.tts.protocol import SynthesisRequest, SynthesizedAudio

logger: Any = get_logger(__name__)

ELEVENLABS_TTS_URL = "https://api.elevenlabs.io/v1/text-to-speech"


class ElevenLabsTTSService(HttpProviderAdapter):
    """ElevenLabs TTS with per-user voice override."""

    provider = ProviderId.ELEVENLABS_TTS
    error_cls = SynthesisError

    def voice_id_for(self, request: SynthesisRequest) -> str:
        return request.elevenlabs_voice_id.strip() or self._settings.elevenlabs_voice_id

    async def invoke(self, request: SynthesisRequest) -> SynthesizedAudio:
        voice_id = self.voice_id_for(request)
        logger.debug(f"ElevenLabs TTS voice={voice_id} chars={len(request.text)}")

        response = await self._request(
            "POST",
            f"{ELEVENLABS_TTS_URL}/{voice_id}",
            headers={
                "xi-api-key": self._secret("ELEVENLABS_API_KEY"),
                "Accept": "audio/mpeg",
            },
            json={"text": request.text, "model_id": self._settings.elevenlabs_tts_model},
        )
        if not response.content:
            raise self._error("No audio received from ElevenLabs")
        return SynthesizedAudio(data=response.content, mime_type="audio/mpeg")
