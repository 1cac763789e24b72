"""OpenAI speech synthesis adapter."""

from __future__ import annotations

from typing import Any

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter
from polyvoice.services.tts.exceptions import SynthesisError
from polyvoice.services.tts.protocol import SynthesisRequest, SynthesizedAudio

logger: Any = get_logger(__name__)

OPENAI_SPEECH_URL = "https://api.openai.com/v1/audio/speech"


class OpenAITTSService(HttpProviderAdapter):
    provider = ProviderId.OPENAI_TTS
    error_cls = SynthesisError

    async def invoke(self, request: SynthesisRequest) -> SynthesizedAudio:
        response = await self._request(
            "POST",
            OPENAI_SPEECH_URL,
            headers={"Authorization": f"Bearer {self._secret('OPENAI_API_KEY')}"},
            json={
                "model": self._settings.openai_tts_model,
                "voice": self._settings.openai_tts_voice,
                "input": request.text,
                "response_format": "mp3",
            },
        )
        if not response.content:
            raise self._error("OpenAI TTS returned no audio.")
        return SynthesizedAudio(data=response.content, mime_type="audio/mpeg")
