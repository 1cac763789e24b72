"""OpenAI Whisper transcription adapter."""

from __future__ import annotations

from typing import Any

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter, extract_text
from polyvoice.services.stt.exceptions import TranscriptionError
from polyvoice.services.stt.protocol import AudioPayload

logger: Any = get_logger(__name__)

OPENAI_TRANSCRIPTIONS_URL = "https://api.openai.com/v1/audio/transcriptions"


class OpenAIWhisperService(HttpProviderAdapter):
    """Multipart upload to /v1/audio/transcriptions."""

    provider = ProviderId.OPENAI_WHISPER
    label = "OpenAI Whisper"
    error_cls = TranscriptionError

    async def invoke(self, payload: AudioPayload) -> str:
        response = await self._request(
            "POST",
            OPENAI_TRANSCRIPTIONS_URL,
            headers={"Authorization": f"Bearer {self._secret('OPENAI_API_KEY')}"},
            data={"model": self._settings.openai_transcription_model},
            files={"file": (payload.filename, payload.data, payload.content_type)},
        )
        return extract_text(self._json(response), "text")
