"""ElevenLabs speech-to-text adapter."""

from __future__ import annotations

from typing import Any

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter, extract_text
from polyvoice.services.stt.exceptions import TranscriptionError
from polyvoice.services.stt.protocol import AudioPayload

logger: Any = get_logger(__name__)

ELEVENLABS_STT_URL = "https://api.elevenlabs.io/v1/speech-to-text"


class ElevenLabsSTTService(HttpProviderAdapter):
    """Multipart upload to the ElevenLabs Scribe model."""

    provider = ProviderId.ELEVENLABS_STT
    error_cls = TranscriptionError

    async def invoke(self, payload: AudioPayload) -> str:
        response = await self._request(
            "POST",
            ELEVENLABS_STT_URL,
            headers={"xi-api-key": self._secret("ELEVENLABS_API_KEY")},
            data={
                "model_id": self._settings.elevenlabs_stt_model,
                "language_code": self._settings.language_short,
            },
            files={"file": (payload.filename, payload.data, payload.content_type)},
        )
        return extract_text(self._json(response), "text")
