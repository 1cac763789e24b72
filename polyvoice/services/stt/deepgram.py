"""Deepgram prerecorded transcription adapter."""

from __future__ import annotations

from typing import Any

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter, extract_text
from polyvoice.services.stt.exceptions import TranscriptionError
from polyvoice.services.stt.protocol import AudioPayload

logger: Any = get_logger(__name__)

DEEPGRAM_LISTEN_URL = "https://api.deepgram.com/v1/listen"


class DeepgramSTTService(HttpProviderAdapter):
    """Deepgram STT over the REST listen endpoint (one request per utterance)."""

    provider = ProviderId.DEEPGRAM
    error_cls = TranscriptionError

    async def invoke(self, payload: AudioPayload) -> str:
        response = await self._request(
            "POST",
            DEEPGRAM_LISTEN_URL,
            params={"model": self._settings.deepgram_model, "smart_format": "true"},
            headers={
                "Authorization": f"Token {self._secret('DEEPGRAM_API_KEY')}",
                "Content-Type": payload.content_type,
            },
            content=payload.data,
        )
        data = self._json(response)
        return extract_text(data, "results", "channels", 0, "alternatives", 0, "transcript")
