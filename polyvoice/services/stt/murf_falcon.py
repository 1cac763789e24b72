"""Murf Falcon adapter.

Murf has no dedicated STT endpoint; the voice changer returns the
transcription of the uploaded audio when asked to.
"""

from __future__ import annotations

from typing import Any

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter, extract_text
from polyvoice.services.stt.exceptions import TranscriptionError
from polyvoice.services.stt.protocol import AudioPayload

logger: Any = get_logger(__name__)


class MurfFalconService(HttpProviderAdapter):
    provider = ProviderId.MURF_FALCON
    label = "Murf Falcon STT"
    error_cls = TranscriptionError

    async def invoke(self, payload: AudioPayload) -> str:
        base_url = self._settings.murf_api_base_url.rstrip("/")
        response = await self._request(
            "POST",
            f"{base_url}/v1/voice-changer/convert",
            headers={"api-key": self._secret("MURF_FALCON_API_KEY")},
            data={
                "voice_id": self._settings.murf_falcon_voice_id,
                "return_transcription": "true",
            },
            files={"file": (payload.filename, payload.data, payload.content_type)},
        )
        return extract_text(self._json(response), "transcription")
