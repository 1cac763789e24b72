"""Google Cloud Speech-to-Text (v1 recognize) adapter."""

from __future__ import annotations

import base64
from typing import Any

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter, extract_text
from polyvoice.services.stt.exceptions import TranscriptionError
from polyvoice.services.stt.protocol import AudioPayload

logger: Any = get_logger(__name__)

GOOGLE_STT_URL = "https://speech.googleapis.com/v1/speech:recognize"

# Container -> RecognitionConfig.AudioEncoding
GOOGLE_ENCODINGS = {
    "webm": "WEBM_OPUS",
    "ogg": "OGG_OPUS",
    "wav": "LINEAR16",
    "flac": "FLAC",
    "mp3": "MP3",
}


class GoogleSTTService(HttpProviderAdapter):
    """Sends base64 audio inline and joins the top alternative of every result."""

    provider = ProviderId.GOOGLE_STT
    label = "Google Cloud STT"
    error_cls = TranscriptionError

    async def invoke(self, payload: AudioPayload) -> str:
        body = {
            "config": {
                "encoding": GOOGLE_ENCODINGS.get(payload.media_format, "WEBM_OPUS"),
                "languageCode": self._settings.stt_language,
                "enableAutomaticPunctuation": True,
            },
            "audio": {"content": base64.b64encode(payload.data).decode("ascii")},
        }
        response = await self._request(
            "POST",
            GOOGLE_STT_URL,
            params={"key": self._secret("GOOGLE_CLOUD_STT_API_KEY")},
            json=body,
        )

        data = self._json(response)
        results = (data.get("results") if isinstance(data, dict) else None) or []
        parts = [extract_text(result, "alternatives", 0, "transcript") for result in results]
        return " ".join(parts).strip()
