"""Google Cloud Text-to-Speech adapter."""

from __future__ import annotations

import base64
import binascii
from typing import Any

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter, extract_text
from polyvoice.services.tts.exceptions import SynthesisError
from polyvoice.services.tts.protocol import SynthesisRequest, SynthesizedAudio

logger: Any = get_logger(__name__)

GOOGLE_TTS_URL = "https://texttospeech.googleapis.com/v1/text:synthesize"


class GoogleTTSService(HttpProviderAdapter):
    """Returns MP3 decoded from the base64 audioContent field."""

    provider = ProviderId.GOOGLE_TTS
    error_cls = SynthesisError

    async def invoke(self, request: SynthesisRequest) -> SynthesizedAudio:
        response = await self._request(
            "POST",
            GOOGLE_TTS_URL,
            params={"key": self._secret("GOOGLE_CLOUD_TTS_API_KEY")},
            json={
                "input": {"text": request.text},
                "voice": {"languageCode": self._settings.stt_language, "ssmlGender": "NEUTRAL"},
                "audioConfig": {"audioEncoding": "MP3"},
            },
        )

        encoded = extract_text(self._json(response), "audioContent")
        if not encoded:
            raise self._error("Google Cloud TTS returned no audio.")
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise self._error(f"Google Cloud TTS returned undecodable audio: {e}") from e
        return SynthesizedAudio(data=data, mime_type="audio/mpeg")
