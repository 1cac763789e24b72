"""Murf TTS adapter.

Murf answers either with inline base64 audio (encodedAudio) or with a URL
to a generated file (audioFile) that has to be fetched separately.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any

import httpx

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter, extract_text
from polyvoice.services.tts.exceptions import SynthesisError
from polyvoice.services.tts.protocol import SynthesisRequest, SynthesizedAudio

logger: Any = get_logger(__name__)


class MurfTTSService(HttpProviderAdapter):
    provider = ProviderId.MURF_TTS
    error_cls = SynthesisError

    def voice_id_for(self, request: SynthesisRequest) -> str:
        return request.murf_voice_id.strip() or self._settings.murf_tts_voice_id

    async def invoke(self, request: SynthesisRequest) -> SynthesizedAudio:
        base_url = self._settings.murf_api_base_url.rstrip("/")
        response = await self._request(
            "POST",
            f"{base_url}/v1/speech/generate",
            headers={"api-key": self._secret("MURF_TTS_API_KEY")},
            json={"text": request.text, "voiceId": self.voice_id_for(request), "format": "MP3"},
        )
        data = self._json(response)

        encoded = extract_text(data, "encodedAudio")
        if encoded:
            try:
                return SynthesizedAudio(data=base64.b64decode(encoded), mime_type="audio/mpeg")
            except (binascii.Error, ValueError) as e:
                raise self._error(f"Murf TTS returned undecodable audio: {e}") from e

        audio_url = extract_text(data, "audioFile")
        if not audio_url:
            raise self._error("Murf TTS returned no audio file.")

        logger.debug("Fetching Murf audio file")
        try:
            audio_response = await self.client.get(audio_url)
        except httpx.HTTPError as e:
            raise self._error(f"Unable to fetch Murf audio file: {e}") from e
        if audio_response.is_error:
            raise self._error(
                f"Unable to fetch Murf audio file ({audio_response.status_code})",
                status_code=audio_response.status_code,
            )
        return SynthesizedAudio(
            data=audio_response.content,
            mime_type=audio_response.headers.get("content-type", "audio/mpeg"),
        )
