"""Azure Speech-to-Text short-audio REST adapter."""

from __future__ import annotations

from typing import Any

from polyvoice.core.catalog import ProviderId
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter, extract_text
from polyvoice.services.stt.exceptions import TranscriptionError
from polyvoice.services.stt.protocol import AudioPayload

logger: Any = get_logger(__name__)

AZURE_STT_PATH = "/speech/recognition/conversation/cognitiveservices/v1"


class AzureSTTService(HttpProviderAdapter):
    """Posts the raw recording to the regional recognition endpoint."""

    provider = ProviderId.AZURE_STT
    label = "Azure STT"
    error_cls = TranscriptionError

    async def invoke(self, payload: AudioPayload) -> str:
        region = self._secret("AZURE_STT_REGION")
        response = await self._request(
            "POST",
            f"https://{region}.stt.speech.microsoft.com{AZURE_STT_PATH}",
            params={"language": self._settings.stt_language, "format": "simple"},
            headers={
                "Ocp-Apim-Subscription-Key": self._secret("AZURE_STT_KEY"),
                "Content-Type": payload.content_type,
            },
            content=payload.data,
        )
        return extract_text(self._json(response), "DisplayText")
