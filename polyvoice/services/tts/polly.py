"""Amazon Polly adapter (boto3, run in a worker thread)."""

from __future__ import annotations

import asyncio
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from polyvoice.config import Settings
from polyvoice.core.catalog import ProviderId
from polyvoice.core.config_accessor import ConfigAccessor
from polyvoice.logging_config import get_logger
from polyvoice.services.aws import create_aws_client
from polyvoice.services.base import ProviderAdapter
from polyvoice.services.tts.exceptions import SynthesisError
from polyvoice.services.tts.protocol import SynthesisRequest, SynthesizedAudio

logger: Any = get_logger(__name__)


class PollyTTSService(ProviderAdapter):
    """Neural-engine Polly synthesis returning MP3."""

    provider = ProviderId.AMAZON_POLLY
    error_cls = SynthesisError

    def __init__(
        self,
        config: ConfigAccessor,
        settings: Settings | None = None,
        *,
        polly_client: Any = None,
    ) -> None:
        super().__init__(config, settings)
        self._polly = polly_client

    @property
    def polly(self) -> Any:
        """Lazy initialization of the Polly client."""
        if self._polly is None:
            self._polly = create_aws_client("polly", self._config)
        return self._polly

    def _synthesize(self, text: str) -> bytes:
        response = self.polly.synthesize_speech(
            Text=text,
            VoiceId=self._settings.aws_polly_voice_id,
            OutputFormat="mp3",
            Engine="neural",
        )
        stream = response.get("AudioStream")
        if stream is None:
            return b""
        try:
            return stream.read()
        finally:
            stream.close()

    async def invoke(self, request: SynthesisRequest) -> SynthesizedAudio:
        try:
            data = await asyncio.to_thread(self._synthesize, request.text)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Amazon Polly synthesis error: {e}")
            raise self._error(f"Amazon Polly request failed: {e}") from e

        if not data:
            raise self._error("No audio stream received from Amazon Polly.")
        return SynthesizedAudio(data=data, mime_type="audio/mpeg")
