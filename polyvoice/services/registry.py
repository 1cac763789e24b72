"""Provider -> adapter dispatch.

Every catalogued provider with a cloud adapter maps to exactly one adapter
class. Instances are created on first use and share one HTTP client.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from polyvoice.config import Settings, get_settings
from polyvoice.core.catalog import ProviderId, Stage, get_descriptor
from polyvoice.core.config_accessor import ConfigAccessor
from polyvoice.core.exceptions import UnknownProviderError
from polyvoice.logging_config import get_logger
from polyvoice.services.base import HttpProviderAdapter, ProviderAdapter
from polyvoice.services.llm import GeminiService, OpenAIChatService, ReplyGenerator
from polyvoice.services.stt import (
    AWSTranscribeService,
    AzureSTTService,
    DeepgramSTTService,
    ElevenLabsSTTService,
    GoogleSTTService,
    MurfFalconService,
    OpenAIWhisperService,
    Transcriber,
)
from polyvoice.services.tts import (
    AzureTTSService,
    ElevenLabsTTSService,
    GoogleTTSService,
    MurfTTSService,
    OpenAITTSService,
    PollyTTSService,
    Synthesizer,
)

logger: Any = get_logger(__name__)

ADAPTER_CLASSES: Mapping[ProviderId, type[ProviderAdapter]] = {
    # Speech-to-text
    ProviderId.AZURE_STT: AzureSTTService,
    ProviderId.GOOGLE_STT: GoogleSTTService,
    ProviderId.DEEPGRAM: DeepgramSTTService,
    ProviderId.AWS_TRANSCRIBE: AWSTranscribeService,
    ProviderId.OPENAI_WHISPER: OpenAIWhisperService,
    ProviderId.ELEVENLABS_STT: ElevenLabsSTTService,
    ProviderId.MURF_FALCON: MurfFalconService,
    # Response generation
    ProviderId.OPENAI_API: OpenAIChatService,
    ProviderId.GEMINI: GeminiService,
    # Text-to-speech
    ProviderId.AZURE_TTS: AzureTTSService,
    ProviderId.GOOGLE_TTS: GoogleTTSService,
    ProviderId.OPENAI_TTS: OpenAITTSService,
    ProviderId.ELEVENLABS_TTS: ElevenLabsTTSService,
    ProviderId.AMAZON_POLLY: PollyTTSService,
    ProviderId.MURF_TTS: MurfTTSService,
}


class AdapterRegistry:
    """Creates and caches one adapter per provider.

    Args:
        config: Decrypting configuration accessor passed to every adapter
        settings: Typed tunables
        client: Shared HTTP client (created lazily if not provided)
        adapters: Pre-built adapters that take precedence over the defaults
    """

    def __init__(
        self,
        config: ConfigAccessor,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        adapters: Mapping[ProviderId, Any] | None = None,
    ) -> None:
        self._config = config
        self._settings = settings or get_settings()
        self._client = client
        self._owns_client = client is None
        self._instances: dict[ProviderId, Any] = dict(adapters or {})

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.http_timeout_seconds)
        return self._client

    def get(self, provider: ProviderId | str, stage: Stage | None = None) -> Any:
        """Return the adapter for a provider.

        Raises:
            UnknownProviderError: If the provider has no cloud adapter
            ValueError: If the provider belongs to a different stage
        """
        descriptor = get_descriptor(provider)
        if stage is not None and descriptor.stage != stage:
            raise ValueError(f"{descriptor.name} is a {descriptor.stage.value} provider, not {stage.value}")

        adapter = self._instances.get(descriptor.provider)
        if adapter is not None:
            return adapter

        adapter_cls = ADAPTER_CLASSES.get(descriptor.provider)
        if adapter_cls is None:
            raise UnknownProviderError(descriptor.name)

        if issubclass(adapter_cls, HttpProviderAdapter):
            adapter = adapter_cls(self._config, self._settings, client=self.client)
        else:
            adapter = adapter_cls(self._config, self._settings)

        logger.debug(f"Created {adapter_cls.__name__} for {descriptor.name}")
        self._instances[descriptor.provider] = adapter
        return adapter

    def transcriber(self, provider: ProviderId | str) -> Transcriber:
        return self.get(provider, Stage.STT)

    def generator(self, provider: ProviderId | str) -> ReplyGenerator:
        return self.get(provider, Stage.AI)

    def synthesizer(self, provider: ProviderId | str) -> Synthesizer:
        return self.get(provider, Stage.TTS)

    async def close(self) -> None:
        """Close cached adapters and the shared client."""
        for adapter in self._instances.values():
            close = getattr(adapter, "close", None)
            if close is not None:
                await close()
        self._instances.clear()

        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
