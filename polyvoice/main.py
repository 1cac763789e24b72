"""Application wiring.

Builds the conversation pipeline from settings, the decrypting config
accessor, the adapter registry and the local audio devices. Every
collaborator can be injected, which is how the tests run without a
microphone, speakers or network.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from polyvoice.config import Settings, get_settings
from polyvoice.core.catalog import ProviderId
from polyvoice.core.config_accessor import ConfigAccessor
from polyvoice.core.credentials import CredentialGate
from polyvoice.core.orchestrators import (
    ResponseOrchestrator,
    SynthesisOrchestrator,
    TranscriptionOrchestrator,
)
from polyvoice.core.pipeline import ConversationPipeline
from polyvoice.core.preferences import PreferencesStore
from polyvoice.core.recording import AudioCapture, RecordingSession, SoundDeviceCapture
from polyvoice.logging_config import get_logger, sanitize_for_log
from polyvoice.services.registry import AdapterRegistry
from polyvoice.services.stt.local import WhisperLocalRecognizer
from polyvoice.services.stt.protocol import LocalRecognizer
from polyvoice.services.tts.local import Pyttsx3Voice
from polyvoice.services.tts.player import SoundDevicePlayer
from polyvoice.services.tts.protocol import AudioPlayer, LocalVoice

logger: Any = get_logger(__name__)


@dataclass
class VoiceApp:
    """Everything a front end needs to run conversation turns."""

    settings: Settings
    config: ConfigAccessor
    gate: CredentialGate
    registry: AdapterRegistry
    preferences_store: PreferencesStore
    pipeline: ConversationPipeline
    capture: AudioCapture
    recognizer: LocalRecognizer | None = None

    def new_recording(self) -> RecordingSession:
        """A fresh session owning the capture device for one recording."""
        return RecordingSession(self.capture, self.recognizer)

    async def close(self) -> None:
        self.pipeline.cancel_recording()
        await self.registry.close()


def build_app(
    settings: Settings | None = None,
    *,
    config: ConfigAccessor | None = None,
    client: httpx.AsyncClient | None = None,
    adapters: Mapping[ProviderId, Any] | None = None,
    capture: AudioCapture | None = None,
    recognizer: LocalRecognizer | None = None,
    player: AudioPlayer | None = None,
    local_voice: LocalVoice | None = None,
    preferences_store: PreferencesStore | None = None,
    enable_local_recognizer: bool = True,
) -> VoiceApp:
    """Create the pipeline and its collaborators."""
    settings = settings or get_settings()
    config = config or ConfigAccessor.from_env(settings.env_file)
    gate = CredentialGate(config)
    registry = AdapterRegistry(config, settings, client=client, adapters=adapters)
    store = preferences_store or PreferencesStore(settings=settings)
    preferences = store.load()

    if recognizer is None and enable_local_recognizer:
        recognizer = WhisperLocalRecognizer(settings)

    pipeline = ConversationPipeline(
        TranscriptionOrchestrator(gate, registry),
        ResponseOrchestrator(gate, registry, settings),
        SynthesisOrchestrator(
            gate,
            registry,
            player or SoundDevicePlayer(),
            local_voice or Pyttsx3Voice(settings),
        ),
        preferences,
    )

    logger.info(
        f"Pipeline ready: stt={preferences.stt_service.value} ai={preferences.ai_service.value} "
        f"tts={preferences.tts_service.value}"
    )
    logger.debug(f"Preferences: {sanitize_for_log(preferences.to_dict())}")

    return VoiceApp(
        settings=settings,
        config=config,
        gate=gate,
        registry=registry,
        preferences_store=store,
        pipeline=pipeline,
        capture=capture or SoundDeviceCapture(settings),
        recognizer=recognizer,
    )
