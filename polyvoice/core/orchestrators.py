"""Per-stage orchestration: credential gating, adapter dispatch and fallbacks.

Each orchestrator decides, for one stage of a turn, whether the selected
provider can be called, calls it through the adapter registry, and applies
the stage's fallback policy:

- STT falls back to the on-device transcript, except for the long-running
  provider which always surfaces its own failure
- AI falls back to a canned reply when the provider cannot be called
- TTS falls back to the local voice on any failure and never raises
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

from polyvoice.config import Settings, get_settings
from polyvoice.core.catalog import ProviderId, Stage, get_descriptor
from polyvoice.core.credentials import CredentialGate
from polyvoice.core.exceptions import EmptyResultError
from polyvoice.logging_config import get_logger
from polyvoice.observability.metrics import (
    record_fallback,
    record_provider_error,
    record_stage_latency,
)
from polyvoice.services.exceptions import ProviderCallError
from polyvoice.services.llm.protocol import GenerationRequest
from polyvoice.services.registry import AdapterRegistry
from polyvoice.services.stt.exceptions import TranscriptionError
from polyvoice.services.stt.protocol import AudioPayload
from polyvoice.services.tts.protocol import AudioPlayer, LocalVoice, SynthesisRequest

logger: Any = get_logger(__name__)

LOCAL_FALLBACK_SOURCE = "local fallback"
DEFAULT_USER_NAME = "Guest"


@dataclass(frozen=True, slots=True)
class TranscriptionOutcome:
    """Transcript plus where it came from.

    ``notice`` is non-empty when a fallback was used and the user should be told.
    """

    text: str
    source: str
    notice: str = ""

    @property
    def used_fallback(self) -> bool:
        return self.source == LOCAL_FALLBACK_SOURCE


@dataclass(frozen=True, slots=True)
class ResponseOutcome:
    text: str
    source: str
    canned: bool = False


@dataclass(frozen=True, slots=True)
class SynthesisOutcome:
    """How the reply was voiced. ``rendered`` is True only for cloud audio."""

    source: str
    rendered: bool
    notice: str = ""


def _display_name(provider: ProviderId | str) -> str:
    return provider.value if isinstance(provider, ProviderId) else str(provider)


class TranscriptionOrchestrator:
    """Runs the STT stage for one utterance."""

    def __init__(self, gate: CredentialGate, registry: AdapterRegistry) -> None:
        self._gate = gate
        self._registry = registry

    async def transcribe(
        self,
        provider: ProviderId | str,
        payload: AudioPayload,
        fallback_transcript: str = "",
    ) -> TranscriptionOutcome:
        """Transcribe the payload with the selected provider.

        Args:
            provider: Selected STT provider
            payload: Recorded utterance
            fallback_transcript: On-device transcript captured alongside the recording

        Raises:
            CredentialMissingError: Long-running provider without its keys
            TranscriptionError: Provider failure with no usable fallback
            EmptyResultError: The provider heard nothing
            ConfigDecryptError: A required credential could not be decrypted
        """
        descriptor = get_descriptor(provider)
        local_text = fallback_transcript.strip()

        if descriptor.long_running:
            # Fails loudly so a local transcript is never mistaken for the job's result.
            self._gate.require(descriptor)
            text = await self._invoke(descriptor.provider, payload)
            return self._completed(text, descriptor.name)

        if descriptor.implemented and self._gate.is_available(descriptor):
            try:
                text = await self._invoke(descriptor.provider, payload)
            except ProviderCallError as e:
                if not local_text:
                    raise
                notice = f"Cloud STT failed ({e}). Used local speech transcript fallback."
                logger.warning(notice)
                record_fallback(Stage.STT.value, descriptor.name)
                return TranscriptionOutcome(local_text, LOCAL_FALLBACK_SOURCE, notice)
            return self._completed(text, descriptor.name)

        note = self._gate.fallback_note(descriptor)
        if local_text:
            logger.info(f"{descriptor.name} not callable, using local transcript")
            record_fallback(Stage.STT.value, descriptor.name)
            return TranscriptionOutcome(
                local_text,
                LOCAL_FALLBACK_SOURCE,
                f"{note} Used local speech transcript fallback.",
            )
        raise TranscriptionError(f"No transcript captured. {note}", provider=descriptor.name)

    async def _invoke(self, provider: ProviderId, payload: AudioPayload) -> str:
        start = time.perf_counter()
        try:
            return await self._registry.transcriber(provider).invoke(payload)
        except ProviderCallError:
            record_provider_error(Stage.STT.value, provider.value)
            raise
        finally:
            record_stage_latency(Stage.STT.value, time.perf_counter() - start)

    def _completed(self, text: str, source: str) -> TranscriptionOutcome:
        text = text.strip()
        if not text:
            raise EmptyResultError("Transcription was empty.", stage=Stage.STT.value)
        logger.info(f"Transcribed via {source}: {text[:50]}")
        return TranscriptionOutcome(text, source)


class ResponseOrchestrator:
    """Runs the response generation stage."""

    def __init__(
        self,
        gate: CredentialGate,
        registry: AdapterRegistry,
        settings: Settings | None = None,
    ) -> None:
        self._gate = gate
        self._registry = registry
        self._settings = settings or get_settings()

    async def respond(
        self,
        provider: ProviderId | str,
        transcript: str,
        user_name: str = "",
    ) -> ResponseOutcome:
        """Generate a reply, or a canned one when the provider cannot be called.

        Raises:
            GenerationError: The provider call failed
            ConfigDecryptError: A required credential could not be decrypted
        """
        descriptor = get_descriptor(provider)
        name = user_name.strip() or self._settings.default_user_name or DEFAULT_USER_NAME

        if descriptor.implemented and self._gate.is_available(descriptor):
            start = time.perf_counter()
            try:
                text = await self._registry.generator(descriptor.provider).invoke(
                    GenerationRequest(prompt=transcript, user_name=name)
                )
            except ProviderCallError:
                record_provider_error(Stage.AI.value, descriptor.name)
                raise
            finally:
                record_stage_latency(Stage.AI.value, time.perf_counter() - start)

            if not text.strip():
                logger.warning(f"{descriptor.name} returned an empty reply")
                text = f"No response from {descriptor.name}."
            return ResponseOutcome(text.strip(), descriptor.name)

        note = self._gate.fallback_note(descriptor)
        logger.info(f"{descriptor.name} not callable, replying with canned response")
        record_fallback(Stage.AI.value, descriptor.name)
        return ResponseOutcome(
            f'Hi {name}! I heard: "{transcript}". {note}',
            descriptor.name,
            canned=True,
        )


class SynthesisOrchestrator:
    """Runs the speech synthesis stage. Always produces some speech."""

    def __init__(
        self,
        gate: CredentialGate,
        registry: AdapterRegistry,
        player: AudioPlayer,
        local_voice: LocalVoice,
    ) -> None:
        self._gate = gate
        self._registry = registry
        self._player = player
        self._local_voice = local_voice

    async def speak(
        self,
        provider: ProviderId | str,
        text: str,
        *,
        elevenlabs_voice_id: str = "",
        murf_voice_id: str = "",
    ) -> SynthesisOutcome:
        """Speak text with the selected provider, falling back to the local voice."""
        start = time.perf_counter()
        try:
            descriptor = get_descriptor(provider)
            if not (descriptor.implemented and self._gate.is_available(descriptor)):
                logger.info(f"{descriptor.name} not callable, using local voice")
                await self._local_voice.speak(text)
                return SynthesisOutcome(LOCAL_FALLBACK_SOURCE, rendered=False)

            request = SynthesisRequest(
                text=text,
                elevenlabs_voice_id=elevenlabs_voice_id,
                murf_voice_id=murf_voice_id,
            )
            audio = await self._registry.synthesizer(descriptor.provider).invoke(request)
            await self._player.play(audio)
            return SynthesisOutcome(descriptor.name, rendered=True)

        except Exception as e:
            # Any failure here (gate, adapter or playback) is absorbed by the local voice.
            notice = f"Cloud TTS failed ({e}). Played local speech fallback."
            logger.warning(notice)
            record_fallback(Stage.TTS.value, _display_name(provider))
            await self._local_voice.speak(text)
            return SynthesisOutcome(LOCAL_FALLBACK_SOURCE, rendered=False, notice=notice)

        finally:
            record_stage_latency(Stage.TTS.value, time.perf_counter() - start)
