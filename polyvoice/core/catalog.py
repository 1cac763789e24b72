"""Static provider catalog.

Each provider-stage pair is one ProviderId member. The catalog maps every
member to an immutable ProviderDescriptor declaring its stage, the ordered
configuration keys it needs, and whether a cloud adapter exists for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from polyvoice.core.exceptions import UnknownProviderError


class Stage(str, Enum):
    """Conversation pipeline stage."""

    STT = "stt"  # Speech-to-text
    AI = "ai"  # Response generation
    TTS = "tts"  # Speech synthesis


class ProviderId(str, Enum):
    """Closed set of providers. Values are the user-facing display names."""

    # Speech-to-text
    AZURE_STT = "Azure Speech-to-Text"
    GOOGLE_STT = "Google Cloud STT"
    DEEPGRAM = "Deepgram"
    AWS_TRANSCRIBE = "AWS Transcribe"
    OPENAI_WHISPER = "OpenAI Whisper API"
    ELEVENLABS_STT = "ElevenLabs STT"
    WISPR_FLOW = "Wispr Flow"
    MURF_FALCON = "Murf Falcon"

    # Response generation
    OPENAI_API = "OpenAI API"
    GEMINI = "Gemini"

    # Text-to-speech
    AZURE_TTS = "Azure Text-to-Speech"
    GOOGLE_TTS = "Google Cloud TTS"
    OPENAI_TTS = "OpenAI TTS"
    ELEVENLABS_TTS = "ElevenLabs TTS"
    AMAZON_POLLY = "Amazon Polly"
    MURF_TTS = "Murf TTS"


@dataclass(frozen=True, slots=True)
class ProviderDescriptor:
    """Static description of one provider for one stage."""

    provider: ProviderId
    stage: Stage
    required_config_keys: tuple[str, ...]
    implemented: bool = True
    long_running: bool = False  # Upload + poll + fetch instead of one call

    @property
    def name(self) -> str:
        """Display name of the provider."""
        return self.provider.value


_AWS_KEYS = ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_REGION")

_DESCRIPTORS = (
    # Speech-to-text
    ProviderDescriptor(ProviderId.AZURE_STT, Stage.STT, ("AZURE_STT_KEY", "AZURE_STT_REGION")),
    ProviderDescriptor(ProviderId.GOOGLE_STT, Stage.STT, ("GOOGLE_CLOUD_STT_API_KEY",)),
    ProviderDescriptor(ProviderId.DEEPGRAM, Stage.STT, ("DEEPGRAM_API_KEY",)),
    ProviderDescriptor(
        ProviderId.AWS_TRANSCRIBE,
        Stage.STT,
        (*_AWS_KEYS, "AWS_TRANSCRIBE_BUCKET"),
        long_running=True,
    ),
    ProviderDescriptor(ProviderId.OPENAI_WHISPER, Stage.STT, ("OPENAI_API_KEY",)),
    ProviderDescriptor(ProviderId.ELEVENLABS_STT, Stage.STT, ("ELEVENLABS_API_KEY",)),
    ProviderDescriptor(
        ProviderId.WISPR_FLOW, Stage.STT, ("WISPR_FLOW_API_KEY",), implemented=False
    ),
    ProviderDescriptor(ProviderId.MURF_FALCON, Stage.STT, ("MURF_FALCON_API_KEY",)),
    # Response generation
    ProviderDescriptor(ProviderId.OPENAI_API, Stage.AI, ("OPENAI_API_KEY",)),
    ProviderDescriptor(ProviderId.GEMINI, Stage.AI, ("GEMINI_API_KEY",)),
    # Text-to-speech
    ProviderDescriptor(ProviderId.AZURE_TTS, Stage.TTS, ("AZURE_TTS_KEY", "AZURE_TTS_REGION")),
    ProviderDescriptor(ProviderId.GOOGLE_TTS, Stage.TTS, ("GOOGLE_CLOUD_TTS_API_KEY",)),
    ProviderDescriptor(ProviderId.OPENAI_TTS, Stage.TTS, ("OPENAI_API_KEY",)),
    ProviderDescriptor(ProviderId.ELEVENLABS_TTS, Stage.TTS, ("ELEVENLABS_API_KEY",)),
    ProviderDescriptor(ProviderId.AMAZON_POLLY, Stage.TTS, _AWS_KEYS),
    ProviderDescriptor(ProviderId.MURF_TTS, Stage.TTS, ("MURF_TTS_API_KEY",)),
)

CATALOG: MappingProxyType[ProviderId, ProviderDescriptor] = MappingProxyType(
    {descriptor.provider: descriptor for descriptor in _DESCRIPTORS}
)


def get_descriptor(provider: ProviderId | str) -> ProviderDescriptor:
    """Look up a descriptor by ProviderId or display name.

    Raises:
        UnknownProviderError: If the name is not catalogued
    """
    try:
        return CATALOG[ProviderId(provider)]
    except ValueError as e:
        raise UnknownProviderError(str(provider)) from e


def providers_for(stage: Stage) -> list[ProviderDescriptor]:
    """All descriptors for a stage, in catalog order."""
    return [descriptor for descriptor in _DESCRIPTORS if descriptor.stage == stage]


def default_provider(stage: Stage) -> ProviderId:
    """First catalogued provider for a stage."""
    return providers_for(stage)[0].provider
