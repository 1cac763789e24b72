"""Text-to-Speech services.

Provides speech output for the conversation pipeline:
- One cloud adapter per TTS provider
- SoundDevicePlayer: plays provider audio locally
- Pyttsx3Voice: on-device voice used as the fallback
"""

from polyvoice.services.tts.azure import AzureTTSService
from polyvoice.services.tts.elevenlabs import ElevenLabsTTSService
from polyvoice.services.tts.exceptions import SynthesisError
from polyvoice.services.tts.google import GoogleTTSService
from polyvoice.services.tts.local import Pyttsx3Voice
from polyvoice.services.tts.murf import MurfTTSService
from polyvoice.services.tts.openai import OpenAITTSService
from polyvoice.services.tts.player import SoundDevicePlayer
from polyvoice.services.tts.polly import PollyTTSService
from polyvoice.services.tts.protocol import (
    AudioPlayer,
    LocalVoice,
    SynthesisRequest,
    SynthesizedAudio,
    Synthesizer,
)

__all__ = [
    # Services
    "AzureTTSService",
    "GoogleTTSService",
    "OpenAITTSService",
    "ElevenLabsTTSService",
    "PollyTTSService",
    "MurfTTSService",
    # Local output
    "SoundDevicePlayer",
    "Pyttsx3Voice",
    # Protocol and types
    "Synthesizer",
    "AudioPlayer",
    "LocalVoice",
    "SynthesisRequest",
    "SynthesizedAudio",
    # Exceptions
    "SynthesisError",
]
