"""Speech-to-Text services.

One adapter per cloud provider plus the on-device fallback recognizer.
AWSTranscribeService is the only long-running adapter.
"""

from polyvoice.services.stt.aws_transcribe import AWSTranscribeService
from polyvoice.services.stt.azure import AzureSTTService
from polyvoice.services.stt.deepgram import DeepgramSTTService
from polyvoice.services.stt.elevenlabs import ElevenLabsSTTService
from polyvoice.services.stt.exceptions import TranscriptionError, TranscriptionTimeoutError
from polyvoice.services.stt.google import GoogleSTTService
from polyvoice.services.stt.local import WhisperLocalRecognizer
from polyvoice.services.stt.murf_falcon import MurfFalconService
from polyvoice.services.stt.openai_whisper import OpenAIWhisperService
from polyvoice.services.stt.protocol import AudioPayload, LocalRecognizer, Transcriber

__all__ = [
    # Services
    "AzureSTTService",
    "GoogleSTTService",
    "DeepgramSTTService",
    "AWSTranscribeService",
    "OpenAIWhisperService",
    "ElevenLabsSTTService",
    "MurfFalconService",
    "WhisperLocalRecognizer",
    # Protocol and types
    "Transcriber",
    "LocalRecognizer",
    "AudioPayload",
    # Exceptions
    "TranscriptionError",
    "TranscriptionTimeoutError",
]
