"""STT (Speech-to-Text) service protocol and data types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from polyvoice.core.catalog import ProviderDescriptor

DEFAULT_MIME_TYPE = "audio/webm"

# Substring of the MIME type -> container name understood by providers
_MEDIA_FORMATS = (
    ("webm", "webm"),
    ("ogg", "ogg"),
    ("wav", "wav"),
    ("mpeg", "mp3"),
    ("mp3", "mp3"),
    ("flac", "flac"),
    ("mp4", "mp4"),
)


@dataclass(frozen=True, slots=True)
class AudioPayload:
    """A complete recorded utterance.

    Owned by the caller for the duration of one transcription call.
    Adapters must not keep a reference after invoke() returns.
    """

    data: bytes
    mime_hint: str = DEFAULT_MIME_TYPE

    @property
    def content_type(self) -> str:
        """MIME type to send upstream."""
        return self.mime_hint or DEFAULT_MIME_TYPE

    @property
    def media_format(self) -> str:
        """Container format derived from the MIME hint (defaults to webm)."""
        normalized = self.mime_hint.lower()
        for marker, media_format in _MEDIA_FORMATS:
            if marker in normalized:
                return media_format
        return "webm"

    @property
    def filename(self) -> str:
        """Filename used for multipart uploads."""
        return f"recording.{self.media_format}"

    def __len__(self) -> int:
        return len(self.data)


class Transcriber(Protocol):
    """Protocol for STT provider adapters."""

    descriptor: ProviderDescriptor

    async def invoke(self, payload: AudioPayload) -> str:
        """Transcribe one utterance.

        Returns:
            Trimmed transcript text (may be empty if the provider heard nothing)

        Raises:
            TranscriptionError: When the provider call fails
        """
        ...


class LocalRecognizer(Protocol):
    """Protocol for the on-device recognizer that runs alongside capture.

    Its transcript is advisory and only consulted when the cloud call fails.
    """

    def start(self) -> None:
        """Begin recognizing. Called when recording starts."""
        ...

    def feed(self, pcm: bytes) -> None:
        """Receive a block of captured PCM int16 mono audio."""
        ...

    def stop(self) -> None:
        """Stop recognizing. Must not block on in-progress work."""
        ...

    @property
    def transcript(self) -> str:
        """Latest transcript so far (read, not awaited)."""
        ...
