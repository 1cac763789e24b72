"""Microphone capture for one utterance.

RecordingSession owns the capture device for exactly one recording and
releases it on every exit path (normal stop, cancellation, startup
failure). Captured frames are forwarded to the local recognizer while the
user is speaking, so its transcript is ready when the recording stops.
"""

from __future__ import annotations

import asyncio
import io
import threading
import wave
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from polyvoice.config import Settings, get_settings
from polyvoice.core.exceptions import PipelineBusyError
from polyvoice.logging_config import get_logger
from polyvoice.services.stt.protocol import AudioPayload, LocalRecognizer

if TYPE_CHECKING:
    import sounddevice as sd

logger: Any = get_logger(__name__)

FrameListener = Callable[[bytes], None]

BLOCK_DURATION_SECONDS = 0.1
SAMPLE_WIDTH_BYTES = 2  # int16


class AudioCapture(Protocol):
    """Protocol for a capture device producing one encoded recording."""

    mime_type: str

    def start(self, on_frames: FrameListener | None = None) -> None:
        """Acquire the device and begin capturing."""
        ...

    def stop(self) -> bytes:
        """Stop, release the device and return the encoded recording."""
        ...

    def abort(self) -> None:
        """Release the device and discard anything captured. Idempotent."""
        ...


@dataclass(frozen=True, slots=True)
class RecordedUtterance:
    """A finished recording plus the on-device transcript captured alongside it."""

    payload: AudioPayload
    local_transcript: str = ""


def encode_wav(pcm: bytes, sample_rate: int, channels: int = 1) -> bytes:
    """Wrap 16-bit PCM in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(SAMPLE_WIDTH_BYTES)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return buffer.getvalue()


class SoundDeviceCapture:
    """Default input device capture via sounddevice, encoded as mono WAV."""

    mime_type = "audio/wav"

    def __init__(self, settings: Settings | None = None, device: int | str | None = None) -> None:
        self._settings = settings or get_settings()
        self._device = device
        self._stream: sd.RawInputStream | None = None
        self._frames: list[bytes] = []
        self._lock = threading.Lock()
        self._listener: FrameListener | None = None

    def _callback(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if status:
            logger.debug(f"Capture status: {status}")
        chunk = bytes(indata)
        with self._lock:
            self._frames.append(chunk)
        if self._listener is not None:
            self._listener(chunk)

    def start(self, on_frames: FrameListener | None = None) -> None:
        import sounddevice as sd

        with self._lock:
            self._frames = []
        self._listener = on_frames
        stream = sd.RawInputStream(
            device=self._device,
            samplerate=self._settings.sample_rate,
            channels=1,
            dtype="int16",
            blocksize=int(self._settings.sample_rate * BLOCK_DURATION_SECONDS),
            callback=self._callback,
        )
        try:
            stream.start()
        except Exception:
            stream.close()
            raise
        self._stream = stream
        logger.debug(f"Microphone opened at {self._settings.sample_rate}Hz")

    def _release(self) -> None:
        stream, self._stream = self._stream, None
        self._listener = None
        if stream is not None:
            try:
                stream.stop()
            finally:
                stream.close()
            logger.debug("Microphone released")

    def stop(self) -> bytes:
        self._release()
        with self._lock:
            pcm = b"".join(self._frames)
            self._frames = []
        if not pcm:
            return b""
        return encode_wav(pcm, self._settings.sample_rate)

    def abort(self) -> None:
        self._release()
        with self._lock:
            self._frames = []


class RecordingSession:
    """One recording: device acquisition, frame fan-out, and release.

    Usage:
        session = RecordingSession(capture, recognizer)
        await session.start()
        ...
        utterance = await session.finish()
    """

    def __init__(
        self,
        capture: AudioCapture,
        recognizer: LocalRecognizer | None = None,
    ) -> None:
        self._capture = capture
        self._recognizer = recognizer
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    async def start(self) -> None:
        """Acquire the device and start the recognizer.

        Raises:
            PipelineBusyError: If this session is already recording
        """
        if self._active:
            raise PipelineBusyError("Recording already in progress")

        try:
            await asyncio.to_thread(self._capture.start, self._on_frames)
        except BaseException:
            self._capture.abort()
            raise

        if self._recognizer is not None:
            try:
                self._recognizer.start()
            except Exception as e:
                # The recognizer is advisory; recording continues without it.
                logger.warning(f"Local recognizer failed to start: {e}")
                self._recognizer = None

        self._active = True
        logger.info("Recording started")

    def _on_frames(self, pcm: bytes) -> None:
        if self._recognizer is not None:
            self._recognizer.feed(pcm)

    async def finish(self) -> RecordedUtterance:
        """Stop capturing and return the recording with the latest local transcript.

        Raises:
            RuntimeError: If the session is not recording
        """
        if not self._active:
            raise RuntimeError("Recording session is not active")

        try:
            data = await asyncio.to_thread(self._capture.stop)
        except BaseException:
            self._capture.abort()
            raise
        finally:
            self._active = False
            self._stop_recognizer()

        transcript = self._recognizer.transcript.strip() if self._recognizer else ""
        logger.info(f"Recording stopped: {len(data)} bytes, local transcript {len(transcript)} chars")
        return RecordedUtterance(
            payload=AudioPayload(data=data, mime_hint=self._capture.mime_type),
            local_transcript=transcript,
        )

    def cancel(self) -> None:
        """Discard the recording and release the device."""
        if not self._active:
            return
        self._active = False
        try:
            self._capture.abort()
        finally:
            self._stop_recognizer()
        logger.info("Recording cancelled")

    def _stop_recognizer(self) -> None:
        if self._recognizer is not None:
            self._recognizer.stop()

    async def __aenter__(self) -> RecordingSession:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.cancel()
