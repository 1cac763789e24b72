"""On-device speech recognition used as the STT fallback.

Runs faster-whisper over the audio captured so far on a background thread
while the user is still speaking. The latest transcript is read (never
awaited) when the recording stops.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from polyvoice.config import Settings, get_settings
from polyvoice.logging_config import get_logger

if TYPE_CHECKING:
    from faster_whisper import WhisperModel

logger: Any = get_logger(__name__)

MIN_AUDIO_SECONDS = 0.5


class WhisperLocalRecognizer:
    """Incremental local recognizer backed by faster-whisper."""

    def __init__(
        self,
        settings: Settings | None = None,
        model: WhisperModel | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._model = model
        self._buffer = bytearray()
        self._transcript = ""
        self._lock = threading.Lock()
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @property
    def model(self) -> WhisperModel:
        """Lazy initialization of the Whisper model (downloads on first use)."""
        if self._model is None:
            from faster_whisper import WhisperModel

            logger.info(f"Loading local Whisper model: {self._settings.local_stt_model}")
            self._model = WhisperModel(
                self._settings.local_stt_model,
                device="cpu",
                compute_type="int8",
            )
        return self._model

    @property
    def transcript(self) -> str:
        with self._lock:
            return self._transcript

    def start(self) -> None:
        # One stop event per session; a stale worker never writes into a newer one.
        stop_event = threading.Event()
        with self._lock:
            if self._stop_event is not None:
                self._stop_event.set()
            self._buffer.clear()
            self._transcript = ""
            self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run, args=(stop_event,), name="local-stt", daemon=True
        )
        self._thread.start()

    def feed(self, pcm: bytes) -> None:
        with self._lock:
            self._buffer.extend(pcm)

    def stop(self) -> None:
        # The worker notices on its next wake-up; an in-progress pass is not joined.
        with self._lock:
            if self._stop_event is not None:
                self._stop_event.set()
        self._thread = None

    def _run(self, stop_event: threading.Event) -> None:
        processed = 0
        min_bytes = int(self._settings.sample_rate * MIN_AUDIO_SECONDS) * 2

        while not stop_event.wait(self._settings.local_stt_interval_seconds):
            with self._lock:
                snapshot = bytes(self._buffer)
            if len(snapshot) < min_bytes or len(snapshot) == processed:
                continue
            processed = len(snapshot)

            text = self.transcribe_pcm(snapshot)
            if not text:
                continue
            with self._lock:
                if not stop_event.is_set():
                    self._transcript = text

    def transcribe_pcm(self, pcm: bytes) -> str:
        """Transcribe 16-bit mono PCM at the capture sample rate.

        Recognition is advisory, so failures are logged and yield "".
        """
        import numpy as np

        audio = np.frombuffer(pcm, dtype=np.int16).astype(np.float32) / 32768.0
        try:
            segments, _info = self.model.transcribe(
                audio,
                language=self._settings.language_short,
                beam_size=1,
                vad_filter=True,
            )
            return " ".join(segment.text.strip() for segment in segments).strip()
        except Exception as e:
            logger.warning(f"Local speech recognition failed: {e}")
            return ""
