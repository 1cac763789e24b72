"""Playback of provider audio on the default output device."""

from __future__ import annotations

import asyncio
import io
from typing import TYPE_CHECKING, Any

from polyvoice.logging_config import get_logger
from polyvoice.services.tts.exceptions import SynthesisError
from polyvoice.services.tts.protocol import SynthesizedAudio

if TYPE_CHECKING:
    import numpy as np

logger: Any = get_logger(__name__)


def decode_audio(audio: SynthesizedAudio) -> tuple[np.ndarray, int]:
    """Decode encoded audio to float32 samples in [-1, 1].

    Returns:
        Tuple of (samples shaped (frames,) or (frames, channels), sample rate)
    """
    import numpy as np
    from pydub import AudioSegment

    segment = AudioSegment.from_file(io.BytesIO(audio.data), format=audio.format)
    samples = np.array(segment.get_array_of_samples(), dtype=np.float32)
    if segment.channels > 1:
        samples = samples.reshape(-1, segment.channels)
    samples /= float(1 << (8 * segment.sample_width - 1))
    return samples, segment.frame_rate


class SoundDevicePlayer:
    """Decodes with pydub (ffmpeg) and plays through sounddevice until finished."""

    def _play_blocking(self, audio: SynthesizedAudio) -> None:
        import sounddevice as sd

        samples, sample_rate = decode_audio(audio)
        logger.debug(f"Playing {len(samples) / sample_rate:.1f}s of {audio.format} audio")
        sd.play(samples, samplerate=sample_rate)
        sd.wait()

    async def play(self, audio: SynthesizedAudio) -> None:
        if not audio.data:
            raise SynthesisError("No audio to play.")
        try:
            await asyncio.to_thread(self._play_blocking, audio)
        except Exception as e:
            logger.error(f"Audio playback error: {e}")
            raise SynthesisError(f"Audio playback failed: {e}") from e
