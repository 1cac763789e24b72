"""On-device voice used when cloud synthesis is unavailable or fails."""

from __future__ import annotations

import asyncio
from typing import Any

from polyvoice.config import Settings, get_settings
from polyvoice.logging_config import get_logger

logger: Any = get_logger(__name__)


class Pyttsx3Voice:
    """Local speech through the platform engine (SAPI5, NSSpeechSynthesizer, eSpeak).

    speak() is best effort: a missing engine or driver is logged and the
    call returns normally, so the fallback can never abort a turn.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def _speak_blocking(self, text: str) -> None:
        import pyttsx3

        # A fresh engine per utterance; reused engines hang after runAndWait on some drivers.
        engine = pyttsx3.init()
        try:
            engine.setProperty("rate", self._settings.local_tts_rate)
            engine.say(text)
            engine.runAndWait()
        finally:
            engine.stop()

    async def speak(self, text: str) -> None:
        if not text.strip():
            return
        try:
            await asyncio.to_thread(self._speak_blocking, text)
        except Exception as e:
            logger.warning(f"Local voice unavailable: {e}")
