"""Persisted user preferences.

One JSON document holding a single object under STORAGE_KEY. Reads fail
open field by field: anything missing, malformed or no longer catalogued
is replaced with its default, and loading never raises.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any

from polyvoice.config import Settings, get_settings
from polyvoice.core.catalog import ProviderId, Stage, default_provider, get_descriptor
from polyvoice.logging_config import get_logger

logger: Any = get_logger(__name__)

STORAGE_KEY = "multiServiceChatbotPreferences"

# Dataclass field -> stored JSON key
_STORED_KEYS = {
    "user_name": "userName",
    "stt_service": "sttService",
    "ai_service": "aiService",
    "tts_service": "ttsService",
    "elevenlabs_voice_id": "elevenLabsVoiceId",
    "murf_tts_voice_id": "murfTtsVoiceId",
}

_SERVICE_STAGES = {
    "stt_service": Stage.STT,
    "ai_service": Stage.AI,
    "tts_service": Stage.TTS,
}


def coerce_provider(value: ProviderId | str, stage: Stage) -> ProviderId:
    """Resolve a provider name and check it belongs to the stage.

    Raises:
        UnknownProviderError: If the name is not catalogued
        ValueError: If the provider serves a different stage
    """
    descriptor = get_descriptor(value)
    if descriptor.stage != stage:
        raise ValueError(f"{descriptor.name} is not a {stage.value} provider")
    return descriptor.provider


@dataclass(frozen=True)
class Preferences:
    """Provider selection and per-user voice overrides."""

    user_name: str
    stt_service: ProviderId
    ai_service: ProviderId
    tts_service: ProviderId
    elevenlabs_voice_id: str
    murf_tts_voice_id: str

    @classmethod
    def defaults(cls, settings: Settings | None = None) -> Preferences:
        s = settings or get_settings()
        return cls(
            user_name="",
            stt_service=default_provider(Stage.STT),
            ai_service=default_provider(Stage.AI),
            tts_service=default_provider(Stage.TTS),
            elevenlabs_voice_id=s.elevenlabs_voice_id,
            murf_tts_voice_id=s.murf_tts_voice_id,
        )

    @classmethod
    def from_dict(cls, data: Any, settings: Settings | None = None) -> Preferences:
        """Build preferences from stored JSON, defaulting each invalid field."""
        defaults = cls.defaults(settings)
        if not isinstance(data, dict):
            return defaults

        values: dict[str, Any] = {}

        user_name = data.get(_STORED_KEYS["user_name"])
        if isinstance(user_name, str):
            values["user_name"] = user_name

        for field_name, stage in _SERVICE_STAGES.items():
            raw = data.get(_STORED_KEYS[field_name])
            if not isinstance(raw, str):
                continue
            try:
                values[field_name] = coerce_provider(raw, stage)
            except (KeyError, ValueError):
                logger.info(f"Ignoring stored {field_name}={raw!r}")

        for field_name in ("elevenlabs_voice_id", "murf_tts_voice_id"):
            raw = data.get(_STORED_KEYS[field_name])
            if isinstance(raw, str) and raw.strip():
                values[field_name] = raw

        return replace(defaults, **values)

    def to_dict(self) -> dict[str, str]:
        return {
            _STORED_KEYS[name]: value.value if isinstance(value, ProviderId) else value
            for name, value in asdict(self).items()
        }


class PreferencesStore:
    """Reads and rewrites the preferences document."""

    def __init__(self, path: Path | str | None = None, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._path = Path(path) if path is not None else self._settings.preferences_path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Preferences:
        """Load stored preferences, or defaults if absent or unreadable."""
        if not self._path.is_file():
            return Preferences.defaults(self._settings)

        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable preferences at {self._path}, using defaults: {e}")
            return Preferences.defaults(self._settings)

        stored = document.get(STORAGE_KEY) if isinstance(document, dict) else None
        return Preferences.from_dict(stored, self._settings)

    def save(self, preferences: Preferences) -> None:
        """Rewrite the whole document.

        Raises:
            OSError: If the file cannot be written
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(
            json.dumps({STORAGE_KEY: preferences.to_dict()}, indent=2),
            encoding="utf-8",
        )
        os.replace(tmp_path, self._path)
        logger.debug(f"Saved preferences to {self._path}")

    def update(self, preferences: Preferences, **changes: Any) -> Preferences:
        """Apply validated changes and persist them.

        Raises:
            UnknownProviderError: If a provider name is not catalogued
            ValueError: If a provider serves a different stage
        """
        for field_name, stage in _SERVICE_STAGES.items():
            if field_name in changes:
                changes[field_name] = coerce_provider(changes[field_name], stage)

        updated = replace(preferences, **changes)
        self.save(updated)
        return updated
