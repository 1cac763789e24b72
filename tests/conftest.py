"""Shared pytest fixtures for polyvoice tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from polyvoice.config import Settings
from polyvoice.core.catalog import ProviderId
from polyvoice.core.config_accessor import ConfigAccessor
from polyvoice.core.credentials import CredentialGate
from polyvoice.core.orchestrators import (
    ResponseOrchestrator,
    SynthesisOrchestrator,
    TranscriptionOrchestrator,
)
from polyvoice.core.pipeline import ConversationPipeline
from polyvoice.core.preferences import Preferences
from polyvoice.services.registry import AdapterRegistry
from polyvoice.services.tts.protocol import SynthesizedAudio

TEST_CRYPTO_KEY = "test-crypto-key"


def build_settings(**overrides) -> Settings:
    """Create a Settings object with safe test defaults (no .env file)."""
    base = {
        "env_file": "",
        "http_timeout_seconds": 5.0,
        "preferences_path": Path("/nonexistent/polyvoice/preferences.json"),
    }
    base.update(overrides)
    return Settings(_env_file=None, **base)


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Return a factory to build Settings with overrides."""
    return build_settings


@pytest.fixture
def settings(settings_factory: Callable[..., Settings], tmp_path: Path) -> Settings:
    """Default Settings fixture with preferences in a temp dir."""
    return settings_factory(preferences_path=tmp_path / "preferences.json")


@pytest.fixture
def config_factory() -> Callable[..., ConfigAccessor]:
    """Return a factory building a ConfigAccessor from keyword values."""

    def _build(**values: str) -> ConfigAccessor:
        return ConfigAccessor(values, encryption_key=TEST_CRYPTO_KEY)

    return _build


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# =============================================================================
# Fakes for local devices
# =============================================================================


class FakeLocalVoice:
    """Records what the local voice was asked to say."""

    def __init__(self) -> None:
        self.spoken: list[str] = []

    async def speak(self, text: str) -> None:
        self.spoken.append(text)


class FakePlayer:
    """Records played audio; optionally fails."""

    def __init__(self, error: Exception | None = None) -> None:
        self.played: list[SynthesizedAudio] = []
        self._error = error

    async def play(self, audio: SynthesizedAudio) -> None:
        if self._error is not None:
            raise self._error
        self.played.append(audio)


class FakeCapture:
    """Capture device that returns fixed bytes and tracks acquisition."""

    mime_type = "audio/wav"

    def __init__(
        self,
        data: bytes = b"RIFF" + b"\x00" * 996,
        frames: list[bytes] | None = None,
        start_error: Exception | None = None,
    ) -> None:
        self.data = data
        self.frames = frames or []
        self.start_error = start_error
        self.acquired = False
        self.start_calls = 0
        self.abort_calls = 0

    def start(self, on_frames: Any = None) -> None:
        self.start_calls += 1
        self.acquired = True
        if self.start_error is not None:
            raise self.start_error
        if on_frames is not None:
            for frame in self.frames:
                on_frames(frame)

    def stop(self) -> bytes:
        self.acquired = False
        return self.data

    def abort(self) -> None:
        self.abort_calls += 1
        self.acquired = False


class FakeRecognizer:
    """Local recognizer with a fixed transcript."""

    def __init__(self, transcript: str = "") -> None:
        self._transcript = transcript
        self.fed: list[bytes] = []
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def feed(self, pcm: bytes) -> None:
        self.fed.append(pcm)

    def stop(self) -> None:
        self.stopped = True

    @property
    def transcript(self) -> str:
        return self._transcript


@pytest.fixture
def local_voice() -> FakeLocalVoice:
    return FakeLocalVoice()


@pytest.fixture
def player() -> FakePlayer:
    return FakePlayer()


# =============================================================================
# Pipeline assembly
# =============================================================================


def build_pipeline(
    config: ConfigAccessor,
    settings: Settings,
    handler: Callable[[httpx.Request], httpx.Response] | None = None,
    *,
    stt: ProviderId = ProviderId.OPENAI_WHISPER,
    ai: ProviderId = ProviderId.OPENAI_API,
    tts: ProviderId = ProviderId.OPENAI_TTS,
    user_name: str = "Asha",
    player: Any = None,
    local_voice: Any = None,
    adapters: dict[ProviderId, Any] | None = None,
) -> ConversationPipeline:
    """Wire a pipeline whose HTTP traffic goes to handler."""
    client = mock_client(handler or (lambda request: httpx.Response(500)))
    gate = CredentialGate(config)
    registry = AdapterRegistry(config, settings, client=client, adapters=adapters)
    preferences = Preferences(
        user_name=user_name,
        stt_service=stt,
        ai_service=ai,
        tts_service=tts,
        elevenlabs_voice_id="",
        murf_tts_voice_id="",
    )
    return ConversationPipeline(
        TranscriptionOrchestrator(gate, registry),
        ResponseOrchestrator(gate, registry, settings),
        SynthesisOrchestrator(
            gate,
            registry,
            player or FakePlayer(),
            local_voice or FakeLocalVoice(),
        ),
        preferences,
    )


@pytest.fixture
def pipeline_factory(settings: Settings) -> Callable[..., ConversationPipeline]:
    """Return a factory building a pipeline around a mock HTTP handler."""

    def _build(config: ConfigAccessor, handler=None, **kwargs: Any) -> ConversationPipeline:
        return build_pipeline(config, settings, handler, **kwargs)

    return _build


@pytest.fixture
def crypto_key() -> str:
    """Passphrase used by config_factory."""
    return TEST_CRYPTO_KEY


@pytest.fixture
def client_factory() -> Callable[..., httpx.AsyncClient]:
    """Return a factory building an AsyncClient around a MockTransport handler."""
    return mock_client


@pytest.fixture
def capture_factory() -> type[FakeCapture]:
    return FakeCapture


@pytest.fixture
def recognizer_factory() -> type[FakeRecognizer]:
    return FakeRecognizer


@pytest.fixture
def player_factory() -> type[FakePlayer]:
    return FakePlayer
