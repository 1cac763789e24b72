"""Tests for cloud STT adapters."""

from __future__ import annotations

import base64
import json
import threading

import httpx
import pytest

from polyvoice.services.base import error_detail, extract_text
from polyvoice.services.stt import (
    AzureSTTService,
    DeepgramSTTService,
    ElevenLabsSTTService,
    GoogleSTTService,
    MurfFalconService,
    OpenAIWhisperService,
    TranscriptionError,
    WhisperLocalRecognizer,
)
from polyvoice.services.stt.protocol import AudioPayload

WEBM = AudioPayload(data=b"webm-bytes", mime_hint="audio/webm;codecs=opus")
WAV = AudioPayload(data=b"RIFF-bytes", mime_hint="audio/wav")


class Recorder:
    """MockTransport handler that records requests and returns a fixed response."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


class TestAudioPayload:
    """Tests for payload helpers."""

    def test_media_format(self) -> None:
        assert WEBM.media_format == "webm"
        assert WAV.media_format == "wav"
        assert AudioPayload(b"", "audio/mpeg").media_format == "mp3"
        assert AudioPayload(b"", "audio/ogg").media_format == "ogg"
        assert AudioPayload(b"", "application/octet-stream").media_format == "webm"

    def test_filename_and_content_type(self) -> None:
        assert WAV.filename == "recording.wav"
        assert WAV.content_type == "audio/wav"
        assert AudioPayload(b"x", "").content_type == "audio/webm"

    def test_len(self) -> None:
        assert len(WEBM) == len(b"webm-bytes")


class TestHelpers:
    """Tests for response parsing helpers."""

    def test_extract_text(self) -> None:
        data = {"a": [{"b": "  value  "}]}
        assert extract_text(data, "a", 0, "b") == "value"
        assert extract_text(data, "a", 3, "b") == ""
        assert extract_text(data, "missing") == ""
        assert extract_text({"a": 5}, "a") == ""
        assert extract_text(["x"], "a") == ""

    def test_error_detail(self) -> None:
        assert error_detail(httpx.Response(400, json={"detail": {"message": "bad"}})) == "bad"
        assert error_detail(httpx.Response(400, json={"message": "nope"})) == "nope"
        assert error_detail(httpx.Response(400, json={"error": {"message": "quota"}})) == "quota"
        assert error_detail(httpx.Response(400, text="<html>")) == ""


class TestOpenAIWhisper:
    """Tests for OpenAI Whisper."""

    @pytest.mark.asyncio
    async def test_transcribes(self, config_factory, settings, client_factory) -> None:
        recorder = Recorder(httpx.Response(200, json={"text": " hello world "}))
        service = OpenAIWhisperService(
            config_factory(OPENAI_API_KEY="sk-test"), settings, client=client_factory(recorder)
        )

        assert await service.invoke(WEBM) == "hello world"

        request = recorder.last
        assert str(request.url) == "https://api.openai.com/v1/audio/transcriptions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = request.content
        assert b'name="model"' in body
        assert b"whisper-1" in body
        assert b'filename="recording.webm"' in body
        assert b"webm-bytes" in body

    @pytest.mark.asyncio
    async def test_error_status(self, config_factory, settings, client_factory) -> None:
        recorder = Recorder(httpx.Response(401, json={"error": {"message": "Incorrect API key"}}))
        service = OpenAIWhisperService(
            config_factory(OPENAI_API_KEY="sk-bad"), settings, client=client_factory(recorder)
        )

        with pytest.raises(TranscriptionError) as exc_info:
            await service.invoke(WEBM)

        error = exc_info.value
        assert str(error) == "OpenAI Whisper request failed (401): Incorrect API key"
        assert error.status_code == 401
        assert error.provider == "OpenAI Whisper API"

    @pytest.mark.asyncio
    async def test_transport_error(self, config_factory, settings, client_factory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        service = OpenAIWhisperService(
            config_factory(OPENAI_API_KEY="sk"), settings, client=client_factory(handler)
        )
        with pytest.raises(TranscriptionError, match="OpenAI Whisper request failed: connection refused"):
            await service.invoke(WEBM)

    @pytest.mark.asyncio
    async def test_malformed_json(self, config_factory, settings, client_factory) -> None:
        recorder = Recorder(httpx.Response(200, text="not json"))
        service = OpenAIWhisperService(
            config_factory(OPENAI_API_KEY="sk"), settings, client=client_factory(recorder)
        )
        with pytest.raises(TranscriptionError, match="malformed"):
            await service.invoke(WEBM)


class TestAzureSTT:
    @pytest.mark.asyncio
    async def test_transcribes(self, config_factory, settings, client_factory) -> None:
        recorder = Recorder(httpx.Response(200, json={"RecognitionStatus": "Success", "DisplayText": "Hello."}))
        service = AzureSTTService(
            config_factory(AZURE_STT_KEY="az-key", AZURE_STT_REGION="eastus"),
            settings,
            client=client_factory(recorder),
        )

        assert await service.invoke(WAV) == "Hello."

        request = recorder.last
        assert request.url.host == "eastus.stt.speech.microsoft.com"
        assert request.url.params["language"] == "en-US"
        assert request.url.params["format"] == "simple"
        assert request.headers["Ocp-Apim-Subscription-Key"] == "az-key"
        assert request.headers["Content-Type"] == "audio/wav"
        assert request.content == b"RIFF-bytes"

    @pytest.mark.asyncio
    async def test_error_label(self, config_factory, settings, client_factory) -> None:
        service = AzureSTTService(
            config_factory(AZURE_STT_KEY="k", AZURE_STT_REGION="eastus"),
            settings,
            client=client_factory(Recorder(httpx.Response(403))),
        )
        with pytest.raises(TranscriptionError, match=r"^Azure STT request failed \(403\)$"):
            await service.invoke(WAV)


class TestGoogleSTT:
    @pytest.mark.asyncio
    async def test_joins_results(self, config_factory, settings, client_factory) -> None:
        recorder = Recorder(
            httpx.Response(
                200,
                json={
                    "results": [
                        {"alternatives": [{"transcript": "book a table"}]},
                        {"alternatives": [{"transcript": " for two "}]},
                    ]
                },
            )
        )
        service = GoogleSTTService(
            config_factory(GOOGLE_CLOUD_STT_API_KEY="g-key"), settings, client=client_factory(recorder)
        )

        assert await service.invoke(WEBM) == "book a table for two"

        request = recorder.last
        assert request.url.params["key"] == "g-key"
        body = json.loads(request.content)
        assert body["config"]["encoding"] == "WEBM_OPUS"
        assert body["config"]["languageCode"] == "en-US"
        assert base64.b64decode(body["audio"]["content"]) == b"webm-bytes"

    @pytest.mark.asyncio
    async def test_wav_encoding(self, config_factory, settings, client_factory) -> None:
        recorder = Recorder(httpx.Response(200, json={}))
        service = GoogleSTTService(
            config_factory(GOOGLE_CLOUD_STT_API_KEY="g"), settings, client=client_factory(recorder)
        )

        assert await service.invoke(WAV) == ""
        assert json.loads(recorder.last.content)["config"]["encoding"] == "LINEAR16"


class TestDeepgram:
    @pytest.mark.asyncio
    async def test_transcribes(self, config_factory, settings, client_factory) -> None:
        recorder = Recorder(
            httpx.Response(
                200,
                json={"results": {"channels": [{"alternatives": [{"transcript": "Hello there."}]}]}},
            )
        )
        service = DeepgramSTTService(
            config_factory(DEEPGRAM_API_KEY="dg-key"), settings, client=client_factory(recorder)
        )

        assert await service.invoke(WEBM) == "Hello there."

        request = recorder.last
        assert request.headers["Authorization"] == "Token dg-key"
        assert request.url.params["model"] == "nova-2"
        assert request.url.params["smart_format"] == "true"

    @pytest.mark.asyncio
    async def test_error_uses_display_name(self, config_factory, settings, client_factory) -> None:
        service = DeepgramSTTService(
            config_factory(DEEPGRAM_API_KEY="dg"),
            settings,
            client=client_factory(Recorder(httpx.Response(400, json={"message": "Bad audio"}))),
        )
        with pytest.raises(TranscriptionError, match=r"Deepgram request failed \(400\): Bad audio"):
            await service.invoke(WEBM)


class TestElevenLabsSTT:
    @pytest.mark.asyncio
    async def test_transcribes(self, config_factory, settings, client_factory) -> None:
        recorder = Recorder(httpx.Response(200, json={"text": "hi"}))
        service = ElevenLabsSTTService(
            config_factory(ELEVENLABS_API_KEY="xi"), settings, client=client_factory(recorder)
        )

        assert await service.invoke(WEBM) == "hi"

        request = recorder.last
        assert request.headers["xi-api-key"] == "xi"
        assert b"scribe_v1" in request.content
        assert b'name="language_code"\r\n\r\nen' in request.content


class TestMurfFalcon:
    @pytest.mark.asyncio
    async def test_transcribes(self, config_factory, settings, client_factory) -> None:
        recorder = Recorder(httpx.Response(200, json={"transcription": "hey"}))
        service = MurfFalconService(
            config_factory(MURF_FALCON_API_KEY="murf"), settings, client=client_factory(recorder)
        )

        assert await service.invoke(WEBM) == "hey"

        request = recorder.last
        assert str(request.url) == "https://api.murf.ai/v1/voice-changer/convert"
        assert request.headers["api-key"] == "murf"
        assert b'name="return_transcription"\r\n\r\ntrue' in request.content

    @pytest.mark.asyncio
    async def test_error_label(self, config_factory, settings, client_factory) -> None:
        service = MurfFalconService(
            config_factory(MURF_FALCON_API_KEY="murf"),
            settings,
            client=client_factory(Recorder(httpx.Response(500))),
        )
        with pytest.raises(TranscriptionError, match="Murf Falcon STT request failed"):
            await service.invoke(WEBM)


class FakeSegment:
    def __init__(self, text: str) -> None:
        self.text = text


class FakeWhisperModel:
    def __init__(self, texts: list[str] | None = None, error: Exception | None = None) -> None:
        self.texts = texts or []
        self.error = error
        self.calls: list[dict] = []

    def transcribe(self, audio, **kwargs):
        self.calls.append({"samples": len(audio), **kwargs})
        if self.error is not None:
            raise self.error
        return (FakeSegment(text) for text in self.texts), None


class BlockingWhisperModel:
    """Holds the first transcribe call open until released."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.entered = threading.Event()
        self.release = threading.Event()

    def transcribe(self, audio, **kwargs):
        self.entered.set()
        self.release.wait(5)
        return iter([FakeSegment(self.text)]), None


class TestWhisperLocalRecognizer:
    """Tests for the on-device fallback recognizer."""

    def test_transcribe_pcm(self, settings) -> None:
        model = FakeWhisperModel([" book a ", "table "])
        recognizer = WhisperLocalRecognizer(settings, model=model)

        assert recognizer.transcribe_pcm(b"\x00\x01" * 8000) == "book a table"
        assert model.calls[0]["samples"] == 8000
        assert model.calls[0]["language"] == "en"

    def test_failure_yields_empty_transcript(self, settings) -> None:
        recognizer = WhisperLocalRecognizer(settings, model=FakeWhisperModel(error=RuntimeError("oom")))
        assert recognizer.transcribe_pcm(b"\x00\x00" * 8000) == ""

    def test_start_resets_and_stop_does_not_block(self, settings_factory) -> None:
        recognizer = WhisperLocalRecognizer(
            settings_factory(local_stt_interval_seconds=60.0), model=FakeWhisperModel(["x"])
        )
        recognizer.start()
        recognizer.feed(b"\x00\x00" * 100)
        recognizer.stop()
        assert recognizer.transcript == ""

    def test_restart_discards_previous_session_pass(self, settings_factory) -> None:
        model = BlockingWhisperModel("previous turn words")
        recognizer = WhisperLocalRecognizer(
            settings_factory(local_stt_interval_seconds=0.01), model=model
        )

        recognizer.start()
        recognizer.feed(b"\x00\x00" * 16000)
        assert model.entered.wait(5)
        first_worker = recognizer._thread

        recognizer.stop()
        recognizer.start()
        model.release.set()
        first_worker.join(5)

        assert not first_worker.is_alive()
        assert recognizer.transcript == ""
        recognizer.stop()
