"""Conversation pipeline for one voice turn at a time.

Orchestrates the full turn:
- Microphone capture (with the local recognizer running alongside)
- STT -> response generation -> TTS, each through its stage orchestrator
- Conversation log entries for the user, the assistant and absorbed failures
- A state machine that rejects overlapping turns
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field, fields
from datetime import UTC, datetime
from enum import Enum, auto
from typing import Any, Literal

from polyvoice.core.exceptions import (
    EmptyResultError,
    PipelineBusyError,
    PipelineError,
    TurnFieldAlreadySetError,
)
from polyvoice.core.orchestrators import (
    ResponseOrchestrator,
    SynthesisOrchestrator,
    TranscriptionOrchestrator,
)
from polyvoice.core.preferences import Preferences
from polyvoice.core.recording import RecordingSession
from polyvoice.logging_config import get_logger
from polyvoice.observability.metrics import record_turn
from polyvoice.services.stt.protocol import AudioPayload

logger: Any = get_logger(__name__)

SYSTEM_PROVIDER = "System"
GREETING = "Choose your STT, AI and TTS providers, then start recording to begin."


class PipelineState(Enum):
    """State machine for one conversation turn."""

    IDLE = auto()  # Ready for a new turn
    LISTENING = auto()  # Microphone open
    TRANSCRIBING = auto()  # STT stage
    GENERATING = auto()  # Response generation stage
    SYNTHESIZING = auto()  # TTS stage (never fails)
    DONE = auto()  # Turn completed
    ERRORED = auto()  # Transient; resets to IDLE immediately


_TURN_START_STATES = frozenset({PipelineState.IDLE, PipelineState.DONE, PipelineState.ERRORED})

ALLOWED_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.LISTENING, PipelineState.TRANSCRIBING}),
    PipelineState.DONE: frozenset({PipelineState.LISTENING, PipelineState.TRANSCRIBING}),
    PipelineState.ERRORED: frozenset(
        {PipelineState.IDLE, PipelineState.LISTENING, PipelineState.TRANSCRIBING}
    ),
    PipelineState.LISTENING: frozenset(
        {PipelineState.TRANSCRIBING, PipelineState.ERRORED, PipelineState.IDLE}
    ),
    PipelineState.TRANSCRIBING: frozenset({PipelineState.GENERATING, PipelineState.ERRORED}),
    PipelineState.GENERATING: frozenset({PipelineState.SYNTHESIZING, PipelineState.ERRORED}),
    PipelineState.SYNTHESIZING: frozenset({PipelineState.DONE}),
}


@dataclass
class ConversationTurn:
    """Result of one turn. Every field can be written once."""

    transcript: str | None = None
    transcript_source: str | None = None
    reply: str | None = None
    reply_source: str | None = None
    audio_rendered: bool | None = None

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, name, None) is not None:
            raise TurnFieldAlreadySetError(name)
        super().__setattr__(name, value)

    @property
    def is_complete(self) -> bool:
        return all(getattr(self, f.name) is not None for f in fields(self))


@dataclass(frozen=True)
class LogMessage:
    """One entry in the conversation log."""

    role: Literal["user", "assistant"]
    content: str
    provider: str
    time: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_system(self) -> bool:
        return self.provider == SYSTEM_PROVIDER


class ConversationLog:
    """Ordered, append-only message log."""

    def __init__(self) -> None:
        self._messages: list[LogMessage] = []

    def append(self, role: Literal["user", "assistant"], content: str, provider: str) -> LogMessage:
        message = LogMessage(role=role, content=content, provider=provider)
        self._messages.append(message)
        return message

    def add_system(self, content: str) -> LogMessage:
        return self.append("assistant", content, SYSTEM_PROVIDER)

    @property
    def messages(self) -> tuple[LogMessage, ...]:
        return tuple(self._messages)

    def system_messages(self) -> list[LogMessage]:
        return [message for message in self._messages if message.is_system]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(tuple(self._messages))


class ConversationPipeline:
    """Runs turns through the three stage orchestrators.

    Failures in STT or response generation that no fallback absorbs move the
    pipeline to ERRORED, which records the error, discards the partial turn
    and resets to IDLE before the error is re-raised.
    """

    def __init__(
        self,
        transcription: TranscriptionOrchestrator,
        response: ResponseOrchestrator,
        synthesis: SynthesisOrchestrator,
        preferences: Preferences,
        *,
        log: ConversationLog | None = None,
        greeting: str = GREETING,
    ) -> None:
        self._transcription = transcription
        self._response = response
        self._synthesis = synthesis
        self.preferences = preferences
        self._log = log or ConversationLog()

        self._state = PipelineState.IDLE
        self._state_history: list[PipelineState] = [PipelineState.IDLE]
        self._session: RecordingSession | None = None
        self._turn: ConversationTurn | None = None
        self._last_error: BaseException | None = None

        if greeting:
            self._log.add_system(greeting)

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def state_history(self) -> tuple[PipelineState, ...]:
        return tuple(self._state_history)

    @property
    def last_error(self) -> BaseException | None:
        return self._last_error

    @property
    def log(self) -> ConversationLog:
        return self._log

    @property
    def current_turn(self) -> ConversationTurn | None:
        return self._turn

    @property
    def is_busy(self) -> bool:
        return self._state not in _TURN_START_STATES

    def _set_state(self, new_state: PipelineState) -> None:
        old_state = self._state
        if new_state not in ALLOWED_TRANSITIONS[old_state]:
            raise PipelineError(f"Invalid pipeline transition {old_state.name} → {new_state.name}")
        self._state = new_state
        self._state_history.append(new_state)
        logger.debug(f"Pipeline state: {old_state.name} → {new_state.name}")

    def _ensure_can_start(self) -> None:
        if self.is_busy:
            raise PipelineBusyError(f"Pipeline is busy ({self._state.name})")

    def _fail(self, error: BaseException) -> None:
        logger.error(f"Turn failed in {self._state.name}: {error}")
        self._last_error = error
        self._set_state(PipelineState.ERRORED)
        self._turn = None
        self._set_state(PipelineState.IDLE)

    # =========================================================================
    # Recording
    # =========================================================================

    async def start_recording(self, session: RecordingSession) -> None:
        """Open the microphone for a new turn.

        Raises:
            PipelineBusyError: If a turn is already in progress
        """
        self._ensure_can_start()
        self._set_state(PipelineState.LISTENING)
        self._last_error = None
        try:
            await session.start()
        except BaseException as e:
            self._fail(e)
            raise
        self._session = session

    async def stop_recording(self) -> ConversationTurn:
        """Stop the microphone and run the captured utterance through the turn.

        Raises:
            PipelineError: If no recording is in progress
            EmptyResultError: If no audio was captured
        """
        session = self._session
        if self._state != PipelineState.LISTENING or session is None:
            raise PipelineError("No recording in progress")
        self._session = None

        try:
            utterance = await session.finish()
        except BaseException as e:
            self._fail(e)
            raise

        if not utterance.payload.data:
            error = EmptyResultError("No audio was captured.", stage="capture")
            self._fail(error)
            raise error

        return await self._process(utterance.payload, utterance.local_transcript)

    def cancel_recording(self) -> None:
        """Discard the current recording without running a turn."""
        if self._state != PipelineState.LISTENING:
            return
        session, self._session = self._session, None
        if session is not None:
            session.cancel()
        self._set_state(PipelineState.IDLE)

    # =========================================================================
    # Turn processing
    # =========================================================================

    async def run_turn(
        self,
        payload: AudioPayload,
        fallback_transcript: str = "",
    ) -> ConversationTurn:
        """Run a full turn on an already recorded utterance.

        Raises:
            PipelineBusyError: If a turn is already in progress
        """
        self._ensure_can_start()
        self._last_error = None
        return await self._process(payload, fallback_transcript)

    async def _process(self, payload: AudioPayload, fallback_transcript: str) -> ConversationTurn:
        started = time.perf_counter()
        turn = ConversationTurn()
        self._turn = turn
        prefs = self.preferences

        try:
            self._set_state(PipelineState.TRANSCRIBING)
            heard = await self._transcription.transcribe(
                prefs.stt_service, payload, fallback_transcript
            )
            turn.transcript = heard.text
            turn.transcript_source = heard.source
            if heard.notice:
                self._log.add_system(heard.notice)
            self._log.append("user", heard.text, heard.source)

            self._set_state(PipelineState.GENERATING)
            answer = await self._response.respond(prefs.ai_service, heard.text, prefs.user_name)
            turn.reply = answer.text
            turn.reply_source = answer.source
            self._log.append("assistant", answer.text, answer.source)
        except BaseException as e:
            # Cancellation resets the state too, or every later turn would be busy.
            self._fail(e)
            outcome = "cancelled" if isinstance(e, asyncio.CancelledError) else "errored"
            record_turn(outcome, time.perf_counter() - started)
            raise

        self._set_state(PipelineState.SYNTHESIZING)
        try:
            spoken = await self._synthesis.speak(
                prefs.tts_service,
                answer.text,
                elevenlabs_voice_id=prefs.elevenlabs_voice_id,
                murf_voice_id=prefs.murf_tts_voice_id,
            )
        except asyncio.CancelledError:
            # The reply already exists; the turn ends without audio.
            self._set_state(PipelineState.DONE)
            record_turn("cancelled", time.perf_counter() - started)
            raise
        turn.audio_rendered = spoken.rendered
        if spoken.notice:
            self._log.add_system(spoken.notice)

        self._set_state(PipelineState.DONE)
        record_turn("completed", time.perf_counter() - started)
        logger.info(
            f"Turn done: stt={turn.transcript_source} ai={turn.reply_source} "
            f"audio_rendered={turn.audio_rendered}"
        )
        return turn
