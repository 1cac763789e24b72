"""Application configuration using Pydantic Settings.

Typed tunables (models, voices, timeouts, paths) are loaded from environment
variables and the local .env file. Provider credentials are NOT declared
here: they are read through ConfigAccessor so that encrypted values are
decrypted on read. See .env.example for both kinds of keys.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # ==========================================================================
    # Application
    # ==========================================================================
    env_file: str = Field(
        default=".env",
        description="Raw key/value file read by ConfigAccessor for provider credentials",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_dir: str = Field(default="logs", description="Directory for rotating log files")
    log_to_file: bool = Field(default=False, description="Enable file logging")
    http_timeout_seconds: float = Field(
        default=30.0,
        description="Transport timeout applied to every provider HTTP call",
    )
    preferences_path: Path = Field(
        default=Path.home() / ".polyvoice" / "preferences.json",
        description="JSON file holding the persisted user preferences",
    )
    default_user_name: str = Field(default="Guest", description="Name used when none is set")

    # ==========================================================================
    # Audio capture
    # ==========================================================================
    sample_rate: int = Field(default=16000, description="Microphone capture sample rate")
    local_stt_model: str = Field(
        default="base.en",
        description="faster-whisper model used by the on-device fallback recognizer",
    )
    local_stt_interval_seconds: float = Field(
        default=1.5,
        description="How often the on-device recognizer re-transcribes captured audio",
    )
    local_tts_rate: int = Field(default=175, description="Words per minute for the local voice")

    # ==========================================================================
    # Speech-to-text
    # ==========================================================================
    stt_language: str = Field(default="en-US", description="Language code sent to STT providers")
    openai_transcription_model: str = Field(default="whisper-1")
    deepgram_model: str = Field(default="nova-2")
    elevenlabs_stt_model: str = Field(default="scribe_v1")
    murf_api_base_url: str = Field(default="https://api.murf.ai")
    murf_falcon_voice_id: str = Field(default="en-US-natalie")
    aws_transcribe_prefix: str = Field(
        default="voice-inputs",
        description="S3 key prefix for uploaded recordings and job output",
    )

    # ==========================================================================
    # Response generation
    # ==========================================================================
    openai_chat_model: str = Field(default="gpt-4o-mini")
    openai_system_prompt: str = Field(
        default="You are a helpful assistant for a multi-service voice chatbot demo.",
    )
    gemini_model: str = Field(default="gemini-2.5-pro")

    # ==========================================================================
    # Text-to-speech
    # ==========================================================================
    openai_tts_model: str = Field(default="gpt-4o-mini-tts")
    openai_tts_voice: str = Field(default="alloy")
    elevenlabs_tts_model: str = Field(default="eleven_flash_v2_5")
    elevenlabs_voice_id: str = Field(
        default="pNInz6obpgDQGcFmaJgB",
        description="Default ElevenLabs voice ID (overridable per user)",
    )
    murf_tts_voice_id: str = Field(
        default="en-US-natalie",
        description="Default Murf voice ID (overridable per user)",
    )
    azure_tts_voice: str = Field(default="en-US-JennyNeural")
    aws_polly_voice_id: str = Field(default="Joanna")

    # ==========================================================================
    # Derived Properties
    # ==========================================================================
    @property
    def language_short(self) -> str:
        """Two-letter language code (en-US -> en)."""
        return self.stt_language.split("-", 1)[0]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
