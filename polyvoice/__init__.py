"""polyvoice: multi-provider voice conversation pipeline (STT -> AI -> TTS)."""

__version__ = "0.1.0"
