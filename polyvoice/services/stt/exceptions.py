"""Custom exceptions for STT services."""

from polyvoice.services.exceptions import ProviderCallError


class TranscriptionError(ProviderCallError):
    """Raised when a speech-to-text provider call fails."""

    pass


class TranscriptionTimeoutError(TranscriptionError, TimeoutError):
    """Raised when a transcription job does not reach a terminal state in time."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        last_status: str = "",
    ) -> None:
        super().__init__(message, provider=provider)
        self.last_status = last_status
