"""Custom exceptions for the conversation pipeline."""

from collections.abc import Sequence


class PipelineError(Exception):
    """Base exception for pipeline errors."""

    pass


class UnknownProviderError(PipelineError, KeyError):
    """Raised when a provider name is not in the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown provider: {name!r}")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class CredentialMissingError(PipelineError):
    """Raised when a provider lacks the configuration it needs to be called."""

    def __init__(self, provider: str, missing_keys: Sequence[str]) -> None:
        self.provider = provider
        self.missing_keys = list(missing_keys)
        keys = ", ".join(self.missing_keys) or "provider keys"
        super().__init__(f"{provider} missing required env keys: {keys}")


class EmptyResultError(PipelineError):
    """Raised when a stage produced no usable content without a transport error."""

    def __init__(self, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage


class PipelineBusyError(PipelineError):
    """Raised when a turn is started while another one is in progress."""

    pass


class TurnFieldAlreadySetError(PipelineError, AttributeError):
    """Raised when a write-once ConversationTurn field is written twice."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"ConversationTurn.{field_name} is already set")
        self.field_name = field_name
