"""Base exception for provider adapter failures."""


class ProviderCallError(Exception):
    """Raised when an upstream provider call fails.

    Carries the provider display name and, when the failure was an HTTP
    error response, its status code.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
