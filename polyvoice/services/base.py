"""Shared plumbing for cloud provider adapters.

Adapters hold a ConfigAccessor (credentials are read per call, so key
rotation in the environment is picked up without rebuilding adapters), the
typed Settings, and an httpx.AsyncClient that may be shared across adapters.
"""

from __future__ import annotations

from typing import Any, ClassVar

import httpx

from polyvoice.config import Settings, get_settings
from polyvoice.core.catalog import ProviderDescriptor, ProviderId, get_descriptor
from polyvoice.core.config_accessor import ConfigAccessor
from polyvoice.logging_config import get_logger
from polyvoice.services.exceptions import ProviderCallError

logger: Any = get_logger(__name__)


def extract_text(data: Any, *path: str | int) -> str:
    """Walk nested dicts/lists and return a trimmed string, or "" if any hop is missing."""
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return ""
            current = current[step]
        else:
            if not isinstance(current, dict):
                return ""
            current = current.get(step)
        if current is None:
            return ""
    return current.strip() if isinstance(current, str) else ""


def error_detail(response: httpx.Response) -> str:
    """Best-effort human-readable detail from a provider error body."""
    try:
        data = response.json()
    except ValueError:
        return ""
    return (
        extract_text(data, "detail", "message")
        or extract_text(data, "message")
        or extract_text(data, "error", "message")
    )


class ProviderAdapter:
    """Base class for every cloud adapter.

    Subclasses set ``provider`` and ``error_cls`` and implement ``invoke``.
    """

    provider: ClassVar[ProviderId]
    label: ClassVar[str] = ""  # Prefix for error messages, defaults to the display name
    error_cls: ClassVar[type[ProviderCallError]] = ProviderCallError

    def __init__(
        self,
        config: ConfigAccessor,
        settings: Settings | None = None,
    ) -> None:
        self._config = config
        self._settings = settings or get_settings()

    @property
    def descriptor(self) -> ProviderDescriptor:
        return get_descriptor(self.provider)

    @property
    def error_label(self) -> str:
        return self.label or self.descriptor.name

    def _secret(self, key: str) -> str:
        """Read a credential through the decrypting accessor."""
        return self._config.get(key).strip()

    def _error(self, message: str, *, status_code: int | None = None) -> ProviderCallError:
        return self.error_cls(message, provider=self.descriptor.name, status_code=status_code)

    async def close(self) -> None:
        """Release adapter resources."""
        return None


class HttpProviderAdapter(ProviderAdapter):
    """Adapter that talks to its provider over HTTPS."""

    def __init__(
        self,
        config: ConfigAccessor,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config, settings)
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy initialization of the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.http_timeout_seconds)
        return self._client

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, converting transport errors and error statuses to ``error_cls``."""
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{self.error_label} transport error: {e}")
            raise self._error(f"{self.error_label} request failed: {e}") from e

        if response.is_error:
            detail = error_detail(response)
            message = f"{self.error_label} request failed ({response.status_code})"
            if detail:
                message = f"{message}: {detail}"
            logger.warning(message)
            raise self._error(message, status_code=response.status_code)

        return response

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise self._error(f"{self.error_label} returned a malformed response") from e

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
