"""Credential gate: can a provider be called with the current configuration?

Evaluation only reads configuration. It never touches the network.
"""

from __future__ import annotations

from polyvoice.core.catalog import ProviderDescriptor
from polyvoice.core.config_accessor import ConfigAccessor
from polyvoice.core.exceptions import CredentialMissingError

CONFIG_SOURCE_NAME = ".env"


class CredentialGate:
    """Decides whether a provider has the configuration it needs."""

    def __init__(self, config: ConfigAccessor) -> None:
        self._config = config

    def missing_keys(self, descriptor: ProviderDescriptor) -> list[str]:
        """Required keys that do not resolve to a non-empty value, in descriptor order.

        Raises:
            ConfigDecryptError: If a required value is encrypted and corrupt
        """
        return [
            key
            for key in descriptor.required_config_keys
            if not self._config.get(key).strip()
        ]

    def is_available(self, descriptor: ProviderDescriptor) -> bool:
        """True iff the descriptor declares keys and all of them resolve.

        A descriptor with no required keys is never available.
        """
        if not descriptor.required_config_keys:
            return False
        return not self.missing_keys(descriptor)

    def require(self, descriptor: ProviderDescriptor) -> None:
        """Raise CredentialMissingError unless the provider is available."""
        if not self.is_available(descriptor):
            raise CredentialMissingError(descriptor.name, self.missing_keys(descriptor))

    def fallback_note(self, descriptor: ProviderDescriptor) -> str:
        """Actionable guidance explaining why a provider will or will not be called."""
        if not self.is_available(descriptor):
            missing = self.missing_keys(descriptor)
            if missing:
                return f"Add {', '.join(missing)} in {CONFIG_SOURCE_NAME} to call {descriptor.name}."
            return f"Add provider keys in {CONFIG_SOURCE_NAME} to call {descriptor.name}."

        if not descriptor.implemented:
            return (
                f"{descriptor.name} keys are loaded from {CONFIG_SOURCE_NAME}, "
                "but the cloud adapter is not implemented yet."
            )

        return f"{descriptor.name} is ready with keys from {CONFIG_SOURCE_NAME}."
