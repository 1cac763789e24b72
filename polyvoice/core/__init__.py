"""Core conversation pipeline components.

The leaf modules are re-exported here:
- Provider catalog and credential gate
- ConfigAccessor: decrypt-on-read configuration
- Preferences persistence

Orchestrators, the recording session and ConversationPipeline depend on the
service adapters and are imported from their own modules.
"""

from polyvoice.core.catalog import (
    CATALOG,
    ProviderDescriptor,
    ProviderId,
    Stage,
    default_provider,
    get_descriptor,
    providers_for,
)
from polyvoice.core.config_accessor import ConfigAccessor
from polyvoice.core.credentials import CredentialGate
from polyvoice.core.exceptions import (
    CredentialMissingError,
    EmptyResultError,
    PipelineBusyError,
    PipelineError,
    TurnFieldAlreadySetError,
    UnknownProviderError,
)
from polyvoice.core.preferences import Preferences, PreferencesStore

__all__ = [
    # Catalog
    "CATALOG",
    "ProviderDescriptor",
    "ProviderId",
    "Stage",
    "default_provider",
    "get_descriptor",
    "providers_for",
    # Configuration
    "ConfigAccessor",
    "CredentialGate",
    "Preferences",
    "PreferencesStore",
    # Exceptions
    "PipelineError",
    "UnknownProviderError",
    "CredentialMissingError",
    "EmptyResultError",
    "PipelineBusyError",
    "TurnFieldAlreadySetError",
]
