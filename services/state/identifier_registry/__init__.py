"""Identifier Registry Service native package exports."""

from packages.tincture_shared.envelope import Envelope, EnvelopeKind, EnvelopeMeta
from packages.tincture_shared.errors import ErrorCategory, ErrorDetail
from services.state.identifier_registry.component import MANIFEST, SERVICE_COMPONENT_ID
from services.state.identifier_registry.config import (
    ColorRegistrySettings,
    IdentifierRegistrySettings,
    RegistryInstanceSettings,
    TraitPolicyDefault,
    WordRegistrySettings,
    resolve_identifier_registry_settings,
)
from services.state.identifier_registry.domain import (
    AttributeList,
    BatchProgress,
    HealthStatus,
    IssueResult,
    KeyRange,
    TransferResult,
    WithdrawResult,
    WordVerification,
)
from services.state.identifier_registry.implementation import (
    DefaultColorRegistryService,
    DefaultWordRegistryService,
)
from services.state.identifier_registry.service import (
    ColorRegistryService,
    IdentifierRegistryService,
    WordRegistryService,
    build_color_registry_service,
    build_identifier_registries,
    build_word_registry_service,
)

__all__ = [
    "MANIFEST",
    "SERVICE_COMPONENT_ID",
    "IdentifierRegistryService",
    "ColorRegistryService",
    "WordRegistryService",
    "DefaultColorRegistryService",
    "DefaultWordRegistryService",
    "build_color_registry_service",
    "build_word_registry_service",
    "build_identifier_registries",
    "IdentifierRegistrySettings",
    "RegistryInstanceSettings",
    "ColorRegistrySettings",
    "WordRegistrySettings",
    "TraitPolicyDefault",
    "resolve_identifier_registry_settings",
    "AttributeList",
    "BatchProgress",
    "HealthStatus",
    "IssueResult",
    "KeyRange",
    "TransferResult",
    "WithdrawResult",
    "WordVerification",
    "Envelope",
    "EnvelopeKind",
    "EnvelopeMeta",
    "ErrorCategory",
    "ErrorDetail",
]
