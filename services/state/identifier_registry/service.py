"""Authoritative in-process Python API for the Identifier Registry Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from packages.tincture_registry.interfaces import PeerNameResolver
from packages.tincture_shared.config import TinctureSettings
from packages.tincture_shared.envelope import Envelope, EnvelopeMeta
from resources.adapters.holder_ledger import HolderLedger
from resources.adapters.settlement import PaymentSettlement
from services.state.identifier_registry.domain import (
    AttributeList,
    BatchProgress,
    HealthStatus,
    IssuanceRecord,
    IssueResult,
    KeyRange,
    RegistryEvent,
    RegistrySnapshot,
    RenderedDocument,
    TraitPolicy,
    TransferResult,
    WithdrawResult,
    WordVerification,
)


class IdentifierRegistryService(ABC):
    """Public API shared by every registry instance."""

    @abstractmethod
    def set_attribute(
        self,
        *,
        meta: EnvelopeMeta,
        caller: str,
        sequence_id: int,
        trait_name: str,
        value: str,
    ) -> Envelope[AttributeList]:
        """Write one holder-modifiable trait of one identifier."""

    @abstractmethod
    def set_attributes(
        self,
        *,
        meta: EnvelopeMeta,
        caller: str,
        sequence_ids: Sequence[int],
        trait_names: Sequence[str],
        values: Sequence[str],
    ) -> Envelope[BatchProgress]:
        """Apply parallel attribute writes one at a time, stopping at the first failure."""

    @abstractmethod
    def admin_set_attribute(
        self,
        *,
        meta: EnvelopeMeta,
        caller: str,
        sequence_id: int,
        trait_name: str,
        value: str,
    ) -> Envelope[AttributeList]:
        """Write one trait as the registry owner regardless of policy."""

    @abstractmethod
    def set_trait_policy(
        self,
        *,
        meta: EnvelopeMeta,
        caller: str,
        trait_name: str,
        user_modifiable: bool,
        enabled_for_all: bool,
    ) -> Envelope[TraitPolicy]:
        """Upsert one global trait policy."""

    @abstractmethod
    def grant_trait(
        self, *, meta: EnvelopeMeta, caller: str, sequence_id: int, trait_name: str
    ) -> Envelope[IssuanceRecord]:
        """Add one trait to an identifier's modifiable whitelist."""

    @abstractmethod
    def revoke_trait(
        self, *, meta: EnvelopeMeta, caller: str, sequence_id: int, trait_name: str
    ) -> Envelope[IssuanceRecord]:
        """Remove one trait from an identifier's modifiable whitelist."""

    @abstractmethod
    def list_attributes(
        self, *, meta: EnvelopeMeta, sequence_id: int
    ) -> Envelope[AttributeList]:
        """Return attributes in first-write order, display name first."""

    @abstractmethod
    def get_document(
        self, *, meta: EnvelopeMeta, sequence_id: int
    ) -> Envelope[RenderedDocument]:
        """Render the canonical document of one issued identifier."""

    @abstractmethod
    def list_keys(
        self, *, meta: EnvelopeMeta, start: int, end: int
    ) -> Envelope[KeyRange]:
        """Return canonical keys for sequence ids in ``[start, end)``."""

    @abstractmethod
    def get_record(
        self, *, meta: EnvelopeMeta, sequence_id: int
    ) -> Envelope[IssuanceRecord]:
        """Return one issuance record."""

    @abstractmethod
    def issued_count(self, *, meta: EnvelopeMeta) -> Envelope[int]:
        """Return how many identifiers were issued."""

    @abstractmethod
    def get_display_name(self, *, meta: EnvelopeMeta, key: str) -> Envelope[str | None]:
        """Return the current display name of ``key`` or ``None`` if unissued."""

    @abstractmethod
    def transfer(
        self, *, meta: EnvelopeMeta, caller: str, sequence_id: int, recipient: str
    ) -> Envelope[TransferResult]:
        """Move one identifier from its holder to ``recipient``."""

    @abstractmethod
    def set_issuance_enabled(
        self, *, meta: EnvelopeMeta, caller: str, enabled: bool
    ) -> Envelope[RegistrySnapshot]:
        """Switch issuance on or off."""

    @abstractmethod
    def set_unit_price(
        self, *, meta: EnvelopeMeta, caller: str, unit_price: int
    ) -> Envelope[RegistrySnapshot]:
        """Change the price of one identifier."""

    @abstractmethod
    def set_policy_changes_allowed(
        self, *, meta: EnvelopeMeta, caller: str, enabled: bool
    ) -> Envelope[RegistrySnapshot]:
        """Freeze or unfreeze price changes and owner name overrides."""

    @abstractmethod
    def set_suppressed(
        self, *, meta: EnvelopeMeta, caller: str, sequence_id: int, suppressed: bool
    ) -> Envelope[RegistrySnapshot]:
        """Suppress or restore one identifier's rendered document."""

    @abstractmethod
    def lock_suppression(
        self, *, meta: EnvelopeMeta, caller: str
    ) -> Envelope[RegistrySnapshot]:
        """Permanently disable suppression changes."""

    @abstractmethod
    def set_staking_custody(
        self, *, meta: EnvelopeMeta, caller: str, identity: str | None
    ) -> Envelope[RegistrySnapshot]:
        """Set or clear the delegated custody identity used for the staked flag."""

    @abstractmethod
    def withdraw(self, *, meta: EnvelopeMeta, caller: str) -> Envelope[WithdrawResult]:
        """Pay the settled balance out to the registry owner."""

    @abstractmethod
    def get_snapshot(self, *, meta: EnvelopeMeta) -> Envelope[RegistrySnapshot]:
        """Return administrative flags and counters."""

    @abstractmethod
    def list_events(
        self, *, meta: EnvelopeMeta, since: int = 0
    ) -> Envelope[tuple[RegistryEvent, ...]]:
        """Return committed audit events starting at ``since``."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return registry readiness."""


class ColorRegistryService(IdentifierRegistryService):
    """Public API of the color registry."""

    @abstractmethod
    def issue_colors(
        self,
        *,
        meta: EnvelopeMeta,
        caller: str,
        recipient: str,
        keys: Sequence[str],
        payment: int,
        display_names: Sequence[str | None] | None = None,
    ) -> Envelope[IssueResult]:
        """Issue a batch of color keys to ``recipient`` all-or-nothing."""

    @abstractmethod
    def rename(
        self, *, meta: EnvelopeMeta, caller: str, sequence_id: int, new_name: str
    ) -> Envelope[IssuanceRecord]:
        """Rename one held color."""

    @abstractmethod
    def rename_many(
        self,
        *,
        meta: EnvelopeMeta,
        caller: str,
        sequence_ids: Sequence[int],
        new_names: Sequence[str],
    ) -> Envelope[BatchProgress]:
        """Rename held colors one at a time, stopping at the first failure."""

    @abstractmethod
    def override_name(
        self, *, meta: EnvelopeMeta, caller: str, sequence_id: int, new_name: str
    ) -> Envelope[IssuanceRecord]:
        """Rename any color as the registry owner."""

    @abstractmethod
    def display_name_for_key(self, key: str) -> str | None:
        """Typed peer query used by cooperating registries."""


class WordRegistryService(IdentifierRegistryService):
    """Public API of the word registry."""

    @abstractmethod
    def verify_words(
        self, *, meta: EnvelopeMeta, words: Sequence[str]
    ) -> Envelope[WordVerification]:
        """Classify one candidate tuple without reserving it."""

    @abstractmethod
    def issue_words(
        self,
        *,
        meta: EnvelopeMeta,
        caller: str,
        recipient: str,
        word_tuples: Sequence[Sequence[str]],
        payment: int,
    ) -> Envelope[IssueResult]:
        """Issue a batch of word tuples to ``recipient`` all-or-nothing."""


def build_color_registry_service(
    *,
    settings: TinctureSettings,
    holders: HolderLedger | None = None,
    settlement: PaymentSettlement | None = None,
) -> ColorRegistryService:
    """Build the default color registry from typed settings."""
    from resources.adapters.holder_ledger import InMemoryHolderLedger
    from resources.adapters.settlement import InMemorySettlement
    from services.state.identifier_registry.config import (
        resolve_identifier_registry_settings,
    )
    from services.state.identifier_registry.implementation import (
        DefaultColorRegistryService,
    )

    return DefaultColorRegistryService(
        settings=resolve_identifier_registry_settings(settings).colors,
        holders=holders or InMemoryHolderLedger(),
        settlement=settlement or InMemorySettlement(),
    )


def build_word_registry_service(
    *,
    settings: TinctureSettings,
    peer: PeerNameResolver | None = None,
    holders: HolderLedger | None = None,
    settlement: PaymentSettlement | None = None,
) -> WordRegistryService:
    """Build the default word registry, optionally resolving colors via ``peer``."""
    from resources.adapters.holder_ledger import InMemoryHolderLedger
    from resources.adapters.settlement import InMemorySettlement
    from services.state.identifier_registry.config import (
        resolve_identifier_registry_settings,
    )
    from services.state.identifier_registry.implementation import (
        DefaultWordRegistryService,
    )

    return DefaultWordRegistryService(
        settings=resolve_identifier_registry_settings(settings).words,
        holders=holders or InMemoryHolderLedger(),
        settlement=settlement or InMemorySettlement(),
        peer=peer,
    )


def build_identifier_registries(
    *, settings: TinctureSettings
) -> tuple[ColorRegistryService, WordRegistryService]:
    """Build both registries with the word registry reading color names."""
    colors = build_color_registry_service(settings=settings)
    words = build_word_registry_service(settings=settings, peer=colors)
    return colors, words
