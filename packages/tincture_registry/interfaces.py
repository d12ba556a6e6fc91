"""Protocols for collaborators the registry engine consults but does not own."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class HolderLookup(Protocol):
    """Read side of the external holder ledger."""

    def owner_of(self, sequence_id: int) -> str | None:
        """Return the current holder of one identifier, or ``None``."""


@runtime_checkable
class PeerNameResolver(Protocol):
    """Typed display-name query answered by a cooperating registry."""

    def display_name_for_key(self, key: str) -> str | None:
        """Return the peer's current display name for ``key``, or ``None`` if unissued."""
