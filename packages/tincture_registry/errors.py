"""Registry error taxonomy.

Engine operations raise these exceptions synchronously and leave registry state
untouched. The service façade converts them to ``ErrorDetail`` values with
``registry_error_to_detail``.
"""

from __future__ import annotations

from typing import ClassVar, Mapping

from packages.tincture_shared.errors import ErrorCategory, ErrorDetail, error_detail

INVALID_INPUT = "INVALID_INPUT"
ALREADY_CLAIMED = "ALREADY_CLAIMED"
NAME_TAKEN = "NAME_TAKEN"
COMBINATION_USED = "COMBINATION_USED"
RESERVED_NAME_MISMATCH = "RESERVED_NAME_MISMATCH"
RESERVED_TRAIT_NAME = "RESERVED_TRAIT_NAME"
NOT_HOLDER = "NOT_HOLDER"
NOT_OWNER = "NOT_OWNER"
POLICY_DENIED = "POLICY_DENIED"
CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
PAYMENT_MISMATCH = "PAYMENT_MISMATCH"
LOCKED = "LOCKED"
ISSUANCE_DISABLED = "ISSUANCE_DISABLED"
NOT_ISSUED = "NOT_ISSUED"


class RegistryError(Exception):
    """Base class for every registry-domain failure."""

    code: ClassVar[str] = "REGISTRY_ERROR"
    category: ClassVar[ErrorCategory] = ErrorCategory.UNSPECIFIED

    def __init__(self, message: str, **metadata: object) -> None:
        super().__init__(message)
        self.message = message
        self.metadata: dict[str, str] = {
            key: str(value) for key, value in metadata.items() if value is not None
        }


class InvalidInput(RegistryError):
    """Malformed key, name, word, or argument shape."""

    code = INVALID_INPUT
    category = ErrorCategory.VALIDATION


class AlreadyClaimed(RegistryError):
    """The canonical key already has an active issuance record."""

    code = ALREADY_CLAIMED
    category = ErrorCategory.CONFLICT


class NameTaken(RegistryError):
    """The canonical display name is reserved by another identifier."""

    code = NAME_TAKEN
    category = ErrorCategory.CONFLICT


class CombinationUsed(RegistryError):
    """The exact word combination was issued before."""

    code = COMBINATION_USED
    category = ErrorCategory.CONFLICT


class ReservedNameMismatch(RegistryError):
    """A hex-shaped display name does not match its own key."""

    code = RESERVED_NAME_MISMATCH
    category = ErrorCategory.VALIDATION


class ReservedTraitName(RegistryError):
    """The display-name trait cannot be written through the attribute path."""

    code = RESERVED_TRAIT_NAME
    category = ErrorCategory.POLICY


class NotHolder(RegistryError):
    """The caller does not currently hold the identifier."""

    code = NOT_HOLDER
    category = ErrorCategory.POLICY


class NotOwner(RegistryError):
    """The caller is not the registry owner."""

    code = NOT_OWNER
    category = ErrorCategory.POLICY


class PolicyDenied(RegistryError):
    """The trait is not holder-modifiable for this identifier."""

    code = POLICY_DENIED
    category = ErrorCategory.POLICY


class CapacityExceeded(RegistryError):
    """Namespace size, quota, or range bounds would be exceeded."""

    code = CAPACITY_EXCEEDED
    category = ErrorCategory.CONFLICT


class PaymentMismatch(RegistryError):
    """Payment differs from price times quantity."""

    code = PAYMENT_MISMATCH
    category = ErrorCategory.VALIDATION


class Locked(RegistryError):
    """An administrative action was attempted after it was locked or frozen."""

    code = LOCKED
    category = ErrorCategory.POLICY


class IssuanceDisabled(RegistryError):
    """Issuance is switched off by the registry owner."""

    code = ISSUANCE_DISABLED
    category = ErrorCategory.POLICY


class NotIssued(RegistryError):
    """The sequence id or key was never issued."""

    code = NOT_ISSUED
    category = ErrorCategory.NOT_FOUND


def registry_error_to_detail(
    exc: RegistryError, *, metadata: Mapping[str, object] | None = None
) -> ErrorDetail:
    """Convert one registry exception into the shared error shape."""
    merged: dict[str, object] = dict(exc.metadata)
    merged.update(metadata or {})
    return error_detail(
        exc.message,
        code=exc.code,
        category=exc.category,
        metadata=merged,
    )
