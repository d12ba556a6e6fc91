"""Concrete Identifier Registry Service implementations."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import replace
from functools import partial
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ValidationError

from packages.tincture_registry.attributes import AttributeStore
from packages.tincture_registry.controls import RegistryControls, require_owner
from packages.tincture_registry.domain import RenderProfile
from packages.tincture_registry.errors import (
    CapacityExceeded,
    NotHolder,
    RegistryError,
    registry_error_to_detail,
)
from packages.tincture_registry.interfaces import PeerNameResolver
from packages.tincture_registry.naming import canonicalize_key, natural_name
from packages.tincture_registry.rendering import Renderer
from packages.tincture_registry.state import RegistryState
from packages.tincture_registry.uniqueness import UniquenessRegistry
from packages.tincture_registry.words import combination_key
from packages.tincture_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    success,
    validate_meta,
)
from packages.tincture_shared.errors import (
    ErrorDetail,
    codes,
    dependency_error,
    internal_error,
    validation_error,
)
from packages.tincture_shared.logging import (
    fields,
    get_logger,
    log_context,
    public_api_instrumented,
)
from resources.adapters.holder_ledger import HolderLedger, HolderLedgerError
from resources.adapters.settlement import PaymentSettlement, SettlementError
from services.state.identifier_registry.component import SERVICE_COMPONENT_ID
from services.state.identifier_registry.config import RegistryInstanceSettings
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
from services.state.identifier_registry.service import (
    ColorRegistryService,
    IdentifierRegistryService,
    WordRegistryService,
)
from services.state.identifier_registry.validation import (
    CallerRequest,
    CustodyRequest,
    EmptyRequest,
    EventsRequest,
    IssueColorsRequest,
    IssueWordsRequest,
    KeyRequest,
    PriceRequest,
    RangeRequest,
    RenameManyRequest,
    RenameRequest,
    SequenceIdRequest,
    SetAttributeRequest,
    SetAttributesRequest,
    SuppressRequest,
    ToggleRequest,
    TraitGrantRequest,
    TraitPolicyRequest,
    TransferRequest,
    VerifyWordsRequest,
)

_LOGGER = get_logger(__name__)
_COMPONENT_ID = str(SERVICE_COMPONENT_ID)

_T = TypeVar("_T")
_RequestT = TypeVar("_RequestT", bound=BaseModel)


class _DefaultIdentifierRegistryService(IdentifierRegistryService):
    """Shared envelope façade over one registry engine instance.

    Every public method validates metadata and arguments, runs one engine
    operation, and maps engine exceptions to ``ErrorDetail`` values. Adapter
    failures surface as dependency errors after the engine transaction has
    rolled back.
    """

    registry_name: ClassVar[str]
    reserves_names: ClassVar[bool]

    def __init__(
        self,
        *,
        settings: RegistryInstanceSettings,
        holders: HolderLedger,
        settlement: PaymentSettlement,
        peer: PeerNameResolver | None = None,
    ) -> None:
        self._settings = settings
        self._holders = holders
        self._settlement = settlement
        self._state = RegistryState(
            name=self.registry_name,
            owner=settings.owner,
            unit_price=settings.unit_price,
            issuance_enabled=settings.issuance_enabled,
            policy_changes_allowed=settings.policy_changes_allowed,
        )
        self._attributes = AttributeStore(self._state, holders=holders)
        self._registry = UniquenessRegistry(
            self._state,
            attributes=self._attributes,
            holders=holders,
            capacity=settings.capacity,
            reserve_names=self.reserves_names,
        )
        self._controls = RegistryControls(
            self._state,
            capacity=settings.capacity,
            price_granularity=settings.price_granularity,
        )
        self._renderer = Renderer(
            self._state,
            profile=self._render_profile(settings),
            attributes=self._attributes,
            peer=peer,
        )
        for policy in settings.default_policies:
            self._attributes.set_policy(
                caller=settings.owner,
                trait_name=policy.trait_name,
                user_modifiable=policy.user_modifiable,
                enabled_for_all=policy.enabled_for_all,
            )

    @classmethod
    @abstractmethod
    def _render_profile(cls, settings: RegistryInstanceSettings) -> RenderProfile:
        """Return the document layout of this registry."""

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("sequence_id", "trait_name"),
    )
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

        def action(request: SetAttributeRequest) -> AttributeList:
            self._attributes.set_attribute(
                caller=request.caller,
                sequence_id=request.sequence_id,
                trait_name=request.trait_name,
                value=request.value,
            )
            return self._attribute_list(request.sequence_id)

        return self._run(
            meta=meta,
            operation="set_attribute",
            model=SetAttributeRequest,
            payload={
                "caller": caller,
                "sequence_id": sequence_id,
                "trait_name": trait_name,
                "value": value,
            },
            action=action,
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def set_attributes(
        self,
        *,
        meta: EnvelopeMeta,
        caller: str,
        sequence_ids: Sequence[int],
        trait_names: Sequence[str],
        values: Sequence[str],
    ) -> Envelope[BatchProgress]:
        """Apply parallel attribute writes one transaction at a time."""
        request, errors = self._validate_request(
            meta=meta,
            model=SetAttributesRequest,
            payload={
                "caller": caller,
                "sequence_ids": list(sequence_ids),
                "trait_names": list(trait_names),
                "values": list(values),
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None

        steps = [
            partial(
                self._attributes.set_attribute,
                caller=request.caller,
                sequence_id=sequence_id,
                trait_name=trait_name,
                value=value,
            )
            for sequence_id, trait_name, value in zip(
                request.sequence_ids, request.trait_names, request.values
            )
        ]
        return self._run_batch(meta=meta, operation="set_attributes", steps=steps)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("sequence_id", "trait_name"),
    )
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

        def action(request: SetAttributeRequest) -> AttributeList:
            self._attributes.admin_set_attribute(
                caller=request.caller,
                sequence_id=request.sequence_id,
                trait_name=request.trait_name,
                value=request.value,
            )
            return self._attribute_list(request.sequence_id)

        return self._run(
            meta=meta,
            operation="admin_set_attribute",
            model=SetAttributeRequest,
            payload={
                "caller": caller,
                "sequence_id": sequence_id,
                "trait_name": trait_name,
                "value": value,
            },
            action=action,
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT_ID, id_fields=("trait_name",)
    )
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
        return self._run(
            meta=meta,
            operation="set_trait_policy",
            model=TraitPolicyRequest,
            payload={
                "caller": caller,
                "trait_name": trait_name,
                "user_modifiable": user_modifiable,
                "enabled_for_all": enabled_for_all,
            },
            action=lambda request: self._attributes.set_policy(
                caller=request.caller,
                trait_name=request.trait_name,
                user_modifiable=request.user_modifiable,
                enabled_for_all=request.enabled_for_all,
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("sequence_id", "trait_name"),
    )
    def grant_trait(
        self, *, meta: EnvelopeMeta, caller: str, sequence_id: int, trait_name: str
    ) -> Envelope[IssuanceRecord]:
        """Add one trait to an identifier's modifiable whitelist."""
        return self._run(
            meta=meta,
            operation="grant_trait",
            model=TraitGrantRequest,
            payload={
                "caller": caller,
                "sequence_id": sequence_id,
                "trait_name": trait_name,
            },
            action=lambda request: self._attributes.grant_trait(
                caller=request.caller,
                sequence_id=request.sequence_id,
                trait_name=request.trait_name,
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("sequence_id", "trait_name"),
    )
    def revoke_trait(
        self, *, meta: EnvelopeMeta, caller: str, sequence_id: int, trait_name: str
    ) -> Envelope[IssuanceRecord]:
        """Remove one trait from an identifier's modifiable whitelist."""
        return self._run(
            meta=meta,
            operation="revoke_trait",
            model=TraitGrantRequest,
            payload={
                "caller": caller,
                "sequence_id": sequence_id,
                "trait_name": trait_name,
            },
            action=lambda request: self._attributes.revoke_trait(
                caller=request.caller,
                sequence_id=request.sequence_id,
                trait_name=request.trait_name,
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT_ID, id_fields=("sequence_id",)
    )
    def list_attributes(
        self, *, meta: EnvelopeMeta, sequence_id: int
    ) -> Envelope[AttributeList]:
        """Return attributes in first-write order, display name first."""
        return self._run(
            meta=meta,
            operation="list_attributes",
            model=SequenceIdRequest,
            payload={"sequence_id": sequence_id},
            action=lambda request: self._attribute_list(request.sequence_id),
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT_ID, id_fields=("sequence_id",)
    )
    def get_document(
        self, *, meta: EnvelopeMeta, sequence_id: int
    ) -> Envelope[RenderedDocument]:
        """Render the canonical document of one issued identifier."""

        def action(request: SequenceIdRequest) -> RenderedDocument:
            self._registry.record(request.sequence_id)
            return self._renderer.render(
                request.sequence_id,
                holder=self._holders.owner_of(request.sequence_id),
            )

        return self._run(
            meta=meta,
            operation="get_document",
            model=SequenceIdRequest,
            payload={"sequence_id": sequence_id},
            action=action,
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def list_keys(
        self, *, meta: EnvelopeMeta, start: int, end: int
    ) -> Envelope[KeyRange]:
        """Return canonical keys for sequence ids in ``[start, end)``."""
        return self._run(
            meta=meta,
            operation="list_keys",
            model=RangeRequest,
            payload={"start": start, "end": end},
            action=lambda request: KeyRange(
                start=request.start,
                end=request.end,
                keys=self._registry.keys_in_range(request.start, request.end),
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT_ID, id_fields=("sequence_id",)
    )
    def get_record(
        self, *, meta: EnvelopeMeta, sequence_id: int
    ) -> Envelope[IssuanceRecord]:
        """Return one issuance record."""
        return self._run(
            meta=meta,
            operation="get_record",
            model=SequenceIdRequest,
            payload={"sequence_id": sequence_id},
            action=lambda request: self._registry.record(request.sequence_id),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def issued_count(self, *, meta: EnvelopeMeta) -> Envelope[int]:
        """Return how many identifiers were issued."""
        return self._run(
            meta=meta,
            operation="issued_count",
            model=EmptyRequest,
            payload={},
            action=lambda _request: self._registry.issued_count,
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID, id_fields=("key",))
    def get_display_name(self, *, meta: EnvelopeMeta, key: str) -> Envelope[str | None]:
        """Return the current display name of ``key`` or ``None`` if unissued."""
        return self._run(
            meta=meta,
            operation="get_display_name",
            model=KeyRequest,
            payload={"key": key},
            action=lambda request: self._registry.display_name_for_key(request.key),
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT_ID, id_fields=("sequence_id",)
    )
    def transfer(
        self, *, meta: EnvelopeMeta, caller: str, sequence_id: int, recipient: str
    ) -> Envelope[TransferResult]:
        """Move one identifier from its holder to ``recipient``."""
        return self._run(
            meta=meta,
            operation="transfer",
            model=TransferRequest,
            payload={
                "caller": caller,
                "sequence_id": sequence_id,
                "recipient": recipient,
            },
            action=self._transfer,
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def set_issuance_enabled(
        self, *, meta: EnvelopeMeta, caller: str, enabled: bool
    ) -> Envelope[RegistrySnapshot]:
        """Switch issuance on or off."""
        return self._run_control(
            meta=meta,
            operation="set_issuance_enabled",
            model=ToggleRequest,
            payload={"caller": caller, "enabled": enabled},
            control=lambda request: self._controls.set_issuance_enabled(
                caller=request.caller, enabled=request.enabled
            ),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def set_unit_price(
        self, *, meta: EnvelopeMeta, caller: str, unit_price: int
    ) -> Envelope[RegistrySnapshot]:
        """Change the price of one identifier."""
        return self._run_control(
            meta=meta,
            operation="set_unit_price",
            model=PriceRequest,
            payload={"caller": caller, "unit_price": unit_price},
            control=lambda request: self._controls.set_unit_price(
                caller=request.caller, unit_price=request.unit_price
            ),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def set_policy_changes_allowed(
        self, *, meta: EnvelopeMeta, caller: str, enabled: bool
    ) -> Envelope[RegistrySnapshot]:
        """Freeze or unfreeze price changes and owner name overrides."""
        return self._run_control(
            meta=meta,
            operation="set_policy_changes_allowed",
            model=ToggleRequest,
            payload={"caller": caller, "enabled": enabled},
            control=lambda request: self._controls.set_policy_changes_allowed(
                caller=request.caller, allowed=request.enabled
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT_ID, id_fields=("sequence_id",)
    )
    def set_suppressed(
        self, *, meta: EnvelopeMeta, caller: str, sequence_id: int, suppressed: bool
    ) -> Envelope[RegistrySnapshot]:
        """Suppress or restore one identifier's rendered document."""
        return self._run_control(
            meta=meta,
            operation="set_suppressed",
            model=SuppressRequest,
            payload={
                "caller": caller,
                "sequence_id": sequence_id,
                "suppressed": suppressed,
            },
            control=lambda request: self._controls.set_suppressed(
                caller=request.caller,
                sequence_id=request.sequence_id,
                suppressed=request.suppressed,
            ),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def lock_suppression(
        self, *, meta: EnvelopeMeta, caller: str
    ) -> Envelope[RegistrySnapshot]:
        """Permanently disable suppression changes."""
        return self._run_control(
            meta=meta,
            operation="lock_suppression",
            model=CallerRequest,
            payload={"caller": caller},
            control=lambda request: self._controls.lock_suppression(
                caller=request.caller
            ),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def set_staking_custody(
        self, *, meta: EnvelopeMeta, caller: str, identity: str | None
    ) -> Envelope[RegistrySnapshot]:
        """Set or clear the delegated custody identity used for the staked flag."""
        return self._run_control(
            meta=meta,
            operation="set_staking_custody",
            model=CustodyRequest,
            payload={"caller": caller, "identity": identity},
            control=lambda request: self._controls.set_staking_custody(
                caller=request.caller, identity=request.identity
            ),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def withdraw(self, *, meta: EnvelopeMeta, caller: str) -> Envelope[WithdrawResult]:
        """Pay the settled balance out to the registry owner."""
        return self._run(
            meta=meta,
            operation="withdraw",
            model=CallerRequest,
            payload={"caller": caller},
            action=self._withdraw,
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def get_snapshot(self, *, meta: EnvelopeMeta) -> Envelope[RegistrySnapshot]:
        """Return administrative flags and counters."""
        return self._run(
            meta=meta,
            operation="get_snapshot",
            model=EmptyRequest,
            payload={},
            action=lambda _request: self._controls.snapshot(),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def list_events(
        self, *, meta: EnvelopeMeta, since: int = 0
    ) -> Envelope[tuple[RegistryEvent, ...]]:
        """Return committed audit events starting at ``since``."""

        def action(request: EventsRequest) -> tuple[RegistryEvent, ...]:
            with self._state.transaction() as state:
                return tuple(state.events[request.since :])

        return self._run(
            meta=meta,
            operation="list_events",
            model=EventsRequest,
            payload={"since": since},
            action=action,
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return registry readiness."""
        return self._run(
            meta=meta,
            operation="health",
            model=EmptyRequest,
            payload={},
            action=lambda _request: HealthStatus(
                service_ready=True,
                registry=self.registry_name,
                issued_count=self._registry.issued_count,
                capacity=self._registry.capacity,
                detail="ok",
            ),
        )

    def _issue(
        self,
        *,
        caller: str,
        recipient: str,
        payment: int,
        quantity: int,
        insert: Callable[[], list[int]],
    ) -> IssueResult:
        """Run one all-or-nothing issuance; adapters are called last."""
        with self._state.transaction():
            self._controls.require_issuance_enabled()
            self._require_quota(recipient=recipient, quantity=quantity)
            self._controls.require_payment(quantity=quantity, amount=payment)
            sequence_ids = insert()
            self._settlement.settle(payer=caller, amount=payment)
            try:
                self._holders.assign(sequence_ids, recipient)
            except Exception:
                self._settlement.refund(payer=caller, amount=payment)
                raise
            keys = tuple(self._registry.key_of(sequence_id) for sequence_id in sequence_ids)
        _LOGGER.info(
            "Issued identifiers: registry=%s count=%d first_sequence_id=%d",
            self.registry_name,
            len(sequence_ids),
            sequence_ids[0],
        )
        return IssueResult(
            sequence_ids=tuple(sequence_ids),
            keys=keys,
            recipient=recipient,
            payment=payment,
        )

    def _require_quota(self, *, recipient: str, quantity: int) -> None:
        limit = self._settings.max_per_transaction
        if quantity > limit:
            raise CapacityExceeded(
                "too many identifiers in one issuance",
                requested=quantity,
                limit=limit,
            )
        self._registry.require_capacity(quantity)
        holder_limit = self._settings.max_per_holder
        if holder_limit is not None:
            held = self._holders.balance_of(recipient)
            if held + quantity > holder_limit:
                raise CapacityExceeded(
                    "recipient would exceed the per-holder quota",
                    recipient=recipient,
                    held=held,
                    requested=quantity,
                    limit=holder_limit,
                )

    def _transfer(self, request: TransferRequest) -> TransferResult:
        with self._state.transaction() as state:
            self._registry.record(request.sequence_id)
            if self._holders.owner_of(request.sequence_id) != request.caller:
                raise NotHolder(
                    "caller does not hold this identifier",
                    sequence_id=request.sequence_id,
                    caller=request.caller,
                )
            state.append_event(
                "transferred",
                sequence_id=request.sequence_id,
                sender=request.caller,
                recipient=request.recipient,
            )
            self._holders.transfer(request.sequence_id, request.recipient)
        return TransferResult(
            sequence_id=request.sequence_id,
            sender=request.caller,
            recipient=request.recipient,
        )

    def _withdraw(self, request: CallerRequest) -> WithdrawResult:
        with self._state.transaction() as state:
            require_owner(state, request.caller)
            amount = self._settlement.withdraw(recipient=request.caller)
            state.append_event("withdrawn", recipient=request.caller, amount=amount)
        return WithdrawResult(recipient=request.caller, amount=amount)

    def _attribute_list(self, sequence_id: int) -> AttributeList:
        return AttributeList(
            sequence_id=sequence_id,
            entries=self._attributes.entries(sequence_id),
        )

    def _run(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        model: type[_RequestT],
        payload: dict[str, Any],
        action: Callable[[_RequestT], _T],
    ) -> Envelope[_T]:
        """Validate one request, run ``action`` and wrap its outcome."""
        request, errors = self._validate_request(meta=meta, model=model, payload=payload)
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None

        value, error = self._call(operation, partial(action, request))
        if error is not None:
            return failure(meta=meta, errors=[error])
        return success(meta=meta, payload=value)

    def _run_control(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        model: type[_RequestT],
        payload: dict[str, Any],
        control: Callable[[_RequestT], None],
    ) -> Envelope[RegistrySnapshot]:
        """Run one owner-only control and answer with the resulting snapshot."""

        def action(request: _RequestT) -> RegistrySnapshot:
            control(request)
            return self._controls.snapshot()

        return self._run(
            meta=meta,
            operation=operation,
            model=model,
            payload=payload,
            action=action,
        )

    def _run_batch(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        steps: Sequence[Callable[[], object]],
    ) -> Envelope[BatchProgress]:
        """Run steps as separate transactions; stop at the first failure."""
        for index, step in enumerate(steps):
            _value, error = self._call(operation, step)
            if error is not None:
                return failure(
                    meta=meta,
                    errors=[replace(error, metadata={**error.metadata, "index": str(index)})],
                    payload=BatchProgress(requested=len(steps), applied=index),
                )
        return success(
            meta=meta,
            payload=BatchProgress(requested=len(steps), applied=len(steps)),
        )

    def _call(
        self, operation: str, func: Callable[[], _T]
    ) -> tuple[_T | None, ErrorDetail | None]:
        """Invoke one engine call and map any exception to an error detail."""
        with log_context({fields.REGISTRY: self.registry_name}):
            try:
                return func(), None
            except RegistryError as exc:
                return None, registry_error_to_detail(
                    exc, metadata={fields.REGISTRY: self.registry_name}
                )
            except (HolderLedgerError, SettlementError) as exc:
                return None, self._dependency_failure(operation=operation, exc=exc)
            except Exception as exc:  # noqa: BLE001
                _LOGGER.error(
                    "Registry operation failed unexpectedly: operation=%s exception_type=%s",
                    operation,
                    type(exc).__name__,
                    exc_info=exc,
                )
                return None, internal_error(
                    f"{operation} failed",
                    metadata={"exception_type": type(exc).__name__},
                )

    def _dependency_failure(self, *, operation: str, exc: Exception) -> ErrorDetail:
        """Map one adapter exception into a dependency-category error."""
        _LOGGER.warning(
            "Registry operation failed due to dependency error: operation=%s exception_type=%s",
            operation,
            type(exc).__name__,
            exc_info=exc,
        )
        resource = (
            "adapter_holder_ledger"
            if isinstance(exc, HolderLedgerError)
            else "adapter_settlement"
        )
        return dependency_error(
            f"{operation} failed",
            code=codes.DEPENDENCY_FAILURE,
            metadata={"resource": resource, "exception_type": type(exc).__name__},
        )

    def _validate_request(
        self,
        *,
        meta: EnvelopeMeta,
        model: type[_RequestT],
        payload: dict[str, Any],
    ) -> tuple[_RequestT | None, list[ErrorDetail]]:
        """Validate envelope metadata and request payload model."""
        try:
            validate_meta(meta)
        except ValueError as exc:
            return None, [validation_error(str(exc), code=codes.INVALID_ARGUMENT)]

        try:
            validated = model.model_validate(payload)
        except ValidationError as exc:
            issue = exc.errors()[0]
            field = ".".join(str(item) for item in issue.get("loc", ()))
            field_name = field if field else "payload"
            message = f"{field_name}: {issue.get('msg', 'invalid value')}"
            return None, [validation_error(message, code=codes.INVALID_ARGUMENT)]

        return validated, []


class DefaultColorRegistryService(_DefaultIdentifierRegistryService, ColorRegistryService):
    """Color registry: hex keys with exclusive, case-insensitive display names."""

    registry_name = "colors"
    reserves_names = True

    @classmethod
    def _render_profile(cls, settings: RegistryInstanceSettings) -> RenderProfile:
        return RenderProfile(
            collection_name=settings.collection_name,
            description=settings.description,
            default_background=settings.default_background,
            default_foreground=settings.default_foreground,
            key_as_background=True,
        )

    def display_name_for_key(self, key: str) -> str | None:
        """Typed peer query used by cooperating registries."""
        return self._registry.display_name_for_key(key)

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT_ID, id_fields=("recipient",)
    )
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

        def action(request: IssueColorsRequest) -> IssueResult:
            names = request.display_names or [None] * len(request.keys)
            pairs = [
                (key, name if name is not None else natural_name(canonicalize_key(key)))
                for key, name in zip(request.keys, names)
            ]
            return self._issue(
                caller=request.caller,
                recipient=request.recipient,
                payment=request.payment,
                quantity=len(pairs),
                insert=lambda: [self._registry.issue(key, name) for key, name in pairs],
            )

        return self._run(
            meta=meta,
            operation="issue_colors",
            model=IssueColorsRequest,
            payload={
                "caller": caller,
                "recipient": recipient,
                "keys": list(keys),
                "display_names": None if display_names is None else list(display_names),
                "payment": payment,
            },
            action=action,
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT_ID, id_fields=("sequence_id",)
    )
    def rename(
        self, *, meta: EnvelopeMeta, caller: str, sequence_id: int, new_name: str
    ) -> Envelope[IssuanceRecord]:
        """Rename one held color."""
        return self._run(
            meta=meta,
            operation="rename",
            model=RenameRequest,
            payload={"caller": caller, "sequence_id": sequence_id, "new_name": new_name},
            action=lambda request: self._registry.rename(
                caller=request.caller,
                sequence_id=request.sequence_id,
                new_name=request.new_name,
            ),
        )

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def rename_many(
        self,
        *,
        meta: EnvelopeMeta,
        caller: str,
        sequence_ids: Sequence[int],
        new_names: Sequence[str],
    ) -> Envelope[BatchProgress]:
        """Rename held colors one transaction at a time."""
        request, errors = self._validate_request(
            meta=meta,
            model=RenameManyRequest,
            payload={
                "caller": caller,
                "sequence_ids": list(sequence_ids),
                "new_names": list(new_names),
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert request is not None

        steps = [
            partial(
                self._registry.rename,
                caller=request.caller,
                sequence_id=sequence_id,
                new_name=new_name,
            )
            for sequence_id, new_name in zip(request.sequence_ids, request.new_names)
        ]
        return self._run_batch(meta=meta, operation="rename_many", steps=steps)

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT_ID, id_fields=("sequence_id",)
    )
    def override_name(
        self, *, meta: EnvelopeMeta, caller: str, sequence_id: int, new_name: str
    ) -> Envelope[IssuanceRecord]:
        """Rename any color as the registry owner."""
        return self._run(
            meta=meta,
            operation="override_name",
            model=RenameRequest,
            payload={"caller": caller, "sequence_id": sequence_id, "new_name": new_name},
            action=lambda request: self._registry.override_name(
                caller=request.caller,
                sequence_id=request.sequence_id,
                new_name=request.new_name,
            ),
        )


class DefaultWordRegistryService(_DefaultIdentifierRegistryService, WordRegistryService):
    """Word registry: unique one to three word phrases, recolorable by holders."""

    registry_name = "words"
    reserves_names = False

    @classmethod
    def _render_profile(cls, settings: RegistryInstanceSettings) -> RenderProfile:
        return RenderProfile(
            collection_name=settings.collection_name,
            description=settings.description,
            default_background=settings.default_background,
            default_foreground=settings.default_foreground,
            include_word_count=True,
        )

    def attach_peer(self, peer: PeerNameResolver | None) -> None:
        """Point color-valued traits at a different cooperating registry."""
        self._renderer.attach_peer(peer)

    @public_api_instrumented(logger=_LOGGER, component_id=_COMPONENT_ID)
    def verify_words(
        self, *, meta: EnvelopeMeta, words: Sequence[str]
    ) -> Envelope[WordVerification]:
        """Classify one candidate tuple without reserving it."""
        return self._run(
            meta=meta,
            operation="verify_words",
            model=VerifyWordsRequest,
            payload={"words": list(words)},
            action=lambda request: WordVerification(
                words=tuple(request.words),
                outcome=self._registry.verifier.verify(request.words),
                combination_key=combination_key(request.words),
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER, component_id=_COMPONENT_ID, id_fields=("recipient",)
    )
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

        def action(request: IssueWordsRequest) -> IssueResult:
            return self._issue(
                caller=request.caller,
                recipient=request.recipient,
                payment=request.payment,
                quantity=len(request.word_tuples),
                insert=lambda: [
                    self._registry.issue_combination(words)
                    for words in request.word_tuples
                ],
            )

        return self._run(
            meta=meta,
            operation="issue_words",
            model=IssueWordsRequest,
            payload={
                "caller": caller,
                "recipient": recipient,
                "word_tuples": [list(words) for words in word_tuples],
                "payment": payment,
            },
            action=action,
        )
