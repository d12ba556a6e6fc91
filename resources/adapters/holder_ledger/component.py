"""Component declaration for the holder ledger adapter resource."""

from __future__ import annotations

from packages.tincture_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ResourceManifest,
    register_component,
)

RESOURCE_COMPONENT_ID = ComponentId("adapter_holder_ledger")

MANIFEST = register_component(
    ResourceManifest(
        id=RESOURCE_COMPONENT_ID,
        layer=0,
        kind="adapter",
        module_roots=frozenset({ModuleRoot("resources.adapters.holder_ledger")}),
        owner_service_id=ComponentId("service_identifier_registry"),
    )
)
