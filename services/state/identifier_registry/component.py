"""Component declaration for the Identifier Registry Service."""

from __future__ import annotations

from packages.tincture_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ServiceManifest,
    register_component,
)

SERVICE_COMPONENT_ID = ComponentId("service_identifier_registry")

MANIFEST = register_component(
    ServiceManifest(
        id=SERVICE_COMPONENT_ID,
        layer=1,
        module_roots=frozenset({ModuleRoot("services.state.identifier_registry")}),
        public_api_roots=frozenset(
            {ModuleRoot("services.state.identifier_registry.service")}
        ),
    )
)
