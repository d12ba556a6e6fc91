"""Static checks for public API invocation instrumentation decorators.

Every envelope-returning method declared by a registered service's API contract
classes must be decorated with ``public_api_instrumented`` in the module that
implements it.
"""

from __future__ import annotations

import ast
from pathlib import Path

from packages.tincture_shared.manifest import ServiceManifest, get_registry

_REPO_ROOT = Path(__file__).resolve().parents[2]


def test_registered_services_decorate_public_api_methods() -> None:
    """Require instrumentation on all envelope methods declared in Service APIs."""
    failures: list[str] = []
    for service in _load_services():
        for root in sorted(str(item) for item in service.public_api_roots):
            contract_file = _module_to_file(root)
            implementation_file = contract_file.with_name("implementation.py")
            contract_methods = _contract_envelope_methods(contract_file)
            decorated = _decorated_methods(implementation_file)
            missing = sorted(contract_methods - decorated)
            if missing:
                failures.append(f"{service.id}: {missing}")

    assert not failures, (
        "Missing @public_api_instrumented on Service public API methods:\n"
        + "\n".join(failures)
    )


def _load_services() -> tuple[ServiceManifest, ...]:
    """Import component manifests and return registered service manifests."""
    import services.state.identifier_registry.component  # noqa: F401

    registry = get_registry()
    registry.assert_valid()
    return registry.list_services()


def _module_to_file(module: str) -> Path:
    path = _REPO_ROOT.joinpath(*module.split(".")).with_suffix(".py")
    assert path.exists(), f"public API root has no module file: {module}"
    return path


def _contract_envelope_methods(file_path: Path) -> set[str]:
    """Return public abstract methods that take envelope metadata."""
    tree = ast.parse(file_path.read_text(encoding="utf-8"))
    names: set[str] = set()
    for node in tree.body:
        if not isinstance(node, ast.ClassDef) or not node.name.endswith("Service"):
            continue
        for item in node.body:
            if not isinstance(item, ast.FunctionDef) or item.name.startswith("_"):
                continue
            arg_names = {arg.arg for arg in item.args.kwonlyargs}
            if "meta" in arg_names:
                names.add(item.name)
    return names


def _decorated_methods(file_path: Path) -> set[str]:
    """Return method names decorated with ``public_api_instrumented``."""
    tree = ast.parse(file_path.read_text(encoding="utf-8"))
    names: set[str] = set()
    for node in tree.body:
        if not isinstance(node, ast.ClassDef):
            continue
        for item in node.body:
            if not isinstance(item, ast.FunctionDef):
                continue
            if any(_is_instrumentation(decorator) for decorator in item.decorator_list):
                names.add(item.name)
    return names


def _is_instrumentation(decorator: ast.expr) -> bool:
    target = decorator.func if isinstance(decorator, ast.Call) else decorator
    if isinstance(target, ast.Name):
        return target.id == "public_api_instrumented"
    if isinstance(target, ast.Attribute):
        return target.attr == "public_api_instrumented"
    return False
