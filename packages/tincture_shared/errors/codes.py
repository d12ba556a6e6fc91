"""Shared error code constants.

These codes cover transport and runtime concerns common to every component.
Registry-domain codes (name conflicts, policy denials, payment mismatches) live
with the registry engine in ``packages.tincture_registry.errors``.
"""

# Validation
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_ARGUMENT = "INVALID_ARGUMENT"

# Not found
NOT_FOUND = "NOT_FOUND"

# Conflict
CONFLICT = "CONFLICT"

# Policy / authorization
POLICY_VIOLATION = "POLICY_VIOLATION"

# Dependency / external system
DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"

# Internal
INTERNAL_ERROR = "INTERNAL_ERROR"
