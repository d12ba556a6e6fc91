"""Factory helpers for creating consistent shared errors."""

from __future__ import annotations

from typing import Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail


def error_detail(
    message: str,
    *,
    code: str,
    category: ErrorCategory,
    retryable: bool = False,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Create an error of any category with stringified metadata values."""
    return ErrorDetail(
        code=code,
        message=message,
        category=category,
        retryable=retryable,
        metadata=_meta(metadata),
    )


def validation_error(
    message: str,
    *,
    code: str = codes.VALIDATION_ERROR,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Create a validation-category error."""
    return error_detail(
        message, code=code, category=ErrorCategory.VALIDATION, metadata=metadata
    )


def not_found_error(
    message: str,
    *,
    code: str = codes.NOT_FOUND,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Create a not-found-category error."""
    return error_detail(
        message, code=code, category=ErrorCategory.NOT_FOUND, metadata=metadata
    )


def conflict_error(
    message: str,
    *,
    code: str = codes.CONFLICT,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Create a conflict-category error."""
    return error_detail(
        message, code=code, category=ErrorCategory.CONFLICT, metadata=metadata
    )


def policy_error(
    message: str,
    *,
    code: str = codes.POLICY_VIOLATION,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Create a policy-category error."""
    return error_detail(
        message, code=code, category=ErrorCategory.POLICY, metadata=metadata
    )


def dependency_error(
    message: str,
    *,
    code: str = codes.DEPENDENCY_FAILURE,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Create a dependency-category error; these are marked retryable."""
    return error_detail(
        message,
        code=code,
        category=ErrorCategory.DEPENDENCY,
        retryable=True,
        metadata=metadata,
    )


def internal_error(
    message: str,
    *,
    code: str = codes.INTERNAL_ERROR,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Create an internal-category error."""
    return error_detail(
        message, code=code, category=ErrorCategory.INTERNAL, metadata=metadata
    )


def _meta(metadata: Mapping[str, object] | None) -> dict[str, str]:
    """Normalize optional metadata into a plain string-valued dict."""
    if metadata is None:
        return {}
    return {str(key): str(value) for key, value in metadata.items()}
