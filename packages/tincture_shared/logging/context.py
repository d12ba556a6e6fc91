"""Context propagation for structured registry logs.

Fields bound here (trace id, registry name, sequence id, caller) are copied onto
every log record emitted in the same execution context.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping

_LOG_CONTEXT: ContextVar[dict[str, str]] = ContextVar(
    "tincture_log_context", default={}
)


def get_context() -> dict[str, str]:
    """Return a copy of the fields bound to the current context."""
    return dict(_LOG_CONTEXT.get())


def bind_context(**values: object) -> None:
    """Bind stringified values into the current context; ``None`` is skipped."""
    merged = _merged(_LOG_CONTEXT.get(), values)
    _LOG_CONTEXT.set(merged)


@contextmanager
def log_context(values: Mapping[str, object] | None = None, **extra: object) -> Iterator[None]:
    """Bind fields for the duration of a block and restore the outer context."""
    token = _LOG_CONTEXT.set(
        _merged(_LOG_CONTEXT.get(), {**dict(values or {}), **extra})
    )
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)


def _merged(base: Mapping[str, str], values: Mapping[str, object]) -> dict[str, str]:
    """Return ``base`` overlaid with non-``None`` stringified ``values``."""
    merged = dict(base)
    for key, value in values.items():
        if value is None:
            continue
        merged[str(key)] = str(value)
    return merged
