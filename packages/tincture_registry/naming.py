"""Key/name canonicalization and syntactic validation.

All functions here are pure and total. Lengths are measured in UTF-8 bytes so a
multi-byte character can never sneak past a byte-count limit.
"""

from __future__ import annotations

from typing import Final

KEY_PREFIX: Final[str] = "#"
KEY_LENGTH: Final[int] = 7
MAX_DISPLAY_NAME_BYTES: Final[int] = 32
MAX_WORD_BYTES: Final[int] = 16

_HEX_DIGITS: Final[frozenset[str]] = frozenset("0123456789abcdefABCDEF")
_UPPER_HEX: Final[dict[int, str]] = {ord(c): c.upper() for c in "abcdef"}
_DIGITS: Final[frozenset[str]] = frozenset("0123456789")
_UPPER: Final[frozenset[str]] = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ")
_LOWER: Final[frozenset[str]] = frozenset("abcdefghijklmnopqrstuvwxyz")


def canonicalize_key(raw: str) -> str:
    """Uppercase exactly the hex-alphabet letters ``a``-``f``; leave the rest."""
    return raw.translate(_UPPER_HEX)


def canonicalize_name(raw: str) -> str:
    """Lowercase ASCII letters only; every other character passes through."""
    return "".join(ch.lower() if ch in _UPPER else ch for ch in raw)


def is_valid_key(key: str) -> bool:
    """Return whether ``key`` is ``#`` followed by exactly six hex digits."""
    if len(key.encode("utf-8")) != KEY_LENGTH:
        return False
    return key[0] == KEY_PREFIX and all(ch in _HEX_DIGITS for ch in key[1:])


def is_valid_display_name(name: str) -> bool:
    """Return whether ``name`` is 1-32 bytes of ASCII letters and digits."""
    if not 1 <= len(name.encode("utf-8")) <= MAX_DISPLAY_NAME_BYTES:
        return False
    return all(ch in _DIGITS or ch in _UPPER or ch in _LOWER for ch in name)


def is_valid_word(word: str) -> bool:
    """Return whether ``word`` is 1-16 bytes of uppercase ASCII letters and digits."""
    if not 1 <= len(word.encode("utf-8")) <= MAX_WORD_BYTES:
        return False
    return all(ch in _DIGITS or ch in _UPPER for ch in word)


def names_match_key(key: str, name: str) -> bool:
    """Return whether ``name`` may be used as the display name of ``key``.

    A hex-shaped name is the natural name of exactly one key; it may only be
    claimed by that key. Any other name passes.
    """
    derived = KEY_PREFIX + "".join(
        ch.upper() if ch in _LOWER else ch for ch in canonicalize_name(name)
    )
    if not is_valid_key(derived):
        return True
    return derived == key


def natural_name(key: str) -> str:
    """Return the default display name of a canonical key (its hex digits)."""
    return key[len(KEY_PREFIX) :]
