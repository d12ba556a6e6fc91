"""Unit tests for key/name canonicalization and syntax checks."""

from __future__ import annotations

import pytest

from packages.tincture_registry.naming import (
    canonicalize_key,
    canonicalize_name,
    is_valid_display_name,
    is_valid_key,
    is_valid_word,
    names_match_key,
    natural_name,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("#ff00aa", "#FF00AA"),
        ("#FF00AA", "#FF00AA"),
        ("#a1b2c3", "#A1B2C3"),
        ("#zzaabb", "#zzAABB"),
    ],
)
def test_canonicalize_key_uppercases_hex_letters_only(raw: str, expected: str) -> None:
    assert canonicalize_key(raw) == expected


def test_canonicalization_is_idempotent() -> None:
    for raw in ("#ff00aa", "Midnight", "ÄbC", "#gg0011"):
        assert canonicalize_key(canonicalize_key(raw)) == canonicalize_key(raw)
        assert canonicalize_name(canonicalize_name(raw)) == canonicalize_name(raw)


def test_canonicalize_name_lowercases_ascii_only() -> None:
    """Non-ASCII letters pass through untouched."""
    assert canonicalize_name("Midnight BLUE") == "midnight blue"
    assert canonicalize_name("ÄBC") == "Äbc"


@pytest.mark.parametrize(
    ("key", "valid"),
    [
        ("#FF00AA", True),
        ("#ff00aa", True),
        ("FF00AA", False),
        ("#FF00A", False),
        ("#FF00AAB", False),
        ("#GG00AA", False),
        ("#FF00Aé", False),
        ("", False),
    ],
)
def test_is_valid_key(key: str, valid: bool) -> None:
    assert is_valid_key(key) is valid


@pytest.mark.parametrize(
    ("name", "valid"),
    [
        ("Sky", True),
        ("a" * 32, True),
        ("a" * 33, False),
        ("", False),
        ("Sky Blue", False),
        ("Ciel-1", False),
        ("Café", False),
    ],
)
def test_is_valid_display_name(name: str, valid: bool) -> None:
    assert is_valid_display_name(name) is valid


@pytest.mark.parametrize(
    ("word", "valid"),
    [
        ("ALPHA", True),
        ("R2D2", True),
        ("A" * 16, True),
        ("A" * 17, False),
        ("alpha", False),
        ("", False),
        ("ÉCOLE", False),
    ],
)
def test_is_valid_word(word: str, valid: bool) -> None:
    assert is_valid_word(word) is valid


def test_hex_shaped_names_must_match_their_key() -> None:
    """A six-hex-digit name belongs to exactly one key, case-insensitively."""
    assert names_match_key("#FF00AA", "ff00aa") is True
    assert names_match_key("#FF00AA", "FF00AA") is True
    assert names_match_key("#FF00AA", "ff00ab") is False
    assert names_match_key("#FF00AA", "Magenta") is True
    assert names_match_key("#FF00AA", "ff00aa1") is True


def test_natural_name_strips_prefix() -> None:
    assert natural_name("#FF00AA") == "FF00AA"
