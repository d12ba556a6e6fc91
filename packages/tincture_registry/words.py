"""Word-tuple verification and combination hashing."""

from __future__ import annotations

import hashlib
from collections.abc import Sequence

from packages.tincture_registry.domain import MAX_WORDS, VerifyOutcome
from packages.tincture_registry.errors import CombinationUsed, InvalidInput
from packages.tincture_registry.naming import MAX_WORD_BYTES, is_valid_word
from packages.tincture_registry.state import RegistryState

COMBINATION_SEPARATOR = "|"


def combination_key(words: Sequence[str]) -> str:
    """Join words in order, padding missing slots with empty strings.

    ``("A",)``, ``("A", "")`` and ``("A", "", "")`` all share the key ``A||``.
    """
    slots = list(words) + [""] * (MAX_WORDS - len(words))
    return COMBINATION_SEPARATOR.join(slots)


def combination_hash(words: Sequence[str]) -> str:
    """Return the SHA-256 hex digest of the padded combination key."""
    return hashlib.sha256(combination_key(words).encode("utf-8")).hexdigest()


def filled_words(words: Sequence[str]) -> tuple[str, ...]:
    """Return the non-empty slots of a tuple, in order."""
    return tuple(word for word in words if word != "")


class WordVerifier:
    """Read-only checks of candidate word tuples against committed combinations."""

    def __init__(self, state: RegistryState) -> None:
        self._state = state

    def verify(self, words: Sequence[str]) -> VerifyOutcome:
        """Classify one tuple without touching state.

        Trailing empty slots are padding, not words. An empty first slot or an
        empty slot followed by a word is a zero-length word.
        """
        if not 1 <= len(words) <= MAX_WORDS:
            return VerifyOutcome.INVALID_COUNT
        filled = filled_words(words)
        if not filled or tuple(words[: len(filled)]) != filled:
            return VerifyOutcome.INVALID_LENGTH
        for word in filled:
            if len(word.encode("utf-8")) > MAX_WORD_BYTES:
                return VerifyOutcome.INVALID_LENGTH
            if not is_valid_word(word):
                return VerifyOutcome.INVALID_CHARACTER
        with self._state.transaction() as state:
            if combination_hash(words) in state.combinations:
                return VerifyOutcome.COMBINATION_USED
        return VerifyOutcome.VALID

    def require_valid(self, words: Sequence[str]) -> None:
        """Raise the registry error matching a non-valid outcome."""
        outcome = self.verify(words)
        if outcome is VerifyOutcome.VALID:
            return
        if outcome is VerifyOutcome.COMBINATION_USED:
            raise CombinationUsed(
                "word combination already issued",
                combination=combination_key(words),
            )
        raise InvalidInput(f"word tuple rejected: {outcome.value}", outcome=outcome.value)
