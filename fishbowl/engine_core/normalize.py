"""
Text normalization for fishbowl items.

Two items are duplicates when their normalized text is equal. The
normalized form ignores case, punctuation, accents and whitespace runs,
so "Spider-Man" and "spiderman" collide.
"""

from __future__ import annotations
from dataclasses import dataclass
import unicodedata

from .state import count_letters


MIN_LETTERS = 2

TOO_FEW_LETTERS = "Each item must contain at least 2 letters."
NOT_VALID = "That item is not valid."


@dataclass(frozen=True)
class NormalizedText:
    display_text: str
    normalized_text: str
    is_valid: bool
    error: str | None = None


def _is_kept(ch: str) -> bool:
    category = unicodedata.category(ch)
    return category[0] in ("L", "N") or ch.isspace()


def normalize_item_text(raw: str) -> NormalizedText:
    """Validate an item and compute its canonical form."""
    display_text = raw.strip()
    if count_letters(display_text) < MIN_LETTERS:
        return NormalizedText(display_text, "", False, TOO_FEW_LETTERS)

    # NFKD splits accents into combining marks (category M), which are dropped
    decomposed = unicodedata.normalize("NFKD", display_text)
    kept = "".join(ch for ch in decomposed if _is_kept(ch))
    normalized_text = " ".join(kept.lower().split())

    if not normalized_text:
        return NormalizedText(display_text, "", False, NOT_VALID)

    return NormalizedText(display_text, normalized_text, True)
