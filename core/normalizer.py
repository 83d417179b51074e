"""
normalizer.py
--------------
Description normalization for grouping.

Bank exports spell the same counterparty with different casing, punctuation
and legal suffixes ("ENEL ENERGIA S.p.A.", "Enel Energia spa"). The grouping
key strips only that noise so two different counterparties are never merged.
"""

import re
from functools import lru_cache

from config.config_loader import get_normalization_config

_PUNCTUATION = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")


@lru_cache(maxsize=8)
def _suffix_patterns(suffixes: tuple[str, ...]) -> tuple[re.Pattern, re.Pattern]:
    # Longest first so "s.r.l.s." is not consumed as "s.r.l." + "s."
    ordered = sorted(suffixes, key=len, reverse=True)
    dotted = "|".join(r"\.\s*".join(re.escape(ch) for ch in s) + r"\." for s in ordered)
    dotted_last = "|".join(r"\.\s*".join(re.escape(ch) for ch in s) for s in ordered)
    punctuated = re.compile(rf"(?<!\w)(?:{dotted}|{dotted_last})(?!\w)")
    bare = re.compile(rf"\b(?:{'|'.join(re.escape(s) for s in ordered)})\b")
    return punctuated, bare


def normalize_description(text) -> str:
    """
    Returns the canonical lowercase grouping key for a description.

    Total: None, empty or non-string input yields "". Idempotent.

    Example:
        >>> normalize_description("  Enel Energia S.p.A. - Bolletta  ")
        'enel energia bolletta'
    """
    if not text or not isinstance(text, str):
        return ""

    suffixes = tuple(get_normalization_config()["legal_suffixes"])
    punctuated, bare = _suffix_patterns(suffixes)

    key = text.lower()
    key = punctuated.sub(" ", key)
    key = _PUNCTUATION.sub(" ", key)
    key = bare.sub(" ", key)
    key = _WHITESPACE.sub(" ", key)
    return key.strip()


def tokenize(normalized: str) -> set[str]:
    """Whole-word tokens of an already normalized description."""
    return set(normalized.split()) if normalized else set()
