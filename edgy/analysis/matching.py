"""
Name and pattern matching primitives shared by the analysis stages.

All functions are pure and never raise on malformed rule data.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Callable, Iterable

_INLINE_FLAGS = re.compile(r"^\(\?[a-zA-Z]+\)")

Check = Callable[[], bool]


def strip_inline_flags(pattern: str) -> str:
    """Drop a leading inline-flag group such as `(?i)`."""
    return _INLINE_FLAGS.sub("", pattern)


@lru_cache(maxsize=512)
def compile_pattern(pattern: str) -> re.Pattern[str] | None:
    """Compile a rule-supplied layer-name expression case-insensitively.

    Returns None for a malformed expression; callers treat that as no match.
    """
    try:
        return re.compile(strip_inline_flags(pattern), re.IGNORECASE)
    except re.error:
        return None


def matches_any_pattern(patterns: Iterable[str], *texts: str | None) -> bool:
    """True if any expression finds a match in any of the non-empty texts."""
    for pattern in patterns:
        regex = compile_pattern(pattern)
        if regex is None:
            continue
        for text in texts:
            if text and regex.search(text):
                return True
    return False


def contains_any(text: str | None, needles: Iterable[str]) -> bool:
    """Case-insensitive substring test against a vocabulary."""
    if not text:
        return False
    lowered = text.lower()
    return any(n.lower() in lowered for n in needles if n)


def all_present(checks: Iterable[Check | None]) -> bool:
    """
    Evaluate only the checks that are present; absent (None) checks are vacuously true.

    Returns True when every present check passes, including when none is present.
    """
    for check in checks:
        if check is not None and not check():
            return False
    return True
