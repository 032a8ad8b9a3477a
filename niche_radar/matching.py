"""Text normalization and phrase matching."""
from __future__ import annotations

import re
from functools import lru_cache


def normalize(text: str | None) -> str:
    """Return *text* trimmed and lower-cased; internal spacing is left alone."""
    if not text:
        return ""
    return str(text).strip().lower()


@lru_cache(maxsize=4096)
def _token_pattern(token: str) -> re.Pattern[str]:
    # "app" must not match inside "approval"; boundaries are non-alphanumerics or string edges
    return re.compile(rf"(?<![^\W_]){re.escape(token)}(?![^\W_])")


def matches(haystack: str, phrase: str) -> bool:
    """Whether normalized *phrase* occurs in normalized *haystack*.

    Multi-word phrases match as plain substrings; single tokens must appear as
    whole tokens. An empty phrase never matches.
    """
    if not phrase or not haystack:
        return False
    if " " in phrase:
        return phrase in haystack
    return _token_pattern(phrase).search(haystack) is not None


def matches_any(haystacks: list[str], phrase: str) -> bool:
    """Whether *phrase* matches at least one of *haystacks*."""
    return any(matches(h, phrase) for h in haystacks)
