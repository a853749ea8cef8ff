from __future__ import annotations

import re

_DISALLOWED = re.compile(r"[^\w\s/-]|_")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lowercase, trim, drop everything but letters/digits/space/'-'/'/', collapse spaces."""
    if not text:
        return ""
    cleaned = _DISALLOWED.sub("", text.lower().strip())
    return _WHITESPACE.sub(" ", cleaned).strip()


def normalize_objective(objective: str) -> str:
    # Cache key for generated items: keeps punctuation, only folds case and spacing.
    return _WHITESPACE.sub(" ", (objective or "").lower().strip())
