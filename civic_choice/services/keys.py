"""Cache key helpers."""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")


def normalize_location(raw: str) -> str:
    """Canonicalise a free-text location into a stable ballot cache key."""

    return _WHITESPACE.sub(" ", (raw or "").strip().lower())
