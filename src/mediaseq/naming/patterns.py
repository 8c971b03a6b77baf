"""Simple glob patterns used to filter filenames."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

_WILDCARDS = {"*": ".*", "?": "."}


@lru_cache(maxsize=64)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a ``*``/``?`` wildcard pattern into a case-insensitive regex.

    Every other character matches literally.

    Args:
        pattern: Wildcard pattern such as ``IMG_*.jpg``.

    Returns:
        re.Pattern[str]: Compiled expression intended for ``fullmatch``.
    """

    translated = "".join(_WILDCARDS.get(char, re.escape(char)) for char in pattern)
    return re.compile(translated, re.IGNORECASE | re.DOTALL)


def matches_pattern(name: str, pattern: Optional[str]) -> bool:
    """Return whether ``name`` matches ``pattern``; blank patterns match everything."""
    if pattern is None or not pattern.strip():
        return True
    return compile_glob(pattern).fullmatch(name) is not None


__all__ = ["compile_glob", "matches_pattern"]
