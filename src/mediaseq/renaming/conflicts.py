"""Name-collision detection shared by the preview engine and executor."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Protocol

LOGGER = logging.getLogger(__name__)


class ConflictChecker(Protocol):
    """Decides whether a candidate name would collide with another file."""

    def reset(self) -> None:
        """Forget names claimed by the previous batch."""
        ...

    def has_conflict(self, handle: Any, candidate: str) -> bool:
        """Return whether renaming ``handle`` to ``candidate`` would collide."""
        ...


class DirectoryConflictChecker:
    """Detect collisions with existing siblings and earlier names in the batch.

    Names compare case-insensitively. A file never conflicts with itself, so
    case-only renames and unchanged names are allowed. The directory is read at
    each check, so a name freed by an earlier rename in the batch is available
    again; names claimed in the batch are kept until :meth:`reset`.
    """

    def __init__(self) -> None:
        self._claimed: dict[Path, set[str]] = {}

    def reset(self) -> None:
        self._claimed.clear()

    def has_conflict(self, handle: Any, candidate: str) -> bool:
        source = Path(handle)
        directory = source.parent
        key = candidate.casefold()

        claimed = self._claimed.setdefault(directory, set())
        if key in claimed:
            return True

        if key != source.name.casefold() and _sibling_exists(directory, key):
            return True

        claimed.add(key)
        return False


def _sibling_exists(directory: Path, key: str) -> bool:
    with os.scandir(directory) as entries:
        return any(entry.name.casefold() == key for entry in entries)


def check_conflict(checker: ConflictChecker, handle: Any, candidate: str) -> bool:
    """Consult ``checker``, treating any failure as "no conflict".

    Checking is fail-open: an error while checking must not block a rename that
    may well be legitimate. The provider still refuses to overwrite files.

    Args:
        checker: Conflict checker to consult.
        handle: Handle of the item being renamed.
        candidate: Candidate filename.

    Returns:
        bool: ``True`` only when the checker positively reports a collision.
    """

    try:
        return bool(checker.has_conflict(handle, candidate))
    except Exception as exc:
        LOGGER.warning(
            "Conflict check failed for %s -> %s; assuming no conflict: %s", handle, candidate, exc
        )
        return False


__all__ = ["ConflictChecker", "DirectoryConflictChecker", "check_conflict"]
