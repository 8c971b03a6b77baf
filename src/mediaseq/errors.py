"""Error taxonomy shared by the rename pipeline and folder monitor."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Machine-distinguishable failure categories."""

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    PROVIDER = "provider"
    WATCH = "watch"


@dataclass(frozen=True, slots=True)
class RenameError:
    """Failure value attached to a preview entry or progress event.

    Attributes:
        kind: Category from the error taxonomy.
        reason: Human-readable explanation suitable for display.
    """

    kind: ErrorKind
    reason: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.reason}"


class MediaseqError(Exception):
    """Base exception for mediaseq operations."""


class MonitorError(MediaseqError):
    """Raised when a folder monitor cannot be started."""


__all__ = ["ErrorKind", "RenameError", "MediaseqError", "MonitorError"]
