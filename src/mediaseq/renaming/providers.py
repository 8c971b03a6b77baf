"""Rename-operation and directory collaborators."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RenameOutcome:
    """Result of a single provider rename.

    Attributes:
        handle: Handle that was renamed.
        new_handle: Handle referring to the renamed file on success.
        error: Failure reason when the rename did not happen.
    """

    handle: Any
    new_handle: Any = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def succeeded(cls, handle: Any, new_handle: Any) -> "RenameOutcome":
        return cls(handle=handle, new_handle=new_handle)

    @classmethod
    def failed(cls, handle: Any, error: str) -> "RenameOutcome":
        return cls(handle=handle, error=error)


class RenameProvider(Protocol):
    """Performs the actual rename of a file identified by an opaque handle."""

    def rename(self, handle: Any, new_name: str) -> RenameOutcome:
        """Rename ``handle`` to ``new_name`` within its current location."""
        ...

    def batch_rename(self, pairs: Iterable[tuple[Any, str]]) -> dict[Any, RenameOutcome]:
        """Rename every pair, continuing past individual failures."""
        ...


class DirectoryProvider(Protocol):
    """Existence checks used before a folder is monitored."""

    def exists(self, path: Path) -> bool: ...

    def is_dir(self, path: Path) -> bool: ...


class LocalRenameProvider:
    """Rename files on the local filesystem, never overwriting an existing file."""

    def rename(self, handle: Any, new_name: str) -> RenameOutcome:
        """Rename the file at ``handle`` to ``new_name`` in the same directory.

        Args:
            handle: Path (or path string) of the file to rename.
            new_name: New filename without directory components.

        Returns:
            RenameOutcome: Success with the new path, or a failure reason.
        """
        source = Path(handle)
        if os.sep in new_name or (os.altsep and os.altsep in new_name):
            return RenameOutcome.failed(handle, f"Invalid file name: {new_name!r}")

        target = source.with_name(new_name)
        try:
            if not source.exists():
                return RenameOutcome.failed(handle, f"Source file is missing: {source}")
            if target.exists() and not _same_file(source, target):
                return RenameOutcome.failed(handle, f"Destination already exists: {target}")
            source.rename(target)
        except PermissionError as exc:
            return RenameOutcome.failed(handle, f"Permission denied: {exc}")
        except OSError as exc:
            return RenameOutcome.failed(handle, f"Failed to rename file: {exc}")

        LOGGER.debug("Renamed %s -> %s", source, target)
        return RenameOutcome.succeeded(handle, target)

    def batch_rename(self, pairs: Iterable[tuple[Any, str]]) -> dict[Any, RenameOutcome]:
        """Rename each ``(handle, new_name)`` pair in order.

        Args:
            pairs: Handles with their new names.

        Returns:
            dict[Any, RenameOutcome]: Outcome per handle; failures never stop the loop.
        """
        results: dict[Any, RenameOutcome] = {}
        for handle, new_name in pairs:
            results[handle] = self.rename(handle, new_name)
        return results


class LocalDirectoryProvider:
    """Directory checks backed by :mod:`pathlib`."""

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()


def _same_file(left: Path, right: Path) -> bool:
    try:
        return os.path.samefile(left, right)
    except OSError:
        return False


__all__ = [
    "DirectoryProvider",
    "LocalDirectoryProvider",
    "LocalRenameProvider",
    "RenameOutcome",
    "RenameProvider",
]
