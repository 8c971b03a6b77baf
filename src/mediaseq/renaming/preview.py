"""Dry-run preview of a batch rename."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from mediaseq.errors import ErrorKind, RenameError
from mediaseq.naming.generator import FilenameGenerator
from mediaseq.naming.models import MediaItem, RenameConfig
from mediaseq.naming.validator import validate_filename

from .conflicts import ConflictChecker, DirectoryConflictChecker, check_conflict


@dataclass(frozen=True, slots=True)
class PreviewEntry:
    """Predicted outcome for one item of a batch.

    Attributes:
        original: Item being renamed.
        candidate_name: Name the item would receive (its current name when the
            template itself is invalid).
        sequence_index: Zero-based position used for numbering.
        error: Conflict describing why the item cannot be renamed.
    """

    original: MediaItem
    candidate_name: str
    sequence_index: int
    error: Optional[RenameError] = None

    @property
    def has_conflict(self) -> bool:
        return self.error is not None

    @property
    def conflict_reason(self) -> Optional[str]:
        return self.error.reason if self.error is not None else None

    @property
    def is_changed(self) -> bool:
        return self.candidate_name != self.original.name

    @property
    def can_commit(self) -> bool:
        return not self.has_conflict and self.is_changed

    @property
    def description(self) -> str:
        if self.has_conflict:
            return f"Cannot rename: {self.conflict_reason}"
        if not self.is_changed:
            return "No change needed"
        return f"{self.original.name} -> {self.candidate_name}"


@dataclass(frozen=True, slots=True)
class PreviewSummary:
    """Counts derived from a set of preview entries."""

    total: int
    committable: int
    conflicts: int
    unchanged: int

    @property
    def can_proceed(self) -> bool:
        return self.conflicts == 0 and self.committable > 0

    @property
    def message(self) -> str:
        if self.conflicts > 0:
            return f"{self.conflicts} file(s) have conflicts"
        if self.committable == 0:
            return "No files will be renamed"
        return f"{self.committable} file(s) ready to rename"

    @classmethod
    def from_entries(cls, entries: Iterable[PreviewEntry]) -> "PreviewSummary":
        entries = list(entries)
        return cls(
            total=len(entries),
            committable=sum(1 for entry in entries if entry.can_commit),
            conflicts=sum(1 for entry in entries if entry.has_conflict),
            unchanged=sum(
                1 for entry in entries if not entry.is_changed and not entry.has_conflict
            ),
        )


class PreviewEngine:
    """Generate, validate, and conflict-check names without renaming anything."""

    def __init__(
        self,
        *,
        generator: FilenameGenerator | None = None,
        checker: ConflictChecker | None = None,
    ) -> None:
        self._generator = generator or FilenameGenerator()
        self._checker = checker or DirectoryConflictChecker()

    def preview(self, items: Sequence[MediaItem], config: RenameConfig) -> list[PreviewEntry]:
        """Predict the outcome of renaming ``items`` with ``config``.

        An invalid template marks every entry with the configuration error before
        any per-item work. Otherwise each item is generated, validated, and checked
        for collisions with existing files and earlier candidates in the batch.

        Args:
            items: Items in their final (already sorted) order.
            config: Naming template.

        Returns:
            list[PreviewEntry]: One entry per item, in input order.
        """
        config_error = config.validation_error()
        if config_error is not None:
            error = RenameError(ErrorKind.CONFIGURATION, config_error)
            return [
                PreviewEntry(
                    original=item, candidate_name=item.name, sequence_index=index, error=error
                )
                for index, item in enumerate(items)
            ]

        self._checker.reset()
        entries: list[PreviewEntry] = []
        for index, item in enumerate(items):
            candidate = self._generator.generate(item, config, index)
            entries.append(
                PreviewEntry(
                    original=item,
                    candidate_name=candidate,
                    sequence_index=index,
                    error=self._entry_error(item, candidate),
                )
            )
        return entries

    def summarize(self, entries: Iterable[PreviewEntry]) -> PreviewSummary:
        return PreviewSummary.from_entries(entries)

    def _entry_error(self, item: MediaItem, candidate: str) -> Optional[RenameError]:
        validation = validate_filename(candidate)
        if not validation.valid:
            return RenameError(ErrorKind.VALIDATION, validation.reason or "Invalid filename")
        if check_conflict(self._checker, item.handle, candidate):
            return RenameError(
                ErrorKind.CONFLICT,
                f"Duplicate name: '{candidate}' already exists in the folder or batch",
            )
        return None


__all__ = ["PreviewEngine", "PreviewEntry", "PreviewSummary"]
