"""Streaming batch rename executor."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Optional, Sequence

from mediaseq.errors import ErrorKind, RenameError
from mediaseq.naming.generator import FilenameGenerator
from mediaseq.naming.models import MediaItem, RenameConfig
from mediaseq.naming.validator import validate_filename

from .conflicts import ConflictChecker, DirectoryConflictChecker, check_conflict
from .providers import RenameOutcome, RenameProvider

LOGGER = logging.getLogger(__name__)


class ExecutionStatus(str, Enum):
    """State of a single item during execution."""

    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class ExecutionProgress:
    """Progress event emitted for each state transition of an item.

    Attributes:
        current_index: Zero-based position within this invocation.
        total: Number of items in this invocation.
        item: Item being processed.
        status: Processing or a terminal status.
        sequence_index: Position used for numbering; differs from
            ``current_index`` only when retrying a subset.
        candidate_name: Generated name, once known.
        new_handle: Handle returned by the provider on success.
        error: Failure or skip reason for ``failed``/``skipped`` events.
    """

    current_index: int
    total: int
    item: MediaItem
    status: ExecutionStatus
    sequence_index: int
    candidate_name: Optional[str] = None
    new_handle: Any = None
    error: Optional[RenameError] = None

    @property
    def percentage(self) -> int:
        if self.total <= 0:
            return 0
        return (self.current_index + 1) * 100 // self.total

    @property
    def progress_label(self) -> str:
        return f"{self.current_index + 1}/{self.total}"

    @property
    def is_last(self) -> bool:
        return self.current_index == self.total - 1

    @property
    def is_terminal(self) -> bool:
        return self.status is not ExecutionStatus.PROCESSING


class CancellationToken:
    """Thread-safe flag checked by the executor between items."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class BatchReport:
    """Accumulate terminal progress events for summaries and retries.

    Attributes:
        total: Number of items in the batch, when known.
        succeeded: Success events in emission order.
        failed: Failure events in emission order.
        skipped: Skip events in emission order.
        cancelled: Set by the consumer when the run was cancelled.
    """

    total: int = 0
    succeeded: list[ExecutionProgress] = field(default_factory=list)
    failed: list[ExecutionProgress] = field(default_factory=list)
    skipped: list[ExecutionProgress] = field(default_factory=list)
    cancelled: bool = False

    def record(self, progress: ExecutionProgress) -> ExecutionProgress:
        """Record ``progress`` and return it unchanged."""
        self.total = max(self.total, progress.total)
        if progress.status is ExecutionStatus.SUCCESS:
            self.succeeded.append(progress)
        elif progress.status is ExecutionStatus.FAILED:
            self.failed.append(progress)
        elif progress.status is ExecutionStatus.SKIPPED:
            self.skipped.append(progress)
        return progress

    @property
    def processed(self) -> int:
        return len(self.succeeded) + len(self.failed) + len(self.skipped)

    @property
    def completed(self) -> bool:
        return not self.cancelled and self.processed == self.total

    def failed_pairs(self) -> list[tuple[int, MediaItem]]:
        """Return ``(sequence_index, item)`` pairs for every failed item."""
        return [(progress.sequence_index, progress.item) for progress in self.failed]

    def counts(self) -> dict[str, int]:
        return {
            "total": self.total,
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
        }


def collect(
    progress: Iterable[ExecutionProgress], report: BatchReport | None = None
) -> BatchReport:
    """Drain a progress stream into a :class:`BatchReport`."""
    report = report or BatchReport()
    for event in progress:
        report.record(event)
    return report


class BatchExecutor:
    """Rename an ordered batch one item at a time, streaming progress.

    Items are processed strictly in sequence. Per-item problems (invalid name,
    conflict, provider failure) are reported on the stream and never stop the
    batch; only an invalid template fails the batch up front.
    """

    def __init__(
        self,
        provider: RenameProvider,
        *,
        checker: ConflictChecker | None = None,
        generator: FilenameGenerator | None = None,
    ) -> None:
        self._provider = provider
        self._checker = checker or DirectoryConflictChecker()
        self._generator = generator or FilenameGenerator()

    def execute(
        self,
        items: Sequence[MediaItem],
        config: RenameConfig,
        token: CancellationToken | None = None,
        *,
        index_offset: int = 0,
    ) -> Iterator[ExecutionProgress]:
        """Return a lazy progress stream for renaming ``items``.

        Args:
            items: Items in their final (already sorted) order.
            config: Naming template.
            token: Optional cancellation token checked before each item.
            index_offset: Added to each position to form the sequence index.

        Returns:
            Iterator[ExecutionProgress]: Single-use stream; call again to re-run.
        """
        pairs = [(index_offset + index, item) for index, item in enumerate(items)]
        return self._run(pairs, config, token)

    def retry_failed(
        self,
        report: BatchReport,
        config: RenameConfig,
        token: CancellationToken | None = None,
    ) -> Iterator[ExecutionProgress]:
        """Replay the failed items of ``report`` keeping their sequence numbers."""
        return self._run(report.failed_pairs(), config, token)

    def _run(
        self,
        pairs: list[tuple[int, MediaItem]],
        config: RenameConfig,
        token: CancellationToken | None,
    ) -> Iterator[ExecutionProgress]:
        total = len(pairs)
        if not pairs:
            return

        config_error = config.validation_error()
        if config_error is not None:
            sequence_index, item = pairs[0]
            LOGGER.warning("Rename batch rejected: %s", config_error)
            yield ExecutionProgress(
                current_index=0,
                total=total,
                item=item,
                status=ExecutionStatus.FAILED,
                sequence_index=sequence_index,
                error=RenameError(ErrorKind.CONFIGURATION, config_error),
            )
            return

        self._checker.reset()
        for position, (sequence_index, item) in enumerate(pairs):
            if token is not None and token.cancelled:
                LOGGER.info("Rename batch cancelled after %d of %d item(s)", position, total)
                return

            yield ExecutionProgress(
                current_index=position,
                total=total,
                item=item,
                status=ExecutionStatus.PROCESSING,
                sequence_index=sequence_index,
            )
            yield self._process(position, total, sequence_index, item, config)

    def _process(
        self,
        position: int,
        total: int,
        sequence_index: int,
        item: MediaItem,
        config: RenameConfig,
    ) -> ExecutionProgress:
        def _terminal(
            status: ExecutionStatus,
            candidate: Optional[str] = None,
            *,
            error: Optional[RenameError] = None,
            new_handle: Any = None,
        ) -> ExecutionProgress:
            return ExecutionProgress(
                current_index=position,
                total=total,
                item=item,
                status=status,
                sequence_index=sequence_index,
                candidate_name=candidate,
                new_handle=new_handle,
                error=error,
            )

        try:
            candidate = self._generator.generate(item, config, sequence_index)
        except Exception as exc:
            LOGGER.warning("Could not generate a name for %s: %s", item.name, exc)
            return _terminal(
                ExecutionStatus.FAILED,
                error=RenameError(ErrorKind.VALIDATION, f"Failed to generate filename: {exc}"),
            )

        validation = validate_filename(candidate)
        if not validation.valid:
            return _terminal(
                ExecutionStatus.SKIPPED,
                candidate,
                error=RenameError(ErrorKind.VALIDATION, validation.reason or "Invalid filename"),
            )

        if check_conflict(self._checker, item.handle, candidate):
            return _terminal(
                ExecutionStatus.SKIPPED,
                candidate,
                error=RenameError(
                    ErrorKind.CONFLICT,
                    f"Duplicate name: '{candidate}' already exists in the folder or batch",
                ),
            )

        try:
            outcome = self._provider.rename(item.handle, candidate)
        except Exception as exc:
            outcome = RenameOutcome.failed(item.handle, f"{type(exc).__name__}: {exc}")

        if not outcome.success:
            LOGGER.warning("Rename failed for %s -> %s: %s", item.name, candidate, outcome.error)
            return _terminal(
                ExecutionStatus.FAILED,
                candidate,
                error=RenameError(ErrorKind.PROVIDER, outcome.error or "Unknown error"),
            )

        LOGGER.debug("Renamed %s -> %s", item.name, candidate)
        return _terminal(ExecutionStatus.SUCCESS, candidate, new_handle=outcome.new_handle)


__all__ = [
    "BatchExecutor",
    "BatchReport",
    "CancellationToken",
    "ExecutionProgress",
    "ExecutionStatus",
    "collect",
]
