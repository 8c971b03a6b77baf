"""Batch rename pipeline: preview, conflict checks, and execution."""

from .conflicts import ConflictChecker, DirectoryConflictChecker, check_conflict
from .executor import (
    BatchExecutor,
    BatchReport,
    CancellationToken,
    ExecutionProgress,
    ExecutionStatus,
    collect,
)
from .preview import PreviewEngine, PreviewEntry, PreviewSummary
from .providers import (
    DirectoryProvider,
    LocalDirectoryProvider,
    LocalRenameProvider,
    RenameOutcome,
    RenameProvider,
)

__all__ = [
    "BatchExecutor",
    "BatchReport",
    "CancellationToken",
    "ConflictChecker",
    "DirectoryConflictChecker",
    "DirectoryProvider",
    "ExecutionProgress",
    "ExecutionStatus",
    "LocalDirectoryProvider",
    "LocalRenameProvider",
    "PreviewEngine",
    "PreviewEntry",
    "PreviewSummary",
    "RenameOutcome",
    "RenameProvider",
    "check_conflict",
    "collect",
]
