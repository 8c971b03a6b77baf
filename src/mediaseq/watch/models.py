"""Models describing monitored folders, their status, and observed events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, model_validator

from mediaseq.naming.models import RenameConfig
from mediaseq.naming.patterns import matches_pattern


class WatchedFolder(BaseModel):
    """A folder whose new arrivals are renamed automatically.

    Attributes:
        path: Absolute folder path.
        handle: Provider handle for the folder. Defaults to ``path``.
        config: Naming template applied to new files.
        pattern: Optional wildcard filter on file names (``IMG_*.jpg``).
        recursive: Whether subfolders are monitored too.
        active: Whether the folder is currently being monitored.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    path: Path
    config: RenameConfig
    handle: Any = None
    pattern: Optional[str] = None
    recursive: bool = False
    active: bool = False

    @model_validator(mode="before")
    @classmethod
    def _default_handle(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("handle") is None and "path" in data:
            data = {**data, "handle": data["path"]}
        return data

    def matches(self, filename: str) -> bool:
        """Return whether ``filename`` passes the folder's pattern."""
        return matches_pattern(filename, self.pattern)


class EventKind(str, Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"


@dataclass(frozen=True, slots=True)
class FileSystemEvent:
    """A change observed inside a monitored folder."""

    path: str
    kind: EventKind
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def name(self) -> str:
        return Path(self.path).name


@dataclass(frozen=True, slots=True)
class StatusInactive:
    """Monitoring is stopped."""

    state = "inactive"


@dataclass(frozen=True, slots=True)
class StatusActive:
    """Monitoring is running.

    Attributes:
        folder_path: Monitored folder.
        files_processed: New files handled since monitoring started.
    """

    folder_path: str
    files_processed: int = 0
    state = "active"


@dataclass(frozen=True, slots=True)
class StatusError:
    """Monitoring stopped because of an error; a new start is required."""

    message: str
    state = "error"


MonitorStatus = Union[StatusInactive, StatusActive, StatusError]


__all__ = [
    "EventKind",
    "FileSystemEvent",
    "MonitorStatus",
    "StatusActive",
    "StatusError",
    "StatusInactive",
    "WatchedFolder",
]
