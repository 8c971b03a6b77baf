"""Folder monitoring for automatic renaming of new files."""

from .models import (
    EventKind,
    FileSystemEvent,
    MonitorStatus,
    StatusActive,
    StatusError,
    StatusInactive,
    WatchedFolder,
)
from .monitor import FolderMonitor
from .status import EventChannel, StatusHolder

__all__ = [
    "EventChannel",
    "EventKind",
    "FileSystemEvent",
    "FolderMonitor",
    "MonitorStatus",
    "StatusActive",
    "StatusError",
    "StatusHolder",
    "StatusInactive",
    "WatchedFolder",
]
