"""Tests for the folder monitor state machine."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Any

import pytest
from watchdog.events import DirDeletedEvent, FileCreatedEvent, FileSystemEventHandler
from watchdog.observers import Observer

from mediaseq.errors import MonitorError
from mediaseq.naming import RenameConfig
from mediaseq.renaming import LocalRenameProvider, RenameOutcome
from mediaseq.watch import (
    EventKind,
    FileSystemEvent,
    FolderMonitor,
    MonitorStatus,
    StatusActive,
    StatusError,
    StatusInactive,
    WatchedFolder,
)


class _FakeObserver:
    """Stand-in for a watchdog observer that never emits on its own."""

    instances: list["_FakeObserver"] = []

    def __init__(self) -> None:
        self.handler: FileSystemEventHandler | None = None
        self.path: str | None = None
        self.recursive: bool | None = None
        self.alive = False
        self.unscheduled = False
        _FakeObserver.instances.append(self)

    def schedule(self, handler: FileSystemEventHandler, path: str, recursive: bool = False) -> Any:
        self.handler, self.path, self.recursive = handler, path, recursive

    def start(self) -> None:
        self.alive = True

    def stop(self) -> None:
        self.alive = False

    def join(self, timeout: float | None = None) -> None:
        pass

    def unschedule_all(self) -> None:
        self.unscheduled = True

    def is_alive(self) -> bool:
        return self.alive


@pytest.fixture()
def monitor() -> Any:
    _FakeObserver.instances.clear()
    instance = FolderMonitor(
        LocalRenameProvider(), observer_factory=_FakeObserver, health_interval=0.05
    )
    yield instance
    instance.stop()


class _BlockingProvider(LocalRenameProvider):
    """Local provider that holds each rename until released."""

    def __init__(self) -> None:
        self.entered = threading.Event()
        self.release = threading.Event()

    def rename(self, handle: Any, new_name: str) -> RenameOutcome:
        self.entered.set()
        self.release.wait(timeout=5)
        return super().rename(handle, new_name)


def _folder(path: Path, **kwargs: Any) -> WatchedFolder:
    return WatchedFolder(path=path, config=RenameConfig(prefix="cam", digit_count=2), **kwargs)


def _created(path: Path) -> FileSystemEvent:
    path.write_bytes(b"x")
    return FileSystemEvent(path=str(path), kind=EventKind.CREATED)


def test_start_validates_and_becomes_active(monitor: FolderMonitor, tmp_path: Path) -> None:
    monitor.start(_folder(tmp_path, recursive=True))

    assert monitor.status.value == StatusActive(str(tmp_path), 0)
    observer = _FakeObserver.instances[-1]
    assert observer.path == str(tmp_path)
    assert observer.recursive is True
    assert monitor.current_folder is not None and monitor.current_folder.active


def test_start_on_missing_folder_errors_without_activating(
    monitor: FolderMonitor, tmp_path: Path
) -> None:
    seen: list[MonitorStatus] = []
    monitor.subscribe_status(seen.append)

    with pytest.raises(MonitorError):
        monitor.start(_folder(tmp_path / "missing"))

    assert isinstance(monitor.status.value, StatusError)
    assert not any(isinstance(status, StatusActive) for status in seen)
    assert _FakeObserver.instances == []


def test_start_on_file_errors(monitor: FolderMonitor, tmp_path: Path) -> None:
    file_path = tmp_path / "file.txt"
    file_path.write_text("x", encoding="utf-8")

    with pytest.raises(MonitorError, match="Not a directory"):
        monitor.start(_folder(file_path))


def test_start_with_invalid_template_errors(monitor: FolderMonitor, tmp_path: Path) -> None:
    folder = WatchedFolder(path=tmp_path, config=RenameConfig(prefix=""))

    with pytest.raises(MonitorError, match="Prefix cannot be empty"):
        monitor.start(folder)
    assert isinstance(monitor.status.value, StatusError)


def test_created_files_are_renamed_and_counted(monitor: FolderMonitor, tmp_path: Path) -> None:
    monitor.start(_folder(tmp_path))

    monitor.handle_event(_created(tmp_path / "IMG_9.jpg"))
    monitor.handle_event(_created(tmp_path / "IMG_4.jpg"))

    assert (tmp_path / "cam01.jpg").exists()
    assert (tmp_path / "cam02.jpg").exists()
    assert monitor.status.value == StatusActive(str(tmp_path), 2)


def test_only_created_events_change_the_count(monitor: FolderMonitor, tmp_path: Path) -> None:
    monitor.start(_folder(tmp_path))
    events: list[FileSystemEvent] = []
    monitor.subscribe_events(events.append)
    existing = tmp_path / "old.jpg"
    existing.write_bytes(b"x")

    for kind in (EventKind.MODIFIED, EventKind.DELETED, EventKind.MOVED):
        monitor.handle_event(FileSystemEvent(path=str(existing), kind=kind))

    assert [event.kind for event in events] == [
        EventKind.MODIFIED,
        EventKind.DELETED,
        EventKind.MOVED,
    ]
    assert monitor.status.value == StatusActive(str(tmp_path), 0)
    assert existing.exists()


def test_pattern_filters_events(monitor: FolderMonitor, tmp_path: Path) -> None:
    monitor.start(_folder(tmp_path, pattern="IMG_*.jpg"))
    events: list[FileSystemEvent] = []
    monitor.subscribe_events(events.append)

    monitor.handle_event(_created(tmp_path / "video.mp4"))
    monitor.handle_event(_created(tmp_path / "IMG_001.png"))
    monitor.handle_event(_created(tmp_path / "img_001.JPG"))

    assert [event.name for event in events] == ["img_001.JPG"]
    assert monitor.files_processed == 1
    assert (tmp_path / "video.mp4").exists()
    assert (tmp_path / "cam01.JPG").exists()


def test_failed_rename_still_counts(monitor: FolderMonitor, tmp_path: Path) -> None:
    monitor.start(_folder(tmp_path))
    results = []
    monitor.results.subscribe(results.append)

    missing = tmp_path / "vanished.jpg"
    monitor.handle_event(FileSystemEvent(path=str(missing), kind=EventKind.CREATED))

    assert monitor.files_processed == 1
    assert results[0].error is not None


def test_events_are_ignored_when_inactive(monitor: FolderMonitor, tmp_path: Path) -> None:
    path = tmp_path / "a.jpg"

    monitor.handle_event(_created(path))

    assert path.exists()
    assert isinstance(monitor.status.value, StatusInactive)


def test_stop_releases_watch_and_resets(monitor: FolderMonitor, tmp_path: Path) -> None:
    monitor.start(_folder(tmp_path))
    observer = _FakeObserver.instances[-1]

    monitor.stop()

    assert isinstance(monitor.status.value, StatusInactive)
    assert observer.unscheduled and not observer.alive
    assert monitor.current_folder is None
    assert monitor.files_processed == 0


def test_restart_stops_previous_watch(monitor: FolderMonitor, tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()

    monitor.start(_folder(first))
    monitor.handle_event(_created(first / "a.jpg"))
    monitor.start(_folder(second))

    assert _FakeObserver.instances[0].unscheduled
    assert monitor.status.value == StatusActive(str(second), 0)


def test_restart_discards_rename_still_running_in_previous_session(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    _FakeObserver.instances.clear()
    provider = _BlockingProvider()
    monitor = FolderMonitor(provider, observer_factory=_FakeObserver, health_interval=0.05)
    results: list[Any] = []
    monitor.results.subscribe(results.append)

    monitor.start(_folder(first))
    handler = _FakeObserver.instances[-1].handler
    assert handler is not None
    arrival = first / "a.jpg"
    arrival.write_bytes(b"x")
    handler.dispatch(FileCreatedEvent(str(arrival)))
    assert provider.entered.wait(timeout=5)

    timer = threading.Timer(0.5, provider.release.set)
    timer.start()
    try:
        monitor.start(_folder(second))
        timer.join()
        time.sleep(0.2)

        assert monitor.status.value == StatusActive(str(second), 0)
        assert monitor.files_processed == 0
        assert results == []
    finally:
        provider.release.set()
        monitor.stop()


def test_own_rename_reported_as_move_is_consumed(monitor: FolderMonitor, tmp_path: Path) -> None:
    monitor.start(_folder(tmp_path))
    events: list[FileSystemEvent] = []
    monitor.subscribe_events(events.append)

    monitor.handle_event(_created(tmp_path / "IMG_1.jpg"))
    target = tmp_path / "cam01.jpg"
    monitor.handle_event(FileSystemEvent(path=str(target), kind=EventKind.MOVED))
    assert [event.kind for event in events] == [EventKind.CREATED]

    # A later arrival at the same path is a new file.
    monitor.handle_event(FileSystemEvent(path=str(target), kind=EventKind.CREATED))

    assert monitor.files_processed == 2
    assert (tmp_path / "cam02.jpg").exists()


def test_own_rename_marker_expires(
    monitor: FolderMonitor, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("mediaseq.watch.monitor._OWN_RENAME_WINDOW", -1.0)
    monitor.start(_folder(tmp_path))

    monitor.handle_event(_created(tmp_path / "IMG_1.jpg"))
    monitor.handle_event(FileSystemEvent(path=str(tmp_path / "cam01.jpg"), kind=EventKind.CREATED))

    assert monitor.files_processed == 2
    assert (tmp_path / "cam02.jpg").exists()

def test_queued_events_are_processed_by_worker(monitor: FolderMonitor, tmp_path: Path) -> None:
    monitor.start(_folder(tmp_path))
    handler = _FakeObserver.instances[-1].handler
    assert handler is not None
    new_file = tmp_path / "DSC_1.jpg"
    new_file.write_bytes(b"x")

    handler.dispatch(FileCreatedEvent(str(new_file)))
    status = monitor.status.wait_for(
        lambda value: isinstance(value, StatusActive) and value.files_processed == 1, timeout=5
    )

    assert status == StatusActive(str(tmp_path), 1)
    assert (tmp_path / "cam01.jpg").exists()


def test_removed_folder_moves_to_error(monitor: FolderMonitor, tmp_path: Path) -> None:
    monitor.start(_folder(tmp_path))
    handler = _FakeObserver.instances[-1].handler
    assert handler is not None

    handler.dispatch(DirDeletedEvent(str(tmp_path)))
    status = monitor.status.wait_for(lambda value: isinstance(value, StatusError), timeout=5)

    assert isinstance(status, StatusError)
    assert "removed" in status.message
    assert _FakeObserver.instances[-1].unscheduled


def test_dead_watch_source_moves_to_error(monitor: FolderMonitor, tmp_path: Path) -> None:
    monitor.start(_folder(tmp_path))

    _FakeObserver.instances[-1].alive = False
    status = monitor.status.wait_for(lambda value: isinstance(value, StatusError), timeout=5)

    assert isinstance(status, StatusError)
    assert status.message == "Filesystem watch stopped unexpectedly"

    monitor.start(_folder(tmp_path))
    assert monitor.status.value == StatusActive(str(tmp_path), 0)


def test_real_observer_renames_new_files(tmp_path: Path) -> None:
    monitor = FolderMonitor(LocalRenameProvider(), observer_factory=Observer)
    monitor.start(_folder(tmp_path.resolve()))
    try:
        (tmp_path / "arrival.jpg").write_bytes(b"x")
        status = monitor.status.wait_for(
            lambda value: isinstance(value, StatusActive) and value.files_processed >= 1,
            timeout=10,
        )
        deadline = time.monotonic() + 5
        while not (tmp_path / "cam01.jpg").exists() and time.monotonic() < deadline:
            time.sleep(0.05)
    finally:
        monitor.stop()

    assert status is not None
    assert (tmp_path / "cam01.jpg").exists()
    assert not (tmp_path / "arrival.jpg").exists()
