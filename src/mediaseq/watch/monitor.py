"""Folder monitor that renames new arrivals as they appear."""

from __future__ import annotations

import logging
import queue
import threading
import time
from pathlib import Path
from typing import Callable, Optional, Union

from watchdog.events import FileSystemEvent as WatchdogEvent
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from mediaseq.errors import MonitorError
from mediaseq.ingestion.discovery import item_from_path
from mediaseq.naming.generator import FilenameGenerator
from mediaseq.naming.models import MediaItem
from mediaseq.renaming.conflicts import ConflictChecker
from mediaseq.renaming.executor import BatchExecutor, ExecutionProgress
from mediaseq.renaming.providers import DirectoryProvider, LocalDirectoryProvider, RenameProvider

from .models import (
    EventKind,
    FileSystemEvent,
    MonitorStatus,
    StatusActive,
    StatusError,
    StatusInactive,
    WatchedFolder,
)
from .status import EventChannel, StatusHolder, Unsubscribe

LOGGER = logging.getLogger(__name__)

_EVENT_KINDS = {
    "created": EventKind.CREATED,
    "modified": EventKind.MODIFIED,
    "deleted": EventKind.DELETED,
    "moved": EventKind.MOVED,
}


class _Stop:
    """Sentinel asking the worker loop to exit."""


class _SourceFailure:
    """Failure reported by the watch source on its own thread."""

    def __init__(self, message: str) -> None:
        self.message = message


_QueueItem = Union[FileSystemEvent, _Stop, _SourceFailure]

# Seconds during which an event for a file the monitor just renamed is treated as its own.
_OWN_RENAME_WINDOW = 5.0


class FolderMonitor:
    """Watch one folder at a time and rename files created inside it.

    Status transitions are published through :attr:`status`; matching file
    events are broadcast on :attr:`events` and the outcome of each automatic
    rename on :attr:`results`. Watchdog callbacks only enqueue events; a single
    worker thread owned by the monitor consumes them and is the only writer of
    the session state.
    """

    def __init__(
        self,
        provider: RenameProvider,
        *,
        directories: DirectoryProvider | None = None,
        checker: ConflictChecker | None = None,
        generator: FilenameGenerator | None = None,
        observer_factory: Callable[[], BaseObserver] = Observer,
        health_interval: float = 1.0,
    ) -> None:
        self._directories = directories or LocalDirectoryProvider()
        self._executor = BatchExecutor(provider, checker=checker, generator=generator)
        self._observer_factory = observer_factory
        self._health_interval = health_interval

        self.status: StatusHolder[MonitorStatus] = StatusHolder(StatusInactive())
        self.events: EventChannel[FileSystemEvent] = EventChannel()
        self.results: EventChannel[ExecutionProgress] = EventChannel()

        self._lock = threading.RLock()
        # Guards the session counter and status; never held while joining threads.
        self._state_lock = threading.RLock()
        self._session = 0
        self._queue: queue.Queue[_QueueItem] = queue.Queue()
        self._observer: Optional[BaseObserver] = None
        self._worker: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._folder: Optional[WatchedFolder] = None
        self._files_processed = 0
        self._renamed_targets: dict[Path, float] = {}

    @property
    def current_folder(self) -> Optional[WatchedFolder]:
        return self._folder

    @property
    def files_processed(self) -> int:
        return self._files_processed

    def subscribe_status(self, callback: Callable[[MonitorStatus], None]) -> Unsubscribe:
        return self.status.subscribe(callback)

    def subscribe_events(self, callback: Callable[[FileSystemEvent], None]) -> Unsubscribe:
        return self.events.subscribe(callback)

    def start(self, folder: WatchedFolder) -> None:
        """Begin monitoring ``folder``, replacing any previous session.

        Args:
            folder: Folder, naming template, and filter to monitor.

        Raises:
            MonitorError: If the folder is missing, is not a directory, carries an
                invalid naming template, or the watch cannot be scheduled. The
                status is ``Error`` in each case.
        """
        with self._lock:
            self._shutdown()

            path = folder.path
            if not self._directories.exists(path):
                self._fail_start(f"Folder does not exist: {path}")
            if not self._directories.is_dir(path):
                self._fail_start(f"Not a directory: {path}")
            config_error = folder.config.validation_error()
            if config_error is not None:
                self._fail_start(f"Invalid rename configuration: {config_error}")

            self._queue = queue.Queue()
            self._stop_event = threading.Event()
            observer = self._observer_factory()
            handler = _MonitorEventHandler(path, self._queue)
            try:
                observer.schedule(handler, str(path), recursive=folder.recursive)
                observer.start()
            except Exception as exc:
                self._fail_start(f"Unable to watch {path}: {exc}", exc)

            with self._state_lock:
                self._observer = observer
                self._folder = folder.model_copy(update={"active": True})
                self._files_processed = 0
                self._renamed_targets.clear()
                session = self._session
                self.status.set(StatusActive(str(path), 0))
            self._worker = threading.Thread(
                target=self._run_loop,
                args=(self._queue, self._stop_event, session),
                name="mediaseq-monitor",
                daemon=True,
            )
            self._worker.start()
            LOGGER.info("Monitoring %s (recursive=%s)", path, folder.recursive)

    def stop(self) -> None:
        """Stop monitoring and return to ``Inactive``; safe from any state."""
        with self._lock:
            was_running = self._observer is not None
            self._shutdown()
            if was_running:
                LOGGER.info("Monitoring stopped")
            self.status.set(StatusInactive())

    def handle_event(self, event: FileSystemEvent, *, session: int | None = None) -> None:
        """Apply one filesystem event to the active session.

        Runs on the monitor's worker thread; also callable directly when no
        worker is consuming events. Events tagged with a ``session`` other than
        the current one are dropped.
        """
        with self._state_lock:
            folder = self._folder
            if session is None:
                session = self._session
            elif session != self._session:
                return
            if folder is None or not isinstance(self.status.value, StatusActive):
                return
            path = Path(event.path)
            if not folder.matches(path.name):
                return
            if event.kind in (EventKind.CREATED, EventKind.MOVED) and self._is_own_rename(path):
                return
            index = self._files_processed

        self.events.publish(event)
        if event.kind is not EventKind.CREATED:
            return

        terminal = self._rename_arrival(folder, path, index)
        with self._state_lock:
            if session != self._session:
                LOGGER.info("Discarding result for %s from a stopped session", path.name)
                return
            if terminal is not None and isinstance(terminal.new_handle, Path):
                self._renamed_targets[terminal.new_handle] = time.monotonic()
            self._files_processed += 1
            self.status.set(StatusActive(str(folder.path), self._files_processed))
        if terminal is not None:
            self.results.publish(terminal)

    def report_failure(self, message: str, *, session: int | None = None) -> None:
        """Move an active session to ``Error`` and release the watch.

        Args:
            message: Reason shown in the ``Error`` status.
            session: Session the failure belongs to; ignored once that session
                has been stopped or replaced.
        """
        # A concurrent start or stop already owns the teardown.
        if not self._lock.acquire(blocking=False):
            return
        try:
            if session is not None and session != self._session:
                return
            if not isinstance(self.status.value, StatusActive):
                return
            LOGGER.error("Monitoring failed: %s", message)
            self._shutdown()
            self.status.set(StatusError(message))
        finally:
            self._lock.release()

    def check_health(self) -> bool:
        """Report a failure when the watch source stopped on its own."""
        observer = self._observer
        if observer is None or self._stop_event.is_set():
            return True
        if observer.is_alive():
            return True
        self.report_failure("Filesystem watch stopped unexpectedly")
        return False

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _is_own_rename(self, path: Path) -> bool:
        now = time.monotonic()
        expired = [
            target
            for target, renamed_at in self._renamed_targets.items()
            if now - renamed_at > _OWN_RENAME_WINDOW
        ]
        for target in expired:
            del self._renamed_targets[target]
        return self._renamed_targets.pop(path, None) is not None

    def _rename_arrival(
        self, folder: WatchedFolder, path: Path, index: int
    ) -> Optional[ExecutionProgress]:
        try:
            item = item_from_path(path)
        except OSError:
            item = MediaItem(id=str(path), name=path.name, path=path)

        terminal: Optional[ExecutionProgress] = None
        for progress in self._executor.execute([item], folder.config, index_offset=index):
            if progress.is_terminal:
                terminal = progress
        if terminal is None:
            return None

        if terminal.error is None:
            LOGGER.info("Renamed %s -> %s", item.name, terminal.candidate_name)
        else:
            LOGGER.warning("Could not rename %s: %s", item.name, terminal.error)
        return terminal

    def _run_loop(
        self, events: queue.Queue[_QueueItem], stop_event: threading.Event, session: int
    ) -> None:
        """Consume queued events until stopped or the session fails."""
        while not stop_event.is_set():
            try:
                entry = events.get(timeout=self._health_interval)
            except queue.Empty:
                self.check_health()
                continue

            if isinstance(entry, _Stop):
                break
            if isinstance(entry, _SourceFailure):
                self.report_failure(entry.message, session=session)
                break
            try:
                self.handle_event(entry, session=session)
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception("Unexpected error while handling %s", entry.path)
                self.report_failure(f"{type(exc).__name__}: {exc}", session=session)
                break

    def _shutdown(self) -> None:
        with self._state_lock:
            # Results still in flight from the old worker are discarded.
            self._session += 1
            self._folder = None
            self._files_processed = 0
            self._renamed_targets.clear()
        self._stop_event.set()
        observer, self._observer = self._observer, None
        if observer is not None:
            observer.unschedule_all()
            observer.stop()
            if observer.is_alive() and observer is not threading.current_thread():
                observer.join(timeout=5)
        self._queue.put(_Stop())
        worker, self._worker = self._worker, None
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=5)

    def _fail_start(self, message: str, cause: Exception | None = None) -> None:
        LOGGER.error("Cannot start monitoring: %s", message)
        self.status.set(StatusError(message))
        raise MonitorError(message) from cause


class _MonitorEventHandler(FileSystemEventHandler):
    """Forward watchdog events into the monitor queue."""

    def __init__(self, root: Path, queue_handle: queue.Queue[_QueueItem]) -> None:
        self._root = root
        self._queue = queue_handle

    def on_any_event(self, event: WatchdogEvent) -> None:
        kind = _EVENT_KINDS.get(event.event_type)
        if kind is None:
            return
        if event.is_directory:
            if kind is EventKind.DELETED and Path(_decode(event.src_path)) == self._root:
                self._queue.put(_SourceFailure(f"Monitored folder was removed: {self._root}"))
            return
        raw_path = event.dest_path if kind is EventKind.MOVED else event.src_path
        self._queue.put(FileSystemEvent(path=_decode(raw_path), kind=kind))


def _decode(path: Union[str, bytes]) -> str:
    return path.decode() if isinstance(path, bytes) else path


__all__ = ["FolderMonitor"]
