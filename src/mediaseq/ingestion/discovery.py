"""Media discovery: turn directory contents into :class:`MediaItem` batches."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, Optional

from mediaseq.naming.models import MediaItem
from mediaseq.naming.patterns import matches_pattern

from .detectors import TypeDetector


def _is_hidden(path: Path) -> bool:
    return any(part.startswith(".") for part in path.parts if part not in (".", ".."))


def item_from_path(path: Path, detector: TypeDetector | None = None) -> MediaItem:
    """Build a :class:`MediaItem` for an existing file.

    Args:
        path: File to describe.
        detector: Optional MIME detector; a default one is used when omitted.

    Returns:
        MediaItem: Item whose handle is the resolved path.

    Raises:
        OSError: If the file cannot be stat'ed.
    """

    resolved = path.expanduser().resolve()
    stat = resolved.stat()
    media_type = (detector or TypeDetector()).detect(resolved)
    return MediaItem(
        id=str(resolved),
        name=resolved.name,
        path=resolved,
        size_bytes=stat.st_size,
        media_type=media_type,
        modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
    )


class MediaScanner:
    """Discover media files within a directory subject to filters."""

    def __init__(
        self,
        *,
        recursive: bool = False,
        include_hidden: bool = False,
        follow_symlinks: bool = False,
        media_types: Iterable[str] | None = ("image", "video"),
        pattern: Optional[str] = None,
        detector: TypeDetector | None = None,
    ) -> None:
        """Configure the scanner.

        Args:
            recursive: Whether to descend into subdirectories.
            include_hidden: Whether dot-files and dot-directories are included.
            follow_symlinks: Whether symbolic links to files are included.
            media_types: Categories to keep (``image``, ``video``, ``audio``). ``None``
                keeps every file.
            pattern: Optional wildcard filter applied to file names.
            detector: MIME detector used to classify files.
        """
        self.recursive = recursive
        self.include_hidden = include_hidden
        self.follow_symlinks = follow_symlinks
        self.media_types = frozenset(media_types) if media_types is not None else None
        self.pattern = pattern
        self.detector = detector or TypeDetector()

    def scan(self, root: Path) -> Iterator[MediaItem]:
        """Yield media items found under ``root`` in directory listing order."""
        root = root.expanduser().resolve()
        if not root.exists():
            return

        for path in self._iter_paths(root):
            if path.is_symlink() and not self.follow_symlinks:
                continue
            if not path.is_file():
                continue
            try:
                relative = path.relative_to(root)
            except ValueError:
                relative = Path(path.name)
            if not self.include_hidden and _is_hidden(relative):
                continue
            if not matches_pattern(path.name, self.pattern):
                continue
            media_type = self.detector.detect(path)
            if (
                self.media_types is not None
                and self.detector.category(media_type) not in self.media_types
            ):
                continue
            try:
                yield item_from_path(path, self.detector)
            except OSError:
                continue

    def _iter_paths(self, root: Path) -> Iterable[Path]:
        if root.is_file():
            yield root
            return

        if self.recursive:
            yield from sorted(root.rglob("*"))
        else:
            yield from sorted(root.iterdir())
