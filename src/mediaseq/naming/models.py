"""Data models describing media items and rename templates."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

RESERVED_CHARACTERS = frozenset('/\\:*?"<>|\x00')
MIN_DIGIT_COUNT = 1
MAX_DIGIT_COUNT = 6
# Followed by a single digit these form reserved device names (COM1, LPT9).
_DEVICE_PREFIXES = frozenset({"COM", "LPT"})


class SortStrategy(str, Enum):
    """Ordering applied to a batch before sequence numbers are assigned."""

    NATURAL = "natural"
    DATE_MODIFIED = "date_modified"
    SIZE = "size"
    ORIGINAL_ORDER = "original_order"

    @property
    def display_name(self) -> str:
        return _STRATEGY_TEXT[self][0]

    @property
    def description(self) -> str:
        return _STRATEGY_TEXT[self][1]

    @property
    def example(self) -> str:
        return _STRATEGY_TEXT[self][2]


_STRATEGY_TEXT = {
    SortStrategy.NATURAL: (
        "Natural (IMG_1, IMG_2, IMG_10)",
        "Smart number sorting",
        "file1, file2, file10 (not file1, file10, file2)",
    ),
    SortStrategy.DATE_MODIFIED: ("Date Modified", "Newest to oldest", "Most recent files first"),
    SortStrategy.SIZE: ("File Size", "Largest to smallest", "Biggest files first"),
    SortStrategy.ORIGINAL_ORDER: (
        "Original Selection Order",
        "Keep selection order",
        "Same order as you selected them",
    ),
}


class MediaItem(BaseModel):
    """A media file selected for renaming.

    Attributes:
        id: Stable identifier for the item within a batch.
        name: Current file name including extension.
        path: Absolute path of the file.
        size_bytes: File size in bytes.
        media_type: MIME type such as ``image/jpeg``.
        modified_at: Last modification timestamp.
        handle: Opaque handle understood by the rename provider. Defaults to ``path``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    name: str
    path: Path
    size_bytes: int = 0
    media_type: str = "application/octet-stream"
    modified_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    handle: Any = None

    @model_validator(mode="before")
    @classmethod
    def _default_handle(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("handle") is None and "path" in data:
            data = {**data, "handle": data["path"]}
        return data

    @property
    def extension(self) -> str:
        """Return the text after the last dot, or an empty string."""
        if "." not in self.name:
            return ""
        return self.name.rsplit(".", 1)[1]

    @property
    def stem(self) -> str:
        if "." not in self.name:
            return self.name
        return self.name.rsplit(".", 1)[0]

    @property
    def is_image(self) -> bool:
        return self.media_type.lower().startswith("image/")

    @property
    def is_video(self) -> bool:
        return self.media_type.lower().startswith("video/")

    @property
    def is_audio(self) -> bool:
        return self.media_type.lower().startswith("audio/")


class RenameConfig(BaseModel):
    """Naming template applied to a batch.

    Values are accepted as given so that an invalid template can be reported by
    the preview engine and executor instead of failing at construction time.

    Attributes:
        prefix: Text placed before the sequence number.
        start_number: Sequence number assigned to the first item.
        digit_count: Minimum width of the zero-padded sequence number.
        preserve_extension: Whether to keep the original file extension.
        sort_strategy: Ordering applied before numbering.
    """

    model_config = ConfigDict(frozen=True)

    prefix: str
    start_number: int = 1
    digit_count: int = 3
    preserve_extension: bool = True
    sort_strategy: SortStrategy = SortStrategy.NATURAL

    def validation_error(self) -> Optional[str]:
        """Return the first violated rule, or ``None`` when the template is usable."""
        if not self.prefix.strip():
            return "Prefix cannot be empty"
        if any(char in RESERVED_CHARACTERS for char in self.prefix):
            return 'Prefix contains illegal characters (/ \\ : * ? " < > | or NUL)'
        if any(ord(char) < 32 for char in self.prefix):
            return "Prefix contains control characters"
        if self.prefix[0] in ". ":
            return "Prefix cannot start with a space or period"
        if self.start_number < 0:
            return "Start number must be non-negative"
        if not MIN_DIGIT_COUNT <= self.digit_count <= MAX_DIGIT_COUNT:
            return f"Digit count must be between {MIN_DIGIT_COUNT} and {MAX_DIGIT_COUNT}"
        if (
            self.prefix.upper() in _DEVICE_PREFIXES
            and self.digit_count == 1
            and self.start_number <= 9
        ):
            return f"Prefix '{self.prefix}' would produce reserved device names"
        return None

    @property
    def is_valid(self) -> bool:
        return self.validation_error() is None


__all__ = [
    "MAX_DIGIT_COUNT",
    "MIN_DIGIT_COUNT",
    "RESERVED_CHARACTERS",
    "MediaItem",
    "RenameConfig",
    "SortStrategy",
]
