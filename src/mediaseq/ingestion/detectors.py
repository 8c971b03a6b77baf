"""Media type detection."""

from __future__ import annotations

import mimetypes
from pathlib import Path

DEFAULT_MEDIA_TYPE = "application/octet-stream"
MEDIA_CATEGORIES = ("image", "video", "audio")

# Common camera formats missing from some platform mime tables.
_EXTRA_TYPES = {
    ".heic": "image/heic",
    ".heif": "image/heif",
    ".webp": "image/webp",
    ".dng": "image/x-adobe-dng",
    ".cr2": "image/x-canon-cr2",
    ".nef": "image/x-nikon-nef",
    ".arw": "image/x-sony-arw",
    ".mkv": "video/x-matroska",
    ".m4v": "video/x-m4v",
    ".mts": "video/mp2t",
    ".3gp": "video/3gpp",
    ".flac": "audio/flac",
    ".m4a": "audio/mp4",
    ".opus": "audio/opus",
}


class TypeDetector:
    """Identify MIME types from file extensions."""

    def detect(self, path: Path) -> str:
        """Return the MIME type for ``path``, or ``application/octet-stream``."""
        suffix = path.suffix.lower()
        if suffix in _EXTRA_TYPES:
            return _EXTRA_TYPES[suffix]
        guessed, _ = mimetypes.guess_type(path.name, strict=False)
        return guessed or DEFAULT_MEDIA_TYPE

    def category(self, media_type: str) -> str:
        """Return ``image``, ``video``, ``audio`` or ``other`` for a MIME type."""
        major = media_type.split("/", 1)[0].lower()
        return major if major in MEDIA_CATEGORIES else "other"
