"""Candidate filename generation."""

from __future__ import annotations

import re
from typing import Callable, Mapping, Optional

from mediaseq.ingestion.extractors import ImageMetadata, MetadataProvider

from .models import RESERVED_CHARACTERS, MediaItem, RenameConfig

UNKNOWN_VALUE = "unknown"
_VARIABLE = re.compile(r"\{([A-Za-z]+)\}")
_UNSAFE = re.compile(r"[\s\x00-\x1f" + re.escape("".join(sorted(RESERVED_CHARACTERS))) + r"]+")


class FilenameGenerator:
    """Build ``prefix + zero-padded number [+ extension]`` candidate names."""

    def generate(self, item: MediaItem, config: RenameConfig, index: int) -> str:
        """Return the candidate name for ``item`` at sequence position ``index``.

        Args:
            item: Item being renamed.
            config: Naming template. Assumed valid; invalid templates are rejected
                before generation.
            index: Zero-based position of the item in the sorted batch.

        Returns:
            str: Candidate filename. Numbers wider than ``digit_count`` are kept whole.
        """

        number = str(config.start_number + index).rjust(config.digit_count, "0")
        base = f"{self.render_prefix(item, config)}{number}"
        if config.preserve_extension and item.extension:
            return f"{base}.{item.extension}"
        return base

    def render_prefix(self, item: MediaItem, config: RenameConfig) -> str:
        return config.prefix


class MetadataFilenameGenerator(FilenameGenerator):
    """Generator that expands ``{variable}`` placeholders in the prefix.

    Placeholders are resolved from the metadata provider (EXIF for images).
    Missing values render as ``unknown`` and unrecognised placeholders are left
    as written. Without placeholders this behaves like :class:`FilenameGenerator`.
    """

    def __init__(self, provider: MetadataProvider) -> None:
        self._provider = provider

    def render_prefix(self, item: MediaItem, config: RenameConfig) -> str:
        if not _VARIABLE.search(config.prefix):
            return config.prefix

        metadata = self._provider.lookup(item)

        def _substitute(match: re.Match[str]) -> str:
            resolver = VARIABLES.get(match.group(1).lower())
            if resolver is None:
                return match.group(0)
            value = resolver(metadata) if metadata is not None else None
            return sanitize_component(value) if value else UNKNOWN_VALUE

        return _VARIABLE.sub(_substitute, config.prefix)


def sanitize_component(value: str) -> str:
    """Replace whitespace and reserved filename characters with underscores."""
    return _UNSAFE.sub("_", value.strip())


def _date(fmt: str) -> Callable[[ImageMetadata], Optional[str]]:
    def _resolve(metadata: ImageMetadata) -> Optional[str]:
        if metadata.date_taken is None:
            return None
        return metadata.date_taken.strftime(fmt)

    return _resolve


def _coordinate(metadata: ImageMetadata, value: Optional[float]) -> Optional[str]:
    return f"{value:.6f}" if value is not None else None


def _location(metadata: ImageMetadata) -> Optional[str]:
    if not metadata.has_location:
        return None
    return f"{metadata.latitude:.6f}_{metadata.longitude:.6f}"


def _megapixels(metadata: ImageMetadata) -> Optional[str]:
    megapixels = metadata.megapixels
    return f"{megapixels:.1f}" if megapixels is not None else None


def _optional(value: object) -> Optional[str]:
    return None if value is None else str(value)


VARIABLES: Mapping[str, Callable[[ImageMetadata], Optional[str]]] = {
    "date": _date("%Y%m%d"),
    "year": _date("%Y"),
    "month": _date("%m"),
    "day": _date("%d"),
    "time": _date("%H%M%S"),
    "lat": lambda m: _coordinate(m, m.latitude),
    "lon": lambda m: _coordinate(m, m.longitude),
    "location": _location,
    "camera": lambda m: m.camera_model,
    "width": lambda m: _optional(m.width),
    "height": lambda m: _optional(m.height),
    "mp": _megapixels,
    "orientation": lambda m: _optional(m.orientation),
    "fnumber": lambda m: f"f{m.f_number}" if m.f_number else None,
    "exposure": lambda m: m.exposure_time.replace("/", "_") if m.exposure_time else None,
    "iso": lambda m: _optional(m.iso),
    "focal": lambda m: f"{m.focal_length}mm" if m.focal_length else None,
}

_DEFAULT_GENERATOR = FilenameGenerator()


def generate_filename(item: MediaItem, config: RenameConfig, index: int) -> str:
    """Generate a candidate name with the plain template generator."""
    return _DEFAULT_GENERATOR.generate(item, config, index)


__all__ = [
    "FilenameGenerator",
    "MetadataFilenameGenerator",
    "UNKNOWN_VALUE",
    "VARIABLES",
    "generate_filename",
    "sanitize_component",
]
