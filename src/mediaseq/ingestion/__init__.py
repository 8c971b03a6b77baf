"""Local collaborators that produce media items and their metadata."""

from .detectors import TypeDetector
from .discovery import MediaScanner, item_from_path
from .extractors import ExifMetadataProvider, ImageMetadata, MetadataProvider

__all__ = [
    "ExifMetadataProvider",
    "ImageMetadata",
    "MediaScanner",
    "MetadataProvider",
    "TypeDetector",
    "item_from_path",
]
