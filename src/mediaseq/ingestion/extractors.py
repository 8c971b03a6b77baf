"""EXIF metadata lookup for the metadata-aware filename generator."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from PIL import ExifTags, Image, UnidentifiedImageError
from pydantic import BaseModel

from mediaseq.naming.models import MediaItem

LOGGER = logging.getLogger(__name__)

_EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"
_ORIENTATION_DEGREES = {1: 0, 3: 180, 6: 90, 8: 270}


class ImageMetadata(BaseModel):
    """Subset of EXIF data usable in filename templates.

    Attributes:
        date_taken: Capture time, falling back to the EXIF modification time.
        camera_model: Camera model, prefixed with the make when it is not already.
        width: Image width in pixels.
        height: Image height in pixels.
        orientation: Rotation in degrees (0, 90, 180, 270).
        latitude: GPS latitude in decimal degrees.
        longitude: GPS longitude in decimal degrees.
        f_number: Aperture as a decimal string (``"1.8"``).
        exposure_time: Exposure as a fraction string (``"1/60"``).
        iso: ISO speed rating.
        focal_length: Focal length in millimetres (``"24"``).
    """

    date_taken: Optional[datetime] = None
    camera_model: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    orientation: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    f_number: Optional[str] = None
    exposure_time: Optional[str] = None
    iso: Optional[int] = None
    focal_length: Optional[str] = None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def megapixels(self) -> Optional[float]:
        if self.width is None or self.height is None:
            return None
        return (self.width * self.height) / 1_000_000


class MetadataProvider(Protocol):
    """Pure lookup of optional per-item metadata."""

    def lookup(self, item: MediaItem) -> Optional[ImageMetadata]:
        """Return metadata for ``item`` or ``None`` when unavailable."""
        ...


class ExifMetadataProvider:
    """Read EXIF metadata from image files with Pillow."""

    def __init__(self) -> None:
        self._cache: Dict[Path, Optional[ImageMetadata]] = {}

    def lookup(self, item: MediaItem) -> Optional[ImageMetadata]:
        """Return EXIF metadata for image items.

        Args:
            item: Media item to inspect.

        Returns:
            Optional[ImageMetadata]: Extracted metadata, or ``None`` for non-images and
            files Pillow cannot open.
        """
        if not item.is_image:
            return None
        if item.path not in self._cache:
            self._cache[item.path] = self.extract(item.path)
        return self._cache[item.path]

    def extract(self, path: Path) -> Optional[ImageMetadata]:
        try:
            with Image.open(path) as img:
                width, height = img.size
                exif = img.getexif()
                base = dict(exif)
                details = dict(exif.get_ifd(ExifTags.IFD.Exif))
                gps = dict(exif.get_ifd(ExifTags.IFD.GPSInfo))
        except (OSError, UnidentifiedImageError) as exc:
            LOGGER.debug("Unable to read EXIF data from %s: %s", path, exc)
            return None

        latitude = _gps_coordinate(
            gps.get(ExifTags.GPS.GPSLatitude), gps.get(ExifTags.GPS.GPSLatitudeRef)
        )
        longitude = _gps_coordinate(
            gps.get(ExifTags.GPS.GPSLongitude), gps.get(ExifTags.GPS.GPSLongitudeRef)
        )
        iso = details.get(ExifTags.Base.ISOSpeedRatings)
        if isinstance(iso, tuple):
            iso = iso[0] if iso else None

        return ImageMetadata(
            date_taken=_parse_datetime(
                details.get(ExifTags.Base.DateTimeOriginal)
                or details.get(ExifTags.Base.DateTimeDigitized)
                or base.get(ExifTags.Base.DateTime)
            ),
            camera_model=_camera_model(base.get(ExifTags.Base.Make), base.get(ExifTags.Base.Model)),
            width=width,
            height=height,
            orientation=_ORIENTATION_DEGREES.get(base.get(ExifTags.Base.Orientation)),
            latitude=latitude,
            longitude=longitude,
            f_number=_decimal(details.get(ExifTags.Base.FNumber)),
            exposure_time=_exposure(details.get(ExifTags.Base.ExposureTime)),
            iso=int(iso) if iso is not None else None,
            focal_length=_decimal(details.get(ExifTags.Base.FocalLength)),
        )


def _text(value: Any) -> Optional[str]:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    if not isinstance(value, str):
        return None
    cleaned = value.strip("\x00 ").strip()
    return cleaned or None


def _parse_datetime(value: Any) -> Optional[datetime]:
    text = _text(value)
    if text is None:
        return None
    try:
        return datetime.strptime(text[:19], _EXIF_DATETIME_FORMAT)
    except ValueError:
        return None


def _camera_model(make: Any, model: Any) -> Optional[str]:
    make_text, model_text = _text(make), _text(model)
    if model_text and make_text and not model_text.lower().startswith(make_text.lower()):
        return f"{make_text} {model_text}"
    return model_text or make_text


def _decimal(value: Any) -> Optional[str]:
    if value is None:
        return None
    try:
        return f"{float(value):g}"
    except (TypeError, ValueError, ZeroDivisionError):
        return None


def _exposure(value: Any) -> Optional[str]:
    if value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    if 0 < seconds < 1:
        return f"1/{round(1 / seconds)}"
    return f"{seconds:g}"


def _gps_coordinate(value: Any, reference: Any) -> Optional[float]:
    if not value or len(value) != 3:
        return None
    try:
        degrees, minutes, seconds = (float(part) for part in value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    decimal = degrees + minutes / 60 + seconds / 3600
    if _text(reference) in {"S", "W"}:
        decimal = -decimal
    return decimal


__all__ = ["ExifMetadataProvider", "ImageMetadata", "MetadataProvider"]
