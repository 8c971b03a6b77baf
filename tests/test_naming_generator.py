"""Tests for candidate filename generation."""

from datetime import datetime
from pathlib import Path
from typing import Optional

import pytest
from PIL import Image

from mediaseq.ingestion import ExifMetadataProvider, ImageMetadata, item_from_path
from mediaseq.naming import (
    FilenameGenerator,
    MediaItem,
    MetadataFilenameGenerator,
    RenameConfig,
    generate_filename,
    validate_filename,
)


def _item(name: str, media_type: str = "image/jpeg") -> MediaItem:
    return MediaItem(id=name, name=name, path=Path("/photos") / name, media_type=media_type)


class _StaticMetadata:
    def __init__(self, metadata: Optional[ImageMetadata]) -> None:
        self.metadata = metadata

    def lookup(self, item: MediaItem) -> Optional[ImageMetadata]:
        return self.metadata


def test_generate_pads_number_and_keeps_extension() -> None:
    config = RenameConfig(prefix="photo", start_number=1, digit_count=3)

    assert generate_filename(_item("IMG_0001.JPG"), config, 0) == "photo001.JPG"
    assert generate_filename(_item("IMG_0002.JPG"), config, 9) == "photo010.JPG"


def test_generate_never_truncates_wide_numbers() -> None:
    config = RenameConfig(prefix="p", start_number=1234, digit_count=3)

    assert generate_filename(_item("a.png"), config, 0) == "p1234.png"


def test_generate_drops_extension_when_requested() -> None:
    config = RenameConfig(prefix="clip_", digit_count=2, preserve_extension=False)

    assert generate_filename(_item("movie.mp4"), config, 4) == "clip_05"


def test_generate_without_extension_has_no_trailing_dot() -> None:
    config = RenameConfig(prefix="scan")

    assert generate_filename(_item("README"), config, 0) == "scan001"


@pytest.mark.parametrize(
    "prefix", ["photo", "Holiday 2024 ", "a.b", "x", "COM", " photo", ".photo", "ph\toto"]
)
@pytest.mark.parametrize("digits", [1, 3, 6])
def test_generated_names_from_valid_templates_pass_validation(prefix: str, digits: int) -> None:
    config = RenameConfig(prefix=prefix, start_number=0, digit_count=digits)
    if not config.is_valid:
        return

    for index in range(3):
        name = FilenameGenerator().generate(_item("IMG_1.jpg"), config, index)
        assert validate_filename(name).valid, name


def test_metadata_generator_expands_known_variables() -> None:
    metadata = ImageMetadata(
        date_taken=datetime(2024, 5, 17, 8, 30, 0),
        camera_model="Canon EOS R6",
        width=4000,
        height=3000,
        iso=200,
    )
    generator = MetadataFilenameGenerator(_StaticMetadata(metadata))
    config = RenameConfig(prefix="{date}_{CAMERA}_{mp}MP_iso{iso}_", digit_count=2)

    name = generator.generate(_item("IMG_1.jpg"), config, 0)

    assert name == "20240517_Canon_EOS_R6_12.0MP_iso200_01.jpg"


def test_metadata_generator_marks_missing_values_and_keeps_unknown_tokens() -> None:
    generator = MetadataFilenameGenerator(_StaticMetadata(ImageMetadata()))
    config = RenameConfig(prefix="{camera}-{nope}-", digit_count=1)

    assert generator.generate(_item("a.jpg"), config, 0) == "unknown-{nope}-1.jpg"


def test_metadata_generator_without_placeholders_matches_plain_generator() -> None:
    generator = MetadataFilenameGenerator(_StaticMetadata(None))
    config = RenameConfig(prefix="trip")

    assert generator.generate(_item("a.jpg"), config, 2) == "trip003.jpg"


def test_exif_provider_reads_pillow_written_tags(tmp_path: Path) -> None:
    image_path = tmp_path / "shot.jpg"
    exif = Image.Exif()
    exif[0x0110] = "Pixel 8"  # Model
    exif[0x010F] = "Google"  # Make
    exif[0x0132] = "2023:12:24 18:05:09"  # DateTime
    exif[0x0112] = 6  # Orientation
    Image.new("RGB", (40, 20), color="blue").save(image_path, exif=exif)

    provider = ExifMetadataProvider()
    metadata = provider.lookup(item_from_path(image_path))

    assert metadata is not None
    assert metadata.width == 40 and metadata.height == 20
    assert metadata.camera_model == "Google Pixel 8"
    assert metadata.date_taken == datetime(2023, 12, 24, 18, 5, 9)
    assert metadata.orientation == 90

    generator = MetadataFilenameGenerator(provider)
    config = RenameConfig(prefix="{year}-{month}-{day}_{width}x{height}_", digit_count=2)
    assert generator.generate(item_from_path(image_path), config, 0) == (
        "2023-12-24_40x20_01.jpg"
    )


def test_exif_provider_ignores_non_images(tmp_path: Path) -> None:
    video = tmp_path / "clip.mp4"
    video.write_bytes(b"not really a video")

    assert ExifMetadataProvider().lookup(item_from_path(video)) is None


def test_exif_provider_tolerates_corrupt_images(tmp_path: Path) -> None:
    broken = tmp_path / "broken.jpg"
    broken.write_bytes(b"\xff\xd8garbage")

    assert ExifMetadataProvider().lookup(item_from_path(broken)) is None
