"""Tests for filename validation and template validation."""

import pytest

from mediaseq.naming import RenameConfig, validate_filename


@pytest.mark.parametrize(
    ("name", "reason"),
    [
        ("", "Filename cannot be empty"),
        ("a" * 256, "Filename is too long (max 255 characters)"),
        ("bad/name.jpg", "Filename contains illegal character: '/'"),
        ("what?.jpg", "Filename contains illegal character: '?'"),
        ("nul\x00byte", "Filename contains illegal character: 'NUL'"),
        ("tab\tname", "Filename contains control character"),
        (" leading.jpg", "Filename cannot start or end with a space or period"),
        ("trailing.", "Filename cannot start or end with a space or period"),
        (".hidden", "Filename cannot start or end with a space or period"),
        ("CON", "'CON' is a reserved filename"),
        ("com1.jpg", "'COM1' is a reserved filename"),
        ("Lpt9.tar.gz", "'LPT9' is a reserved filename"),
    ],
)
def test_invalid_filenames_report_first_rule(name: str, reason: str) -> None:
    result = validate_filename(name)

    assert not result
    assert result.reason == reason


@pytest.mark.parametrize("name", ["photo001.jpg", "a" * 255, "CONSOLE.txt", "COM10.jpg"])
def test_valid_filenames(name: str) -> None:
    result = validate_filename(name)

    assert result.valid
    assert result.reason is None


@pytest.mark.parametrize(
    ("config", "message"),
    [
        (RenameConfig(prefix="   "), "Prefix cannot be empty"),
        (
            RenameConfig(prefix="a/b"),
            'Prefix contains illegal characters (/ \\ : * ? " < > | or NUL)',
        ),
        (RenameConfig(prefix="ph\toto"), "Prefix contains control characters"),
        (RenameConfig(prefix=" photo"), "Prefix cannot start with a space or period"),
        (RenameConfig(prefix=".photo"), "Prefix cannot start with a space or period"),
        (RenameConfig(prefix="p", start_number=-1), "Start number must be non-negative"),
        (RenameConfig(prefix="p", digit_count=0), "Digit count must be between 1 and 6"),
        (RenameConfig(prefix="p", digit_count=7), "Digit count must be between 1 and 6"),
        (
            RenameConfig(prefix="com", digit_count=1),
            "Prefix 'com' would produce reserved device names",
        ),
    ],
)
def test_rename_config_validation_messages(config: RenameConfig, message: str) -> None:
    assert config.validation_error() == message
    assert not config.is_valid


def test_rename_config_defaults_are_valid() -> None:
    config = RenameConfig(prefix="photo")

    assert config.validation_error() is None
    assert config.digit_count == 3 and config.start_number == 1


def test_device_like_prefix_is_fine_once_numbers_are_wide() -> None:
    assert RenameConfig(prefix="COM", digit_count=2).is_valid
    assert RenameConfig(prefix="LPT", digit_count=1, start_number=10).is_valid
