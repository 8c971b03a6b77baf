"""Tests for stored settings and the override layers applied to them."""

from pathlib import Path

import pytest

from mediaseq.config import SETTING_KEYS, ConfigError, ConfigManager, RenameSettings
from mediaseq.naming import SortStrategy


@pytest.fixture()
def manager(tmp_path: Path) -> ConfigManager:
    return ConfigManager(tmp_path / "settings" / "config.yaml", env={})


def test_defaults_are_written_once(manager: ConfigManager) -> None:
    path = manager.ensure_exists()
    path.write_text("rename:\n  prefix: mine\n", encoding="utf-8")

    manager.ensure_exists()

    assert manager.load().rename.prefix == "mine"


def test_missing_file_loads_defaults_without_creating_it(manager: ConfigManager) -> None:
    config = manager.load()

    assert config.rename.prefix == "photo"
    assert config.scan.media_types == ["image", "video"]
    assert not manager.path.exists()


def test_saved_template_round_trips_and_keeps_other_sections(manager: ConfigManager) -> None:
    manager.set_value("scan.recursive", "true")

    manager.save_rename_settings(
        RenameSettings(prefix="{date}_", digit_count=5, sort_strategy=SortStrategy.DATE_MODIFIED)
    )
    config = manager.load()
    template = config.rename.to_rename_config()

    assert config.scan.recursive is True
    assert template.prefix == "{date}_"
    assert template.digit_count == 5
    assert template.sort_strategy is SortStrategy.DATE_MODIFIED
    assert "sort_strategy: date_modified" in manager.read_text()


def test_environment_overrides_file_and_cli_overrides_environment(tmp_path: Path) -> None:
    env = {
        "MEDIASEQ__RENAME__PREFIX": "2024",
        "MEDIASEQ__RENAME__DIGIT_COUNT": "5",
        "MEDIASEQ__SCAN__MEDIA_TYPES": "[audio]",
        "MEDIASEQ__WATCH__RECURSIVE": "yes",
        "UNRELATED": "1",
    }
    manager = ConfigManager(tmp_path / "config.yaml", env=env)
    manager.set_value("rename.digit_count", "4")
    manager.set_value("rename.start_number", "10")

    config = manager.load({"rename.digit_count": 2, "watch.pattern": "IMG_*"})

    assert config.rename.prefix == "2024"
    assert config.rename.start_number == 10
    assert config.rename.digit_count == 2
    assert config.scan.media_types == ["audio"]
    assert config.watch.recursive is True
    assert config.watch.pattern == "IMG_*"
    assert manager.load(use_env=False).rename.digit_count == 4


def test_placeholder_prefix_from_environment_stays_text(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={"MEDIASEQ__RENAME__PREFIX": "{camera}"})

    assert manager.load().rename.prefix == "{camera}"


def test_unknown_environment_setting_is_ignored(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={"MEDIASEQ__RENAME__PREFX": "x"})

    with caplog.at_level("WARNING", logger="mediaseq.config.overrides"):
        config = manager.load()

    assert config.rename.prefix == "photo"
    assert "MEDIASEQ__RENAME__PREFX" in caplog.text


def test_unknown_cli_setting_suggests_the_closest_key(manager: ConfigManager) -> None:
    with pytest.raises(ConfigError, match="Did you mean 'watch.health_interval_seconds'"):
        manager.load({"watch.health_interval": 2})


def test_set_value_reports_previous_and_normalized_value(manager: ConfigManager) -> None:
    change = manager.set_value("logging.level", "debug")
    again = manager.set_value("LOGGING.LEVEL", "DEBUG")

    assert (change.key, change.previous, change.current) == ("logging.level", "WARNING", "DEBUG")
    assert change.changed
    assert not again.changed
    assert manager.load().logging.level == "DEBUG"


def test_set_value_rejects_invalid_values_without_writing(manager: ConfigManager) -> None:
    manager.ensure_exists()
    before = manager.read_text()

    with pytest.raises(ConfigError, match="watch.health_interval_seconds"):
        manager.set_value("watch.health_interval_seconds", "0")
    with pytest.raises(ConfigError, match="rename.sort_strategy"):
        manager.set_value("rename.sort_strategy", "alphabetical")

    assert manager.read_text() == before


def test_malformed_file_raises_config_error(manager: ConfigManager) -> None:
    manager.path.parent.mkdir(parents=True)
    manager.path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="must map section names"):
        manager.load()


def test_replace_text_validates_before_storing(manager: ConfigManager) -> None:
    manager.ensure_exists()

    with pytest.raises(ConfigError):
        manager.replace_text("rename:\n  colour: blue\n")
    updated = manager.replace_text("rename:\n  prefix: scan_\nwatch:\n")

    assert updated.rename.prefix == "scan_"
    assert manager.load().rename.prefix == "scan_"


def test_setting_keys_cover_every_section() -> None:
    sections = {key.split(".")[0] for key in SETTING_KEYS}

    assert sections == {"rename", "scan", "watch", "logging", "cli"}
    assert "rename.use_metadata" in SETTING_KEYS
