"""Stored settings for mediaseq and the overrides layered on top of them."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import MediaseqConfig, RenameSettings, ScanSettings, WatchSettings
from .overrides import (
    ENV_PREFIX,
    SETTING_KEYS,
    Layer,
    build_config,
    dotted_layer,
    env_layer,
    parse_value,
    split_key,
)

DEFAULT_CONFIG_PATH = Path("~/.mediaseq/config.yaml")
_CONFIG_HEADER = (
    "# mediaseq settings\n"
    "# Change values with `mediaseq config set KEY VALUE` or `mediaseq config edit`.\n"
)


@dataclass(frozen=True, slots=True)
class SettingChange:
    """Result of storing a single setting.

    Attributes:
        key: Dotted setting name.
        previous: Effective value before the change.
        current: Stored value after validation.
    """

    key: str
    previous: Any
    current: Any

    @property
    def changed(self) -> bool:
        return self.previous != self.current


class ConfigManager:
    """Keep the settings file and resolve the effective configuration.

    The file holds the user's defaults. ``MEDIASEQ__SECTION__FIELD`` variables
    and command-line flags are layered on top of it each time :meth:`load` runs.
    """

    def __init__(self, path: Path | None = None, *, env: Mapping[str, str] | None = None) -> None:
        self._path = (path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def path(self) -> Path:
        return self._path

    def load(
        self, overrides: Mapping[str, Any] | None = None, *, use_env: bool = True
    ) -> MediaseqConfig:
        """Return the effective configuration.

        Args:
            overrides: Dotted-key values from the command line; these win.
            use_env: Whether ``MEDIASEQ__`` environment variables apply.

        Returns:
            MediaseqConfig: Stored settings with environment and CLI values applied.

        Raises:
            ConfigError: If the file is malformed or any layer holds invalid values.
        """
        layers: list[Layer] = [self._stored()]
        if use_env:
            layers.append(env_layer(self._env))
        if overrides:
            layers.append(dotted_layer(overrides))
        return build_config(*layers)

    def ensure_exists(self) -> Path:
        """Write the default settings when no file exists yet."""
        if not self._path.exists():
            self._write(MediaseqConfig().model_dump(mode="json"))
        return self._path

    def read_text(self) -> str:
        if not self._path.exists():
            return ""
        return self._path.read_text(encoding="utf-8")

    def save_rename_settings(self, settings: RenameSettings) -> None:
        """Store ``settings`` as the default naming template, keeping other sections."""
        stored = self._stored()
        stored["rename"] = settings.model_dump(mode="json")
        self._write(stored)

    def set_value(self, key: str, raw_value: str) -> SettingChange:
        """Store one setting given as a YAML literal (``4``, ``true``, ``[image]``).

        Raises:
            ConfigError: If the key is unknown or the value fails validation.
        """
        section, field = split_key(key)
        value = parse_value(section, field, raw_value)

        stored = self._stored()
        previous = build_config(stored).model_dump(mode="json")[section][field]
        stored.setdefault(section, {})[field] = value
        current = build_config(stored).model_dump(mode="json")[section][field]
        stored[section][field] = current
        self._write(stored)
        return SettingChange(key=f"{section}.{field}", previous=previous, current=current)

    def replace_text(self, text: str) -> MediaseqConfig:
        """Validate an edited settings document and store it.

        Raises:
            ConfigError: If the document is not a valid settings mapping.
        """
        document = _parse_document(text)
        config = build_config(document)
        self._write(document)
        return config

    def _stored(self) -> Layer:
        if not self._path.exists():
            return {}
        return _parse_document(self._path.read_text(encoding="utf-8"))

    def _write(self, data: Mapping[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self._path.write_text(_CONFIG_HEADER + body, encoding="utf-8")


def _parse_document(text: str) -> Layer:
    try:
        document = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Settings file is not valid YAML: {exc}") from exc
    if not isinstance(document, dict):
        raise ConfigError("Settings file must map section names to settings.")
    for section, values in document.items():
        if values is None:
            document[section] = {}
        elif not isinstance(values, dict):
            raise ConfigError(f"Section '{section}' must be a mapping of settings.")
    return document


__all__ = [
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "MediaseqConfig",
    "RenameSettings",
    "SETTING_KEYS",
    "ScanSettings",
    "SettingChange",
    "WatchSettings",
]
