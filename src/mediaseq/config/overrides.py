"""Override layers applied on top of the stored mediaseq settings.

Every layer is a ``{section: {field: value}}`` mapping. Layers are applied in
order (stored file, environment, command line) and the result is validated
once, so a bad value is reported with the dotted key it came from.
"""

from __future__ import annotations

import difflib
import logging
from collections.abc import Mapping as MappingABC
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import MediaseqConfig

LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "MEDIASEQ__"

Layer = dict[str, dict[str, Any]]

_SECTIONS = {name: type(value) for name, value in MediaseqConfig()}

SETTING_KEYS: tuple[str, ...] = tuple(
    f"{section}.{field}" for section, model in _SECTIONS.items() for field in model.model_fields
)
_TEXT_KEYS = frozenset(
    f"{section}.{field}"
    for section, model in _SECTIONS.items()
    for field, info in model.model_fields.items()
    if info.annotation in (str, Optional[str])
)


def split_key(key: str) -> tuple[str, str]:
    """Split a dotted ``section.field`` key, rejecting unknown settings.

    Raises:
        ConfigError: If ``key`` does not name a mediaseq setting.
    """
    normalized = key.strip().lower()
    if normalized not in SETTING_KEYS:
        close = difflib.get_close_matches(normalized, SETTING_KEYS, n=1)
        hint = f" Did you mean '{close[0]}'?" if close else ""
        raise ConfigError(f"Unknown setting '{key}'.{hint}")
    section, _, field = normalized.partition(".")
    return section, field


def dotted_layer(overrides: Mapping[str, Any]) -> Layer:
    """Build a layer from ``{"rename.prefix": "trip_"}`` style overrides."""
    layer: Layer = {}
    for key, value in overrides.items():
        section, field = split_key(key)
        layer.setdefault(section, {})[field] = value
    return layer


def env_layer(env: Mapping[str, str]) -> Layer:
    """Build a layer from ``MEDIASEQ__SECTION__FIELD`` variables.

    Values are parsed as YAML so ``true``, ``4`` and ``[image, audio]`` keep
    their types. Variables naming unknown settings are logged and ignored.
    """
    layer: Layer = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        dotted = name[len(ENV_PREFIX) :].replace("__", ".")
        try:
            section, field = split_key(dotted)
        except ConfigError:
            LOGGER.warning("Ignoring unknown environment override %s", name)
            continue
        layer.setdefault(section, {})[field] = parse_value(section, field, raw)
    return layer


def parse_value(section: str, field: str, raw: str) -> Any:
    """Parse ``raw`` as a YAML literal, keeping text settings as written.

    ``MEDIASEQ__RENAME__PREFIX=2024`` stays the string ``"2024"`` and
    ``{date}_`` stays a template rather than failing as a YAML flow mapping.

    Raises:
        ConfigError: If ``raw`` is not valid YAML.
    """
    is_text = f"{section}.{field}" in _TEXT_KEYS
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        if is_text:
            return raw
        raise ConfigError(f"Unable to parse value for {section}.{field}: {exc}") from exc
    if is_text and value is not None and not isinstance(value, str):
        return raw
    return value


def build_config(*layers: Mapping[str, Any]) -> MediaseqConfig:
    """Validate the defaults with ``layers`` applied in order.

    Raises:
        ConfigError: If a section is not a mapping or a value is invalid.
    """
    merged: Layer = {}
    for layer in layers:
        for section, values in layer.items():
            if not isinstance(values, MappingABC):
                raise ConfigError(f"Section '{section}' must be a mapping of settings.")
            merged.setdefault(section, {}).update(values)

    try:
        return MediaseqConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {_describe(exc)}") from exc


def _describe(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)


__all__ = [
    "ENV_PREFIX",
    "SETTING_KEYS",
    "build_config",
    "dotted_layer",
    "env_layer",
    "parse_value",
    "split_key",
]
