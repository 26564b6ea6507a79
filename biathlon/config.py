"""Loading of the race configuration from JSON."""

from __future__ import annotations

import json
import os
from typing import Any, Mapping

from .models import RaceConfig, RaceError
from .timeutils import parse_duration, parse_time

_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1


class ConfigError(RaceError):
    """Raised when the race configuration cannot be read or is invalid."""


def _lookup(raw: Mapping[str, Any], key: str) -> Any:
    """Find ``key`` exactly, falling back to a case-insensitive match."""
    if key in raw:
        return raw[key]
    lowered = key.lower()
    for name, value in raw.items():
        if isinstance(name, str) and name.lower() == lowered:
            return value
    return None


def _int_field(raw: Mapping[str, Any], key: str) -> int:
    value = _lookup(raw, key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"invalid config format: {key} must be an integer, got {value!r}")
    if not _INT_MIN <= value <= _INT_MAX:
        raise ConfigError(f"invalid config format: {key} is out of range")
    return value


def _str_field(raw: Mapping[str, Any], key: str) -> str:
    value = _lookup(raw, key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"invalid config format: {key} must be a string, got {value!r}")
    return value


def config_from_mapping(raw: Mapping[str, Any]) -> RaceConfig:
    """Build a :class:`RaceConfig` from decoded JSON fields."""
    laps = _int_field(raw, "laps")
    lap_len = _int_field(raw, "lapLen")
    penalty_len = _int_field(raw, "penaltyLen")
    firing_lines = _int_field(raw, "firingLines")
    start_text = _str_field(raw, "start")
    delta_text = _str_field(raw, "startDelta")

    try:
        start = parse_time(start_text)
    except ValueError as exc:
        raise ConfigError(f"invalid start time: {exc}") from exc
    try:
        start_delta = parse_duration(delta_text)
    except ValueError as exc:
        raise ConfigError(f"invalid start delta: {exc}") from exc
    if laps <= 0:
        raise ConfigError("laps must be positive")

    return RaceConfig(
        laps=laps,
        lap_len=lap_len,
        penalty_len=penalty_len,
        firing_lines=firing_lines,
        start=start,
        start_delta=start_delta,
    )


def load_config(path: str | os.PathLike[str]) -> RaceConfig:
    """Read a JSON configuration file and return the race configuration."""
    try:
        with open(path, "rb") as handle:
            content = handle.read()
    except OSError as exc:
        raise ConfigError(f"failed to read config file: {exc}") from exc

    try:
        raw = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"invalid config format: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("invalid config format: expected a JSON object")
    return config_from_mapping(raw)