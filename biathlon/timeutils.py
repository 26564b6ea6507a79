"""Parsing and formatting of race clock times and durations."""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

BASE_DATE = date(1900, 1, 1)

_TIME_RE = re.compile(r"([0-9]{1,2}):([0-9]{2}):([0-9]{2})\.([0-9]{3})", re.ASCII)
_INT_RE = re.compile(r"\s*([+-]?[0-9]+)", re.ASCII)


def parse_time(text: str) -> datetime:
    """Parse ``HH:MM:SS.sss`` into a datetime on :data:`BASE_DATE`."""
    match = _TIME_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid time format: {text!r}")
    hour, minute, second, millis = (int(group) for group in match.groups())
    if hour > 23:
        raise ValueError(f"invalid time format: hour out of range in {text!r}")
    if minute > 59:
        raise ValueError(f"invalid time format: minute out of range in {text!r}")
    if second > 59:
        raise ValueError(f"invalid time format: second out of range in {text!r}")
    return datetime.combine(BASE_DATE, time(hour, minute, second, millis * 1000))


def parse_duration(text: str) -> timedelta:
    """Parse ``HH:MM:SS`` into a timedelta."""
    parts = text.split(":")
    if len(parts) != 3:
        raise ValueError("invalid duration format")
    values = []
    for name, part in zip(("hours", "minutes", "seconds"), parts):
        match = _INT_RE.match(part)
        if match is None:
            raise ValueError(f"failed to parse {name}: {part!r}")
        values.append(int(match.group(1)))
    hours, minutes, seconds = values
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def format_duration(duration: timedelta) -> str:
    """Format a duration as ``HH:MM:SS.sss``; hours are not wrapped at 24."""
    micros = duration // timedelta(microseconds=1)
    sign = -1 if micros < 0 else 1
    total_ms = abs(micros) // 1000
    parts = (
        total_ms // 3_600_000,
        total_ms // 60_000 % 60,
        total_ms // 1000 % 60,
        total_ms % 1000,
    )
    hours, minutes, seconds, millis = (sign * part for part in parts)
    return "%02d:%02d:%02d.%03d" % (hours, minutes, seconds, millis)


def format_timestamp(moment: datetime) -> str:
    """Format the time of day of ``moment`` as ``HH:MM:SS.sss``."""
    return f"{moment:%H:%M:%S}.{moment.microsecond // 1000:03d}"