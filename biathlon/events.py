"""Reading and parsing of the race event log."""

from __future__ import annotations

import os
import re

from .models import Event, EventType, RaceError, parse_event_type
from .timeutils import parse_time

_LINE_RE = re.compile(
    r"\[(\d{2}:\d{2}:\d{2}\.\d{3})\][ \t\n\f\r]+(\d+)[ \t\n\f\r]+(\d+)(?:[ \t\n\f\r]+(.+))?",
    re.ASCII,
)
_INT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1


class EventFormatError(RaceError):
    """Raised when the event log cannot be read or holds a malformed event."""


def _atoi(text: str) -> int:
    if _INT_RE.fullmatch(text) is None:
        raise ValueError(f"invalid syntax: {text!r}")
    value = int(text)
    if not _INT_MIN <= value <= _INT_MAX:
        raise ValueError(f"value out of range: {text!r}")
    return value


def _require_single_int(params: list[str], missing: str, invalid: str) -> None:
    if len(params) != 1:
        raise EventFormatError(missing)
    try:
        _atoi(params[0])
    except ValueError as exc:
        raise EventFormatError(f"{invalid}: {exc}") from exc


def parse_event(time_text: str, event_code: str, competitor_id: str, extra: str) -> Event:
    """Build an event from the text fields of one log line."""
    try:
        moment = parse_time(time_text)
    except ValueError as exc:
        raise EventFormatError(f"invalid events time: {exc}") from exc

    try:
        code = _atoi(event_code)
    except ValueError as exc:
        raise EventFormatError(f"invalid events ID: {exc}") from exc
    try:
        event_type = parse_event_type(code)
    except RaceError as exc:
        raise EventFormatError(str(exc)) from exc

    try:
        competitor = _atoi(competitor_id)
    except ValueError as exc:
        raise EventFormatError(f"invalid competitor ID: {exc}") from exc

    params = extra.split(" ") if extra else []

    if event_type == EventType.START_TIME_SET:
        if len(params) != 1:
            raise EventFormatError("events 2 requires exactly 1 parameter")
        try:
            parse_time(params[0])
        except ValueError as exc:
            raise EventFormatError(f"invalid start time parameter: {exc}") from exc
    elif event_type == EventType.ON_FIRING_RANGE:
        _require_single_int(params, "event 5 requires firing range number", "invalid firing range number")
    elif event_type == EventType.TARGET_HIT:
        _require_single_int(params, "events 6 requires target number", "invalid target number")

    return Event(time=moment, event_type=event_type, competitor_id=competitor, extra_params=params)


def parse_line(line: str) -> Event:
    """Parse one line of the form ``[HH:MM:SS.sss] <event> <competitor> [extra]``."""
    match = _LINE_RE.fullmatch(line)
    if match is None:
        raise EventFormatError("invalid events format")
    time_text, code, competitor, extra = match.groups()
    return parse_event(time_text, code, competitor, extra or "")


def read_lines(path: str | os.PathLike[str]) -> list[str]:
    """Return the lines of a text file without their line endings."""
    try:
        with open(path, encoding="utf-8", errors="replace", newline="") as handle:
            content = handle.read()
    except OSError as exc:
        raise EventFormatError(f"error opening events file: {exc}") from exc
    if not content:
        return []
    lines = content.split("\n")
    if content.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_events(path: str | os.PathLike[str]) -> list[Event]:
    """Parse every line of an event log; the first bad line aborts parsing."""
    events = []
    for number, line in enumerate(read_lines(path), start=1):
        try:
            events.append(parse_line(line))
        except EventFormatError as exc:
            raise EventFormatError(f"line {number}: {exc}") from exc
    return events