"""Application of race events to competitor state."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Callable

from .models import (
    Competitor,
    CompetitorStatus,
    Event,
    EventType,
    RaceConfig,
    RaceError,
    parse_event_time,
)
from .timeutils import format_timestamp

_INT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)

_Logger = logging.Logger | logging.LoggerAdapter


def _atoi(text: str) -> int:
    if _INT_RE.fullmatch(text) is None:
        raise RaceError(f"invalid integer: {text!r}")
    return int(text)


class EventProcessor:
    """Keeps the state of every competitor and updates it event by event."""

    def __init__(self, config: RaceConfig, logger: _Logger | None = None) -> None:
        self._config = config
        self._logger = logger if logger is not None else logging.getLogger("biathlon")
        self._competitors: dict[int, Competitor] = {}
        self._handlers: dict[EventType, Callable[[Competitor, Event], None]] = {
            EventType.COMPETITOR_REGISTERED: self._register,
            EventType.START_TIME_SET: self._set_start_time,
            EventType.ON_START_LINE: self._on_start_line,
            EventType.STARTED: self._start_race,
            EventType.ON_FIRING_RANGE: self._enter_firing,
            EventType.TARGET_HIT: self._hit_target,
            EventType.LEFT_FIRING_RANGE: self._leave_firing,
            EventType.ENTERED_PENALTY: self._enter_penalty,
            EventType.LEFT_PENALTY: self._leave_penalty,
            EventType.LAP_FINISHED: self._finish_lap,
            EventType.CANNOT_CONTINUE: self._cannot_continue,
        }

    def handle_event(self, event: Event) -> None:
        """Apply one event; raise :class:`RaceError` if it cannot be applied."""
        competitor = self._get_or_create(event.competitor_id)
        if competitor.actual_start is not None and event.time < competitor.actual_start:
            raise RaceError("event time precedes actual start")
        handler = self._handlers.get(event.event_type)
        if handler is None:
            raise RaceError(f"unknown event type: {int(event.event_type)}")
        handler(competitor, event)

    def competitors(self) -> list[Competitor]:
        """Return every competitor seen so far."""
        return list(self._competitors.values())

    def _get_or_create(self, competitor_id: int) -> Competitor:
        competitor = self._competitors.get(competitor_id)
        if competitor is None:
            competitor = Competitor(id=competitor_id, logger=self._logger)
            self._competitors[competitor_id] = competitor
        return competitor

    def _scheduled_for(self, competitor_id: int) -> datetime:
        return self._config.start + (competitor_id - 1) * self._config.start_delta

    def _info(self, message: str, event: Event, competitor: Competitor, **fields: object) -> None:
        self._logger.info(
            message,
            extra={"time": format_timestamp(event.time), "competitorID": competitor.id, **fields},
        )

    def _register(self, competitor: Competitor, event: Event) -> None:
        competitor.scheduled = self._scheduled_for(competitor.id)
        self._info("Competitor registered", event, competitor)

    def _set_start_time(self, competitor: Competitor, event: Event) -> None:
        if not event.extra_params:
            self._logger.error("missing start time")
            raise RaceError("missing start time")
        raw = event.extra_params[0]
        try:
            competitor.scheduled = parse_event_time(raw)
        except ValueError as exc:
            self._logger.error("invalid time", extra={"error": str(exc), "input": raw})
            raise RaceError(f"invalid time: {exc}") from exc
        self._info("Start time set by draw", event, competitor, startTime=raw)

    def _on_start_line(self, competitor: Competitor, event: Event) -> None:
        self._info("Competitor is on the start line", event, competitor)
        competitor.update_status(CompetitorStatus.ON_START)

    def _start_race(self, competitor: Competitor, event: Event) -> None:
        scheduled = self._scheduled_for(competitor.id)
        if event.time > scheduled + self._config.start_delta:
            self._info("Competitor disqualified for a late start", event, competitor)
            competitor.update_status(CompetitorStatus.NOT_STARTED)
            return
        competitor.actual_start = event.time
        competitor.update_status(CompetitorStatus.RACING)
        competitor.start_new_lap(False, competitor.scheduled)
        self._info("Competitor has started", event, competitor)

    def _single_int(self, competitor: Competitor, event: Event, missing: str) -> int:
        if not event.extra_params:
            self._logger.error(missing, extra={"competitorID": competitor.id})
            raise RaceError(missing)
        raw = event.extra_params[0]
        try:
            return _atoi(raw)
        except RaceError:
            self._logger.error("invalid number", extra={"competitorID": competitor.id, "rawInput": raw})
            raise

    def _enter_firing(self, competitor: Competitor, event: Event) -> None:
        line = self._single_int(competitor, event, "missing firing line")
        competitor.start_firing(line, self._config.firing_lines, event.time)
        self._info("Competitor is on the firing range", event, competitor, firingLine=line)
        competitor.update_status(CompetitorStatus.IN_FIRING_RANGE)

    def _hit_target(self, competitor: Competitor, event: Event) -> None:
        target = self._single_int(competitor, event, "missing target number")
        competitor.register_shot(target)
        self._info("Target hit", event, competitor, target=target)

    def _leave_firing(self, competitor: Competitor, event: Event) -> None:
        missed = competitor.finish_firing(event.time)
        self._info("Competitor left the firing range", event, competitor)
        if missed > 0:
            competitor.update_status(CompetitorStatus.IN_PENALTY)
        else:
            competitor.update_status(CompetitorStatus.RACING)

    def _enter_penalty(self, competitor: Competitor, event: Event) -> None:
        competitor.start_new_lap(True, event.time)
        self._info("Competitor entered the penalty laps", event, competitor)

    def _leave_penalty(self, competitor: Competitor, event: Event) -> None:
        competitor.end_penalty(event.time)
        self._info("Competitor left the penalty laps", event, competitor)
        competitor.update_status(CompetitorStatus.RACING)

    def _finish_lap(self, competitor: Competitor, event: Event) -> None:
        try:
            competitor.finish_current_lap(event.time)
        except RaceError as exc:
            self._logger.error(
                "Lap completion error",
                extra={"error": str(exc), "competitorID": competitor.id, "lapNumber": len(competitor.laps)},
            )
            raise
        self._info("Competitor ended the main lap", event, competitor)
        if competitor.completed_main(self._config.laps):
            competitor.finish_time = event.time
            competitor.update_status(CompetitorStatus.FINISHED)
            return
        competitor.start_new_lap(False, event.time)

    def _cannot_continue(self, competitor: Competitor, event: Event) -> None:
        reason = ""
        if event.extra_params:
            reason = event.extra_params[0]
            competitor.disqualification_reason = reason
        self._info("Competitor cannot continue", event, competitor, reason=reason)
        competitor.update_status(CompetitorStatus.NOT_FINISHED)