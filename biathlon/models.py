"""Domain model of a biathlon race: configuration, events and competitors."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .timeutils import parse_time

MAX_SHOTS = 5

_LOG = logging.getLogger(__name__)


class RaceError(Exception):
    """Raised when race data or a race action is invalid."""


class TransitionError(RaceError):
    """Raised when a competitor cannot move to the requested status."""


class CompetitorStatus(enum.IntEnum):
    REGISTERED = 1
    ON_START = 2
    RACING = 3
    IN_FIRING_RANGE = 4
    IN_PENALTY = 5
    FINISHED = 6
    DISQUALIFIED = 7
    NOT_STARTED = 8
    NOT_FINISHED = 9


class EventType(enum.IntEnum):
    COMPETITOR_REGISTERED = 1
    START_TIME_SET = 2
    ON_START_LINE = 3
    STARTED = 4
    ON_FIRING_RANGE = 5
    TARGET_HIT = 6
    LEFT_FIRING_RANGE = 7
    ENTERED_PENALTY = 8
    LEFT_PENALTY = 9
    LAP_FINISHED = 10
    CANNOT_CONTINUE = 11


_TRANSITIONS: dict[CompetitorStatus, frozenset[CompetitorStatus]] = {
    CompetitorStatus.REGISTERED: frozenset({CompetitorStatus.ON_START, CompetitorStatus.NOT_STARTED}),
    CompetitorStatus.ON_START: frozenset({CompetitorStatus.RACING, CompetitorStatus.NOT_STARTED}),
    CompetitorStatus.RACING: frozenset(
        {
            CompetitorStatus.IN_FIRING_RANGE,
            CompetitorStatus.IN_PENALTY,
            CompetitorStatus.FINISHED,
            CompetitorStatus.NOT_FINISHED,
        }
    ),
    CompetitorStatus.IN_FIRING_RANGE: frozenset(
        {CompetitorStatus.RACING, CompetitorStatus.IN_PENALTY, CompetitorStatus.NOT_FINISHED}
    ),
    CompetitorStatus.IN_PENALTY: frozenset({CompetitorStatus.RACING, CompetitorStatus.NOT_FINISHED}),
}


@dataclass
class Lap:
    number: int
    start: datetime | None
    finish: datetime | None = None
    is_penalty: bool = False


@dataclass
class FiringSession:
    line: int
    entry_time: datetime
    end_time: datetime | None = None
    hits: set[int] = field(default_factory=set)
    max_shots: int = MAX_SHOTS

    @property
    def missed(self) -> int:
        return self.max_shots - len(self.hits)


@dataclass(frozen=True)
class RaceConfig:
    laps: int
    lap_len: int
    penalty_len: int
    firing_lines: int
    start: datetime
    start_delta: timedelta


@dataclass
class Event:
    time: datetime
    event_type: EventType
    competitor_id: int
    extra_params: list[str] = field(default_factory=list)


def parse_event_type(code: int) -> EventType:
    """Return the event type for a numeric code from 1 to 11."""
    if code < 1 or code > 11:
        raise RaceError("invalid events type code")
    return EventType(code)


def parse_event_time(text: str) -> datetime:
    """Parse a time that may be wrapped in square brackets."""
    return parse_time(text.strip("[]"))


@dataclass
class Competitor:
    id: int
    status: CompetitorStatus = CompetitorStatus.REGISTERED
    scheduled: datetime | None = None
    actual_start: datetime | None = None
    finish_time: datetime | None = None
    laps: list[Lap] = field(default_factory=list)
    hits: int = 0
    shots: int = 0
    disqualification_reason: str = ""
    firing_lines: list[FiringSession] = field(default_factory=list)
    logger: logging.Logger | logging.LoggerAdapter = field(default=_LOG, repr=False, compare=False)

    def update_status(self, next_status: CompetitorStatus) -> None:
        """Move to ``next_status`` if the transition is allowed."""
        if next_status == CompetitorStatus.DISQUALIFIED or next_status in _TRANSITIONS.get(
            self.status, frozenset()
        ):
            self.status = next_status
            return
        error = TransitionError(f"invalid transition {int(self.status)} -> {int(next_status)}")
        self.logger.error("Status transition error", extra={"error": str(error)})
        raise error

    def start_new_lap(self, penalty: bool, start: datetime | None) -> Lap:
        lap = Lap(number=len(self.laps) + 1, start=start, is_penalty=penalty)
        self.laps.append(lap)
        return lap

    def finish_current_lap(self, moment: datetime) -> None:
        """Finish the latest unfinished main lap."""
        if not self.laps:
            error = RaceError("no lap in progress")
            self.logger.error("Lap completion error", extra={"error": str(error), "competitorID": self.id})
            raise error
        for lap in reversed(self.laps):
            if not lap.is_penalty and lap.finish is None:
                lap.finish = moment
                return
        error = RaceError("no unfinished main lap found")
        self.logger.error("Failed to finish lap", extra={"error": str(error), "competitorID": self.id})
        raise error

    def end_penalty(self, moment: datetime) -> None:
        """Finish the latest unfinished penalty lap, if any."""
        for lap in reversed(self.laps):
            if lap.is_penalty and lap.finish is None:
                lap.finish = moment
                return

    def completed_main(self, total: int) -> bool:
        return sum(1 for lap in self.laps if not lap.is_penalty) >= total

    def start_firing(self, line: int, spots: int, moment: datetime) -> FiringSession:
        session = FiringSession(line=line, entry_time=moment)
        self.firing_lines.append(session)
        self.shots += MAX_SHOTS
        return session

    def register_shot(self, target: int) -> None:
        """Record a hit on ``target`` in the current firing session."""
        if not self.firing_lines:
            return
        session = self.firing_lines[-1]
        if target not in session.hits:
            session.hits.add(target)
            self.hits += 1

    def finish_firing(self, moment: datetime) -> int:
        """Close the current firing session and return the number of misses."""
        if not self.firing_lines:
            raise RaceError("no firing session in progress")
        session = self.firing_lines[-1]
        session.end_time = moment
        return MAX_SHOTS - len(session.hits)

    def total_time(self) -> timedelta:
        if self.finish_time is None or self.scheduled is None:
            return timedelta(0)
        return self.finish_time - self.scheduled

    def average_speed(self, distance: int, laps: list[Lap]) -> float:
        total = timedelta(0)
        for lap in laps:
            if lap.finish is None or lap.start is None:
                raise RaceError(f"lap {lap.number} is not finished")
            total += lap.finish - lap.start
        if total == timedelta(0):
            return 0.0
        return distance * len(laps) / total.total_seconds()

    def main_laps(self) -> list[Lap]:
        return [lap for lap in self.laps if not lap.is_penalty]

    def penalty_laps(self) -> list[Lap]:
        return [lap for lap in self.laps if lap.is_penalty]

    def penalty_missed_shots(self) -> list[int]:
        return [session.missed for session in self.firing_lines if session.missed >= 0]