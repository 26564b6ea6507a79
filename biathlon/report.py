"""Final race reports: a compact summary and an aligned table."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, Sequence

from .models import Competitor, CompetitorStatus, Lap, RaceConfig, RaceError
from .timeutils import format_duration, format_timestamp

_Logger = logging.Logger | logging.LoggerAdapter

_STATUS_LABELS = {
    CompetitorStatus.NOT_STARTED: "NotStarted",
    CompetitorStatus.NOT_FINISHED: "NotFinished",
    CompetitorStatus.FINISHED: "Finished",
    CompetitorStatus.DISQUALIFIED: "Disqualified",
}

_HEADER = [
    "ID",
    "Status",
    "Total Time",
    "Laps Times",
    "Speed Laps",
    "Penalty Times",
    "Speed Penalty",
    "Hits/Shots",
]
_SEPARATOR = ["-" * len(title) if title != "Penalty Times" else "-" * 13 for title in _HEADER]


def status_label(competitor: Competitor) -> str:
    """Return the report label for the competitor's status."""
    return _STATUS_LABELS.get(competitor.status, "InProgress")


def align_columns(rows: Sequence[Sequence[str]], padding: int = 2) -> str:
    """Lay out rows of cells as text columns.

    Every cell except the last one of a row is padded with spaces to the width
    of its column's widest cell plus ``padding``. Each row ends with a newline.
    """
    widths: dict[int, int] = {}
    for row in rows:
        for index, cell in enumerate(row[:-1]):
            widths[index] = max(widths.get(index, 0), len(cell) + padding)
    lines = []
    for row in rows:
        if not row:
            lines.append("")
            continue
        padded = [cell.ljust(widths[index]) for index, cell in enumerate(row[:-1])]
        lines.append("".join(padded) + row[-1])
    return "".join(f"{line}\n" for line in lines)


def _rank(competitor: Competitor) -> tuple[int, timedelta]:
    total = competitor.total_time()
    zero = timedelta(0)
    if total > zero:
        return (0, total)
    if total == zero:
        return (1, total)
    return (2, total)


def _lap_duration(lap: Lap) -> timedelta | None:
    if lap.finish is None or lap.start is None:
        return None
    return lap.finish - lap.start


def _speed(distance: float, duration: timedelta) -> str:
    seconds = duration.total_seconds()
    if seconds == 0:
        if distance > 0:
            return "+Inf"
        if distance < 0:
            return "-Inf"
        return "NaN"
    return f"{distance / seconds:.3f}"


def _missed_at(missed: list[int], index: int) -> int:
    if index >= len(missed):
        raise RaceError("penalty lap has no matching firing session")
    return missed[index]


class ReportService:
    """Builds the final results report for a race."""

    def __init__(self, config: RaceConfig, full_output: bool = False, logger: _Logger | None = None) -> None:
        self.config = config
        self.full_output = full_output
        self.logger = logger if logger is not None else logging.getLogger("biathlon")

    def generate_report(self, competitors: Iterable[Competitor]) -> str:
        """Return the report, fastest finishers first and non-finishers last."""
        ordered = sorted(competitors, key=_rank)
        if self.full_output:
            self.logger.debug("Generating full report", extra={"competitorsCount": len(ordered)})
            return self._full_report(ordered)
        self.logger.debug("Generating short report", extra={"competitorsCount": len(ordered)})
        return self._short_report(ordered)

    def _short_report(self, competitors: list[Competitor]) -> str:
        lines = ["Final Results:\n"]
        for competitor in competitors:
            laps_info = []
            for lap in competitor.main_laps():
                duration = _lap_duration(lap)
                if duration is None:
                    laps_info.append("{,}")
                    continue
                speed = _speed(self.config.lap_len, duration)
                laps_info.append(f"{{{format_timestamp(lap.finish)}, {speed}}}")

            missed = competitor.penalty_missed_shots()
            penalty_time = timedelta(0)
            penalty_distance = 0.0
            for index, lap in enumerate(competitor.penalty_laps()):
                duration = _lap_duration(lap)
                if duration is None:
                    continue
                penalty_time += duration
                penalty_distance += _missed_at(missed, index) * self.config.penalty_len

            penalty_time_text = "-"
            penalty_speed_text = "-"
            if penalty_time > timedelta(0):
                penalty_time_text = format_duration(penalty_time)
                penalty_speed_text = _speed(penalty_distance, penalty_time)

            lines.append(
                f"[{status_label(competitor)}] {competitor.id} [{', '.join(laps_info)}] "
                f"{{{penalty_time_text}, {penalty_speed_text}}} {competitor.hits}/{competitor.shots}\n"
            )
        return "".join(lines)

    def _full_report(self, competitors: list[Competitor]) -> str:
        rows = [_HEADER, _SEPARATOR]
        for competitor in competitors:
            total = competitor.total_time()
            total_text = format_duration(total) if total > timedelta(0) else "-"
            main_laps = competitor.main_laps()
            penalty_laps = competitor.penalty_laps()
            rows.append(
                [
                    str(competitor.id),
                    status_label(competitor),
                    total_text,
                    self._lap_times(main_laps),
                    self._lap_speeds(main_laps, self.config.lap_len),
                    self._lap_times(penalty_laps),
                    self._penalty_speeds(penalty_laps, competitor.penalty_missed_shots()),
                    f"{competitor.hits}/{competitor.shots}",
                ]
            )
        return "Final Results:\n" + align_columns(rows, 2)

    @staticmethod
    def _lap_times(laps: list[Lap]) -> str:
        durations = (_lap_duration(lap) for lap in laps)
        return ", ".join(format_duration(d) for d in durations if d is not None)

    @staticmethod
    def _lap_speeds(laps: list[Lap], distance: int) -> str:
        durations = (_lap_duration(lap) for lap in laps)
        return ", ".join(_speed(distance, d) for d in durations if d is not None)

    def _penalty_speeds(self, laps: list[Lap], missed: list[int]) -> str:
        speeds = []
        for index, lap in enumerate(laps):
            misses = _missed_at(missed, index)
            if misses <= 0:
                continue
            duration = _lap_duration(lap)
            if duration is not None:
                speeds.append(_speed(misses * self.config.penalty_len, duration))
        return ", ".join(speeds)