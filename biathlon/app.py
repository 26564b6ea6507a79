"""The race pipeline: configuration, events, processing and report."""

from __future__ import annotations

import logging
import os
from typing import Callable, Sequence

from .config import load_config
from .events import parse_events
from .models import Event, RaceConfig, RaceError
from .processor import EventProcessor
from .report import ReportService

_Logger = logging.Logger | logging.LoggerAdapter
_Path = str | os.PathLike[str]


class App:
    """Runs a race from a configuration file and an event log."""

    def __init__(
        self,
        logger: _Logger | None = None,
        config_loader: Callable[[_Path], RaceConfig] = load_config,
        event_parser: Callable[[_Path], Sequence[Event]] = parse_events,
    ) -> None:
        self.logger = logger if logger is not None else logging.getLogger("biathlon")
        self.config_loader = config_loader
        self.event_parser = event_parser

    def run(self, config_path: _Path, events_path: _Path, full_output: bool = False) -> str:
        """Process every event and return the final report."""
        self.logger.debug("Loading configuration", extra={"path": str(config_path)})
        try:
            config = self.config_loader(config_path)
        except RaceError as exc:
            self.logger.error("Failed to load config", extra={"path": str(config_path), "error": str(exc)})
            raise

        report_service = ReportService(config, full_output, self.logger)
        processor = EventProcessor(config, self.logger)

        self.logger.debug("Parsing events", extra={"path": str(events_path)})
        try:
            events = self.event_parser(events_path)
        except RaceError as exc:
            self.logger.error("Failed to read events", extra={"path": str(events_path), "error": str(exc)})
            raise

        self.logger.debug("Processing events", extra={"count": len(events)})
        for event in events:
            try:
                processor.handle_event(event)
            except RaceError as exc:
                self.logger.error(
                    "Event processing failed",
                    extra={"eventTime": str(event.time), "competitorID": event.competitor_id, "error": str(exc)},
                )
                raise

        self.logger.info("Generating final report")
        return report_service.generate_report(processor.competitors())