import json
import logging
from datetime import timedelta

import pytest

from biathlon.app import App
from biathlon.config import ConfigError
from biathlon.events import EventFormatError
from biathlon.models import Event, EventType, RaceConfig, TransitionError
from biathlon.timeutils import format_duration, parse_time

CONFIG = {
    "laps": 1,
    "lapLen": 1000,
    "penaltyLen": 50,
    "firingLines": 1,
    "start": "10:00:00.000",
    "startDelta": "00:01:00",
}

EVENTS = """[09:55:00.000] 1 1
[09:55:01.000] 1 2
[09:59:00.000] 3 1
[09:59:01.000] 3 2
[10:00:10.000] 4 1
[10:00:50.000] 5 1 1
[10:00:55.000] 6 1 1
[10:00:56.000] 6 1 2
[10:00:57.000] 6 1 3
[10:00:58.000] 6 1 4
[10:00:59.000] 6 1 5
[10:01:00.000] 7 1
[10:01:40.000] 10 1
"""


@pytest.fixture
def logger():
    return logging.getLogger("biathlon.tests.app")


@pytest.fixture
def race(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(CONFIG))
    events_path = tmp_path / "events"
    events_path.write_text(EVENTS)
    return config_path, events_path


def test_short_report(race, logger):
    report = App(logger).run(*race, False)
    lines = report.splitlines()
    assert lines[0] == "Final Results:"
    assert lines[1] == "[Finished] 1 [{10:01:40.000, 10.000}] {-, -} 5/5"
    assert lines[2].startswith("[InProgress] 2 ")


def test_full_report(race, logger):
    report = App(logger).run(*race, True)
    table = report.splitlines()[1:]
    assert table[0].split()[0] == "ID"
    first = table[2].split()
    assert first[:3] == ["1", "Finished", format_duration(timedelta(seconds=100))]
    assert first[-1] == "5/5"


def test_missing_config(tmp_path, logger):
    events_path = tmp_path / "events"
    events_path.write_text(EVENTS)
    with pytest.raises(ConfigError):
        App(logger).run(tmp_path / "absent.json", events_path)


def test_bad_event_line(race, logger):
    config_path, events_path = race
    events_path.write_text("[09:55:00.000] 1\n")
    with pytest.raises(EventFormatError):
        App(logger).run(config_path, events_path)


def test_invalid_transition(race, logger):
    config_path, events_path = race
    events_path.write_text("[09:59:00.000] 3 1\n[09:59:01.000] 3 1\n")
    with pytest.raises(TransitionError):
        App(logger).run(config_path, events_path)


def test_injected_sources(logger):
    start = parse_time("10:00:00.000")
    config = RaceConfig(1, 1000, 50, 1, start, timedelta(minutes=1))
    events = [Event(time=start, event_type=EventType.COMPETITOR_REGISTERED, competitor_id=9)]
    app = App(logger, config_loader=lambda path: config, event_parser=lambda path: events)
    report = app.run("config", "events")
    assert report.splitlines()[1] == "[InProgress] 9 [] {-, -} 0/0"