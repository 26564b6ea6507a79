import json
import logging

import pytest

from biathlon.app import App
from biathlon.cli import main

CONFIG = {
    "laps": 1,
    "lapLen": 1000,
    "penaltyLen": 50,
    "firingLines": 1,
    "start": "10:00:00.000",
    "startDelta": "00:01:00",
}

EVENTS = """[09:55:00.000] 1 1
[09:59:00.000] 3 1
[10:00:10.000] 4 1
[10:01:40.000] 10 1
"""


@pytest.fixture
def race(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(CONFIG))
    events_path = tmp_path / "events"
    events_path.write_text(EVENTS)
    return str(config_path), str(events_path)


def _expected(race, full):
    return App(logging.getLogger("biathlon.tests.cli")).run(*race, full)


def test_prints_short_report(race, capsys):
    assert main(list(race)) == 0
    out = capsys.readouterr().out
    assert out == _expected(race, False) + "\n"
    assert out.startswith("Final Results:\n[Finished] 1 ")


def test_prints_full_report(race, capsys):
    assert main(["-fullOutput", *race]) == 0
    out = capsys.readouterr().out
    assert out == _expected(race, True) + "\n"
    assert out.splitlines()[1].split()[0] == "ID"


def test_wrong_argument_count(race, capsys):
    assert main([race[0]]) == 1
    out = capsys.readouterr().out
    assert "argsCount=1" in out
    assert "Final Results" not in out


def test_failure_returns_one(tmp_path, capsys):
    events_path = tmp_path / "events"
    events_path.write_text(EVENTS)
    assert main([str(tmp_path / "missing.json"), str(events_path)]) == 1
    out = capsys.readouterr().out
    assert "Application failed" in out
    assert "Final Results" not in out


def test_debug_logs_are_json(race, capsys):
    assert main(["-debug", *race]) == 0
    lines = capsys.readouterr().out.splitlines()
    records = [json.loads(line) for line in lines if line.startswith("{")]
    messages = {record["msg"] for record in records}
    assert "Loading configuration" in messages
    assert "Application completed successfully" in messages