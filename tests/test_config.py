import json

import pytest

from biathlon.config import ConfigError, config_from_mapping, load_config
from biathlon.models import RaceError
from biathlon.timeutils import parse_duration, parse_time

SAMPLE = {
    "laps": 2,
    "lapLen": 3651,
    "penaltyLen": 50,
    "firingLines": 1,
    "start": "09:30:00.000",
    "startDelta": "00:00:30",
}


def _write(tmp_path, payload):
    path = tmp_path / "config.json"
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    return path


def test_load_config_reads_all_fields(tmp_path):
    cfg = load_config(_write(tmp_path, SAMPLE))
    assert cfg.laps == SAMPLE["laps"]
    assert cfg.lap_len == SAMPLE["lapLen"]
    assert cfg.penalty_len == SAMPLE["penaltyLen"]
    assert cfg.firing_lines == SAMPLE["firingLines"]
    assert cfg.start == parse_time(SAMPLE["start"])
    assert cfg.start_delta == parse_duration(SAMPLE["startDelta"])


def test_config_from_mapping_matches_load(tmp_path):
    assert config_from_mapping(SAMPLE) == load_config(_write(tmp_path, SAMPLE))


def test_missing_integer_fields_default_to_zero():
    cfg = config_from_mapping({"laps": 1, "start": "10:00:00.000", "startDelta": "00:01:00"})
    assert cfg.lap_len == 0
    assert cfg.penalty_len == 0
    assert cfg.firing_lines == 0


def test_keys_match_case_insensitively():
    raw = dict(SAMPLE)
    raw["LAPLEN"] = raw.pop("lapLen")
    assert config_from_mapping(raw).lap_len == SAMPLE["lapLen"]


@pytest.mark.parametrize("laps", [0, -1])
def test_non_positive_laps_rejected(laps):
    with pytest.raises(ConfigError, match="laps must be positive"):
        config_from_mapping({**SAMPLE, "laps": laps})


def test_invalid_start_time_rejected():
    with pytest.raises(ConfigError, match="invalid start time"):
        config_from_mapping({**SAMPLE, "start": "9:30"})


def test_missing_start_time_rejected():
    raw = {key: value for key, value in SAMPLE.items() if key != "start"}
    with pytest.raises(ConfigError, match="invalid start time"):
        config_from_mapping(raw)


def test_invalid_start_delta_rejected():
    with pytest.raises(ConfigError, match="invalid start delta"):
        config_from_mapping({**SAMPLE, "startDelta": "00:30"})


@pytest.mark.parametrize("bad", ["two", 2.5, True, [2]])
def test_wrong_integer_type_rejected(bad):
    with pytest.raises(ConfigError, match="invalid config format"):
        config_from_mapping({**SAMPLE, "laps": bad})


def test_wrong_string_type_rejected():
    with pytest.raises(ConfigError, match="invalid config format"):
        config_from_mapping({**SAMPLE, "start": 930})


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="failed to read config file"):
        load_config(tmp_path / "absent.json")


def test_malformed_json(tmp_path):
    with pytest.raises(ConfigError, match="invalid config format"):
        load_config(_write(tmp_path, "{not json"))


def test_non_object_json(tmp_path):
    with pytest.raises(ConfigError, match="invalid config format"):
        load_config(_write(tmp_path, "[1, 2]"))


def test_config_error_is_race_error(tmp_path):
    with pytest.raises(RaceError):
        load_config(tmp_path / "absent.json")