# biathlon

Reads a biathlon race configuration and a log of race events, replays the
events for every competitor and prints the final results.

## Installation

```
pip install .
```

## Usage

```
biathlon [--debug] [--info] [--error] [--fullOutput] CONFIG_PATH EVENTS_PATH
```

The single-dash spellings (`-debug`, `-info`, `-error`, `-fullOutput`) are
accepted as well. The command exits with status 1 if it is not given exactly
two paths or if the configuration, the event log or an event is invalid.

- `CONFIG_PATH` is a JSON file describing the race:

  ```json
  {
    "laps": 2,
    "lapLen": 3651,
    "penaltyLen": 50,
    "firingLines": 1,
    "start": "09:30:00.000",
    "startDelta": "00:00:30"
  }
  ```

  `start` is `HH:MM:SS.sss`, `startDelta` is `HH:MM:SS`, and `laps` must be
  positive.

- `EVENTS_PATH` is a text file with one event per line,
  `[HH:MM:SS.sss] <event code> <competitor id> [extra]`:

  ```
  [09:05:59.867] 1 1
  [09:15:00.841] 2 1 09:30:00.000
  [09:29:45.734] 3 1
  [09:30:01.005] 4 1
  [09:49:31.659] 5 1 1
  [09:49:33.123] 6 1 1
  [09:49:38.339] 7 1
  [09:49:55.915] 8 1
  [09:51:48.391] 9 1
  [09:59:03.872] 10 1
  [09:59:05.321] 11 1 Lost
  ```

  Event codes: 1 registered, 2 start time drawn (a time `HH:MM:SS.sss`),
  3 on the start line, 4 started, 5 on a firing range (range number),
  6 target hit (target number), 7 left the firing range, 8 entered the
  penalty laps, 9 left the penalty laps, 10 finished a main lap, 11 cannot
  continue (the first word of the extra text is kept as the reason).

  A competitor who starts later than their scheduled slot plus `startDelta`
  is marked `NotStarted`. Each firing range counts five shots; every target
  not hit is one penalty lap of `penaltyLen`.

By default a short report is printed, one line per competitor, finishers
first by total time:

```
Final Results:
[NotFinished] 1 [{09:59:03.872, 2.094}, {,}] {00:01:52.476, 1.778} 1/5
```

Each line holds the status, the competitor id, every main lap as
`{finish time, speed}` (`{,}` for an unfinished lap), the total penalty time
and speed, and hits out of shots.

`--fullOutput` prints an aligned table with total time, lap times and speeds,
penalty times and speeds, and hits out of shots.

Logging goes to standard output. `--debug`, `--info` and `--error` choose the
level (if several are given, the most verbose wins) and log as JSON; without
any of them only errors are logged, as `key=value` text.

## Library use

```python
from biathlon.app import App

report = App().run("config.json", "events.txt", full_output=True)
print(report)
```

The building blocks are available on their own: `biathlon.config.load_config`,
`biathlon.events.parse_events`, `biathlon.processor.EventProcessor` and
`biathlon.report.ReportService`. All errors about race data are raised as
`biathlon.models.RaceError` or one of its subclasses.