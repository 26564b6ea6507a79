"""Command line entry point for the race report."""

from __future__ import annotations

import argparse
from typing import Sequence

from .app import App
from .logsetup import configure_logger
from .models import RaceError


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="biathlon", description="Build a biathlon race report.")
    parser.add_argument("-debug", "--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("-info", "--info", action="store_true", help="Enable info logs")
    parser.add_argument("-error", "--error", action="store_true", help="Enable error logs")
    parser.add_argument("-fullOutput", "--fullOutput", action="store_true", help="Generate full report")
    parser.add_argument("paths", nargs="*", metavar="path")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the race from ``<config_path> <events_path>`` and print the report."""
    args = _parser().parse_args(argv)
    logger = configure_logger(args.debug, args.info, args.error)

    if len(args.paths) != 2:
        logger.error(
            "Usage: biathlon [flags] <config_path> <events_path>",
            extra={"argsCount": len(args.paths)},
        )
        return 1
    config_path, events_path = args.paths

    try:
        report = App(logger).run(config_path, events_path, args.fullOutput)
    except RaceError as exc:
        logger.error("Application failed", extra={"error": str(exc)})
        return 1

    logger.info("Application completed successfully")
    print(report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())