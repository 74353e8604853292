# scripts/run.py
from __future__ import annotations

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import Any

from rotaplan.dataloader.config_loader import ConfigLoader
from rotaplan.dataloader.postload_handler import LoadResultHandler
from rotaplan.dataloader.schedule_loader import ScheduleLoader
from rotaplan.errors import DataError, RotaplanError
from rotaplan.planner import Planner


def _setup_logging(verbose: bool = False) -> None:
    """
    @brief
    Initializes global logging configuration.

    @details
    INFO by default (DEBUG with --verbose) with a simple console format.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for the planning driver.
    """
    parser = argparse.ArgumentParser(
        prog="rotaplan-run",
        description=(
            "Generate a rotation schedule (or re-validate an edited one): "
            "generate → validate → audit → metrics → export"
        ),
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.yaml",
        help="Path to config YAML (default: config/config.yaml)",
    )
    parser.add_argument(
        "--schedule",
        type=str,
        default=None,
        help="Edited schedule.csv to re-validate instead of generating a new one",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for artifacts (default: output_dir from config)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log simulation decisions")
    return parser.parse_args(argv)


def run_pipeline(
    config_path: Path, output_dir: Path | None = None, schedule_path: Path | None = None
) -> dict[str, Any]:
    """
    @brief
    Executes one planning run.

    @details
    (1) Load configuration.
    (2) Either generate the schedule from the regime, or load an edited
        schedule CSV and re-validate it.
    (3) Audit, collect metrics and export artifacts through Planner.

    @raises
        RotaplanError
            On configuration or data issues.
    """
    logging.info("Loading config: %s", config_path)
    cfg = ConfigLoader().load(config_path)
    planner = Planner(cfg, output_dir=output_dir)

    if schedule_path is None:
        logging.info("Generating schedule…")
        return planner.plan()

    logging.info("Loading edited schedule: %s", schedule_path)
    result = ScheduleLoader().load(schedule_path)
    days = LoadResultHandler(output_dir=planner.output_dir).handle(result)
    if days is None:
        raise DataError(
            message=f"Schedule load failed, see {(planner.output_dir / 'load_errors.json').as_posix()}",
            source="scripts.run",
            suggested_action="Fix the rows reported in load_errors.json and rerun.",
        )
    logging.info("Re-validating %d day(s)…", len(days))
    return planner.revalidate(days)


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point.

    @details
    Exit codes:
      0 – schedule produced and audit valid
      1 – controlled failure or audit invalid
      2 – unexpected crash
    """
    args = _parse_args(argv)
    _setup_logging(args.verbose)

    try:
        result = run_pipeline(
            Path(args.config),
            Path(args.output) if args.output else None,
            Path(args.schedule) if args.schedule else None,
        )
        written = [name for name, path in result["artifacts"].items() if path]
        logging.info("Artifacts: %s", ", ".join(written) or "none (write_artifacts=false)")
        return 0 if result.get("valid") else 1

    except RotaplanError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
