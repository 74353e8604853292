# src/rotaplan/planner.py
from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from rotaplan.errors import RotaplanError
from rotaplan.export.schedule_export import write_schedule_csv
from rotaplan.generator.orchestrator import generate_schedule
from rotaplan.metrics.logger import write_metrics
from rotaplan.metrics.metrics import collect_metrics
from rotaplan.schemas.models import Config, DaySchedule
from rotaplan.validator.audit import audit_schedule
from rotaplan.validator.validator import validate_schedule

logger = logging.getLogger(__name__)

PlanResult = dict[str, Any]


class Planner:
    """
    @brief
    Facade providing one entry point for planning runs.

    @details
    Separates computation from side effects:
        - generation and validation are pure (generate_schedule / validate_schedule),
        - audit, metrics, CSV and plot artifacts are written according to
          cfg.io_policy / cfg.validation / cfg.metrics / cfg.visualization.

    Public API:
        plan() -> PlanResult                  generate from cfg.regime
        revalidate(table) -> PlanResult       refresh an edited table
    """

    def __init__(self, cfg: Config, output_dir: Path | None = None) -> None:
        """
        @brief
        Initializes the planner with configuration.

        @params
            cfg : Config
                Runtime configuration (regime + output policy).
            output_dir : Path | None
                Overrides cfg.output_dir when given.
        """
        self.cfg = cfg
        self.output_dir = Path(output_dir or cfg.output_dir or "data/output")

    def plan(self) -> PlanResult:
        """
        @brief
        Generate the schedule for cfg.regime and persist artifacts.

        @returns
            PlanResult: schedule, report, metrics, runtime and artifact paths.
        """
        t0 = time.perf_counter()
        table = generate_schedule(self.cfg.regime)
        return self._finish(table, t0)

    def revalidate(self, table: Sequence[DaySchedule]) -> PlanResult:
        """
        @brief
        Re-derive diagnostics of an externally edited table and persist artifacts.
        """
        t0 = time.perf_counter()
        return self._finish(validate_schedule(table), t0)

    # --------------- Internal ---------------

    def _finish(self, table: list[DaySchedule], t0: float) -> PlanResult:
        params = self.cfg.regime
        write = self.cfg.io_policy.write_artifacts

        # (1) Audit and metrics are always computed; writing follows the policy
        report = audit_schedule(
            table,
            params,
            write_report=write and self.cfg.validation.write_report,
            out_dir=self.output_dir,
            fail_on_warnings=self.cfg.validation.fail_on_warnings,
        )
        metrics = collect_metrics(table, params)
        runtime = time.perf_counter() - t0
        metrics["runtime_sec"] = round(runtime, 6)

        artifacts: dict[str, Path | None] = {
            "validation_report": None,
            "metrics": None,
            "schedule_csv": None,
            "schedule_plot": None,
        }
        if write:
            artifacts.update(self._persist(table, metrics))
            if self.cfg.validation.write_report:
                artifacts["validation_report"] = self.output_dir / "validation_report.json"

        logger.info(
            "Plan ready: %d day(s), valid=%s, coverage=%.2f",
            len(table),
            report["valid"],
            metrics.get("coverage_ratio", 0.0),
        )
        return {
            "schedule": table,
            "report": report,
            "metrics": metrics,
            "valid": bool(report["valid"]),
            "runtime_seconds": runtime,
            "artifacts": artifacts,
        }

    def _persist(self, table: list[DaySchedule], metrics: dict[str, Any]) -> dict[str, Path | None]:
        out: dict[str, Path | None] = {}
        self.output_dir.mkdir(parents=True, exist_ok=True)

        out["schedule_csv"] = write_schedule_csv(table, self.output_dir / "schedule.csv")

        if self.cfg.metrics.save_metrics:
            out["metrics"] = write_metrics(metrics, self.output_dir)

        if self.cfg.visualization.save_plot and table:
            # Imported lazily: matplotlib/seaborn are only needed for the plot
            from rotaplan.visualizer.plot import plot_schedule

            try:
                out["schedule_plot"] = plot_schedule(
                    table, self.cfg, self.output_dir / "schedule_plot.png"
                )
            except RotaplanError as e:
                logger.warning("Schedule plot not written: %s", e)
        return out


__all__ = ["Planner", "PlanResult"]
