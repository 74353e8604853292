# src/rotaplan/validator/audit.py
from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rotaplan.errors import ValidationError
from rotaplan.schemas.models import (
    ADAPTIVE_ROLES,
    SINGLE_ACTIVE,
    TRIPLE_ACTIVE,
    DaySchedule,
    DayStatus,
    RegimeParameters,
)
from rotaplan.validator.advisories import regime_advisories
from rotaplan.validator.validator import validate_schedule

logger = logging.getLogger(__name__)


# ---------------------------
# AUDIT CLASS (instance core)
# ----------------------------
class ScheduleAudit:
    """
    @brief
    Post-generation (or post-edit) rotation audit.

    @details
    Re-derives diagnostics with validate_schedule() and checks the rotation
    rules that any table should satisfy:
        - day indices contiguous from 0 (and matching the horizon),
        - no adaptive role ACTIVE for more than work_days consecutive days,
        - a returning adaptive role rested min_rest_days_before_return days.
    Coverage diagnostics and regime advisories are reported as warnings.

    Business-rule violations are collected into the report, never raised.
    """

    # ---------- Constructor ----------
    def __init__(self, table: Sequence[DaySchedule], params: RegimeParameters) -> None:
        """
        @brief
        Initialize audit context.

        @params
            table : Sequence[DaySchedule]
                Day table to audit (generated or manually edited).
            params : RegimeParameters
                Regime the table is expected to follow.
        """
        self.params = params
        self.table = validate_schedule(table)

        # (1) Initialize accumulators for audit outcomes
        self.errors: list[dict[str, Any]] = []
        self.warnings: list[dict[str, Any]] = []
        self.checks: dict[str, bool] = {}
        self.metrics: dict[str, Any] = {}

    # ---------- Public lifecycle API ----------
    def run_all_checks(self) -> None:
        """
        @brief
        Execute the full audit sequence.

        @details
        Integrity runs first; a broken index sequence makes the run-length
        checks meaningless, so they are marked unavailable.
        """
        # (1) Validate index integrity before other checks
        self._check_data_integrity()

        if not self.checks.get("DataIntegrity", True):
            self.checks.update({"DutyLimit": False, "RestBeforeReturn": False})
        else:
            # (2) Rotation rules
            self._check_duty_limit()
            self._check_rest_before_return()

        # (3) Informational passes
        self._check_coverage()
        self._check_regime()
        self._compute_metrics()

    def build_report(self) -> dict[str, Any]:
        """
        @brief
        Assemble audit results into a structured dictionary.

        @details
        Errors invalidate the table; warnings do not unless
        fail_on_warnings is requested by the caller.

        @returns
            Report dict: timestamp, valid, errors, warnings, metrics, checks.
        """
        is_valid = not self.errors and all(self.checks.values())
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "valid": bool(is_valid),
            "errors": self.errors,
            "warnings": self.warnings,
            "metrics": self.metrics,
            "checks": self.checks,
        }

    def save_report(
        self,
        report: dict[str, Any],
        out_dir: Path | None = None,
        filename: str = "validation_report.json",
    ) -> Path:
        """
        Writes the report atomically to disk.

        Args:
            report: Audit report dictionary.
            out_dir: Target directory (defaults to 'data/output').
            filename: Target filename (default 'validation_report.json').

        Returns:
            Path to the written JSON file.
        """
        target_dir = Path(out_dir or "data/output")
        target_dir.mkdir(parents=True, exist_ok=True)
        final_path = target_dir / filename

        tmp_path = final_path.with_suffix(".tmp")

        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(report, f, indent=2, ensure_ascii=False)
            tmp_path.replace(final_path)
        except OSError as e:
            raise ValidationError(
                f"Failed to write validation report: {e}",
                source="ScheduleAudit.save_report",
                suggested_action="Check disk permissions and free space.",
            ) from e

        logger.info("Validation report saved: %s", final_path)
        return final_path

    # ---------- Checks ----------
    def _check_data_integrity(self) -> None:
        """Day indices must be exactly 0..n-1 in order, n == total_days."""
        ok = True
        indices = [day.day_index for day in self.table]

        if indices != list(range(len(indices))):
            ok = False
            self._add_error(
                check="DataIntegrity",
                message="day_index values are not contiguous from 0",
                entities={"first_indices": indices[:5]},
                suggested_action="Rebuild the table or restore missing/duplicated days",
            )

        if len(indices) != self.params.total_days:
            ok = False
            self._add_error(
                check="DataIntegrity",
                message=(
                    f"Table has {len(indices)} day(s), "
                    f"regime horizon is {self.params.total_days}"
                ),
                entities={"days": len(indices), "total_days": self.params.total_days},
                suggested_action="Regenerate the schedule for the configured horizon",
            )

        self.checks["DataIntegrity"] = ok

    def _check_duty_limit(self) -> None:
        """No adaptive role ACTIVE for more than work_days consecutive days."""
        ok = True
        limit = self.params.work_days

        for role in ADAPTIVE_ROLES:
            run_start, run_len = 0, 0
            for day in self.table:
                if day.status_of(role) == DayStatus.ACTIVE:
                    if run_len == 0:
                        run_start = day.day_index
                    run_len += 1
                    continue
                if run_len > limit:
                    ok = False
                    self._report_long_run(role.value, run_start, run_len)
                run_len = 0
            if run_len > limit:
                ok = False
                self._report_long_run(role.value, run_start, run_len)

        self.checks["DutyLimit"] = ok

    def _report_long_run(self, role: str, start: int, length: int) -> None:
        self._add_error(
            check="DutyLimit",
            message=f"{role} is ACTIVE for {length} consecutive days from day {start}",
            entities={"role": role, "start_day": start, "length": length},
            suggested_action=f"Insert a DOWN within {self.params.work_days} days of duty",
        )

    def _check_rest_before_return(self) -> None:
        """Every UP after a DOWN needs enough REST days right before it."""
        ok = True
        required = self.params.min_rest_days_before_return

        for role in ADAPTIVE_ROLES:
            worked = False
            rest_streak = 0
            for day in self.table:
                status = day.status_of(role)
                if status == DayStatus.UP and worked and rest_streak < required:
                    ok = False
                    self._add_error(
                        check="RestBeforeReturn",
                        message=(
                            f"{role.value} returns on day {day.day_index} "
                            f"after {rest_streak} rest day(s)"
                        ),
                        entities={
                            "role": role.value,
                            "day_index": day.day_index,
                            "rest_days": rest_streak,
                        },
                        suggested_action=f"Keep at least {required} REST day(s) before UP",
                    )
                if status == DayStatus.DOWN:
                    worked = True
                rest_streak = rest_streak + 1 if status == DayStatus.REST else 0

        self.checks["RestBeforeReturn"] = ok

    def _check_coverage(self) -> None:
        """Surface diagnostic tags as warnings (one entry per tag)."""
        for tag in (TRIPLE_ACTIVE, SINGLE_ACTIVE):
            days = [day.day_index for day in self.table if tag in day.errors]
            if days:
                self._add_warning(
                    check="Coverage",
                    message=f"{len(days)} day(s) flagged {tag}",
                    entities={"tag": tag, "days": days},
                )

    def _check_regime(self) -> None:
        for item in regime_advisories(self.params):
            self._add_warning(
                check=item["check"], message=item["message"], entities=item["entities"]
            )

    def _compute_metrics(self) -> None:
        counts = [day.active_count for day in self.table]
        self.metrics = {
            "num_days": len(counts),
            "full_coverage_days": sum(1 for c in counts if c == 2),
            "flagged_days": sum(1 for day in self.table if day.errors),
        }

    # ---------- Report helpers ----------
    def _add_error(
        self,
        check: str,
        message: str,
        entities: dict[str, Any] | None = None,
        suggested_action: str | None = None,
    ) -> None:
        payload: dict[str, Any] = {"check": check, "message": message}
        if entities:
            payload["entities"] = entities
        if suggested_action:
            payload["suggested_action"] = suggested_action
        self.errors.append(payload)

    def _add_warning(
        self,
        check: str,
        message: str,
        entities: dict[str, Any] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"check": check, "message": message}
        if entities:
            payload["entities"] = entities
        self.warnings.append(payload)


# ----------------------------
# THIN FACADE
# ----------------------------
def audit_schedule(
    table: Sequence[DaySchedule],
    params: RegimeParameters,
    *,
    write_report: bool = False,
    out_dir: Path | None = None,
    fail_on_warnings: bool = False,
    filename: str = "validation_report.json",
) -> dict[str, Any]:
    """
    @brief
    High-level convenience wrapper for the rotation audit.

    @details
    Runs every check, builds the report and optionally persists it.
    With fail_on_warnings the report is invalid whenever warnings exist.

    @returns
        Report dictionary (always returned, also when written to disk).
    """
    audit = ScheduleAudit(table, params)
    audit.run_all_checks()
    report = audit.build_report()

    if fail_on_warnings and report["warnings"]:
        report["valid"] = False

    if write_report:
        audit.save_report(report, out_dir=out_dir, filename=filename)

    return report


__all__ = ["ScheduleAudit", "audit_schedule"]
