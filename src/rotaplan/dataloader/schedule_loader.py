# src/rotaplan/dataloader/schedule_loader.py
from __future__ import annotations

import csv
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from rotaplan.dataloader.types import LoadResult
from rotaplan.errors import DataError
from rotaplan.schemas.models import DaySchedule, DayStatus, Role
from rotaplan.validator.validator import validate_schedule

logger = logging.getLogger(__name__)


class ScheduleLoader:
    """
    CSV -> LoadResult[DaySchedule].

    Reads a schedule exported by write_schedule_csv(), typically after manual
    edits, so it can be re-validated.

    Rules:
      - UTF-8 CSV, delimiter=','
      - Required columns: day_index, fixed_role, role_a, role_b
      - active_count / errors columns are ignored; they are re-derived
      - Status cells: DayStatus names, case-insensitive; blank means EMPTY
      - Row-level issues (collected, loading continues):
          * non-integer or negative day_index  -> invalid_index
          * unknown status                     -> invalid_status
          * duplicate day_index                -> duplicate_day (first row kept)
          * day indices not contiguous from 0  -> missing_day
      - With issues: success=False, days=[]; otherwise days are sorted and validated.

    Fatal errors (DataError raised immediately):
      - file missing or unreadable
      - no header row or missing required columns
    """

    REQUIRED_COLUMNS = ("day_index", *(role.value for role in Role))

    def load(self, path: Path | str) -> LoadResult:
        path = Path(path)
        rows = self._read_csv(path)
        result = self._rows_to_result(rows)
        self._report_summary(path, result)
        return result

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _read_csv(self, path: Path) -> list[dict[str, str]]:
        if not path.is_file():
            raise DataError(
                message=f"Schedule CSV not found: {path}",
                source="ScheduleLoader._read_csv",
                suggested_action="Verify the path of the exported schedule.csv.",
            )

        try:
            with path.open("r", encoding="utf-8", newline="") as f:
                reader = csv.DictReader(f, delimiter=",")
                if reader.fieldnames is None:
                    raise DataError(
                        message="CSV has no header row.",
                        source="ScheduleLoader._read_csv",
                        suggested_action="Ensure the first line contains column names.",
                    )
                header = tuple((name or "").strip() for name in reader.fieldnames)
                self._validate_header(header)
                return [self._strip_row(r) for r in reader]
        except OSError as e:
            raise DataError(
                message=f"Unable to read CSV: {e}",
                source="ScheduleLoader._read_csv",
                suggested_action="Check file permissions and that the file is not locked.",
            ) from e

    def _validate_header(self, header: Iterable[str]) -> None:
        missing = [c for c in self.REQUIRED_COLUMNS if c not in header]
        if missing:
            raise DataError(
                message=f"Invalid CSV header: missing required column(s): {', '.join(missing)}",
                source="ScheduleLoader._validate_header",
                suggested_action="Add required columns: " + ",".join(self.REQUIRED_COLUMNS),
            )

    def _strip_row(self, row: dict[str, Any]) -> dict[str, str]:
        return {
            (k or "").strip(): (v.strip() if isinstance(v, str) else "") for k, v in row.items()
        }

    def _parse_status(self, raw: str) -> DayStatus:
        if not raw:
            return DayStatus.EMPTY
        return DayStatus(raw.upper())

    def _rows_to_result(self, rows: list[dict[str, str]]) -> LoadResult:
        issues: list[dict[str, Any]] = []
        by_index: dict[int, DaySchedule] = {}

        for line_no, row in enumerate(rows, start=2):  # header = line 1
            raw_index = row.get("day_index", "")

            # day index
            try:
                day_index = int(raw_index)
            except ValueError:
                day_index = -1
            if day_index < 0:
                issues.append(
                    {
                        "kind": "invalid_index",
                        "line_no": line_no,
                        "day_index": None,
                        "message": f"Invalid day_index: {raw_index!r}",
                    }
                )
                continue

            # statuses
            try:
                statuses = {
                    role.value: self._parse_status(row.get(role.value, "")) for role in Role
                }
            except ValueError as e:
                issues.append(
                    {
                        "kind": "invalid_status",
                        "line_no": line_no,
                        "day_index": day_index,
                        "message": f"Unknown status: {e}",
                    }
                )
                continue

            # duplicates: keep first, later are issues
            if day_index in by_index:
                issues.append(
                    {
                        "kind": "duplicate_day",
                        "line_no": line_no,
                        "day_index": day_index,
                        "message": "Duplicate day_index (later occurrence skipped)",
                    }
                )
                continue

            by_index[day_index] = DaySchedule(day_index=day_index, **statuses)

        # gaps in the sequence
        if by_index:
            for missing in sorted(set(range(max(by_index) + 1)) - set(by_index)):
                issues.append(
                    {
                        "kind": "missing_day",
                        "line_no": None,
                        "day_index": missing,
                        "message": f"Day {missing} is missing from the schedule",
                    }
                )

        if issues:
            return LoadResult(success=False, errors=issues, total_rows=len(rows), kept_rows=0)

        days = validate_schedule([by_index[i] for i in sorted(by_index)])
        return LoadResult(
            success=True,
            days=days,
            errors=[],
            total_rows=len(rows),
            kept_rows=len(days),
        )

    def _report_summary(self, path: Path, result: LoadResult) -> None:
        if result.success:
            logger.info(
                "ScheduleLoader OK: kept=%d/%d from %s",
                result.kept_rows,
                result.total_rows,
                path,
            )
            return

        counts: dict[str, int] = {}
        for it in result.errors:
            counts[it["kind"]] = counts.get(it["kind"], 0) + 1
        summary = ", ".join(f"{k}={v}" for k, v in counts.items())
        logger.error(
            "ScheduleLoader failed: %d issue(s) across %d row(s) in %s [%s]",
            len(result.errors),
            result.total_rows,
            path,
            summary or "no-summary",
        )


__all__ = ["ScheduleLoader"]
