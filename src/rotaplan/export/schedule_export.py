# src/rotaplan/export/schedule_export.py
from __future__ import annotations

import csv
import os
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from rotaplan.errors import DataError
from rotaplan.schemas.models import DaySchedule, DayStatus

EXPORT_COLUMNS = ("day_index", "fixed_role", "role_a", "role_b", "active_count", "errors")
ERROR_SEPARATOR = ";"


def _to_records(table: Any) -> list[Mapping[str, Any]]:
    """
    @brief
    Normalizes a day table into a list of mappings.

    @details
    Accepts a sequence of DaySchedule or of dicts with the export columns.
    A plain dict is rejected, since iterating it would walk its keys.

    @raises
        DataError if the container or an item has an unsupported type.
    """
    if isinstance(table, (Mapping | str | bytes)) or not isinstance(table, Iterable):
        raise DataError(
            "Unsupported schedule container type.",
            source="export.write_schedule_csv",
            suggested_action="Pass list[DaySchedule] (output of generate_schedule).",
        )

    records: list[Mapping[str, Any]] = []
    for item in table:
        if isinstance(item, DaySchedule):
            records.append(item.model_dump(mode="json"))
        elif isinstance(item, Mapping):
            records.append(item)
        else:
            raise DataError(
                f"Unsupported schedule row type: {type(item).__name__}",
                source="export.write_schedule_csv",
                suggested_action="Rows must be DaySchedule objects or dicts.",
            )
    return records


def _format_row(row: Mapping[str, Any]) -> dict[str, str]:
    """
    @brief
    Converts one record into CSV cells.

    @details
    Status cells are written by name, errors joined with ';'.

    @raises
        DataError on missing columns or unknown statuses.
    """
    missing = [c for c in EXPORT_COLUMNS if c not in row]
    if missing:
        raise DataError(
            f"Missing required column(s): {', '.join(missing)}",
            source="export.write_schedule_csv",
            suggested_action="Ensure rows contain: " + ",".join(EXPORT_COLUMNS),
        )

    out = {"day_index": str(int(row["day_index"])), "active_count": str(int(row["active_count"]))}
    for col in ("fixed_role", "role_a", "role_b"):
        try:
            out[col] = DayStatus(row[col]).value
        except ValueError as e:
            raise DataError(
                f"Unknown status {row[col]!r} in column {col}",
                source="export.write_schedule_csv",
                suggested_action="Use DayStatus names (UP, TRAINING, ACTIVE, DOWN, REST, EMPTY).",
            ) from e
    out["errors"] = ERROR_SEPARATOR.join(str(tag) for tag in row["errors"])
    return out


def write_schedule_csv(table: Any, out_path: Path) -> Path:
    """
    @brief
    Exports a day table to CSV.

    @details
    Columns: day_index,fixed_role,role_a,role_b,active_count,errors.
    Rows are written in day order; the file is UTF-8, readable by
    ScheduleLoader and pandas.read_csv, and replaced atomically.

    @params
        table : Any
            list[DaySchedule] or list[dict] with the export columns.
        out_path : Path
            Destination CSV path.

    @returns
        Path to the written file.

    @raises
        DataError for structural issues or duplicate day indices.
    """
    # (1) Normalize and format
    rows = [_format_row(r) for r in _to_records(table)]

    # (2) One row per day
    seen: set[str] = set()
    for r in rows:
        if r["day_index"] in seen:
            raise DataError(
                f"Duplicate day_index detected: {r['day_index']}",
                source="export.write_schedule_csv",
                suggested_action="Export a table with unique day indices.",
            )
        seen.add(r["day_index"])
    rows.sort(key=lambda r: int(r["day_index"]))

    # (3) Atomic write via temporary file replacement
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_fd, tmp_name = tempfile.mkstemp(dir=str(out_path.parent), suffix=".tmp", text=True)
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=EXPORT_COLUMNS)
            writer.writeheader()
            writer.writerows(rows)
        os.replace(tmp_name, out_path)
    except OSError:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise

    return out_path


__all__ = ["write_schedule_csv"]
