# tests/export/test_schedule_export.py
from __future__ import annotations

import csv

import pandas as pd
import pytest

from rotaplan.dataloader.schedule_loader import ScheduleLoader
from rotaplan.errors import DataError
from rotaplan.export.schedule_export import EXPORT_COLUMNS, write_schedule_csv
from rotaplan.generator.orchestrator import generate_schedule
from rotaplan.schemas.models import DaySchedule, DayStatus, RegimeParameters
from rotaplan.validator.validator import set_status


def read_rows(path) -> list[dict[str, str]]:
    with path.open(encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


def test_export_reference_schedule(tmp_path):
    """
    @brief
    Exported CSV carries one row per day with statuses by name and joined tags.
    """
    # --- Arrange ---
    table = generate_schedule(RegimeParameters())
    out = tmp_path / "out" / "schedule.csv"

    # --- Act ---
    path = write_schedule_csv(table, out)
    rows = read_rows(path)

    # --- Assert ---
    assert path == out
    assert list(rows[0].keys()) == list(EXPORT_COLUMNS)
    assert len(rows) == 30
    assert rows[0] == {
        "day_index": "0",
        "fixed_role": "UP",
        "role_a": "UP",
        "role_b": "EMPTY",
        "active_count": "0",
        "errors": "",
    }
    assert rows[13]["errors"] == "single-active"
    assert not list(out.parent.glob("*.tmp"))


def test_export_is_readable_by_pandas(tmp_path):
    table = generate_schedule(RegimeParameters(total_days=12))
    path = write_schedule_csv(table, tmp_path / "schedule.csv")

    df = pd.read_csv(path, keep_default_na=False)

    assert list(df.columns) == list(EXPORT_COLUMNS)
    assert df["day_index"].tolist() == list(range(12))


def test_edited_export_reloads_with_same_statuses(tmp_path):
    """
    @brief
    A manually edited table survives export and reload via ScheduleLoader.
    """
    table = set_status(generate_schedule(RegimeParameters()), 8, "role_b", "ACTIVE")
    path = write_schedule_csv(table, tmp_path / "schedule.csv")

    result = ScheduleLoader().load(path)

    assert result.success is True
    assert result.days == table


def test_multiple_tags_joined_with_semicolon(tmp_path):
    rows = [
        {
            "day_index": 0,
            "fixed_role": "ACTIVE",
            "role_a": "ACTIVE",
            "role_b": "ACTIVE",
            "active_count": 3,
            "errors": ["triple-active", "manual"],
        }
    ]

    path = write_schedule_csv(rows, tmp_path / "schedule.csv")

    assert read_rows(path)[0]["errors"] == "triple-active;manual"


def test_rows_written_in_day_order(tmp_path):
    table = [DaySchedule(day_index=1), DaySchedule(day_index=0, fixed_role=DayStatus.UP)]

    path = write_schedule_csv(table, tmp_path / "schedule.csv")

    assert [r["day_index"] for r in read_rows(path)] == ["0", "1"]


def test_duplicate_day_rejected(tmp_path):
    table = [DaySchedule(day_index=0), DaySchedule(day_index=0)]

    with pytest.raises(DataError, match="Duplicate"):
        write_schedule_csv(table, tmp_path / "schedule.csv")


@pytest.mark.parametrize("bad", [{"day_index": 0}, "schedule", 42])
def test_unsupported_container_rejected(tmp_path, bad):
    with pytest.raises(DataError):
        write_schedule_csv(bad, tmp_path / "schedule.csv")


def test_missing_column_and_unknown_status_rejected(tmp_path):
    with pytest.raises(DataError, match="Missing required"):
        write_schedule_csv([{"day_index": 0}], tmp_path / "a.csv")

    row = {
        "day_index": 0,
        "fixed_role": "ONCALL",
        "role_a": "EMPTY",
        "role_b": "EMPTY",
        "active_count": 0,
        "errors": [],
    }
    with pytest.raises(DataError, match="Unknown status"):
        write_schedule_csv([row], tmp_path / "b.csv")
