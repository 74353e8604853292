# tests/dataloader/test_schedule_loader.py
from __future__ import annotations

from pathlib import Path

import pytest

from rotaplan.dataloader.schedule_loader import ScheduleLoader
from rotaplan.errors import DataError
from rotaplan.schemas.models import SINGLE_ACTIVE, DayStatus

HEADER = "day_index,fixed_role,role_a,role_b,active_count,errors\n"


def write_csv(tmp_path: Path, body: str, header: str = HEADER) -> Path:
    path = tmp_path / "schedule.csv"
    path.write_text(header + body, encoding="utf-8")
    return path


def test_load_and_revalidate(tmp_path):
    """
    @brief
    Stale derived columns are ignored; statuses are parsed and re-validated.
    """
    # --- Arrange ---
    path = write_csv(
        tmp_path,
        "0,ACTIVE,ACTIVE,,0,\n"
        "1,ACTIVE,down,rest,2,\n"
        "2,rest,REST,UP,0,triple-active\n",
    )

    # --- Act ---
    result = ScheduleLoader().load(path)

    # --- Assert ---
    assert result.success is True
    assert result.total_rows == 3
    assert result.kept_rows == 3
    assert [d.day_index for d in result.days] == [0, 1, 2]
    assert result.days[0].role_b is DayStatus.EMPTY
    assert result.days[1].role_a is DayStatus.DOWN
    assert result.days[0].active_count == 2
    assert result.days[1].errors == [SINGLE_ACTIVE]
    assert result.days[2].errors == []


def test_rows_are_sorted_by_day_index(tmp_path):
    path = write_csv(tmp_path, "1,REST,REST,REST,,\n0,UP,UP,,,\n")

    result = ScheduleLoader().load(path)

    assert [d.day_index for d in result.days] == [0, 1]


def test_derived_columns_are_optional(tmp_path):
    path = write_csv(tmp_path, "0,UP,UP,EMPTY\n", header="day_index,fixed_role,role_a,role_b\n")

    result = ScheduleLoader().load(path)

    assert result.success is True
    assert result.days[0].fixed_role is DayStatus.UP


def test_row_issues_are_collected(tmp_path):
    """
    @brief
    Every row-level problem is reported; the load fails without days.
    """
    # --- Arrange ---
    path = write_csv(
        tmp_path,
        "0,UP,UP,,,\n"
        "x,UP,UP,,,\n"
        "0,ACTIVE,ACTIVE,,,\n"
        "2,ACTIVE,ONCALL,,,\n"
        "3,ACTIVE,ACTIVE,,,\n",
    )

    # --- Act ---
    result = ScheduleLoader().load(path)

    # --- Assert ---
    assert result.success is False
    assert result.days == []
    kinds = sorted(issue["kind"] for issue in result.errors)
    assert kinds == ["duplicate_day", "invalid_index", "invalid_status", "missing_day", "missing_day"]
    missing = sorted(i["day_index"] for i in result.errors if i["kind"] == "missing_day")
    assert missing == [1, 2]
    invalid = next(i for i in result.errors if i["kind"] == "invalid_index")
    assert invalid["line_no"] == 3


def test_missing_file(tmp_path):
    with pytest.raises(DataError, match="not found"):
        ScheduleLoader().load(tmp_path / "nope.csv")


def test_missing_required_column(tmp_path):
    path = write_csv(tmp_path, "0,UP,UP\n", header="day_index,fixed_role,role_a\n")

    with pytest.raises(DataError, match="role_b"):
        ScheduleLoader().load(path)


def test_empty_file_has_no_header(tmp_path):
    path = tmp_path / "schedule.csv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(DataError, match="no header"):
        ScheduleLoader().load(path)
