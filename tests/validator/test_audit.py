# tests/validator/test_audit.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from rotaplan.errors import ValidationError
from rotaplan.generator.orchestrator import generate_schedule
from rotaplan.schemas.models import DaySchedule, DayStatus, RegimeParameters
from rotaplan.validator.audit import ScheduleAudit, audit_schedule

U, T, A, D, R, E = (
    DayStatus.UP,
    DayStatus.TRAINING,
    DayStatus.ACTIVE,
    DayStatus.DOWN,
    DayStatus.REST,
    DayStatus.EMPTY,
)


def mk_column_table(role_a: list[DayStatus], fixed: DayStatus = R) -> list[DaySchedule]:
    """
    @brief
    Table driven by a single role_a column; the other roles are constant.
    """
    return [
        DaySchedule(day_index=i, fixed_role=fixed, role_a=s, role_b=E)
        for i, s in enumerate(role_a)
    ]


def test_reference_schedule_is_valid_with_coverage_warnings():
    """
    @brief
    The reference regime passes every rotation rule.

    @details
    Its single-active days are reported as a Coverage warning listing the
    flagged day indices; warnings alone do not invalidate the report.
    """
    # --- Arrange ---
    params = RegimeParameters()
    table = generate_schedule(params)

    # --- Act ---
    report = audit_schedule(table, params)

    # --- Assert ---
    assert report["valid"] is True
    assert report["errors"] == []
    assert set(report["checks"]) == {"DataIntegrity", "DutyLimit", "RestBeforeReturn"}
    coverage = [w for w in report["warnings"] if w["check"] == "Coverage"]
    assert len(coverage) == 1
    assert coverage[0]["entities"]["tag"] == "single-active"
    assert coverage[0]["entities"]["days"] == list(range(13, 30))
    assert report["metrics"] == {"num_days": 30, "full_coverage_days": 7, "flagged_days": 17}


def test_fail_on_warnings_invalidates_report():
    params = RegimeParameters()
    report = audit_schedule(generate_schedule(params), params, fail_on_warnings=True)

    assert report["valid"] is False
    assert report["errors"] == []


def test_duty_limit_violation_is_reported():
    """An edited table keeping role_a ACTIVE beyond work_days fails DutyLimit."""
    # --- Arrange ---
    params = RegimeParameters(work_days=3, rest_days=1, induction_days=0, total_days=6)
    table = mk_column_table([U, A, A, A, A, D])

    # --- Act ---
    report = audit_schedule(table, params)

    # --- Assert ---
    assert report["valid"] is False
    assert report["checks"]["DutyLimit"] is False
    err = next(e for e in report["errors"] if e["check"] == "DutyLimit")
    assert err["entities"] == {"role": "role_a", "start_day": 1, "length": 4}


def test_duty_limit_run_at_end_of_horizon():
    params = RegimeParameters(work_days=2, rest_days=1, induction_days=0, total_days=4)
    report = audit_schedule(mk_column_table([U, A, A, A]), params)

    assert report["checks"]["DutyLimit"] is False


def test_early_return_is_reported():
    """
    @brief
    UP after DOWN with fewer REST days than min_rest_days_before_return.
    """
    params = RegimeParameters(
        work_days=14, rest_days=7, induction_days=0, total_days=6, min_rest_days_before_return=2
    )
    table = mk_column_table([U, A, D, R, U, A])

    report = audit_schedule(table, params)

    assert report["checks"]["RestBeforeReturn"] is False
    err = next(e for e in report["errors"] if e["check"] == "RestBeforeReturn")
    assert err["entities"] == {"role": "role_a", "day_index": 4, "rest_days": 1}


def test_first_arrival_needs_no_rest():
    params = RegimeParameters(induction_days=0, total_days=3, min_rest_days_before_return=5)
    report = audit_schedule(mk_column_table([E, U, A]), params)

    assert report["checks"]["RestBeforeReturn"] is True


def test_broken_indices_skip_run_checks():
    """
    @brief
    Non-contiguous day indices fail DataIntegrity and disable the run-length checks.
    """
    params = RegimeParameters(total_days=3)
    table = [
        DaySchedule(day_index=0, role_a=U),
        DaySchedule(day_index=2, role_a=A),
        DaySchedule(day_index=3, role_a=A),
    ]

    audit = ScheduleAudit(table, params)
    audit.run_all_checks()
    report = audit.build_report()

    assert report["checks"] == {
        "DataIntegrity": False,
        "DutyLimit": False,
        "RestBeforeReturn": False,
    }
    assert report["valid"] is False


def test_horizon_mismatch_is_integrity_error():
    params = RegimeParameters(total_days=30)
    table = generate_schedule(params.model_copy(update={"total_days": 20}))

    report = audit_schedule(table, params)

    assert report["checks"]["DataIntegrity"] is False
    assert any("regime horizon is 30" in e["message"] for e in report["errors"])


def test_regime_advisories_become_warnings():
    params = RegimeParameters(work_days=6, rest_days=6, induction_days=5, total_days=20)

    report = audit_schedule(generate_schedule(params), params)

    checks = {w["check"] for w in report["warnings"]}
    assert {"RestRatio", "InductionMargin"} <= checks


def test_save_report_writes_json(tmp_path: Path):
    params = RegimeParameters()
    report = audit_schedule(
        generate_schedule(params), params, write_report=True, out_dir=tmp_path
    )

    path = tmp_path / "validation_report.json"
    assert path.exists()
    assert not (tmp_path / "validation_report.tmp").exists()
    assert json.loads(path.read_text(encoding="utf-8"))["valid"] == report["valid"]


def test_save_report_raises_on_unwritable_target(tmp_path: Path):
    """
    @brief
    I/O failures surface as ValidationError.

    @details
    A directory occupying the temporary file's path makes open() fail.
    """
    (tmp_path / "validation_report.tmp").mkdir()
    audit = ScheduleAudit([], RegimeParameters(total_days=0))
    audit.run_all_checks()

    with pytest.raises(ValidationError):
        audit.save_report(audit.build_report(), out_dir=tmp_path)
