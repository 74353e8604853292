# tests/metrics/test_metrics.py
from __future__ import annotations

import json

import pytest

from rotaplan.errors import DataError
from rotaplan.generator.orchestrator import generate_schedule
from rotaplan.metrics.metrics import collect_metrics
from rotaplan.schemas.models import DaySchedule, DayStatus, RegimeParameters
from rotaplan.validator.validator import validate_schedule


@pytest.fixture(scope="module")
def reference_metrics():
    params = RegimeParameters()
    return collect_metrics(generate_schedule(params), params)


def test_coverage_distribution(reference_metrics):
    """
    @brief
    Histogram of ACTIVE roles per day for the reference regime.

    @details
    Six startup days with nobody ACTIVE, seven fully covered days while
    role_a overlaps the fixed role, one ACTIVE role for the rest.
    """
    m = reference_metrics

    assert m["num_days"] == 30
    assert m["active_count_histogram"] == {"0": 6, "1": 17, "2": 7, "3": 0}
    assert m["coverage_ratio"] == pytest.approx(0.2333)
    assert m["first_full_coverage_day"] == 6
    assert m["triple_active_days"] == 0
    assert m["single_active_days"] == 17


def test_role_workload(reference_metrics):
    roles = reference_metrics["roles"]

    assert roles["fixed_role"] == {
        "active_days": 17,
        "training_days": 5,
        "rest_days": 5,
        "deployments": 2,
    }
    assert roles["role_a"]["active_days"] == 7
    assert roles["role_b"]["active_days"] == 7
    assert roles["role_b"]["training_days"] == 5
    assert reference_metrics["equity_gap_days"] == 0


def test_regime_and_metadata_included(reference_metrics):
    m = reference_metrics

    assert m["regime"]["work_days"] == 14
    assert m["version"]
    assert m["timestamp"].endswith("Z")
    json.dumps(m)  # serializable as-is


def test_regime_omitted_without_params():
    table = validate_schedule([DaySchedule(day_index=0, fixed_role=DayStatus.ACTIVE)])

    m = collect_metrics(table)

    assert "regime" not in m
    assert m["active_count_histogram"]["1"] == 1


def test_triple_active_counted():
    table = validate_schedule(
        [
            DaySchedule(
                day_index=0,
                fixed_role=DayStatus.ACTIVE,
                role_a=DayStatus.ACTIVE,
                role_b=DayStatus.ACTIVE,
            )
        ]
    )

    m = collect_metrics(table)

    assert m["triple_active_days"] == 1
    assert m["first_full_coverage_day"] is None
    assert m["coverage_ratio"] == 0.0


def test_empty_table_returns_zeroed_metrics():
    m = collect_metrics([])

    assert m["num_days"] == 0
    assert m["coverage_ratio"] == 0.0
    assert m["active_count_histogram"] == {"0": 0, "1": 0, "2": 0, "3": 0}
    assert m["roles"] == {}


def test_rejects_non_day_records():
    with pytest.raises(DataError):
        collect_metrics([{"day_index": 0}])  # type: ignore[list-item]
