# src/rotaplan/metrics/metrics.py
from __future__ import annotations

import json
import math
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

import pandas as pd

from rotaplan import __version__
from rotaplan.errors import DataError
from rotaplan.schemas.models import (
    SINGLE_ACTIVE,
    TRIPLE_ACTIVE,
    DaySchedule,
    DayStatus,
    RegimeParameters,
    Role,
)

_ROLE_COLUMNS = [role.value for role in Role]


def collect_metrics(
    table: Sequence[DaySchedule], params: RegimeParameters | None = None
) -> dict[str, Any]:
    """
    @brief
    Builds a JSON-serializable summary of a day table's coverage.

    @details
    Expects an annotated table (output of generate_schedule/validate_schedule).
    Reports how many days have 0..3 ACTIVE roles, how many carry each
    diagnostic tag, the share of fully covered days (exactly two ACTIVE), the
    per-role ACTIVE and onboarding totals, and the workload gap between the
    two adaptive roles.

    @params
        table : Sequence[DaySchedule]
            Annotated day table.
        params : RegimeParameters | None
            Regime echoed into the summary when provided.

    @returns
        Metrics dictionary (flat numbers plus per-role sub-dicts).

    @raises
        DataError
            If the table is not a sequence of DaySchedule.
    """
    df = _to_dataframe(table)

    # (1) Empty horizon: zeroed report
    if df.empty:
        metrics = _base_metrics(params)
        metrics.update(
            {
                "num_days": 0,
                "coverage_ratio": 0.0,
                "active_count_histogram": {str(k): 0 for k in range(4)},
                "triple_active_days": 0,
                "single_active_days": 0,
                "first_full_coverage_day": None,
                "roles": {},
                "equity_gap_days": 0,
            }
        )
        return metrics

    # (2) Coverage distribution
    hist = df["active_count"].value_counts().reindex(range(4), fill_value=0)
    full = int(hist.loc[2])
    coverage_ratio = full / len(df)

    full_days = df.loc[df["active_count"] == 2, "day_index"]
    first_full = int(full_days.iloc[0]) if not full_days.empty else None

    # (3) Diagnostic tags
    triple = int(df["errors"].map(lambda tags: TRIPLE_ACTIVE in tags).sum())
    single = int(df["errors"].map(lambda tags: SINGLE_ACTIVE in tags).sum())

    # (4) Per-role workload
    roles = {col: _role_summary(df[col]) for col in _ROLE_COLUMNS}
    gap = abs(
        roles[Role.ROLE_A.value]["active_days"] - roles[Role.ROLE_B.value]["active_days"]
    )

    metrics = _base_metrics(params)
    metrics.update(
        {
            "num_days": int(len(df)),
            "coverage_ratio": _f(coverage_ratio),
            "active_count_histogram": {str(k): int(v) for k, v in hist.items()},
            "triple_active_days": triple,
            "single_active_days": single,
            "first_full_coverage_day": first_full,
            "roles": roles,
            "equity_gap_days": int(gap),
        }
    )

    # (5) Guard numeric integrity and serializability
    _assert_finite(metrics)
    json.dumps(metrics, ensure_ascii=False)
    return metrics


# ----------------- internal -----------------


def _to_dataframe(table: Sequence[DaySchedule]) -> pd.DataFrame:
    """
    @brief
    Flatten the table into a DataFrame with status values as plain strings.

    @raises
        DataError on non-DaySchedule items.
    """
    rows: list[dict[str, Any]] = []
    for item in table:
        if not isinstance(item, DaySchedule):
            raise DataError(
                f"Expected DaySchedule, got {type(item).__name__}",
                source="metrics.collect_metrics",
                suggested_action="Pass the list returned by generate_schedule/validate_schedule.",
            )
        rows.append(item.model_dump(mode="json"))

    columns = ["day_index", *_ROLE_COLUMNS, "active_count", "errors"]
    return pd.DataFrame(rows, columns=columns)


def _role_summary(col: pd.Series) -> dict[str, int]:
    """Counts of duty and onboarding days for one role column."""
    counts = col.value_counts()
    return {
        "active_days": int(counts.get(DayStatus.ACTIVE.value, 0)),
        "training_days": int(counts.get(DayStatus.TRAINING.value, 0)),
        "rest_days": int(counts.get(DayStatus.REST.value, 0)),
        "deployments": int(counts.get(DayStatus.UP.value, 0)),
    }


def _base_metrics(params: RegimeParameters | None) -> dict[str, Any]:
    metrics: dict[str, Any] = {"timestamp": _utc_now_iso(), "version": __version__}
    if params is not None:
        metrics["regime"] = params.model_dump()
    return metrics


def _assert_finite(obj: Any) -> None:
    """
    @brief
    Rejects NaN or infinite floats anywhere in the metrics tree.
    """
    if isinstance(obj, float) and not math.isfinite(obj):
        raise DataError("NaN/Inf encountered in metrics", source="metrics.collect_metrics")
    if isinstance(obj, dict):
        for v in obj.values():
            _assert_finite(v)
    elif isinstance(obj, (list | tuple)):
        for v in obj:
            _assert_finite(v)


def _utc_now_iso() -> str:
    """
    @brief
    Returns current UTC timestamp in ISO-8601 format (Z-suffix).
    """
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _f(x: float) -> float:
    """Rounds to 4 decimals for stable reports."""
    return round(float(x), 4)


__all__ = ["collect_metrics"]
