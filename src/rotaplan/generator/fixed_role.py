# src/rotaplan/generator/fixed_role.py
from __future__ import annotations

from rotaplan.schemas.models import DayStatus


def fixed_role_status(
    day_index: int, work_days: int, rest_days: int, induction_days: int
) -> DayStatus:
    """
    @brief
    Status of the fixed role on a given day.

    @details
    Pure function of the day's offset inside the period P = work_days + rest_days
    and of the period index:
        offset 0                      -> UP
        offset 1..I (first period)    -> TRAINING
        offset <= work_days           -> ACTIVE
        offset == work_days + 1       -> DOWN
        later offsets                 -> REST
    Training happens only once over the whole horizon; later periods go
    straight from UP to ACTIVE.

    @params
        day_index : int
            0-based day index.
        work_days, rest_days, induction_days : int
            Regime lengths.

    @returns
        DayStatus for the fixed role.
    """
    period = max(1, work_days + rest_days)
    offset = day_index % period
    cycle = day_index // period

    if offset == 0:
        return DayStatus.UP
    if offset <= work_days:
        if cycle == 0 and offset <= induction_days:
            return DayStatus.TRAINING
        return DayStatus.ACTIVE
    if offset == work_days + 1:
        return DayStatus.DOWN
    return DayStatus.REST


def fixed_role_timeline(
    work_days: int, rest_days: int, induction_days: int, total_days: int
) -> list[DayStatus]:
    """
    @brief
    Full fixed-role timeline over the projection horizon.

    @returns
        List of length total_days (empty for a non-positive horizon).
    """
    return [
        fixed_role_status(d, work_days, rest_days, induction_days)
        for d in range(max(0, total_days))
    ]


__all__ = ["fixed_role_status", "fixed_role_timeline"]
