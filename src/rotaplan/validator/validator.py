# src/rotaplan/validator/validator.py
from __future__ import annotations

import logging
from collections.abc import Sequence

from rotaplan.errors import DataError
from rotaplan.schemas.models import (
    SINGLE_ACTIVE,
    TRIPLE_ACTIVE,
    DaySchedule,
    DayStatus,
    Role,
)

logger = logging.getLogger(__name__)


def validate_schedule(table: Sequence[DaySchedule]) -> list[DaySchedule]:
    """
    @brief
    Recompute derived coverage fields for every day of a table.

    @details
    Works on any table, generated or manually edited. For each day:
        - active_count = number of roles whose status is ACTIVE;
        - "triple-active" when all three roles are ACTIVE;
        - "single-active" when exactly one role is ACTIVE and role_b has
          shown a non-EMPTY status at or before that day (the single-role
          startup phase is not flagged).
    Role-status cells are copied unchanged; the input table is not mutated.
    Single O(days) pass, idempotent.

    @params
        table : Sequence[DaySchedule]
            Day records ordered by day_index.

    @returns
        New list of DaySchedule with active_count and errors refreshed.
    """
    validated: list[DaySchedule] = []
    second_slot_entered = False

    for day in table:
        # (1) Count ACTIVE roles
        statuses = (day.fixed_role, day.role_a, day.role_b)
        active = sum(1 for s in statuses if s == DayStatus.ACTIVE)

        # (2) Track whether the second adaptive slot has started its regime
        if day.role_b != DayStatus.EMPTY:
            second_slot_entered = True

        # (3) Diagnostic tags
        errors: list[str] = []
        if active == 3:
            errors.append(TRIPLE_ACTIVE)
        if active == 1 and second_slot_entered:
            errors.append(SINGLE_ACTIVE)

        validated.append(day.model_copy(update={"active_count": active, "errors": errors}))

    return validated


def set_status(
    table: Sequence[DaySchedule],
    day_index: int,
    role: Role | str,
    status: DayStatus | str,
) -> list[DaySchedule]:
    """
    @brief
    Apply one manual cell edit and re-validate the whole table.

    @details
    Returns a new table; the input is left untouched. A day_index outside the
    table is a no-op (the table is still re-validated). Unknown role or status
    values are rejected with DataError.

    @params
        table : Sequence[DaySchedule]
            Current table.
        day_index : int
            Day to edit.
        role : Role | str
            Role handle or field name ("fixed_role", "role_a", "role_b").
        status : DayStatus | str
            New status.

    @returns
        Re-validated copy of the table with the edit applied.

    @raises
        DataError
            If role or status is not a known value.
    """
    # (1) Normalize role and status
    try:
        role = Role(role)
    except ValueError as e:
        raise DataError(
            f"Unknown role: {role!r}",
            source="validator.set_status",
            suggested_action="Use one of: fixed_role, role_a, role_b.",
        ) from e
    try:
        status = DayStatus(status)
    except ValueError as e:
        raise DataError(
            f"Unknown day status: {status!r}",
            source="validator.set_status",
            suggested_action="Use one of: " + ", ".join(s.value for s in DayStatus),
        ) from e

    # (2) Copy rows, editing only the target cell
    edited: list[DaySchedule] = []
    hit = False
    for day in table:
        if day.day_index == day_index:
            edited.append(day.model_copy(update={role.value: status}))
            hit = True
        else:
            edited.append(day)

    if not hit:
        logger.warning("Edit ignored: day %d is outside the schedule", day_index)

    # (3) Derived fields are only consistent after a full pass
    return validate_schedule(edited)


__all__ = ["set_status", "validate_schedule"]
