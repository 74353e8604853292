# src/rotaplan/generator/orchestrator.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from rotaplan.generator.fixed_role import fixed_role_timeline
from rotaplan.schemas.models import (
    ADAPTIVE_ROLES,
    ON_DUTY,
    DaySchedule,
    DayStatus,
    RegimeParameters,
    Role,
)
from rotaplan.validator.validator import validate_schedule

logger = logging.getLogger(__name__)

# Window (beyond prep time) in which an already scheduled arrival blocks a new summon
UPCOMING_ARRIVAL_WINDOW = 5
# Extra days of margin for the pre-emptive summon trigger
PREEMPTIVE_MARGIN = 2


@dataclass(slots=True)
class _SlotHistory:
    """
    Running facts about the finished days of one adaptive slot.

    Fields:
        trained: a TRAINING day has been seen.
        worked: a DOWN day has been seen (the slot has completed a deployment).
        active_total: cumulative ACTIVE days.
        duty_streak: consecutive UP/TRAINING/ACTIVE days ending yesterday.
        rest_streak: consecutive REST days ending yesterday.
        last_status: most recent non-EMPTY status.
    """

    trained: bool = False
    worked: bool = False
    active_total: int = 0
    duty_streak: int = 0
    rest_streak: int = 0
    last_status: DayStatus = DayStatus.EMPTY

    def record(self, status: DayStatus) -> None:
        if status is DayStatus.TRAINING:
            self.trained = True
        elif status is DayStatus.DOWN:
            self.worked = True
        elif status is DayStatus.ACTIVE:
            self.active_total += 1

        self.duty_streak = self.duty_streak + 1 if status in ON_DUTY else 0
        self.rest_streak = self.rest_streak + 1 if status is DayStatus.REST else 0
        if status is not DayStatus.EMPTY:
            self.last_status = status


class AdaptiveOrchestrator:
    """
    @brief
    Forward day-by-day simulation of the two adaptive roles.

    @details
    Owns one mutable status buffer per adaptive slot for the duration of a run.
    The buffers are rewritten at random positions (onboarding sequences are
    written ahead of the current day), so the table is kept as plain lists and
    every write outside [0, total_days) is silently dropped.

    Transient state is the active/idle designation: two slot handles swapped
    by value. The designation is never persisted.

    Per-day order:
        (1) swap on overlap
        (2) equity tie-break and look-ahead summon
        (3) continuation fill
        (4) hard duty-limit enforcement
        (5) rest fill
    """

    def __init__(self, params: RegimeParameters, fixed: list[DayStatus]) -> None:
        """
        @brief
        Prepare empty buffers for both adaptive slots.

        @params
            params : RegimeParameters
                Regime of the run.
            fixed : list[DayStatus]
                Precomputed fixed-role timeline (length total_days).
        """
        self.params = params
        self.total_days = len(fixed)
        self.fixed = fixed
        self.slots: dict[Role, list[DayStatus]] = {
            role: [DayStatus.EMPTY] * self.total_days for role in ADAPTIVE_ROLES
        }
        self.active = Role.ROLE_A
        self.idle = Role.ROLE_B
        self.history: dict[Role, _SlotHistory] = {
            role: _SlotHistory() for role in ADAPTIVE_ROLES
        }

    # ---------- Public API ----------
    def run(self) -> dict[Role, list[DayStatus]]:
        """
        @brief
        Execute the simulation over the full horizon.

        @details
        The first adaptive slot mirrors the fixed role's startup by beginning
        its onboarding on day 0; the second one stays EMPTY until summoned.

        @returns
            Mapping of adaptive role to its completed timeline.
        """
        self._start_work_block(self.active, 0)

        for day in range(self.total_days):
            self._swap_on_overlap(day)
            self._plan_summon(day)
            self._continue_duty(day)
            self._enforce_duty_limit(day)
            self._fill_rest(day)
            self._close_day(day)

        return self.slots

    # ---------- Buffer helpers ----------
    def _get(self, role: Role, day: int) -> DayStatus:
        if 0 <= day < self.total_days:
            return self.slots[role][day]
        return DayStatus.EMPTY

    def _set(self, role: Role, day: int, status: DayStatus) -> None:
        if 0 <= day < self.total_days:
            self.slots[role][day] = status

    def _swap(self) -> None:
        self.active, self.idle = self.idle, self.active

    def _active_count(self, day: int) -> int:
        cells = (self.fixed[day], self._get(Role.ROLE_A, day), self._get(Role.ROLE_B, day))
        return sum(1 for s in cells if s is DayStatus.ACTIVE)

    # ---------- History queries ----------
    # Days before the current one are final, so their facts live in _SlotHistory.
    def _has_trained(self, role: Role) -> bool:
        """True if the slot shows a TRAINING day before the current day."""
        return self.history[role].trained

    def _has_worked(self, role: Role) -> bool:
        """True if the slot has left duty (DOWN) before the current day."""
        return self.history[role].worked

    def _rest_streak(self, role: Role) -> int:
        """Consecutive REST days immediately before the current day."""
        return self.history[role].rest_streak

    def _days_on_duty(self, role: Role, day: int) -> int:
        """Consecutive UP/TRAINING/ACTIVE days ending at the current day (inclusive)."""
        if self._get(role, day) not in ON_DUTY:
            return 0
        return self.history[role].duty_streak + 1

    def _active_days_total(self, role: Role) -> int:
        """Cumulative ACTIVE days before the current day."""
        return self.history[role].active_total

    def _in_open_cycle(self, role: Role) -> bool:
        """True if the most recent non-empty status before the current day is on duty."""
        return self.history[role].last_status in ON_DUTY

    def _close_day(self, day: int) -> None:
        """Fold the finished day into each slot's history."""
        for role in ADAPTIVE_ROLES:
            self.history[role].record(self.slots[role][day])

    def _has_upcoming_arrival(self, role: Role, day: int, prep_time: int) -> bool:
        end = min(day + prep_time + UPCOMING_ARRIVAL_WINDOW, self.total_days)
        return DayStatus.UP in self.slots[role][day:end]

    # ---------- Writers ----------
    def _start_work_block(self, role: Role, start: int) -> None:
        """
        @brief
        Write an onboarding sequence starting at `start`.

        @details
        UP on the start day, TRAINING for induction_days if the slot has never
        trained, then the first ACTIVE day. Later ACTIVE days are filled by the
        continuation step as the simulation reaches them.
        """
        if start >= self.total_days:
            return

        self._set(role, start, DayStatus.UP)

        induction = 0 if self._has_trained(role) else self.params.induction_days
        for k in range(1, induction + 1):
            self._set(role, start + k, DayStatus.TRAINING)

        self._set(role, start + 1 + induction, DayStatus.ACTIVE)

    # ---------- Per-day steps ----------
    def _swap_on_overlap(self, day: int) -> None:
        """(1) Idle slot already ACTIVE while the fixed role is ACTIVE: relieve the active slot."""
        if self._get(self.idle, day) is not DayStatus.ACTIVE:
            return
        if self.fixed[day] is not DayStatus.ACTIVE:
            return
        if self._get(self.active, day) is DayStatus.DOWN:
            return

        logger.debug("Day %d: hand-off %s -> %s", day, self.active.value, self.idle.value)
        self._set(self.active, day, DayStatus.DOWN)
        self._swap()

    def _plan_summon(self, day: int) -> None:
        """
        @brief
        (2) Look-ahead summon of the idle slot, preceded by the equity tie-break.

        @details
        The idle slot is summoned "now" so that it becomes ACTIVE exactly at
        deadline = day + prep_time. Triggers: a fixed-role gap at the deadline,
        the active slot reaching its duty limit by the deadline, fewer than two
        roles ACTIVE today, or the active slot nearing its limit while two roles
        are ACTIVE. A summon needs an eligible idle slot and is vetoed when the
        projection shows three ACTIVE roles at the deadline.

        The equity tie-break and the summon are evaluated independently; prep
        time is computed for the idle slot before the tie-break runs.
        """
        p = self.params
        prep_time = 1 + (0 if self._has_trained(self.idle) else p.induction_days)
        deadline = day + prep_time
        if deadline >= self.total_days:
            return

        gap_coming = self.fixed[deadline] is not DayStatus.ACTIVE
        limit_coming = self._days_on_duty(self.active, day) + prep_time >= p.work_days
        will_need_idle = gap_coming or limit_coming

        if not will_need_idle:
            self._equity_tie_break(day)

        if not self._can_summon(day, prep_time):
            return

        active_now = self._active_count(day)
        active_worked = self._days_on_duty(self.active, day)
        ending_soon = active_worked >= p.work_days - prep_time - PREEMPTIVE_MARGIN

        should_summon = (
            will_need_idle or active_now < 2 or (ending_soon and active_now == 2)
        )
        if not should_summon:
            return

        projected = [
            self.fixed[deadline],
            DayStatus.ACTIVE if active_worked + prep_time < p.work_days else DayStatus.DOWN,
            DayStatus.ACTIVE,
        ]
        if sum(1 for s in projected if s is DayStatus.ACTIVE) >= 3:
            return

        logger.debug(
            "Day %d: summon %s (active from day %d)", day, self.idle.value, deadline
        )
        self._start_work_block(self.idle, day)

    def _equity_tie_break(self, day: int) -> None:
        """Hand the idle designation to the slot with fewer ACTIVE days when it is rested."""
        a_total = self._active_days_total(Role.ROLE_A)
        b_total = self._active_days_total(Role.ROLE_B)
        preferred = Role.ROLE_A if a_total <= b_total else Role.ROLE_B
        if self.idle is preferred:
            return

        available = self._get(preferred, day) in (DayStatus.REST, DayStatus.EMPTY)
        rested = (
            not self._has_worked(preferred)
            or self._rest_streak(preferred) >= self.params.min_rest_days_before_return
        )
        if available and rested:
            logger.debug("Day %d: equity swap, %s becomes idle", day, preferred.value)
            self._swap()

    def _can_summon(self, day: int, prep_time: int) -> bool:
        """Eligibility of the idle slot for a summon starting on `day`."""
        idle = self.idle
        current = self._get(idle, day)

        if current in ON_DUTY:
            return False
        if self._in_open_cycle(idle):
            return False
        if self._has_upcoming_arrival(idle, day, prep_time):
            return False
        if day > 0 and self._has_worked(idle):
            if self._rest_streak(idle) < self.params.min_rest_days_before_return:
                return False
        return current in (DayStatus.EMPTY, DayStatus.REST)

    def _continue_duty(self, day: int) -> None:
        """(3) Unset day after TRAINING/ACTIVE stays ACTIVE."""
        for role in (self.active, self.idle):
            if self._get(role, day) is not DayStatus.EMPTY:
                continue
            if self._get(role, day - 1) in (DayStatus.TRAINING, DayStatus.ACTIVE):
                self._set(role, day, DayStatus.ACTIVE)

    def _enforce_duty_limit(self, day: int) -> None:
        """(4) A slot that reaches work_days on duty leaves today."""
        for role in ADAPTIVE_ROLES:
            if self._days_on_duty(role, day) < self.params.work_days:
                continue
            if self._get(role, day) not in ON_DUTY:
                continue

            logger.debug("Day %d: duty limit reached for %s", day, role.value)
            self._set(role, day, DayStatus.DOWN)
            if role is self.active and self._get(self.idle, day) is DayStatus.ACTIVE:
                self._swap()

    def _fill_rest(self, day: int) -> None:
        """(5) Unset day after DOWN/REST is REST."""
        for role in ADAPTIVE_ROLES:
            if self._get(role, day) is not DayStatus.EMPTY:
                continue
            if self._get(role, day - 1) in (DayStatus.DOWN, DayStatus.REST):
                self._set(role, day, DayStatus.REST)


def generate_schedule(params: RegimeParameters) -> list[DaySchedule]:
    """
    @brief
    Generate the annotated day table for a regime.

    @details
    Builds the fixed-role timeline, runs the adaptive simulation and passes
    the assembled table through validate_schedule(). Total over its input
    domain: never raises for any non-negative parameters.

    @params
        params : RegimeParameters
            Regime of the run.

    @returns
        List of DaySchedule of length params.total_days, day_index 0..n-1.
    """
    # (1) Fixed role: one pass, never revisited
    fixed = fixed_role_timeline(
        params.work_days, params.rest_days, params.induction_days, params.total_days
    )

    # (2) Adaptive roles: forward simulation over a private buffer
    slots = AdaptiveOrchestrator(params, fixed).run()

    # (3) Assemble records and derive diagnostics
    table = [
        DaySchedule(
            day_index=d,
            fixed_role=fixed[d],
            role_a=slots[Role.ROLE_A][d],
            role_b=slots[Role.ROLE_B][d],
        )
        for d in range(len(fixed))
    ]
    table = validate_schedule(table)

    flagged = sum(1 for day in table if day.errors)
    logger.info(
        "Generated %d-day schedule (N=%d, M=%d, I=%d): %d day(s) flagged",
        len(table),
        params.work_days,
        params.rest_days,
        params.induction_days,
        flagged,
    )
    return table


__all__ = ["AdaptiveOrchestrator", "generate_schedule"]
