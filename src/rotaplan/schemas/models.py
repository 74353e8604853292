# src/rotaplan/schemas/models.py
"""
@brief
Pydantic data models for the Rotaplan rotation planner.

@details
Defines the canonical model types:
    - DayStatus: symbolic per-role, per-day state
    - Role: handles of the three role columns in a day record
    - RegimeParameters: immutable generation input (duty/rest/induction lengths, horizon)
    - DaySchedule: one projected day (three role statuses + derived diagnostics)
    - Config: runtime configuration (from config.yaml), including the nested regime

Models stay lightweight so that the generator and validator can rebuild full
tables cheaply on every call.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

TRIPLE_ACTIVE = "triple-active"
SINGLE_ACTIVE = "single-active"


class DayStatus(str, Enum):
    """
    @brief
    State of one role on one day.

    @details
    Per-role sequence: EMPTY* -> UP -> TRAINING{0..I} -> ACTIVE+ -> DOWN -> REST* -> (UP again).
    """

    UP = "UP"
    TRAINING = "TRAINING"
    ACTIVE = "ACTIVE"
    DOWN = "DOWN"
    REST = "REST"
    EMPTY = "EMPTY"

    @property
    def code(self) -> str:
        """Single-letter grid label (empty for EMPTY)."""
        return "" if self is DayStatus.EMPTY else self.value[0]


# Statuses that count as being on site for duty-length accounting
ON_DUTY = frozenset({DayStatus.UP, DayStatus.TRAINING, DayStatus.ACTIVE})


class Role(str, Enum):
    """Role column handle; the value is the matching DaySchedule field name."""

    FIXED = "fixed_role"
    ROLE_A = "role_a"
    ROLE_B = "role_b"


ADAPTIVE_ROLES = (Role.ROLE_A, Role.ROLE_B)


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration and data contracts.

    @details
    Forbids unknown fields and allows population by field name even when an
    alias is declared.
    """

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,  # Allow population by field name
    }


class RegimeParameters(_StrictBaseModel):
    """
    @brief
    Immutable input of one generation run.

    @details
    The domain expects work_days >= 2 * rest_days and work_days > induction_days + 2,
    but these are advisory only (see validator.advisories); generation runs for any
    non-negative values. camelCase aliases match the configuration form payload.

    @params
        work_days : int
            Duty length N.
        rest_days : int
            Rest length M.
        induction_days : int
            Onboarding length I (0..5 expected, larger values tolerated).
        total_days : int
            Projection horizon.
        min_rest_days_before_return : int
            Rest days an adaptive role needs before it may be summoned again.
    """

    model_config = {**_StrictBaseModel.model_config, "frozen": True}

    work_days: int = Field(14, ge=0, alias="workDays", description="Duty length (N)")
    rest_days: int = Field(7, ge=0, alias="restDays", description="Rest length (M)")
    induction_days: int = Field(
        5, ge=0, alias="inductionDays", description="Onboarding length (I)"
    )
    total_days: int = Field(30, ge=0, alias="totalDays", description="Projection horizon")
    min_rest_days_before_return: int = Field(
        2,
        ge=0,
        alias="minRestDaysBeforeReturn",
        description="Minimum rest days before an adaptive role may return",
    )


class DaySchedule(_StrictBaseModel):
    """
    @brief
    One projected day of the rotation.

    @details
    Role statuses are the only persisted state; active_count and errors are
    derived and recomputed by validate_schedule().
    """

    day_index: int = Field(..., ge=0, description="0-based day index")
    fixed_role: DayStatus = DayStatus.EMPTY
    role_a: DayStatus = DayStatus.EMPTY
    role_b: DayStatus = DayStatus.EMPTY
    active_count: int = Field(0, ge=0, le=3, description="Roles ACTIVE that day (derived)")
    errors: list[str] = Field(default_factory=list, description="Diagnostic tags (derived)")

    def status_of(self, role: Role) -> DayStatus:
        return getattr(self, role.value)


# ------------------------------------------------------------
# Runtime I/O control block
# ------------------------------------------------------------
class IOPolicy(BaseModel):
    """
    @brief
    Controls runtime behavior for artifact writing.

    @details
    Used by the Planner facade to decide whether schedule.csv, metrics.json,
    validation_report.json and the plot are written.
    """

    write_artifacts: bool = Field(
        True,
        description="If False, the planner returns results without touching the filesystem.",
    )


class VisualConfig(BaseModel):
    """
    @brief
    Visualization parameters for plot rendering.

    @details
    Figure width grows with the horizon when width is left at 0.
    """

    width: float = Field(0.0, ge=0.0, description="Figure width in inches (0 = auto)")
    height: float = Field(3.5, gt=0.0, description="Figure height in inches")
    dpi: int = Field(120, ge=1, description="Output figure DPI")


class ExperimentConfig(BaseModel):
    """
    @brief
    Metadata describing the run context.
    """

    name: str | None = None
    description: str | None = None
    tags: list[str] | None = None


class ValidationConfig(BaseModel):
    """
    @brief
    Controls behavior of the audit subsystem.

    @details
    fail_on_warnings turns coverage diagnostics and regime advisories into
    report failures.
    """

    write_report: bool = True
    fail_on_warnings: bool = False


class MetricsConfig(BaseModel):
    """Flags for saving metrics.json."""

    save_metrics: bool = True


class VisualizationConfig(BaseModel):
    """Controls whether the roster plot is rendered."""

    save_plot: bool = True


class Config(_StrictBaseModel):
    """
    @brief
    Represents the full runtime configuration loaded from config.yaml.

    @details
    Combines the rotation regime with output, validation, metrics and
    visualization settings.
    """

    regime: RegimeParameters = Field(default_factory=RegimeParameters)
    output_dir: str | None = "data/output"
    io_policy: IOPolicy = Field(default_factory=IOPolicy.model_construct)
    validation: ValidationConfig = Field(default_factory=ValidationConfig.model_construct)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig.model_construct)
    visual: VisualConfig = Field(default_factory=VisualConfig.model_construct)
    visualization: VisualizationConfig = Field(default_factory=VisualizationConfig.model_construct)
    experiment: ExperimentConfig = Field(default_factory=ExperimentConfig.model_construct)


__all__ = [
    "ADAPTIVE_ROLES",
    "ON_DUTY",
    "SINGLE_ACTIVE",
    "TRIPLE_ACTIVE",
    "Config",
    "DaySchedule",
    "DayStatus",
    "RegimeParameters",
    "Role",
]
