# src/rotaplan/dataloader/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from rotaplan.schemas.models import DaySchedule


@dataclass(slots=True)
class LoadResult:
    """
    Structured result of reading a schedule CSV.

    Fields:
        success: True if no row-level issues were found, False otherwise.
        days: Re-validated day table ordered by day_index (empty if success=False).
        errors: Issue dicts with per-row context (kind, line_no, message, day_index).
        total_rows: Data rows observed in the CSV (header excluded).
        kept_rows: Number of parsed days (len(days)).
    """

    success: bool
    days: list[DaySchedule] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0
    kept_rows: int = 0
