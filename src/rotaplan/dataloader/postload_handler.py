# src/rotaplan/dataloader/postload_handler.py
from __future__ import annotations

import json
import logging
from pathlib import Path

from rotaplan.dataloader.types import LoadResult
from rotaplan.schemas.models import DaySchedule

logger = logging.getLogger(__name__)


class LoadResultHandler:
    """
    @brief
    Decides what happens to a loaded schedule before re-validation.

    @details
    On success the day table is passed on. On failure a load_errors.json
    report with every row-level issue is written to output_dir and None is
    returned, so the caller can stop without losing the diagnostics.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    def handle(self, result: LoadResult) -> list[DaySchedule] | None:
        """
        @brief
        Return the loaded days, or write an error report and return None.

        @details
        A failure to write the report is logged, never raised.
        """
        # (1) Success path
        if result.success:
            logger.info("PostLoad: %d day(s) ready for re-validation.", result.kept_rows)
            return result.days

        # (2) Failure path: persist structured issues
        self.output_dir.mkdir(parents=True, exist_ok=True)
        out_path = self.output_dir / "load_errors.json"

        try:
            with out_path.open("w", encoding="utf-8") as f:
                json.dump(result.errors, f, ensure_ascii=False, indent=2)
            logger.error(
                "PostLoad: schedule rejected with %d issue(s). See %s",
                len(result.errors),
                out_path,
            )
        except OSError as e:
            logger.error("PostLoad: failed to write error report: %s", e)

        return None


__all__ = ["LoadResultHandler"]
