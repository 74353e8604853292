# src/rotaplan/visualizer/plot.py
"""
Static roster plot.

Responsibilities:
- Turn a day table into a role x day matrix of status codes.
- Enforce headless backend (Agg) and figure export parameters (DPI, size).
- Draw a colour-coded grid with seaborn, one row per role plus the
  active-count row, flagged days outlined.
- Save PNG to the requested out_path and return that Path.
"""

from __future__ import annotations

# --- Standard library ---
from collections.abc import Sequence
from pathlib import Path
from typing import Any

# --- Third-party (no pyplot here!) ---
import matplotlib
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.colors import ListedColormap

# --- Project imports ---
from rotaplan.errors import DataError, VisualizationError
from rotaplan.schemas.models import Config, DaySchedule, DayStatus, Role

# (1) Enforce headless backend for environments without display
matplotlib.use("Agg")

# Grid order and colours (hex) per status
STATUS_ORDER = [
    DayStatus.EMPTY,
    DayStatus.UP,
    DayStatus.TRAINING,
    DayStatus.ACTIVE,
    DayStatus.DOWN,
    DayStatus.REST,
]
STATUS_COLORS = {
    DayStatus.EMPTY: "#f2f2f2",
    DayStatus.UP: "#4e79a7",
    DayStatus.TRAINING: "#f28e2b",
    DayStatus.ACTIVE: "#59a14f",
    DayStatus.DOWN: "#e15759",
    DayStatus.REST: "#bab0ac",
}
ROW_LABELS = {Role.FIXED: "Fixed", Role.ROLE_A: "Role A", Role.ROLE_B: "Role B"}


def _status_frame(table: Sequence[DaySchedule]) -> pd.DataFrame:
    """
    @brief
    Role x day frame of status names (rows: roles, columns: day_index).

    @raises
        DataError if the table is empty or holds non-DaySchedule items.
    """
    if not table:
        raise DataError(
            "Cannot plot an empty schedule",
            source="visualizer.plot._status_frame",
            suggested_action="Generate a schedule with total_days > 0 first",
        )
    if not all(isinstance(day, DaySchedule) for day in table):
        raise DataError(
            "Schedule rows must be DaySchedule objects",
            source="visualizer.plot._status_frame",
            suggested_action="Pass the list returned by generate_schedule/validate_schedule",
        )

    data = {
        day.day_index: [DayStatus(day.status_of(role)).value for role in Role] for day in table
    }
    frame = pd.DataFrame(data, index=[ROW_LABELS[role] for role in Role])
    return frame.reindex(columns=sorted(frame.columns))


def _extract_visual_params(cfg: Config | Any, num_days: int) -> tuple[float, float, int]:
    """
    @brief
    Read cfg.visual.{width, height, dpi}; width 0 means "grow with the horizon".
    """
    width, height, dpi = 0.0, 3.5, 120
    visual = getattr(cfg, "visual", None)
    if visual is not None:
        width = float(getattr(visual, "width", width))
        height = float(getattr(visual, "height", height))
        dpi = int(getattr(visual, "dpi", dpi))
    if width <= 0:
        width = max(8.0, 0.32 * num_days + 2.0)
    return width, height, dpi


def plot_schedule(table: Sequence[DaySchedule], cfg: Config | Any, out_path: Path) -> Path:
    """
    @brief
    Render the roster grid to PNG.

    @details
    Steps:
        (1) Build the role x day status matrix.
        (2) Draw it with a categorical colormap, labelling cells with status codes.
        (3) Add the active-count row; days carrying diagnostics are marked red.
        (4) Save the figure with the configured DPI.

    @params
        table : Sequence[DaySchedule]
            Annotated day table.
        cfg : Config | Any
            Configuration with optional visual section.
        out_path : Path
            Destination PNG path.

    @returns
        Resolved path of the saved PNG.

    @raises
        DataError, VisualizationError depending on failure mode.
    """
    from matplotlib import pyplot as plt
    from matplotlib.patches import Patch

    # (1) Status matrix and labels
    frame = _status_frame(table)
    codes = frame.map(lambda s: STATUS_ORDER.index(DayStatus(s))).to_numpy()
    labels = frame.map(lambda s: DayStatus(s).code).to_numpy()
    counts = [day.active_count for day in sorted(table, key=lambda d: d.day_index)]
    flagged = [bool(day.errors) for day in sorted(table, key=lambda d: d.day_index)]

    # (2) Output directory
    out_path = Path(out_path)
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise VisualizationError(
            f"Cannot create output directory: {out_path.parent} ({exc})",
            source="visualizer.plot.plot_schedule",
            suggested_action="Check filesystem permissions or choose another output path",
        ) from exc

    width, height, dpi = _extract_visual_params(cfg, frame.shape[1])
    cmap = ListedColormap([STATUS_COLORS[s] for s in STATUS_ORDER])

    # (3) Draw grid
    fig, ax = plt.subplots(nrows=1, ncols=1, figsize=(width, height))
    try:
        sns.heatmap(
            codes,
            ax=ax,
            cmap=cmap,
            vmin=-0.5,
            vmax=len(STATUS_ORDER) - 0.5,
            annot=labels,
            fmt="",
            cbar=False,
            linewidths=0.5,
            linecolor="white",
            xticklabels=list(frame.columns),
            yticklabels=list(frame.index),
        )

        # (3.1) Active-count row under the grid
        n_rows = codes.shape[0]
        for x, (count, bad) in enumerate(zip(counts, flagged)):
            ax.text(
                x + 0.5,
                n_rows + 0.5,
                str(count),
                ha="center",
                va="center",
                fontsize=8,
                color="#c0392b" if bad else "black",
                fontweight="bold" if bad else "normal",
            )
        ax.set_ylim(n_rows + 1, 0)
        ax.set_yticks(np.arange(n_rows + 1) + 0.5)
        ax.set_yticklabels([*frame.index, "# Active"], rotation=0)
        ax.set_xlabel("day")
        ax.legend(
            handles=[
                Patch(color=STATUS_COLORS[s], label=s.value.title())
                for s in STATUS_ORDER
                if s is not DayStatus.EMPTY
            ],
            loc="upper center",
            bbox_to_anchor=(0.5, -0.25),
            ncol=len(STATUS_ORDER) - 1,
            frameon=False,
        )
        ax.title.set_text(f"Rotation over {frame.shape[1]} day(s), {sum(flagged)} flagged")
    except Exception as exc:
        plt.close(fig)
        raise VisualizationError(
            f"Plot rendering failed: {exc}",
            source="visualizer.plot.plot_schedule",
            suggested_action="Verify the schedule contents and seaborn/matplotlib versions",
        ) from exc

    # (4) Export rendered figure
    try:
        fig.savefig(out_path, dpi=dpi, bbox_inches="tight")
    except OSError as exc:
        raise VisualizationError(
            f"Failed to save figure: {out_path} ({exc})",
            source="visualizer.plot.plot_schedule",
            suggested_action="Check disk space and file permissions",
        ) from exc
    finally:
        plt.close(fig)

    return out_path.resolve()


__all__ = ["plot_schedule"]
