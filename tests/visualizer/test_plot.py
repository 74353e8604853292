# tests/visualizer/test_plot.py
from __future__ import annotations

from types import SimpleNamespace

import pytest

from rotaplan.errors import DataError
from rotaplan.generator.orchestrator import generate_schedule
from rotaplan.schemas.models import Config, DaySchedule, RegimeParameters
from rotaplan.visualizer.plot import _extract_visual_params, _status_frame, plot_schedule

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def test_plot_schedule_writes_png(tmp_path):
    """
    @brief
    The roster grid is rendered headlessly to the requested PNG path.
    """
    # --- Arrange ---
    table = generate_schedule(RegimeParameters())
    out = tmp_path / "plots" / "schedule_plot.png"

    # --- Act ---
    path = plot_schedule(table, Config(), out)

    # --- Assert ---
    assert path == out.resolve()
    assert path.read_bytes()[:8] == PNG_MAGIC


def test_plot_empty_schedule_raises(tmp_path):
    with pytest.raises(DataError):
        plot_schedule([], Config(), tmp_path / "x.png")


def test_status_frame_layout():
    table = generate_schedule(RegimeParameters(total_days=10))

    frame = _status_frame(table)

    assert list(frame.index) == ["Fixed", "Role A", "Role B"]
    assert list(frame.columns) == list(range(10))
    assert frame.loc["Role A", 0] == "UP"
    assert frame.loc["Role B", 0] == "EMPTY"


def test_status_frame_rejects_foreign_rows():
    with pytest.raises(DataError):
        _status_frame([DaySchedule(day_index=0), {"day_index": 1}])  # type: ignore[list-item]


def test_visual_params_auto_width_and_overrides():
    width, height, dpi = _extract_visual_params(Config(), num_days=60)
    assert width == pytest.approx(0.32 * 60 + 2.0)
    assert (height, dpi) == (3.5, 120)

    cfg = SimpleNamespace(visual=SimpleNamespace(width=6, height=2, dpi=72))
    assert _extract_visual_params(cfg, num_days=60) == (6.0, 2.0, 72)

    assert _extract_visual_params(object(), num_days=5)[0] == 8.0
