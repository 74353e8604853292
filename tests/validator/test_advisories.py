# tests/validator/test_advisories.py
from __future__ import annotations

import logging

import pytest

from rotaplan.schemas.models import RegimeParameters
from rotaplan.validator.advisories import regime_advisories


def test_sound_regime_has_no_advisories():
    assert regime_advisories(RegimeParameters()) == []


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"work_days": 13, "rest_days": 7}, {"RestRatio"}),
        ({"work_days": 7, "rest_days": 3, "induction_days": 5}, {"InductionMargin"}),
        ({"work_days": 30, "rest_days": 7, "induction_days": 6}, {"InductionRange"}),
        (
            {"work_days": 4, "rest_days": 4, "induction_days": 9},
            {"RestRatio", "InductionMargin", "InductionRange"},
        ),
    ],
)
def test_advisory_checks(overrides, expected):
    advisories = regime_advisories(RegimeParameters(**overrides))

    assert {a["check"] for a in advisories} == expected
    assert all(a["message"] and a["entities"] for a in advisories)


def test_advisories_are_logged(caplog):
    caplog.set_level(logging.WARNING, logger="rotaplan.validator.advisories")

    regime_advisories(RegimeParameters(work_days=10, rest_days=7))

    assert "RestRatio" in caplog.text
