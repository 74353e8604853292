# src/rotaplan/validator/advisories.py
from __future__ import annotations

import logging
from typing import Any

from rotaplan.schemas.models import RegimeParameters

logger = logging.getLogger(__name__)

# Onboarding length accepted by the configuration form
INDUCTION_RANGE = (0, 5)


def regime_advisories(params: RegimeParameters) -> list[dict[str, Any]]:
    """
    @brief
    Non-blocking warnings about a regime that is likely to leave coverage gaps.

    @details
    The generator runs for any non-negative regime; these checks only tell the
    caller that the result will probably carry more diagnostic flags:
        RestRatio       : work_days >= 2 * rest_days
        InductionMargin : work_days > induction_days + 2
        InductionRange  : induction_days within 0..5

    @params
        params : RegimeParameters
            Regime to inspect.

    @returns
        List of {"check", "message", "entities"} dicts (empty when the regime is sound).
    """
    advisories: list[dict[str, Any]] = []

    if params.work_days < 2 * params.rest_days:
        advisories.append(
            {
                "check": "RestRatio",
                "message": "work_days should be at least twice rest_days (N >= 2*M)",
                "entities": {"work_days": params.work_days, "rest_days": params.rest_days},
            }
        )

    if params.work_days <= params.induction_days + 2:
        advisories.append(
            {
                "check": "InductionMargin",
                "message": "work_days should exceed induction_days + 2",
                "entities": {
                    "work_days": params.work_days,
                    "induction_days": params.induction_days,
                },
            }
        )

    lo, hi = INDUCTION_RANGE
    if not lo <= params.induction_days <= hi:
        advisories.append(
            {
                "check": "InductionRange",
                "message": f"induction_days is expected within {lo}..{hi}",
                "entities": {"induction_days": params.induction_days},
            }
        )

    for item in advisories:
        logger.warning("Regime advisory (%s): %s", item["check"], item["message"])
    return advisories


__all__ = ["regime_advisories"]
