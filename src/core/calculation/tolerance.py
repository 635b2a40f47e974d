#!/usr/bin/env python3
"""
File: tolerance.py
Author: Bastian Cerf
Date: 17/09/2026
Description:
    Decide which grace tolerances apply to a day plan and normalize the
    boundary times with them.

    Tolerance policy by plan type:

    | Plan type | variable_work_time | come_minus | come_plus / go_minus |
    |-----------|--------------------|------------|----------------------|
    | fixed     | false              | no         | yes                  |
    | fixed     | true               | yes        | yes                  |
    | flextime  | any                | yes        | no, forced to zero   |

    `effective_tolerance()` is the only place holding this table. It is
    evaluated on each calculation, whatever values were stored in the
    plan.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
from dataclasses import dataclass
from typing import Optional

# Internal libraries
from .model import DayPlanConfig, Tolerance


@dataclass(frozen=True)
class EffectiveTolerance:
    """
    Tolerances that actually apply to a plan.

    Attributes:
        tolerance (Tolerance): Grace minutes, disabled ones set to 0.
        allow_early_arrival (bool): `True` if the early arrival grace
            (`come_minus`) applies.
    """

    tolerance: Tolerance
    allow_early_arrival: bool


def effective_tolerance(plan: DayPlanConfig) -> EffectiveTolerance:
    """
    Apply the tolerance policy of the plan type to the stored values.

    Args:
        plan (DayPlanConfig): Day plan.

    Returns:
        EffectiveTolerance: Tolerances to use for the calculation.
    """
    stored = plan.tolerance

    if plan.is_flextime:
        # No schedule to be late for or to leave early from
        return EffectiveTolerance(
            Tolerance(
                come_plus=0,
                come_minus=stored.come_minus,
                go_plus=stored.go_plus,
                go_minus=0,
            ),
            allow_early_arrival=True,
        )

    if plan.variable_work_time:
        return EffectiveTolerance(stored, allow_early_arrival=True)

    return EffectiveTolerance(
        Tolerance(
            come_plus=stored.come_plus,
            come_minus=0,
            go_plus=stored.go_plus,
            go_minus=stored.go_minus,
        ),
        allow_early_arrival=False,
    )


def apply_come_tolerance(
    arrival: int, come_from: Optional[int], tolerance: Tolerance
) -> int:
    """
    Forgive a slightly late arrival. An arrival in
    `(come_from, come_from + come_plus]` is set to `come_from`.
    """
    if come_from is None or tolerance.come_plus <= 0:
        return arrival
    if come_from < arrival <= come_from + tolerance.come_plus:
        return come_from
    return arrival


def apply_go_tolerance(
    departure: int, go_to: Optional[int], tolerance: Tolerance
) -> int:
    """
    Forgive a slightly early departure. A departure in
    `[go_to - go_minus, go_to)` is set to `go_to`.
    """
    if go_to is None or tolerance.go_minus <= 0:
        return departure
    if go_to - tolerance.go_minus <= departure < go_to:
        return go_to
    return departure
