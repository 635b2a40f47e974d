#!/usr/bin/env python3
"""
File: rounding.py
Author: Bastian Cerf
Date: 16/09/2026
Description:
    Snap boundary times to a configured increment.

    The grid is anchored at midnight by default. When the rounding is
    relative to the plan, it is anchored at the plan's `come_from` for
    arrivals and `go_from` for departures, so a 15 minutes grid on a
    plan starting at 07:10 gives 07:10, 07:25, ...

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
from typing import Optional

# Internal libraries
from .model import DayPlanConfig, RoundingRule, RoundingType
from .time_window import clamp_time


def round_time(minutes: int, rule: RoundingRule, anchor: int = 0) -> int:
    """
    Apply a rounding rule to a time.

    Args:
        minutes (int): Time to round.
        rule (RoundingRule): Rounding rule.
        anchor (int): Origin of the rounding grid.

    Returns:
        int: Rounded time clamped to [0, 1440]. The time is unchanged
            for a `NONE` rule or a grid rule without interval.
    """
    match rule.type:
        case RoundingType.ADD:
            return clamp_time(minutes + rule.add_value)
        case RoundingType.SUBTRACT:
            return clamp_time(minutes - rule.add_value)
        case RoundingType.NONE:
            return minutes

    if rule.interval <= 0:
        return minutes

    # Distance to the previous grid point, always positive
    remainder = (minutes - anchor) % rule.interval
    down = minutes - remainder
    up = down if remainder == 0 else down + rule.interval

    match rule.type:
        case RoundingType.UP:
            rounded = up
        case RoundingType.DOWN:
            rounded = down
        case _:
            # Nearest, halfway rounds up
            rounded = up if remainder * 2 >= rule.interval else down

    return clamp_time(rounded)


def _anchor(reference: Optional[int], relative_to_plan: bool) -> int:
    if relative_to_plan and reference is not None:
        return reference
    return 0


def round_come_time(
    minutes: int, plan: DayPlanConfig, relative_to_plan: bool = False
) -> int:
    """
    Round an arrival with the plan's arrival rule.
    """
    return round_time(
        minutes, plan.rounding_come, _anchor(plan.come_from, relative_to_plan)
    )


def round_go_time(
    minutes: int, plan: DayPlanConfig, relative_to_plan: bool = False
) -> int:
    """
    Round a departure with the plan's departure rule.
    """
    return round_time(
        minutes, plan.rounding_go, _anchor(plan.go_from, relative_to_plan)
    )
