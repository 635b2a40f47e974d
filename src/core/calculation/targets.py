#!/usr/bin/env python3
"""
File: targets.py
Author: Bastian Cerf
Date: 18/09/2026
Description:
    Target work time of a day and the derived balances.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
from typing import Optional

# Internal libraries
from .model import DayPlanConfig


def resolve_target_time(
    plan: DayPlanConfig,
    employee_target: Optional[int] = None,
    is_absence_day: bool = False,
) -> int:
    """
    Get the target minutes of the day. In order of priority:
    - the employee's target, if the plan takes it from the employee
        master data and it's known;
    - the plan's absence day target on absence days, if set;
    - the plan's regular target.

    Args:
        plan (DayPlanConfig): Active day plan.
        employee_target (Optional[int]): Employee's target minutes.
        is_absence_day (bool): `True` if the day is an absence day.

    Returns:
        int: Target minutes.
    """
    if plan.from_employee_master and employee_target is not None:
        return employee_target
    if is_absence_day and plan.regular_hours_2 is not None:
        return plan.regular_hours_2
    return plan.regular_hours


def calculate_overtime_undertime(net_time: int, target_time: int) -> tuple[int, int]:
    """
    Returns:
        tuple[int, int]: Overtime and undertime minutes, one of them is
            always 0.
    """
    return max(0, net_time - target_time), max(0, target_time - net_time)


def calculate_vacation_deduction(factor: float, absence_duration: float) -> float:
    """
    Weight an absence duration (in days or minutes) with the plan's
    vacation deduction factor.
    """
    return factor * absence_duration
