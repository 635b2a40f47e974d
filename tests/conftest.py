#!/usr/bin/env python3
"""
File: conftest.py
Author: Bastian Cerf
Date: 13/04/2025
Description:
    Declaration of shared fixtures across unit test modules.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import pytest
from pathlib import Path

# Internal libraries
from tests.test_constants import *
from tests.calc_helpers import write_workbook
from core.calculation.model import (
    DayPlanConfig,
    PlanType,
    ShiftDetectionConfig,
    Tolerance,
)
from core.calculation.calculator import DailyCalculator
from core.day_plans.day_plan_loader import MemoryDayPlanLoader

########################################################################
#                            Day plan fixtures                         #
########################################################################


@pytest.fixture
def fixed_plan() -> DayPlanConfig:
    """
    Fixed plan 08:00-17:00 with arrival window 07:00-08:00 and departure
    window 16:00-17:00.
    """
    return DayPlanConfig(
        plan_id=TEST_FIXED_PLAN_ID,
        plan_type=PlanType.FIXED,
        plan_code="F8",
        come_from=T_0700,
        come_to=T_0800,
        go_from=T_1600,
        go_to=T_1700,
        regular_hours=480,
    )


@pytest.fixture
def flex_plan() -> DayPlanConfig:
    """
    Flextime plan with tolerances set on every boundary.
    """
    return DayPlanConfig(
        plan_id=TEST_FLEX_PLAN_ID,
        plan_type=PlanType.FLEXTIME,
        come_from=T_0700,
        come_to=T_0900,
        go_from=T_1500,
        go_to=T_1700,
        tolerance=Tolerance(come_plus=10, come_minus=15, go_plus=20, go_minus=10),
    )


@pytest.fixture
def shift_plans() -> MemoryDayPlanLoader:
    """
    Early, late and night shift plans. The early plan lists the two
    other plans as alternatives.
    """
    early = DayPlanConfig(
        plan_id=TEST_EARLY_PLAN_ID,
        come_from=T_0600,
        go_to=T_1400,
        shift_detection=ShiftDetectionConfig(
            arrive_from=5 * 60,
            arrive_to=T_0700,
            alternative_plan_ids=(TEST_LATE_PLAN_ID, TEST_NIGHT_PLAN_ID),
        ),
    )
    late = DayPlanConfig(
        plan_id=TEST_LATE_PLAN_ID,
        come_from=T_1300,
        go_to=T_2200,
        shift_detection=ShiftDetectionConfig(arrive_from=T_1200, arrive_to=T_1400),
    )
    night = DayPlanConfig(
        plan_id=TEST_NIGHT_PLAN_ID,
        come_from=T_2200,
        go_to=1440,
        shift_detection=ShiftDetectionConfig(arrive_from=21 * 60, arrive_to=23 * 60),
    )
    return MemoryDayPlanLoader([early, late, night])


@pytest.fixture
def calculator() -> DailyCalculator:
    """
    Calculator without external lookups.
    """
    return DailyCalculator()


########################################################################
#                         Workbook arrangement                         #
########################################################################


@pytest.fixture
def plans_workbook(tmp_path: Path) -> Path:
    """
    Workbook with a fixed plan and its break rules, a flextime plan and
    a malformed plan.
    """
    return write_workbook(
        tmp_path / TEST_WORKBOOK_NAME,
        plans=[
            {
                "plan_id": TEST_FIXED_PLAN_ID,
                "plan_code": "F8",
                "plan_type": "fixed",
                "come_from": "07:00",
                "come_to": "08:00",
                "go_from": "16:00",
                "go_to": "17:00",
                "core_start": "09:00",
                "core_end": "16:00",
                "come_plus": 5,
                "go_minus": 5,
                "rounding_come": "up",
                "rounding_come_interval": 15,
                "regular_hours": "08:00",
                "max_net_work_time": 600,
                "shift_arrive_from": "06:00",
                "shift_arrive_to": "09:00",
                "alternative_plans": f"{TEST_FLEX_PLAN_ID}, {TEST_LATE_PLAN_ID}",
            },
            {
                "plan_id": TEST_FLEX_PLAN_ID,
                "plan_type": "flextime",
                "come_from": 420,
                "come_to": 540,
                "go_from": 900,
                "go_to": 1080,
                "come_minus": 30,
                "variable_work_time": "yes",
                "vacation_deduction_factor": 0.5,
            },
            {
                "plan_id": TEST_LATE_PLAN_ID,
                "come_from": "25:00",
            },
        ],
        breaks=[
            {
                "plan_id": TEST_FIXED_PLAN_ID,
                "type": "fixed",
                "duration": 30,
                "start_time": "12:00",
                "end_time": "12:30",
            },
            {
                "plan_id": TEST_FIXED_PLAN_ID,
                "type": "minimum",
                "duration": 15,
                "after_work_minutes": 540,
                "minutes_difference": True,
            },
        ],
    )
