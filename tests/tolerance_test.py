#!/usr/bin/env python3
"""
File: tolerance_test.py
Author: Bastian Cerf
Date: 26/09/2026
Description:
    Unit test the tolerance normalizer module.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import pytest
from dataclasses import replace

# Internal libraries
from .test_constants import *
from .calc_helpers import *
from core.calculation.calculator import DailyCalculator
from core.calculation.model import DayPlanConfig, PlanType, Tolerance
from core.calculation.tolerance import (
    apply_come_tolerance,
    apply_go_tolerance,
    effective_tolerance,
)

STORED = Tolerance(come_plus=5, come_minus=30, go_plus=20, go_minus=10)

########################################################################
#                         Tolerance policy tests                       #
########################################################################


def test_fixed_plan_policy():
    """
    A fixed plan without variable work time ignores `come_minus`.
    """
    plan = DayPlanConfig(plan_id=TEST_FIXED_PLAN_ID, tolerance=STORED)
    effective = effective_tolerance(plan)

    assert not effective.allow_early_arrival
    assert effective.tolerance == Tolerance(
        come_plus=5, come_minus=0, go_plus=20, go_minus=10
    )


def test_fixed_variable_plan_policy():
    """
    Variable work time enables `come_minus` on a fixed plan.
    """
    plan = DayPlanConfig(
        plan_id=TEST_FIXED_PLAN_ID, tolerance=STORED, variable_work_time=True
    )
    effective = effective_tolerance(plan)

    assert effective.allow_early_arrival
    assert effective.tolerance == STORED


@pytest.mark.parametrize("variable_work_time", [True, False])
def test_flextime_plan_policy(variable_work_time: bool):
    """
    A flextime plan always allows `come_minus` and never `come_plus` or
    `go_minus`, whatever the stored values.
    """
    plan = DayPlanConfig(
        plan_id=TEST_FLEX_PLAN_ID,
        plan_type=PlanType.FLEXTIME,
        tolerance=STORED,
        variable_work_time=variable_work_time,
    )
    effective = effective_tolerance(plan)

    assert effective.allow_early_arrival
    assert effective.tolerance == Tolerance(
        come_plus=0, come_minus=30, go_plus=20, go_minus=0
    )


########################################################################
#                       Boundary normalization tests                   #
########################################################################


@pytest.mark.parametrize(
    "arrival, expected",
    [
        (479, 479),  # Early, unchanged
        (480, 480),  # On time
        (483, 480),  # Within the grace
        (485, 480),  # Last forgiven minute
        (486, 486),  # Late
    ],
)
def test_come_tolerance(arrival: int, expected: int):
    """
    Late arrivals in `(come_from, come_from + come_plus]` are forgiven.
    """
    assert apply_come_tolerance(arrival, 480, Tolerance(come_plus=5)) == expected


@pytest.mark.parametrize(
    "departure, expected",
    [
        (1014, 1014),  # Early
        (1015, 1020),  # First forgiven minute
        (1017, 1020),  # Within the grace
        (1020, 1020),  # On time
        (1025, 1025),  # Late, unchanged
    ],
)
def test_go_tolerance(departure: int, expected: int):
    """
    Early departures in `[go_to - go_minus, go_to)` are forgiven.
    """
    assert apply_go_tolerance(departure, 1020, Tolerance(go_minus=5)) == expected


def test_tolerance_without_reference():
    """
    Without plan time, the booking is unchanged.
    """
    assert apply_come_tolerance(483, None, Tolerance(come_plus=5)) == 483
    assert apply_go_tolerance(1017, None, Tolerance(go_minus=5)) == 1017


########################################################################
#                        Flextime idempotence test                     #
########################################################################


@pytest.mark.parametrize(
    "bookings",
    [
        work_day(T_0700 + 5, T_1700 - 5),
        work_day(T_0700 - 20, T_1200, T_1300, T_1700 + 30),
        work_day(T_0900 + 3, T_1500 - 3),
        [work_in(T_0800)],
    ],
)
def test_flextime_ignores_stored_come_plus_go_minus(
    flex_plan: DayPlanConfig, bookings: list
):
    """
    A flextime day gives the same result whatever the stored
    `come_plus`, `go_minus` and `variable_work_time` values.
    """
    calculator = DailyCalculator()
    reference = calculator.calculate(
        bookings,
        replace(
            flex_plan,
            tolerance=replace(flex_plan.tolerance, come_plus=0, go_minus=0),
            variable_work_time=False,
        ),
    )

    for come_plus, go_minus, variable in [(10, 10, True), (60, 0, False), (0, 45, True)]:
        plan = replace(
            flex_plan,
            tolerance=replace(
                flex_plan.tolerance, come_plus=come_plus, go_minus=go_minus
            ),
            variable_work_time=variable,
        )
        assert calculator.calculate(bookings, plan) == reference
