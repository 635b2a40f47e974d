#!/usr/bin/env python3
"""
File: day_plan_loader_test.py
Author: Bastian Cerf
Date: 29/09/2026
Description:
    Unit test the day plan loaders.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import pytest
import logging
from pathlib import Path

# Third-party libraries
import openpyxl

# Internal libraries
from .test_constants import *
from .calc_helpers import *
from core.calculation.model import (
    BreakType,
    DayPlanConfig,
    PlanType,
    RoundingType,
)
from core.day_plans.day_plan_loader import (
    CachedDayPlanLoader,
    DayPlanFormatError,
    DayPlanLoader,
    DayPlanLoaderException,
    MemoryDayPlanLoader,
)
from core.day_plans.workbook_day_plan_loader import WorkbookDayPlanLoader

logger = logging.getLogger(__name__)


class CountingDayPlanLoader(DayPlanLoader):
    """
    Loader counting the lookups, failing on a given plan.
    """

    def __init__(self, loader: DayPlanLoader, failing: str = ""):
        self.loader = loader
        self.failing = failing
        self.calls = 0

    def load(self, plan_id: str):
        self.calls += 1
        if plan_id == self.failing:
            raise DayPlanLoaderException()
        return self.loader.load(plan_id)


########################################################################
#                          Memory loader tests                         #
########################################################################


def test_memory_loader(fixed_plan: DayPlanConfig, flex_plan: DayPlanConfig):
    """
    Plans are served by identifier, unknown plans give `None`.
    """
    loader = MemoryDayPlanLoader([fixed_plan])
    assert loader.load(TEST_FIXED_PLAN_ID) is fixed_plan
    assert loader.load(TEST_FLEX_PLAN_ID) is None
    assert TEST_FLEX_PLAN_ID not in loader

    loader.add(flex_plan)
    assert loader.load(TEST_FLEX_PLAN_ID) is flex_plan
    assert TEST_FLEX_PLAN_ID in loader


########################################################################
#                          Cached loader tests                         #
########################################################################


def test_cached_loader(fixed_plan: DayPlanConfig):
    """
    Plans and misses are looked up once until the cache is cleared.
    """
    source = CountingDayPlanLoader(MemoryDayPlanLoader([fixed_plan]))
    loader = CachedDayPlanLoader(source)

    for _ in range(3):
        assert loader.load(TEST_FIXED_PLAN_ID) is fixed_plan
        assert loader.load("UNKNOWN") is None
    assert source.calls == 2

    loader.clear()
    loader.load(TEST_FIXED_PLAN_ID)
    assert source.calls == 3


def test_cached_loader_doesnt_cache_failures():
    """
    A failing lookup is retried on the next call.
    """
    source = CountingDayPlanLoader(MemoryDayPlanLoader(), failing="LOCKED")
    loader = CachedDayPlanLoader(source)

    for _ in range(2):
        with pytest.raises(DayPlanLoaderException):
            loader.load("LOCKED")
    # An unreadable plan is neither found nor missing
    with pytest.raises(DayPlanLoaderException):
        "LOCKED" in loader
    assert source.calls == 3


########################################################################
#                         Workbook loader tests                        #
########################################################################


def test_workbook_plan_ids(plans_workbook: Path):
    """
    Every plan row is listed, even the malformed ones.
    """
    loader = WorkbookDayPlanLoader(plans_workbook)
    assert loader.plan_ids == [TEST_FIXED_PLAN_ID, TEST_FLEX_PLAN_ID, TEST_LATE_PLAN_ID]


def test_workbook_fixed_plan(plans_workbook: Path):
    """
    Check every converted value of the fixed plan.
    """
    plan = WorkbookDayPlanLoader(plans_workbook).load(TEST_FIXED_PLAN_ID)

    assert plan.plan_type == PlanType.FIXED
    assert plan.plan_code == "F8"
    assert (plan.come_from, plan.come_to) == (T_0700, T_0800)
    assert (plan.go_from, plan.go_to) == (T_1600, T_1700)
    assert (plan.core_start, plan.core_end) == (T_0900, T_1600)
    assert plan.tolerance.come_plus == 5
    assert plan.tolerance.come_minus == 0
    assert plan.tolerance.go_minus == 5
    assert plan.rounding_come.type == RoundingType.UP
    assert plan.rounding_come.interval == 15
    assert plan.rounding_go.type == RoundingType.NONE
    assert plan.regular_hours == 480
    assert plan.max_net_work_time == 600
    assert plan.vacation_deduction_factor == 1.0
    assert not plan.variable_work_time

    assert plan.shift_detection.arrive_from == T_0600
    assert plan.shift_detection.arrive_to == T_0900
    assert plan.shift_detection.departure_window is None
    assert plan.shift_detection.alternative_plan_ids == (
        TEST_FLEX_PLAN_ID,
        TEST_LATE_PLAN_ID,
    )

    fixed, minimum = plan.breaks
    assert fixed.type == BreakType.FIXED
    assert (fixed.start_time, fixed.end_time, fixed.duration) == (T_1200, T_1230, 30)
    assert fixed.auto_deduct
    assert minimum.type == BreakType.MINIMUM
    assert minimum.after_work_minutes == 540
    assert minimum.minutes_difference


def test_workbook_flextime_plan(plans_workbook: Path):
    """
    Minutes given as numbers and textual booleans are converted.
    """
    plan = WorkbookDayPlanLoader(plans_workbook).load(TEST_FLEX_PLAN_ID)

    assert plan.is_flextime
    assert (plan.come_from, plan.go_to) == (420, 1080)
    assert plan.tolerance.come_minus == 30
    assert plan.variable_work_time
    assert plan.vacation_deduction_factor == 0.5
    assert plan.breaks == ()
    assert not plan.shift_detection.is_active


def test_workbook_plan_is_cached(plans_workbook: Path):
    """
    A plan is built once.
    """
    loader = WorkbookDayPlanLoader(plans_workbook)
    assert loader.load(TEST_FIXED_PLAN_ID) is loader.load(TEST_FIXED_PLAN_ID)


def test_workbook_unknown_plan(plans_workbook: Path):
    """
    An unknown plan gives `None`.
    """
    assert WorkbookDayPlanLoader(plans_workbook).load(TEST_NIGHT_PLAN_ID) is None


def test_workbook_malformed_plan(plans_workbook: Path):
    """
    A malformed plan raises a format error naming the plan.
    """
    loader = WorkbookDayPlanLoader(plans_workbook)
    with pytest.raises(DayPlanFormatError, match=TEST_LATE_PLAN_ID):
        loader.load(TEST_LATE_PLAN_ID)
    # Other plans are still available
    assert loader.load(TEST_FLEX_PLAN_ID) is not None


def test_workbook_missing_file(tmp_path: Path):
    """
    A missing workbook raises a loader exception.
    """
    with pytest.raises(DayPlanLoaderException):
        WorkbookDayPlanLoader(tmp_path / "missing.xlsx")


def test_workbook_missing_plans_sheet(plans_workbook: Path):
    """
    The plans sheet is mandatory.
    """
    with pytest.raises(DayPlanLoaderException, match="not found"):
        WorkbookDayPlanLoader(plans_workbook, plans_sheet="day plans")


def test_workbook_missing_breaks_sheet(tmp_path: Path):
    """
    The breaks sheet is optional.
    """
    path = write_workbook(tmp_path / TEST_WORKBOOK_NAME, [{"plan_id": "P1"}])
    plan = WorkbookDayPlanLoader(path).load("P1")
    assert plan.breaks == ()
    assert plan.regular_hours == 480


def test_workbook_unknown_column(tmp_path: Path):
    """
    An unknown column is rejected.
    """
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "plans"
    sheet.append(["plan_id", "come_from", "colour"])
    sheet.append(["P1", 420, "blue"])
    path = tmp_path / TEST_WORKBOOK_NAME
    workbook.save(path)

    with pytest.raises(DayPlanLoaderException, match="colour"):
        WorkbookDayPlanLoader(path)


def test_workbook_duplicate_plan(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    """
    The first row of a duplicated plan is used.
    """
    path = write_workbook(
        tmp_path / TEST_WORKBOOK_NAME,
        [{"plan_id": "P1", "plan_code": "first"}, {"plan_id": "P1", "plan_code": "second"}],
    )

    with caplog.at_level(logging.WARNING):
        loader = WorkbookDayPlanLoader(path)

    assert loader.load("P1").plan_code == "first"
    assert "Duplicate day plan 'P1'" in caplog.text
