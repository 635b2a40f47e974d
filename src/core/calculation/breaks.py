#!/usr/bin/env python3
"""
File: breaks.py
Author: Bastian Cerf
Date: 18/09/2026
Description:
    Compute the break minutes deducted from the gross work time.

    Without break rules the booked break time is deducted. Otherwise the
    deduction is the booked break time plus the contribution of each
    rule:
    - fixed: time worked during the fixed break range, up to the rule
        duration, always deducted;
    - variable: rule duration, only if no break was booked;
    - minimum: rule duration once the gross work time reaches the
        threshold, or only the minutes over the threshold with
        `minutes_difference`.
    Variable and minimum rules are ignored unless `auto_deduct` is set.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import logging
from typing import Iterable, Sequence

# Internal libraries
from .model import BookingCategory, BreakConfig, BreakType
from .pairing import BookingInterval
from .time_window import overlap

logger = logging.getLogger(__name__)


def deduct_fixed_break(
    intervals: Iterable[BookingInterval], config: BreakConfig
) -> int:
    """
    Returns:
        int: Work minutes overlapping the fixed break range, capped at
            the rule duration. 0 if the range isn't set.
    """
    if config.start_time is None or config.end_time is None:
        return 0

    worked = sum(
        overlap(i.start, i.end, config.start_time, config.end_time)
        for i in intervals
        if i.category is BookingCategory.WORK
    )
    return min(worked, config.duration)


def calculate_minimum_break(gross_time: int, config: BreakConfig) -> int:
    """
    Returns:
        int: Minimum break minutes due for the gross work time. 0 if the
            threshold isn't set or not reached.
    """
    threshold = config.after_work_minutes
    if threshold is None or gross_time < threshold:
        return 0

    if config.minutes_difference:
        return min(gross_time - threshold, config.duration)
    return config.duration


def calculate_variable_break(
    gross_time: int, recorded_break: int, config: BreakConfig
) -> int:
    """
    Returns:
        int: Variable break minutes, only due when no break was booked
            and the optional threshold is reached.
    """
    if recorded_break > 0:
        return 0
    if config.after_work_minutes is not None and gross_time < config.after_work_minutes:
        return 0
    return config.duration


def calculate_break_deduction(
    intervals: Sequence[BookingInterval],
    recorded_break: int,
    gross_time: int,
    configs: Sequence[BreakConfig],
) -> int:
    """
    Compute the total break minutes to deduct.

    Args:
        intervals (Sequence[BookingInterval]): Paired intervals with
            adjusted times.
        recorded_break (int): Booked break minutes.
        gross_time (int): Gross work minutes.
        configs (Sequence[BreakConfig]): Break rules of the plan.

    Returns:
        int: Minutes to deduct.
    """
    if not configs:
        return recorded_break

    total = recorded_break
    for config in configs:
        match config.type:
            case BreakType.FIXED:
                deducted = deduct_fixed_break(intervals, config)
            case BreakType.VARIABLE if config.auto_deduct:
                deducted = calculate_variable_break(gross_time, recorded_break, config)
            case BreakType.MINIMUM if config.auto_deduct:
                deducted = calculate_minimum_break(gross_time, config)
            case _:
                deducted = 0

        if deducted:
            logger.debug(f"{config.type.value} break rule deducts {deducted} minutes.")
        total += deducted

    return total
