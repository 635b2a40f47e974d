#!/usr/bin/env python3
"""
File: time_window.py
Author: Bastian Cerf
Date: 14/09/2026
Description:
    Minute-of-day primitives shared by the calculation modules. A time
    of day is an integer number of minutes from midnight in the range
    [0, 1440]. 1440 is a valid value and means the end of the day.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
from dataclasses import dataclass
from typing import Final, Optional

# First and last valid minutes of a day
DAY_START: Final[int] = 0
DAY_END: Final[int] = 1440


def is_valid_time(minutes: int) -> bool:
    """
    Returns:
        bool: `True` if the value is a minute of day in [0, 1440].
    """
    return DAY_START <= minutes <= DAY_END


def clamp_time(minutes: int) -> int:
    """
    Clamp the value to the [0, 1440] range.
    """
    return max(DAY_START, min(DAY_END, minutes))


def in_window(minutes: int, start: Optional[int], end: Optional[int]) -> bool:
    """
    Check if a time falls within a window. Both bounds are inclusive.

    Args:
        minutes (int): Time to check.
        start (Optional[int]): Window start or `None` if not set.
        end (Optional[int]): Window end or `None` if not set.

    Returns:
        bool: `True` if the time is inside the window, always `False`
            if any bound is missing.
    """
    if start is None or end is None:
        return False
    return start <= minutes <= end


def overlap(start1: int, end1: int, start2: int, end2: int) -> int:
    """
    Compute the overlap of two time ranges.

    Returns:
        int: Overlap in minutes, 0 for disjoint or adjacent ranges.
    """
    return max(0, min(end1, end2) - max(start1, start2))


def format_time(minutes: Optional[int]) -> str:
    """
    Format a minute of day as 'HH:MM' for logging, '--:--' if `None`.
    """
    if minutes is None:
        return "--:--"
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_time(text: str) -> int:
    """
    Parse a 'HH:MM' string to a minute of day.

    Raises:
        ValueError: The text is not a valid time of day.
    """
    hours, sep, minutes = text.strip().partition(":")
    if not sep or not hours.isdigit() or not minutes.isdigit() or len(minutes) != 2:
        raise ValueError(f"Invalid time of day: '{text}'")

    value = int(hours) * 60 + int(minutes)
    if int(minutes) >= 60 or not is_valid_time(value):
        raise ValueError(f"Time of day out of range: '{text}'")
    return value


@dataclass(frozen=True)
class TimeWindow:
    """
    Inclusive time-of-day window.

    Attributes:
        start (int): First minute of the window.
        end (int): Last minute of the window.
    """

    start: int
    end: int

    def contains(self, minutes: int) -> bool:
        return in_window(minutes, self.start, self.end)

    def __str__(self) -> str:
        return f"[{format_time(self.start)}-{format_time(self.end)}]"
