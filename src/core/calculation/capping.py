#!/usr/bin/env python3
"""
File: capping.py
Author: Bastian Cerf
Date: 17/09/2026
Description:
    Track the minutes removed from an employee's day. Three independent
    sources exist:
    - arrival before the evaluation window (early arrival);
    - departure after the evaluation window (late departure);
    - net work time over the plan's maximum.

    Capping is pure bookkeeping: it clamps a value and records how much
    was clamped, but it never raises a warning or an error.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
from dataclasses import replace
from typing import Final, Optional

# Internal libraries
from .model import CappedTime, CappingResult, CappingSource

REASON_EARLY_ARRIVAL: Final[str] = "Arrival before evaluation window"
REASON_LATE_DEPARTURE: Final[str] = "Departure after evaluation window"
REASON_MAX_NET_TIME: Final[str] = "Exceeded maximum net work time"


########################################################################
#                          Capping sources                             #
########################################################################


def _early_arrival_start(
    window_start: int, tolerance_minus: int, allow_early_tolerance: bool
) -> int:
    if allow_early_tolerance and tolerance_minus > 0:
        return window_start - tolerance_minus
    return window_start


def calculate_early_arrival_capping(
    arrival: int,
    window_start: Optional[int],
    tolerance_minus: int,
    allow_early_tolerance: bool,
) -> Optional[CappedTime]:
    """
    Compute the minutes worked before the evaluation window.

    Args:
        arrival (int): Arrival time.
        window_start (Optional[int]): Plan's `come_from`.
        tolerance_minus (int): Early arrival grace.
        allow_early_tolerance (bool): `True` if the grace applies.

    Returns:
        Optional[CappedTime]: Capped minutes or `None` if nothing is
            capped or the window has no start.
    """
    if window_start is None:
        return None

    effective_start = _early_arrival_start(
        window_start, tolerance_minus, allow_early_tolerance
    )
    if arrival >= effective_start:
        return None

    return CappedTime(
        effective_start - arrival,
        CappingSource.EARLY_ARRIVAL,
        REASON_EARLY_ARRIVAL,
    )


def calculate_late_departure_capping(
    departure: int, window_end: Optional[int], tolerance_plus: int
) -> Optional[CappedTime]:
    """
    Compute the minutes worked after the evaluation window.

    Args:
        departure (int): Departure time.
        window_end (Optional[int]): Plan's `go_to`.
        tolerance_plus (int): Late departure grace.

    Returns:
        Optional[CappedTime]: Capped minutes or `None` if nothing is
            capped or the window has no end.
    """
    if window_end is None:
        return None

    effective_end = window_end + tolerance_plus
    if departure <= effective_end:
        return None

    return CappedTime(
        departure - effective_end,
        CappingSource.LATE_DEPARTURE,
        REASON_LATE_DEPARTURE,
    )


def calculate_max_net_time_capping(
    net_work_time: int, max_net_work_time: Optional[int]
) -> Optional[CappedTime]:
    """
    Compute the net minutes over the maximum.

    Returns:
        Optional[CappedTime]: Capped minutes or `None` if no maximum is
            configured or it isn't exceeded.
    """
    if max_net_work_time is None or net_work_time <= max_net_work_time:
        return None

    return CappedTime(
        net_work_time - max_net_work_time,
        CappingSource.MAX_NET_TIME,
        REASON_MAX_NET_TIME,
    )


########################################################################
#                        Capping application                           #
########################################################################


def apply_window_capping(
    minutes: int,
    window_start: Optional[int],
    window_end: Optional[int],
    tolerance_minus: int,
    tolerance_plus: int,
    is_arrival: bool,
    allow_early_tolerance: bool,
) -> tuple[int, int]:
    """
    Clamp one boundary time to the evaluation window.

    The input is always reconstructed by `adjusted - capped` for an
    arrival and by `adjusted + capped` for a departure.

    Args:
        minutes (int): Booking time.
        window_start (Optional[int]): Plan's `come_from`.
        window_end (Optional[int]): Plan's `go_to`.
        tolerance_minus (int): Early arrival grace.
        tolerance_plus (int): Late departure grace.
        is_arrival (bool): `True` for an arrival, `False` for a
            departure.
        allow_early_tolerance (bool): `True` if the early arrival grace
            applies.

    Returns:
        tuple[int, int]: Adjusted time and capped minutes.
    """
    if is_arrival:
        capped = calculate_early_arrival_capping(
            minutes, window_start, tolerance_minus, allow_early_tolerance
        )
        if capped is not None:
            return minutes + capped.minutes, capped.minutes
    else:
        capped = calculate_late_departure_capping(
            minutes, window_end, tolerance_plus
        )
        if capped is not None:
            return minutes - capped.minutes, capped.minutes

    return minutes, 0


def calculate_interval_capping(
    start: int,
    end: int,
    window_start: Optional[int],
    window_end: Optional[int],
    tolerance_minus: int,
    tolerance_plus: int,
    allow_early_tolerance: bool,
) -> tuple[Optional[CappedTime], Optional[CappedTime]]:
    """
    Compute the minutes of a work interval lying outside the evaluation
    window. Each side is limited to the interval duration, so an
    interval fully before or after the window only gives the minutes
    actually worked there.

    Args:
        start (int): Interval start time.
        end (int): Interval end time.
        window_start (Optional[int]): Plan's `come_from`.
        window_end (Optional[int]): Plan's `go_to`.
        tolerance_minus (int): Early arrival grace.
        tolerance_plus (int): Late departure grace.
        allow_early_tolerance (bool): `True` if the early arrival grace
            applies.

    Returns:
        tuple[Optional[CappedTime], Optional[CappedTime]]: Early arrival
            and late departure capping, `None` when nothing is capped.
    """
    duration = max(0, end - start)

    def limit(capped: Optional[CappedTime]) -> Optional[CappedTime]:
        if capped is None or duration == 0:
            return None
        return replace(capped, minutes=min(capped.minutes, duration))

    return (
        limit(
            calculate_early_arrival_capping(
                start, window_start, tolerance_minus, allow_early_tolerance
            )
        ),
        limit(calculate_late_departure_capping(end, window_end, tolerance_plus)),
    )


def apply_max_net_capping(
    net_work_time: int, max_net_work_time: Optional[int]
) -> tuple[int, int]:
    """
    Clamp the net work time to the maximum.

    Returns:
        tuple[int, int]: Adjusted net time and capped minutes.
    """
    capped = calculate_max_net_time_capping(net_work_time, max_net_work_time)
    if capped is None:
        return net_work_time, 0
    return net_work_time - capped.minutes, capped.minutes


def aggregate_capping(*items: Optional[CappedTime]) -> CappingResult:
    """
    Sum the capped minutes. Missing and non-positive items are ignored,
    the order of the items doesn't change the total.

    Returns:
        CappingResult: Total and per-source detail.
    """
    kept = tuple(
        sorted(
            (item for item in items if item is not None and item.minutes > 0),
            key=lambda item: (item.source.value, item.minutes),
        )
    )
    return CappingResult(sum(item.minutes for item in kept), kept)
