#!/usr/bin/env python3
"""
File: calculator.py
Author: Bastian Cerf
Date: 22/09/2026
Description:
    Daily calculator. Turns the bookings of an employee's day into a
    `CalculationResult` by running a fixed sequence of stages, declared
    once in `PIPELINE`:

    1. check the booking times;
    2. pair the bookings and locate the first arrival and last departure;
    3. detect the shift, possibly switching the active plan;
    4. round the boundary times;
    5. normalize the boundary times with the plan tolerances;
    6. cap the times outside of the evaluation window;
    7. aggregate gross, break and net times, cap the net time;
    8. emit the window violation warnings;
    9. emit the booking and shift errors;
    10. compute the target time and the day balance.

    Each stage is a pure function taking the `DayContext` built by the
    previous stages and returning a new one. Problems with the bookings
    never interrupt the pipeline, they end up as codes in the result.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Final, Optional, Sequence

# Internal libraries
from core.day_plans.day_plan_loader import DayPlanLoader
from .codes import CalculationCode
from .model import *
from .pairing import (
    PairingIssueKind,
    PairingResult,
    adjust_intervals,
    calculate_break_time,
    calculate_gross_time,
    find_first_come_index,
    find_last_go_index,
    pair_bookings,
)
from .rounding import round_come_time, round_go_time
from .tolerance import apply_come_tolerance, apply_go_tolerance, effective_tolerance
from .capping import (
    aggregate_capping,
    apply_max_net_capping,
    apply_window_capping,
    calculate_interval_capping,
    calculate_max_net_time_capping,
)
from .breaks import calculate_break_deduction
from .shift_detection import ShiftDetector
from .targets import calculate_overtime_undertime, resolve_target_time
from .time_window import format_time, is_valid_time

logger = logging.getLogger(__name__)

# Employee target minutes lookup
TargetLookup = Callable[[str], Optional[int]]

########################################################################
#                        Day context declaration                       #
########################################################################


@dataclass(frozen=True)
class DayContext:
    """
    State passed from one pipeline stage to the next. Never modified,
    each stage returns a copy.

    Attributes:
        bookings (tuple[Booking, ...]): Input bookings.
        plan (DayPlanConfig): Active plan, may change at shift detection.
        detector (ShiftDetector): Shift detector.
        rounding_relative_to_plan (bool): Anchor the rounding grid on
            the plan windows.
        employee_target (Optional[int]): Employee's target minutes.
        is_absence_day (bool): The day is an absence day.
        invalid_indices (tuple[int, ...]): Bookings with an out of range
            time.
        pairing (PairingResult): Pairing output.
        first_index (Optional[int]): Index of the first work arrival.
        last_index (Optional[int]): Index of the last work departure.
        shift (Optional[ShiftDetectionResult]): Shift detection output.
        times (tuple[int, ...]): Current time of each booking.
        validation_times (tuple[int, ...]): Booking times after rounding
            and tolerance, before capping.
        window_capping (tuple[CappedTime, ...]): Window capping items.
        gross_time (int): Gross work minutes.
        break_time (int): Deducted break minutes.
        net_time (int): Net work minutes, capped.
        capping (CappingResult): All capping items.
        target_time (int): Target minutes.
        overtime (int): Overtime minutes.
        undertime (int): Undertime minutes.
        warnings (tuple[CalculationCode, ...]): Warning codes.
        errors (tuple[CalculationCode, ...]): Error codes.
    """

    bookings: tuple[Booking, ...]
    plan: DayPlanConfig
    detector: ShiftDetector
    rounding_relative_to_plan: bool = False
    employee_target: Optional[int] = None
    is_absence_day: bool = False
    invalid_indices: tuple[int, ...] = ()
    pairing: PairingResult = field(default_factory=PairingResult)
    first_index: Optional[int] = None
    last_index: Optional[int] = None
    shift: Optional[ShiftDetectionResult] = None
    times: tuple[int, ...] = ()
    validation_times: tuple[int, ...] = ()
    window_capping: tuple[CappedTime, ...] = ()
    gross_time: int = 0
    break_time: int = 0
    net_time: int = 0
    capping: CappingResult = field(default_factory=CappingResult)
    target_time: int = 0
    overtime: int = 0
    undertime: int = 0
    warnings: tuple[CalculationCode, ...] = ()
    errors: tuple[CalculationCode, ...] = ()

    @property
    def has_bookings(self) -> bool:
        """
        Returns:
            bool: `True` if at least one booking has a valid time.
        """
        return len(self.invalid_indices) < len(self.bookings)

    def is_work(self, index: int) -> bool:
        """
        Returns:
            bool: `True` for a valid work booking.
        """
        return (
            index not in self.invalid_indices
            and self.bookings[index].category is BookingCategory.WORK
        )

    def validation_time(self, index: Optional[int]) -> Optional[int]:
        """
        Returns:
            Optional[int]: Pre-capping time of a booking, `None` for a
                missing index.
        """
        return None if index is None else self.validation_times[index]

    def __str__(self) -> str:
        return (
            f"{len(self.bookings)} booking(s) under plan {self.plan}, "
            f"{format_time(self.validation_time(self.first_index))}-"
            f"{format_time(self.validation_time(self.last_index))}"
        )


########################################################################
#                           Pipeline stages                            #
########################################################################


def check_bookings(ctx: DayContext) -> DayContext:
    """
    Spot the bookings with an out of range time. They keep their raw
    time and are ignored by the next stages.
    """
    invalid = tuple(i for i, b in enumerate(ctx.bookings) if not is_valid_time(b.time))
    for i in invalid:
        logger.warning(f"Booking '{ctx.bookings[i]}' has an invalid time, ignored.")

    return replace(
        ctx,
        invalid_indices=invalid,
        times=tuple(b.time for b in ctx.bookings),
    )


def pair(ctx: DayContext) -> DayContext:
    """
    Pair the bookings and locate the day boundaries on the raw times.
    """
    result = pair_bookings(ctx.bookings)
    return replace(
        ctx,
        pairing=result,
        first_index=find_first_come_index(ctx.bookings),
        last_index=find_last_go_index(ctx.bookings),
        validation_times=ctx.times,
    )


def detect_shift(ctx: DayContext) -> DayContext:
    """
    Select the plan matching the raw first arrival and last departure.
    """
    first = None if ctx.first_index is None else ctx.times[ctx.first_index]
    last = None if ctx.last_index is None else ctx.times[ctx.last_index]

    plan, shift = ctx.detector.detect_shift(ctx.plan, first, last)
    return replace(ctx, plan=plan, shift=shift)


def round_boundaries(ctx: DayContext) -> DayContext:
    """
    Round the first arrival and the last departure, or every work
    booking if the plan asks so.
    """
    plan = ctx.plan
    times = list(ctx.times)

    for i, booking in enumerate(ctx.bookings):
        if not ctx.is_work(i):
            continue
        if booking.direction is Direction.IN:
            if plan.round_all_bookings or i == ctx.first_index:
                times[i] = round_come_time(times[i], plan, ctx.rounding_relative_to_plan)
        elif plan.round_all_bookings or i == ctx.last_index:
            times[i] = round_go_time(times[i], plan, ctx.rounding_relative_to_plan)

    return replace(ctx, times=tuple(times))


def normalize_tolerance(ctx: DayContext) -> DayContext:
    """
    Forgive a slightly late first arrival and a slightly early last
    departure with the plan's effective tolerances. The bookings in
    between keep their time so the intervals never overlap.
    """
    plan = ctx.plan
    tolerance = effective_tolerance(plan).tolerance
    times = list(ctx.times)

    if ctx.first_index is not None:
        i = ctx.first_index
        times[i] = apply_come_tolerance(times[i], plan.come_from, tolerance)
    if ctx.last_index is not None:
        i = ctx.last_index
        times[i] = apply_go_tolerance(times[i], plan.expected_go, tolerance)

    times_tuple = tuple(times)
    return replace(ctx, times=times_tuple, validation_times=times_tuple)


def cap_windows(ctx: DayContext) -> DayContext:
    """
    Clamp the work bookings to the evaluation window and record the
    minutes of the work intervals lying outside of it.
    """
    plan = ctx.plan
    effective = effective_tolerance(plan)
    come_minus = effective.tolerance.come_minus
    go_plus = effective.tolerance.go_plus
    times = list(ctx.times)
    items: list[CappedTime] = []

    for interval in adjust_intervals(
        ctx.pairing.intervals_for(BookingCategory.WORK), ctx.times
    ):
        items.extend(
            item
            for item in calculate_interval_capping(
                interval.start,
                interval.end,
                plan.come_from,
                plan.go_to,
                come_minus,
                go_plus,
                effective.allow_early_arrival,
            )
            if item is not None
        )

    for i, booking in enumerate(ctx.bookings):
        if ctx.is_work(i):
            times[i], _ = apply_window_capping(
                times[i],
                plan.come_from,
                plan.go_to,
                come_minus,
                go_plus,
                booking.direction is Direction.IN,
                effective.allow_early_arrival,
            )

    return replace(ctx, times=tuple(times), window_capping=tuple(items))


def aggregate(ctx: DayContext) -> DayContext:
    """
    Compute gross, break and net times from the adjusted intervals. The
    net time is capped to the plan's maximum.
    """
    intervals = adjust_intervals(ctx.pairing.intervals, ctx.times)
    gross = calculate_gross_time(intervals)
    recorded_break = calculate_break_time(intervals)
    break_time = calculate_break_deduction(
        intervals, recorded_break, gross, ctx.plan.breaks
    )

    uncapped_net = max(0, gross - break_time)
    net, _ = apply_max_net_capping(uncapped_net, ctx.plan.max_net_work_time)
    capping = aggregate_capping(
        *ctx.window_capping,
        calculate_max_net_time_capping(uncapped_net, ctx.plan.max_net_work_time),
    )

    return replace(
        ctx,
        gross_time=gross,
        break_time=break_time,
        net_time=net,
        capping=capping,
    )


def emit_warnings(ctx: DayContext) -> DayContext:
    """
    Check the pre-capping first arrival and last departure against the
    plan windows widened by the effective tolerances, then the core time
    and the minimum work time.
    """
    plan = ctx.plan
    tolerance = effective_tolerance(plan).tolerance
    first = ctx.validation_time(ctx.first_index)
    last = ctx.validation_time(ctx.last_index)
    warnings: list[CalculationCode] = []

    come_to = plan.come_to if plan.come_to is not None else plan.come_from
    go_from = plan.go_from if plan.go_from is not None else plan.go_to

    if first is not None:
        if plan.come_from is not None and first < plan.come_from - tolerance.come_minus:
            warnings.append(CalculationCode.EARLY_COME)
        if come_to is not None and first > come_to + tolerance.come_plus:
            warnings.append(CalculationCode.LATE_COME)

    if last is not None:
        if go_from is not None and last < go_from - tolerance.go_minus:
            warnings.append(CalculationCode.EARLY_GO)
        if plan.go_to is not None and last > plan.go_to + tolerance.go_plus:
            warnings.append(CalculationCode.LATE_GO)

    if first is not None and plan.core_start is not None and first > plan.core_start:
        warnings.append(CalculationCode.MISSED_CORE_START)
    if last is not None and plan.core_end is not None and last < plan.core_end:
        warnings.append(CalculationCode.MISSED_CORE_END)

    if (
        ctx.has_bookings
        and plan.min_work_time is not None
        and ctx.net_time < plan.min_work_time
    ):
        warnings.append(CalculationCode.BELOW_MIN_WORK_TIME)

    return replace(ctx, warnings=tuple(warnings))


# Error code of each pairing issue, work category first
_WORK_ISSUE_CODES: Final[dict[PairingIssueKind, CalculationCode]] = {
    PairingIssueKind.DUPLICATE_IN: CalculationCode.DUPLICATE_IN_TIME,
    PairingIssueKind.UNPAIRED_OUT: CalculationCode.MISSING_COME,
    PairingIssueKind.UNCLOSED_IN: CalculationCode.MISSING_GO,
}
_OTHER_ISSUE_CODES: Final[dict[PairingIssueKind, CalculationCode]] = {
    PairingIssueKind.DUPLICATE_IN: CalculationCode.DUPLICATE_IN_TIME,
    PairingIssueKind.UNPAIRED_OUT: CalculationCode.UNPAIRED_BOOKING,
    PairingIssueKind.UNCLOSED_IN: CalculationCode.UNPAIRED_BOOKING,
}


def emit_errors(ctx: DayContext) -> DayContext:
    """
    Report the booking problems and a failed shift detection. Each code
    is reported once.
    """
    errors: list[CalculationCode] = []

    def add(code: CalculationCode):
        if code not in errors:
            errors.append(code)

    if ctx.invalid_indices:
        add(CalculationCode.INVALID_TIME)
    if not ctx.has_bookings:
        add(CalculationCode.NO_BOOKINGS)

    for issue in ctx.pairing.issues:
        if issue.category is BookingCategory.WORK:
            add(_WORK_ISSUE_CODES[issue.kind])
        else:
            add(_OTHER_ISSUE_CODES[issue.kind])

    if ctx.shift is not None and ctx.shift.error_code is not None:
        add(ctx.shift.error_code)

    return replace(ctx, errors=tuple(errors))


def balance(ctx: DayContext) -> DayContext:
    """
    Compute the target time of the day and the resulting overtime or
    undertime.
    """
    target = resolve_target_time(ctx.plan, ctx.employee_target, ctx.is_absence_day)
    overtime, undertime = calculate_overtime_undertime(ctx.net_time, target)
    return replace(ctx, target_time=target, overtime=overtime, undertime=undertime)


# Calculation stages, in execution order
PIPELINE: Final[tuple[Callable[[DayContext], DayContext], ...]] = (
    check_bookings,
    pair,
    detect_shift,
    round_boundaries,
    normalize_tolerance,
    cap_windows,
    aggregate,
    emit_warnings,
    emit_errors,
    balance,
)

########################################################################
#                            Daily calculator                          #
########################################################################


class DailyCalculator:
    """
    Entry point of the calculation engine. Holds the engine settings and
    the external lookups, and runs the `PIPELINE` on each call. It keeps
    no state between calls.
    """

    def __init__(
        self,
        plan_loader: Optional[DayPlanLoader] = None,
        target_lookup: Optional[TargetLookup] = None,
        rounding_relative_to_plan: bool = False,
        max_alternatives: int = MAX_ALTERNATIVE_PLANS,
    ):
        """
        Args:
            plan_loader (Optional[DayPlanLoader]): Alternative plans
                source for the shift detection.
            target_lookup (Optional[TargetLookup]): Employee target
                minutes source, used for plans taking the target from the
                employee master data.
            rounding_relative_to_plan (bool): Anchor the rounding grid on
                the plan windows instead of midnight.
            max_alternatives (int): Maximum alternative plans tried by
                the shift detection.
        """
        self._detector = ShiftDetector(plan_loader, max_alternatives)
        self._target_lookup = target_lookup
        self._relative_to_plan = rounding_relative_to_plan

    def _employee_target(
        self, employee_id: Optional[str], override: Optional[int]
    ) -> Optional[int]:
        if override is not None:
            return override
        if self._target_lookup is None or employee_id is None:
            return None
        return self._target_lookup(employee_id)

    def calculate(
        self,
        bookings: Sequence[Booking],
        plan: DayPlanConfig,
        employee_id: Optional[str] = None,
        employee_target_minutes: Optional[int] = None,
        is_absence_day: bool = False,
    ) -> CalculationResult:
        """
        Calculate an employee's day.

        Args:
            bookings (Sequence[Booking]): Bookings of the day, any order.
            plan (DayPlanConfig): Plan assigned to the day.
            employee_id (Optional[str]): Employee identifier, used for
                the target lookup and logging.
            employee_target_minutes (Optional[int]): Employee's target
                minutes, takes precedence over the lookup.
            is_absence_day (bool): The day is an absence day.

        Returns:
            CalculationResult: Complete day breakdown.
        """
        ctx = DayContext(
            bookings=tuple(bookings),
            plan=plan,
            detector=self._detector,
            rounding_relative_to_plan=self._relative_to_plan,
            employee_target=self._employee_target(employee_id, employee_target_minutes),
            is_absence_day=is_absence_day,
        )

        for stage in PIPELINE:
            ctx = stage(ctx)
            logger.debug(f"After '{stage.__name__}': {ctx}")

        who = f"[Employee '{employee_id}'] " if employee_id else ""
        logger.info(
            f"{who}Day calculated: gross={ctx.gross_time}, break={ctx.break_time}, "
            f"net={ctx.net_time}, capped={ctx.capping.total_capped} under plan "
            f"{ctx.plan} with {len(ctx.warnings)} warning(s) and "
            f"{len(ctx.errors)} error(s)."
        )

        return CalculationResult(
            plan_id=ctx.plan.plan_id,
            first_come=ctx.validation_time(ctx.first_index),
            last_go=ctx.validation_time(ctx.last_index),
            gross_time=ctx.gross_time,
            break_time=ctx.break_time,
            net_time=ctx.net_time,
            target_time=ctx.target_time,
            overtime=ctx.overtime,
            undertime=ctx.undertime,
            capping=ctx.capping,
            warnings=ctx.warnings,
            errors=ctx.errors,
            adjusted_booking_times=ctx.times,
            booking_count=len(ctx.bookings),
            vacation_deduction_factor=ctx.plan.vacation_deduction_factor,
            shift_detection=ctx.shift,
        )
