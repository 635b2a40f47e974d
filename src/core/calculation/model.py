#!/usr/bin/env python3
"""
File: model.py
Author: Bastian Cerf
Date: 15/09/2026
Description:
    Data model of the daily calculation engine. All the types are
    immutable: the inputs are never modified by the engine and a new
    result is constructed on each calculation.

    Optional times and limits use `None` to mark a missing value since
    0 is a valid minute of day.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Optional

# Internal libraries
from .codes import CalculationCode
from .time_window import TimeWindow, is_valid_time

# Maximum number of alternative plans searched by the shift detection
MAX_ALTERNATIVE_PLANS: Final[int] = 6

# Default target work time of a day (8h)
DEFAULT_REGULAR_HOURS: Final[int] = 480

########################################################################
#                  Day plan configuration error                        #
########################################################################


class DayPlanConfigError(Exception):
    """Raised when a day plan is built from impossible values."""

    def __init__(self, message: str = "Invalid day plan configuration."):
        super().__init__(message)


def _check_time(name: str, value: Optional[int]):
    """
    Raises:
        DayPlanConfigError: The time is set but not a minute of day.
    """
    if value is not None and not is_valid_time(value):
        raise DayPlanConfigError(
            f"'{name}' must be between 0 and 1440, got {value}."
        )


def _check_positive(name: str, value: Optional[int | float]):
    """
    Raises:
        DayPlanConfigError: The value is set but negative.
    """
    if value is not None and value < 0:
        raise DayPlanConfigError(f"'{name}' cannot be negative, got {value}.")


########################################################################
#                       Enumerations declaration                       #
########################################################################


class Direction(Enum):
    """Booking direction enumeration."""

    IN = "in"
    OUT = "out"

    def __str__(self) -> str:
        return self.value


class BookingCategory(Enum):
    """Booking category enumeration."""

    WORK = "work"
    BREAK = "break"
    ERRAND = "errand"

    def __str__(self) -> str:
        return self.value


class PlanType(Enum):
    """Day plan type enumeration."""

    FIXED = "fixed"  # Literal schedule enforced
    FLEXTIME = "flextime"  # Reporting tolerances only

    def __str__(self) -> str:
        return self.value


class RoundingType(Enum):
    """Rounding policy enumeration."""

    NONE = "none"
    UP = "up"
    DOWN = "down"
    NEAREST = "nearest"
    ADD = "add"
    SUBTRACT = "subtract"


class BreakType(Enum):
    """Break rule type enumeration."""

    FIXED = "fixed"  # Deducted over a fixed time range
    VARIABLE = "variable"  # Deducted if no break was booked
    MINIMUM = "minimum"  # Deducted after a work time threshold


class CappingSource(Enum):
    """Origin of capped minutes."""

    EARLY_ARRIVAL = "early_arrival"
    LATE_DEPARTURE = "late_departure"
    MAX_NET_TIME = "max_net_time"

    def __str__(self) -> str:
        return self.value


class MatchType(Enum):
    """Which shift detection window(s) matched."""

    NONE = "none"
    ARRIVAL = "arrival"
    DEPARTURE = "departure"
    BOTH = "both"

    def __str__(self) -> str:
        return self.value


########################################################################
#                       Input types declaration                        #
########################################################################


@dataclass(frozen=True)
class Booking:
    """
    A single clock event of an employee on a day. The time is not
    validated here, out of range times are reported by the calculator.

    Attributes:
        time (int): Minutes from midnight.
        direction (Direction): Clock in or clock out.
        category (BookingCategory): What the employee is doing.
        booking_id (Optional[str]): Optional identifier, only used for
            logging.
    """

    time: int
    direction: Direction
    category: BookingCategory = BookingCategory.WORK
    booking_id: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.category}-{self.direction}@{self.time}"


@dataclass(frozen=True)
class Tolerance:
    """
    Grace minutes widening the evaluation windows.

    Attributes:
        come_plus (int): Late arrival grace.
        come_minus (int): Early arrival grace.
        go_plus (int): Late departure grace.
        go_minus (int): Early departure grace.
    """

    come_plus: int = 0
    come_minus: int = 0
    go_plus: int = 0
    go_minus: int = 0

    def __post_init__(self):
        for name in ("come_plus", "come_minus", "go_plus", "go_minus"):
            _check_positive(name, getattr(self, name))


@dataclass(frozen=True)
class RoundingRule:
    """
    Rounding policy for one boundary.

    Attributes:
        type (RoundingType): Rounding policy.
        interval (int): Grid interval for up, down and nearest.
        add_value (int): Minutes for add and subtract.
    """

    type: RoundingType = RoundingType.NONE
    interval: int = 0
    add_value: int = 0

    def __post_init__(self):
        _check_positive("interval", self.interval)
        _check_positive("add_value", self.add_value)


@dataclass(frozen=True)
class BreakConfig:
    """
    Automatic break deduction rule.

    Attributes:
        type (BreakType): Rule type.
        duration (int): Minutes to deduct (upper bound).
        start_time (Optional[int]): Fixed break start.
        end_time (Optional[int]): Fixed break end.
        after_work_minutes (Optional[int]): Gross work threshold that
            triggers minimum and variable breaks.
        auto_deduct (bool): Variable and minimum rules only apply when
            set.
        minutes_difference (bool): Minimum break only deducts the
            minutes worked over the threshold.
    """

    type: BreakType
    duration: int = 0
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    after_work_minutes: Optional[int] = None
    auto_deduct: bool = True
    minutes_difference: bool = False

    def __post_init__(self):
        _check_positive("duration", self.duration)
        _check_positive("after_work_minutes", self.after_work_minutes)
        _check_time("start_time", self.start_time)
        _check_time("end_time", self.end_time)


@dataclass(frozen=True)
class ShiftDetectionConfig:
    """
    Shift detection windows of a day plan. A window is configured only
    when both of its bounds are set. The bounds are checked by
    `validate_shift_detection_config()`, not at construction.

    Attributes:
        arrive_from (Optional[int]): Arrival window start.
        arrive_to (Optional[int]): Arrival window end.
        depart_from (Optional[int]): Departure window start.
        depart_to (Optional[int]): Departure window end.
        alternative_plan_ids (tuple[str, ...]): Plans searched in this
            order when the plan doesn't match.
    """

    arrive_from: Optional[int] = None
    arrive_to: Optional[int] = None
    depart_from: Optional[int] = None
    depart_to: Optional[int] = None
    alternative_plan_ids: tuple[str, ...] = ()

    def __post_init__(self):
        # Accept any sequence but store an immutable tuple
        object.__setattr__(
            self, "alternative_plan_ids", tuple(self.alternative_plan_ids)
        )
        if len(self.alternative_plan_ids) > MAX_ALTERNATIVE_PLANS:
            raise DayPlanConfigError(
                f"At most {MAX_ALTERNATIVE_PLANS} alternative plans are "
                f"allowed, got {len(self.alternative_plan_ids)}."
            )

    @property
    def arrival_window(self) -> Optional[TimeWindow]:
        if self.arrive_from is None or self.arrive_to is None:
            return None
        return TimeWindow(self.arrive_from, self.arrive_to)

    @property
    def departure_window(self) -> Optional[TimeWindow]:
        if self.depart_from is None or self.depart_to is None:
            return None
        return TimeWindow(self.depart_from, self.depart_to)

    @property
    def is_active(self) -> bool:
        """
        Returns:
            bool: `True` if at least one window is configured.
        """
        return self.arrival_window is not None or self.departure_window is not None


@dataclass(frozen=True)
class DayPlanConfig:
    """
    Policy applied to compute an employee's day.

    Attributes:
        plan_id (str): Plan identifier.
        plan_type (PlanType): Fixed or flextime plan.
        plan_code (str): Display code of the plan.
        come_from / come_to (Optional[int]): Arrival window.
        go_from / go_to (Optional[int]): Departure window.
        core_start / core_end (Optional[int]): Core time.
        tolerance (Tolerance): Stored grace minutes. The effective
            values depend on the plan type, see `effective_tolerance()`.
        variable_work_time (bool): Enables the early arrival grace on
            fixed plans.
        rounding_come / rounding_go (RoundingRule): Boundary rounding.
        round_all_bookings (bool): Round every work booking instead of
            the first arrival and the last departure only.
        regular_hours (int): Target minutes.
        regular_hours_2 (Optional[int]): Target minutes on absence days.
        from_employee_master (bool): Target minutes come from the
            employee when available.
        min_work_time (Optional[int]): Minimum net minutes.
        max_net_work_time (Optional[int]): Net minutes cap.
        vacation_deduction_factor (float): Weight of a vacation day.
        breaks (tuple[BreakConfig, ...]): Break deduction rules.
        shift_detection (ShiftDetectionConfig): Shift detection setup.
    """

    plan_id: str
    plan_type: PlanType = PlanType.FIXED
    plan_code: str = ""
    come_from: Optional[int] = None
    come_to: Optional[int] = None
    go_from: Optional[int] = None
    go_to: Optional[int] = None
    core_start: Optional[int] = None
    core_end: Optional[int] = None
    tolerance: Tolerance = field(default_factory=Tolerance)
    variable_work_time: bool = False
    rounding_come: RoundingRule = field(default_factory=RoundingRule)
    rounding_go: RoundingRule = field(default_factory=RoundingRule)
    round_all_bookings: bool = False
    regular_hours: int = DEFAULT_REGULAR_HOURS
    regular_hours_2: Optional[int] = None
    from_employee_master: bool = False
    min_work_time: Optional[int] = None
    max_net_work_time: Optional[int] = None
    vacation_deduction_factor: float = 1.0
    breaks: tuple[BreakConfig, ...] = ()
    shift_detection: ShiftDetectionConfig = field(
        default_factory=ShiftDetectionConfig
    )

    def __post_init__(self):
        if not isinstance(self.plan_type, PlanType):
            raise DayPlanConfigError(
                f"Unknown plan type '{self.plan_type}' for plan '{self.plan_id}'."
            )

        object.__setattr__(self, "breaks", tuple(self.breaks))

        for name in (
            "come_from",
            "come_to",
            "go_from",
            "go_to",
            "core_start",
            "core_end",
        ):
            _check_time(name, getattr(self, name))

        for name in (
            "regular_hours",
            "regular_hours_2",
            "min_work_time",
            "max_net_work_time",
            "vacation_deduction_factor",
        ):
            _check_positive(name, getattr(self, name))

    @property
    def is_flextime(self) -> bool:
        return self.plan_type is PlanType.FLEXTIME

    @property
    def expected_go(self) -> Optional[int]:
        """
        Returns:
            Optional[int]: Departure reference time, `go_to` with a
                fallback on `go_from`.
        """
        return self.go_to if self.go_to is not None else self.go_from

    def __str__(self) -> str:
        return f"'{self.plan_code or self.plan_id}' ({self.plan_type})"


########################################################################
#                       Output types declaration                       #
########################################################################


@dataclass(frozen=True)
class CappedTime:
    """
    Minutes removed from the day by one capping source.

    Attributes:
        minutes (int): Capped minutes, strictly positive.
        source (CappingSource): What caused the capping.
        reason (str): Human readable reason.
    """

    minutes: int
    source: CappingSource
    reason: str


@dataclass(frozen=True)
class CappingResult:
    """
    Aggregated capping of a day.

    Attributes:
        total_capped (int): Sum of the items minutes.
        items (tuple[CappedTime, ...]): Per-source detail.
    """

    total_capped: int = 0
    items: tuple[CappedTime, ...] = ()

    def minutes_for(self, source: CappingSource) -> int:
        """
        Returns:
            int: Total capped minutes for the given source.
        """
        return sum(item.minutes for item in self.items if item.source is source)


@dataclass(frozen=True)
class ShiftDetectionResult:
    """
    Outcome of the shift detection.

    Attributes:
        matched_plan_id (str): Plan to use for the calculation.
        matched_plan_code (str): Code of that plan.
        is_original_plan (bool): `True` if the assigned plan is kept.
        matched_by (MatchType): Matched window(s).
        has_error (bool): `True` if no plan matched.
        error_code (Optional[CalculationCode]): Set with `has_error`.
    """

    matched_plan_id: str
    matched_plan_code: str = ""
    is_original_plan: bool = True
    matched_by: MatchType = MatchType.NONE
    has_error: bool = False
    error_code: Optional[CalculationCode] = None


@dataclass(frozen=True)
class CalculationResult:
    """
    Complete breakdown of an employee's day.

    Attributes:
        plan_id (str): Plan actually used (after shift detection).
        first_come (Optional[int]): First work arrival, rounded and
            normalized, before capping.
        last_go (Optional[int]): Last work departure, rounded and
            normalized, before capping.
        gross_time (int): Paired work minutes.
        break_time (int): Deducted break minutes.
        net_time (int): Gross minus break, capped.
        target_time (int): Expected net minutes.
        overtime (int): Net minutes over the target.
        undertime (int): Net minutes missing to reach the target.
        capping (CappingResult): Capped minutes detail.
        warnings (tuple[CalculationCode, ...]): Warning codes.
        errors (tuple[CalculationCode, ...]): Error codes.
        adjusted_booking_times (tuple[int, ...]): Final time of each
            input booking, in input order.
        booking_count (int): Number of input bookings.
        vacation_deduction_factor (float): Weight of a vacation day
            under the used plan.
        shift_detection (Optional[ShiftDetectionResult]): Detection
            outcome, `None` if detection didn't run.
    """

    plan_id: str
    first_come: Optional[int] = None
    last_go: Optional[int] = None
    gross_time: int = 0
    break_time: int = 0
    net_time: int = 0
    target_time: int = 0
    overtime: int = 0
    undertime: int = 0
    capping: CappingResult = field(default_factory=CappingResult)
    warnings: tuple[CalculationCode, ...] = ()
    errors: tuple[CalculationCode, ...] = ()
    adjusted_booking_times: tuple[int, ...] = ()
    booking_count: int = 0
    vacation_deduction_factor: float = 1.0
    shift_detection: Optional[ShiftDetectionResult] = None

    @property
    def has_error(self) -> bool:
        return bool(self.errors)
