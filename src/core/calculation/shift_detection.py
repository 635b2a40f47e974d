#!/usr/bin/env python3
"""
File: shift_detection.py
Author: Bastian Cerf
Date: 19/09/2026
Description:
    Automatic shift detection. A day plan can declare an arrival window,
    a departure window or both. When the first arrival and the last
    departure of the day don't fit the assigned plan, its alternative
    plans are tried in their configured order and the first one that
    fits is used instead.

    Detection is fail-soft: when no plan fits, the assigned plan is kept
    and the result is flagged with `NO_MATCHING_SHIFT`.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import logging
from typing import Optional

# Internal libraries
from core.day_plans.day_plan_loader import DayPlanLoader, DayPlanLoaderException
from .codes import CalculationCode
from .model import (
    MAX_ALTERNATIVE_PLANS,
    DayPlanConfig,
    MatchType,
    ShiftDetectionConfig,
    ShiftDetectionResult,
)
from .time_window import format_time, is_valid_time

logger = logging.getLogger(__name__)

########################################################################
#                            Plan matching                             #
########################################################################


def matches_plan(
    config: ShiftDetectionConfig,
    first_arrival: Optional[int],
    last_departure: Optional[int],
) -> MatchType:
    """
    Check the observed times against the detection windows.

    When both windows are configured both must match, a missing time
    never matches its window.

    Args:
        config (ShiftDetectionConfig): Detection windows.
        first_arrival (Optional[int]): First arrival of the day.
        last_departure (Optional[int]): Last departure of the day.

    Returns:
        MatchType: Matched window(s), `NONE` if the plan doesn't match
            or has no window.
    """
    arrival_window = config.arrival_window
    departure_window = config.departure_window

    arrival_ok = (
        arrival_window is not None
        and first_arrival is not None
        and arrival_window.contains(first_arrival)
    )
    departure_ok = (
        departure_window is not None
        and last_departure is not None
        and departure_window.contains(last_departure)
    )

    if arrival_window is not None and departure_window is not None:
        return MatchType.BOTH if arrival_ok and departure_ok else MatchType.NONE
    if arrival_window is not None:
        return MatchType.ARRIVAL if arrival_ok else MatchType.NONE
    if departure_window is not None:
        return MatchType.DEPARTURE if departure_ok else MatchType.NONE
    return MatchType.NONE


def validate_shift_detection_config(config: ShiftDetectionConfig) -> list[str]:
    """
    Check the detection windows bounds.

    Returns:
        list[str]: Problems found, empty if the configuration is valid.
    """
    errors: list[str] = []

    for name, start, end in (
        ("arrive", config.arrive_from, config.arrive_to),
        ("depart", config.depart_from, config.depart_to),
    ):
        key_from = f"shift_detect_{name}_from"
        key_to = f"shift_detect_{name}_to"

        if start is not None and end is not None:
            if not is_valid_time(start):
                errors.append(f"{key_from} must be between 0 and 1440")
            if not is_valid_time(end):
                errors.append(f"{key_to} must be between 0 and 1440")
            if start > end:
                errors.append(f"{key_from} must be <= {key_to}")
        elif (start is None) != (end is None):
            errors.append(f"both {key_from} and {key_to} must be set together")

    return errors


########################################################################
#                            Shift detector                            #
########################################################################


class ShiftDetector:
    """
    Select the day plan whose detection windows match the observed
    times. Alternative plans are loaded lazily through a `DayPlanLoader`.
    """

    def __init__(
        self,
        loader: Optional[DayPlanLoader] = None,
        max_alternatives: int = MAX_ALTERNATIVE_PLANS,
    ):
        """
        Args:
            loader (Optional[DayPlanLoader]): Alternative plans source.
                Without loader the alternatives are never tried.
            max_alternatives (int): Maximum number of alternatives tried.
        """
        self._loader = loader
        self._max_alternatives = max(0, min(max_alternatives, MAX_ALTERNATIVE_PLANS))

    def _load_alternative(self, plan_id: str) -> Optional[DayPlanConfig]:
        """
        Load an alternative plan. A missing plan or a loader failure
        gives `None`.
        """
        if self._loader is None:
            return None

        try:
            plan = self._loader.load(plan_id)
        except DayPlanLoaderException as e:
            logger.warning(f"Alternative plan '{plan_id}' skipped: {e}")
            return None

        if plan is None:
            logger.warning(f"Alternative plan '{plan_id}' not found, skipped.")
        return plan

    def detect_shift(
        self,
        plan: DayPlanConfig,
        first_arrival: Optional[int],
        last_departure: Optional[int],
    ) -> tuple[DayPlanConfig, ShiftDetectionResult]:
        """
        Run the shift detection for the assigned plan.

        Args:
            plan (DayPlanConfig): Plan assigned to the employee's day.
            first_arrival (Optional[int]): First arrival of the day.
            last_departure (Optional[int]): Last departure of the day.

        Returns:
            tuple[DayPlanConfig, ShiftDetectionResult]: The plan to use
                for the calculation and the detection outcome.
        """
        config = plan.shift_detection
        kept = ShiftDetectionResult(plan.plan_id, plan.plan_code)

        if not config.is_active:
            return plan, kept

        if first_arrival is None and last_departure is None:
            return plan, kept

        matched_by = matches_plan(config, first_arrival, last_departure)
        if matched_by is not MatchType.NONE:
            return plan, ShiftDetectionResult(
                plan.plan_id, plan.plan_code, matched_by=matched_by
            )

        times = f"{format_time(first_arrival)}-{format_time(last_departure)}"
        for plan_id in config.alternative_plan_ids[: self._max_alternatives]:
            alternative = self._load_alternative(plan_id)
            if alternative is None:
                continue

            matched_by = matches_plan(
                alternative.shift_detection, first_arrival, last_departure
            )
            if matched_by is not MatchType.NONE:
                logger.info(
                    f"Shift {times} detected as plan {alternative} "
                    f"instead of {plan} (matched by {matched_by})."
                )
                return alternative, ShiftDetectionResult(
                    alternative.plan_id,
                    alternative.plan_code,
                    is_original_plan=False,
                    matched_by=matched_by,
                )

        logger.warning(f"No plan matches the shift {times}, keeping plan {plan}.")
        return plan, ShiftDetectionResult(
            plan.plan_id,
            plan.plan_code,
            has_error=True,
            error_code=CalculationCode.NO_MATCHING_SHIFT,
        )
