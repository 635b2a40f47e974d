#!/usr/bin/env python3
"""
File: serialization.py
Author: Bastian Cerf
Date: 24/09/2026
Description:
    Conversion of the bookings and the calculation results from and to
    JSON compatible structures, used by the command line front-end.

    A booking is an object with a `time` (minutes or 'HH:MM'), a
    `direction` (in/out), an optional `category` (work by default) and
    an optional `id`.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
from typing import Any, Iterable

# Internal libraries
from .model import Booking, BookingCategory, CalculationResult, Direction
from .time_window import parse_time


def booking_from_dict(data: dict[str, Any]) -> Booking:
    """
    Build a booking from its JSON object.

    Raises:
        ValueError: Missing or invalid field.
    """
    if "time" not in data or "direction" not in data:
        raise ValueError(f"Booking {data} requires a 'time' and a 'direction'.")

    time = data["time"]
    if isinstance(time, str):
        time = parse_time(time)
    elif not isinstance(time, int) or isinstance(time, bool):
        raise ValueError(f"Booking time '{time}' must be minutes or 'HH:MM'.")

    booking_id = data.get("id")
    return Booking(
        time=time,
        direction=Direction(str(data["direction"]).lower()),
        category=BookingCategory(str(data.get("category", "work")).lower()),
        booking_id=None if booking_id is None else str(booking_id),
    )


def bookings_from_json(data: Any) -> list[Booking]:
    """
    Build the bookings from a JSON list, or from an object holding the
    list under 'bookings'.

    Raises:
        ValueError: Invalid structure or booking.
    """
    if isinstance(data, dict):
        data = data.get("bookings")
    if not isinstance(data, list):
        raise ValueError("Expected a list of bookings.")
    return [booking_from_dict(item) for item in data]


def _codes(codes: Iterable[Any]) -> list[str]:
    return [str(code) for code in codes]


def result_to_dict(result: CalculationResult) -> dict[str, Any]:
    """
    Convert a calculation result to a JSON compatible dictionary.
    """
    shift = result.shift_detection
    return {
        "plan_id": result.plan_id,
        "first_come": result.first_come,
        "last_go": result.last_go,
        "gross_time": result.gross_time,
        "break_time": result.break_time,
        "net_time": result.net_time,
        "target_time": result.target_time,
        "overtime": result.overtime,
        "undertime": result.undertime,
        "capping": {
            "total_capped": result.capping.total_capped,
            "items": [
                {"minutes": i.minutes, "source": str(i.source), "reason": i.reason}
                for i in result.capping.items
            ],
        },
        "warnings": _codes(result.warnings),
        "errors": _codes(result.errors),
        "has_error": result.has_error,
        "adjusted_booking_times": list(result.adjusted_booking_times),
        "booking_count": result.booking_count,
        "vacation_deduction_factor": result.vacation_deduction_factor,
        "shift_detection": None
        if shift is None
        else {
            "matched_plan_id": shift.matched_plan_id,
            "matched_plan_code": shift.matched_plan_code,
            "is_original_plan": shift.is_original_plan,
            "matched_by": str(shift.matched_by),
            "has_error": shift.has_error,
            "error_code": None if shift.error_code is None else str(shift.error_code),
        },
    }
