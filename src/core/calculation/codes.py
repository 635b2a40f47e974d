#!/usr/bin/env python3
"""
File: codes.py
Author: Bastian Cerf
Date: 14/09/2026
Description:
    Closed set of the warning and error codes a day calculation can
    produce. The caller maps the codes to user messages, the engine
    never formats any text for them.

    Codes are split in two severities:
    - Warnings flag a time that is present but outside of its tolerated
        window. They never block anything in the engine.
    - Errors flag a structural problem with the bookings or a failed
        shift detection. The calculation still completes.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
from enum import Enum, auto

########################################################################
#                       Code severity declaration                      #
########################################################################


class CodeSeverity(Enum):
    """
    Code severities enumeration.
    """

    WARNING = auto()
    ERROR = auto()


########################################################################
#                   Calculation codes enumeration                      #
########################################################################


class CalculationCode(Enum):
    """
    Warning and error codes emitted by the daily calculator. The value
    is the stable code string exchanged with callers.
    """

    # Booking structure errors
    MISSING_COME = "MISSING_COME"
    MISSING_GO = "MISSING_GO"
    UNPAIRED_BOOKING = "UNPAIRED_BOOKING"
    NO_BOOKINGS = "NO_BOOKINGS"
    INVALID_TIME = "INVALID_TIME"
    DUPLICATE_IN_TIME = "DUPLICATE_IN_TIME"
    NO_MATCHING_SHIFT = "NO_MATCHING_SHIFT"

    # Window violation warnings
    EARLY_COME = "EARLY_COME"
    LATE_COME = "LATE_COME"
    EARLY_GO = "EARLY_GO"
    LATE_GO = "LATE_GO"
    MISSED_CORE_START = "MISSED_CORE_START"
    MISSED_CORE_END = "MISSED_CORE_END"
    BELOW_MIN_WORK_TIME = "BELOW_MIN_WORK_TIME"

    @property
    def severity(self) -> CodeSeverity:
        """
        Returns:
            CodeSeverity: Severity of the code.
        """
        if self in _WARNING_CODES:
            return CodeSeverity.WARNING
        return CodeSeverity.ERROR

    def __str__(self) -> str:
        return self.value


# Codes reported as warnings, all others are errors
_WARNING_CODES = frozenset(
    {
        CalculationCode.EARLY_COME,
        CalculationCode.LATE_COME,
        CalculationCode.EARLY_GO,
        CalculationCode.LATE_GO,
        CalculationCode.MISSED_CORE_START,
        CalculationCode.MISSED_CORE_END,
        CalculationCode.BELOW_MIN_WORK_TIME,
    }
)
