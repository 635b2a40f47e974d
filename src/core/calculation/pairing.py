#!/usr/bin/env python3
"""
File: pairing.py
Author: Bastian Cerf
Date: 16/09/2026
Description:
    Pair the bookings of a day into per-category intervals.

    The bookings are sorted by time with a stable sort, so bookings at
    the same minute keep their input order. They are then walked in
    chronological order keeping at most one open interval per category:
    - an `in` opens an interval;
    - an `out` closes the open interval of its category;
    - an `in` while an interval is already open is a duplicate, it is
        ignored and the interval keeps its first start;
    - an `out` without open interval is unpaired;
    - an interval still open at the end of the day is unclosed.
    Issues never stop the pairing, they are collected in the result.

    Bookings with a time outside of [0, 1440] are skipped.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import logging
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Iterable, Optional, Sequence

# Internal libraries
from .model import Booking, BookingCategory, Direction
from .time_window import is_valid_time

logger = logging.getLogger(__name__)

########################################################################
#                      Pairing types declaration                       #
########################################################################


class PairingIssueKind(Enum):
    """Pairing problems enumeration."""

    DUPLICATE_IN = auto()  # Second `in` while an interval is open
    UNPAIRED_OUT = auto()  # `out` without open interval
    UNCLOSED_IN = auto()  # Interval still open at the end of the day


@dataclass(frozen=True)
class PairingIssue:
    """
    A booking that couldn't be paired.

    Attributes:
        kind (PairingIssueKind): Problem type.
        category (BookingCategory): Category of the booking.
        index (int): Index of the booking in the input sequence.
        time (int): Time of the booking.
    """

    kind: PairingIssueKind
    category: BookingCategory
    index: int
    time: int


@dataclass(frozen=True)
class BookingInterval:
    """
    A closed interval between an `in` and an `out` booking.

    Attributes:
        category (BookingCategory): Category of both bookings.
        start_index (int): Input index of the `in` booking.
        end_index (int): Input index of the `out` booking.
        start (int): Interval start time.
        end (int): Interval end time.
    """

    category: BookingCategory
    start_index: int
    end_index: int
    start: int
    end: int

    @property
    def duration(self) -> int:
        """
        Returns:
            int: Interval length in minutes, never negative.
        """
        return max(0, self.end - self.start)


@dataclass(frozen=True)
class PairingResult:
    """
    Pairing output.

    Attributes:
        intervals (tuple[BookingInterval, ...]): Intervals in order of
            closing time.
        issues (tuple[PairingIssue, ...]): Problems in chronological
            order.
    """

    intervals: tuple[BookingInterval, ...] = ()
    issues: tuple[PairingIssue, ...] = ()

    def intervals_for(self, category: BookingCategory) -> list[BookingInterval]:
        return [i for i in self.intervals if i.category is category]


########################################################################
#                         Chronological order                          #
########################################################################


def chronological_order(bookings: Sequence[Booking]) -> list[int]:
    """
    Get the input indices of the valid bookings sorted by time. Bookings
    at the same minute keep their input order.
    """
    valid = [i for i, b in enumerate(bookings) if is_valid_time(b.time)]
    return sorted(valid, key=lambda i: bookings[i].time)


def find_first_come_index(bookings: Sequence[Booking]) -> Optional[int]:
    """
    Returns:
        Optional[int]: Input index of the earliest work arrival or `None`.
    """
    for i in chronological_order(bookings):
        b = bookings[i]
        if b.category is BookingCategory.WORK and b.direction is Direction.IN:
            return i
    return None


def find_last_go_index(bookings: Sequence[Booking]) -> Optional[int]:
    """
    Returns:
        Optional[int]: Input index of the latest work departure or `None`.
    """
    for i in reversed(chronological_order(bookings)):
        b = bookings[i]
        if b.category is BookingCategory.WORK and b.direction is Direction.OUT:
            return i
    return None


def find_first_come(bookings: Sequence[Booking]) -> Optional[int]:
    """
    Returns:
        Optional[int]: Time of the earliest work arrival or `None`.
    """
    index = find_first_come_index(bookings)
    return None if index is None else bookings[index].time


def find_last_go(bookings: Sequence[Booking]) -> Optional[int]:
    """
    Returns:
        Optional[int]: Time of the latest work departure or `None`.
    """
    index = find_last_go_index(bookings)
    return None if index is None else bookings[index].time


########################################################################
#                           Pairing algorithm                          #
########################################################################


def pair_bookings(bookings: Sequence[Booking]) -> PairingResult:
    """
    Pair the bookings in per-category intervals.

    Args:
        bookings (Sequence[Booking]): Bookings of the day in any order.

    Returns:
        PairingResult: Closed intervals and pairing issues.
    """
    intervals: list[BookingInterval] = []
    issues: list[PairingIssue] = []
    # Input index of the open `in` booking per category
    open_in: dict[BookingCategory, int] = {}

    for i in chronological_order(bookings):
        booking = bookings[i]
        category = booking.category

        if booking.direction is Direction.IN:
            if category in open_in:
                issues.append(
                    PairingIssue(
                        PairingIssueKind.DUPLICATE_IN, category, i, booking.time
                    )
                )
                logger.debug(f"Duplicate '{booking}' ignored (index {i}).")
            else:
                open_in[category] = i

        else:
            start = open_in.pop(category, None)
            if start is None:
                issues.append(
                    PairingIssue(
                        PairingIssueKind.UNPAIRED_OUT, category, i, booking.time
                    )
                )
                logger.debug(f"Unpaired '{booking}' (index {i}).")
            else:
                intervals.append(
                    BookingInterval(
                        category, start, i, bookings[start].time, booking.time
                    )
                )

    # Report intervals left open, in chronological order of their start
    for category, start in sorted(
        open_in.items(), key=lambda kv: (bookings[kv[1]].time, kv[1])
    ):
        issues.append(
            PairingIssue(
                PairingIssueKind.UNCLOSED_IN,
                category,
                start,
                bookings[start].time,
            )
        )

    return PairingResult(tuple(intervals), tuple(issues))


def adjust_intervals(
    intervals: Iterable[BookingInterval], times: Sequence[int]
) -> tuple[BookingInterval, ...]:
    """
    Rebuild intervals with adjusted booking times.

    Args:
        intervals (Iterable[BookingInterval]): Paired intervals.
        times (Sequence[int]): Adjusted time of each input booking.

    Returns:
        tuple[BookingInterval, ...]: New intervals using the adjusted
            times.
    """
    return tuple(
        replace(i, start=times[i.start_index], end=times[i.end_index])
        for i in intervals
    )


def calculate_gross_time(intervals: Iterable[BookingInterval]) -> int:
    """
    Sum the duration of the work intervals.
    """
    return sum(i.duration for i in intervals if i.category is BookingCategory.WORK)


def calculate_break_time(intervals: Iterable[BookingInterval]) -> int:
    """
    Sum the duration of the break intervals. Errands are not breaks.
    """
    return sum(i.duration for i in intervals if i.category is BookingCategory.BREAK)
