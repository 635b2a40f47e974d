#!/usr/bin/env python3
"""
File: workbook_day_plan_loader.py
Author: Bastian Cerf
Date: 21/09/2026
Description:
    Day plan loader reading the plans from an Excel workbook (.xlsx).

    The plans sheet holds one plan per row, the first row contains the
    column names listed in `PLAN_COLUMNS`. Only `plan_id` is required,
    other columns can be omitted or left empty. An optional breaks
    sheet holds one break rule per row, linked to its plan by
    `plan_id`.

    Time values can be written as 'HH:MM' text, spreadsheet times or
    plain minutes. Boolean values accept true/false, yes/no, 1/0.

    The workbook is read once at construction. The rows are converted
    to `DayPlanConfig` on first access, a malformed row only fails the
    plan it describes.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import logging
import datetime as dt
from pathlib import Path
from typing import Any, Final, Optional

# Third-party libraries
import openpyxl

# Internal libraries
from core.calculation.model import (
    DEFAULT_REGULAR_HOURS,
    BreakConfig,
    BreakType,
    DayPlanConfig,
    DayPlanConfigError,
    PlanType,
    RoundingRule,
    RoundingType,
    ShiftDetectionConfig,
    Tolerance,
)
from core.calculation.time_window import parse_time
from .day_plan_loader import DayPlanFormatError, DayPlanLoader, DayPlanLoaderException

logger = logging.getLogger(__name__)

########################################################################
#                      Workbook layout declaration                     #
########################################################################

# Default sheet names
PLANS_SHEET: Final[str] = "plans"
BREAKS_SHEET: Final[str] = "breaks"

# Columns of the plans sheet
PLAN_COLUMNS: Final[tuple[str, ...]] = (
    "plan_id",
    "plan_code",
    "plan_type",
    "come_from",
    "come_to",
    "go_from",
    "go_to",
    "core_start",
    "core_end",
    "come_plus",
    "come_minus",
    "go_plus",
    "go_minus",
    "variable_work_time",
    "rounding_come",
    "rounding_come_interval",
    "rounding_come_value",
    "rounding_go",
    "rounding_go_interval",
    "rounding_go_value",
    "round_all_bookings",
    "regular_hours",
    "regular_hours_2",
    "from_employee_master",
    "min_work_time",
    "max_net_work_time",
    "vacation_deduction_factor",
    "shift_arrive_from",
    "shift_arrive_to",
    "shift_depart_from",
    "shift_depart_to",
    "alternative_plans",
)

# Columns of the breaks sheet
BREAK_COLUMNS: Final[tuple[str, ...]] = (
    "plan_id",
    "type",
    "duration",
    "start_time",
    "end_time",
    "after_work_minutes",
    "auto_deduct",
    "minutes_difference",
)

########################################################################
#                         Cell value converters                        #
########################################################################


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_minutes(value: Any) -> Optional[int]:
    """
    Convert a cell value to minutes.

    Raises:
        ValueError: Unsupported value.
    """
    if _is_empty(value):
        return None
    if isinstance(value, bool):
        raise ValueError(f"'{value}' is not a time")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, (dt.time, dt.datetime)):
        return value.hour * 60 + value.minute
    if isinstance(value, dt.timedelta):
        return int(value.total_seconds() // 60)
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return int(text)
        return parse_time(text)
    raise ValueError(f"'{value}' is not a time")


def _to_bool(value: Any, default: bool = False) -> bool:
    """
    Raises:
        ValueError: Unsupported value.
    """
    if _is_empty(value):
        return default
    if isinstance(value, (bool, int)):
        return bool(value)

    text = str(value).strip().lower()
    if text in {"true", "1", "yes", "on", "x"}:
        return True
    if text in {"false", "0", "no", "off"}:
        return False
    raise ValueError(f"'{value}' is not a boolean")


def _to_float(value: Any, default: float) -> float:
    if _is_empty(value):
        return default
    return float(value)


def _to_str(value: Any) -> str:
    return "" if _is_empty(value) else str(value).strip()


########################################################################
#                     Workbook day plan loader                         #
########################################################################


class WorkbookDayPlanLoader(DayPlanLoader):
    """
    Day plans read from an Excel workbook.
    """

    def __init__(
        self,
        path: str | Path,
        plans_sheet: str = PLANS_SHEET,
        breaks_sheet: str = BREAKS_SHEET,
    ):
        """
        Open the workbook and read the raw rows.

        Args:
            path (str | Path): Workbook file path.
            plans_sheet (str): Plans sheet name.
            breaks_sheet (str): Breaks sheet name, the sheet is optional.

        Raises:
            DayPlanLoaderException: The workbook cannot be opened or the
                plans sheet is missing.
        """
        self._path = Path(path)
        self._rows: dict[str, dict[str, Any]] = {}
        self._breaks: dict[str, list[dict[str, Any]]] = {}
        self._plans: dict[str, DayPlanConfig] = {}

        try:
            workbook = openpyxl.load_workbook(self._path, read_only=True, data_only=True)
        except Exception as e:
            raise DayPlanLoaderException(
                f"Cannot open day plans workbook '{self._path}'."
            ) from e

        try:
            if plans_sheet not in workbook.sheetnames:
                raise DayPlanLoaderException(
                    f"Sheet '{plans_sheet}' not found in '{self._path}'."
                )

            for row in self.__read_sheet(workbook[plans_sheet], PLAN_COLUMNS):
                plan_id = _to_str(row.get("plan_id"))
                if not plan_id:
                    continue
                if plan_id in self._rows:
                    logger.warning(
                        f"Duplicate day plan '{plan_id}' in '{self._path}', "
                        "the first row is used."
                    )
                    continue
                self._rows[plan_id] = row

            if breaks_sheet in workbook.sheetnames:
                for row in self.__read_sheet(workbook[breaks_sheet], BREAK_COLUMNS):
                    plan_id = _to_str(row.get("plan_id"))
                    if plan_id:
                        self._breaks.setdefault(plan_id, []).append(row)

        finally:
            workbook.close()

        logger.info(f"{len(self._rows)} day plan(s) available in '{self._path}'.")

    def __read_sheet(self, sheet: Any, columns: tuple[str, ...]) -> list[dict[str, Any]]:
        """
        Read the rows of a sheet as dictionaries keyed by column name.

        Raises:
            DayPlanLoaderException: Unknown column names.
        """
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []

        names = [_to_str(cell).lower() for cell in header]
        unknown = set(names) - set(columns) - {""}
        if unknown:
            raise DayPlanLoaderException(
                f"Unknown column(s) {', '.join(sorted(unknown))} in sheet "
                f"'{sheet.title}' of '{self._path}'."
            )

        result = []
        for values in rows:
            result.append(
                {name: value for name, value in zip(names, values) if name}
            )
        return result

    @property
    def plan_ids(self) -> list[str]:
        """
        Returns:
            list[str]: Identifiers of the plans in the workbook.
        """
        return list(self._rows.keys())

    def load(self, plan_id: str) -> Optional[DayPlanConfig]:
        if plan_id in self._plans:
            return self._plans[plan_id]

        row = self._rows.get(plan_id)
        if row is None:
            return None

        try:
            plan = self.__build_plan(plan_id, row)
        except (ValueError, TypeError, DayPlanConfigError) as e:
            raise DayPlanFormatError(
                f"Day plan '{plan_id}' in '{self._path}' is malformed: {e}"
            ) from e

        self._plans[plan_id] = plan
        return plan

    def __build_plan(self, plan_id: str, row: dict[str, Any]) -> DayPlanConfig:
        """
        Convert a raw plans sheet row to a `DayPlanConfig`.

        Raises:
            ValueError: A cell value cannot be converted.
            DayPlanConfigError: The plan values are impossible.
        """

        def minutes(name: str) -> Optional[int]:
            try:
                return _to_minutes(row.get(name))
            except ValueError as e:
                raise ValueError(f"column '{name}': {e}") from e

        def minutes_or(name: str, default: int) -> int:
            value = minutes(name)
            return default if value is None else value

        def rounding(prefix: str) -> RoundingRule:
            kind = _to_str(row.get(prefix)).lower() or RoundingType.NONE.value
            return RoundingRule(
                type=RoundingType(kind),
                interval=minutes_or(f"{prefix}_interval", 0),
                add_value=minutes_or(f"{prefix}_value", 0),
            )

        alternatives = tuple(
            alt.strip()
            for alt in _to_str(row.get("alternative_plans")).split(",")
            if alt.strip()
        )

        plan_type = _to_str(row.get("plan_type")).lower() or PlanType.FIXED.value

        return DayPlanConfig(
            plan_id=plan_id,
            plan_type=PlanType(plan_type),
            plan_code=_to_str(row.get("plan_code")),
            come_from=minutes("come_from"),
            come_to=minutes("come_to"),
            go_from=minutes("go_from"),
            go_to=minutes("go_to"),
            core_start=minutes("core_start"),
            core_end=minutes("core_end"),
            tolerance=Tolerance(
                come_plus=minutes_or("come_plus", 0),
                come_minus=minutes_or("come_minus", 0),
                go_plus=minutes_or("go_plus", 0),
                go_minus=minutes_or("go_minus", 0),
            ),
            variable_work_time=_to_bool(row.get("variable_work_time")),
            rounding_come=rounding("rounding_come"),
            rounding_go=rounding("rounding_go"),
            round_all_bookings=_to_bool(row.get("round_all_bookings")),
            regular_hours=minutes_or("regular_hours", DEFAULT_REGULAR_HOURS),
            regular_hours_2=minutes("regular_hours_2"),
            from_employee_master=_to_bool(row.get("from_employee_master")),
            min_work_time=minutes("min_work_time"),
            max_net_work_time=minutes("max_net_work_time"),
            vacation_deduction_factor=_to_float(
                row.get("vacation_deduction_factor"), 1.0
            ),
            breaks=tuple(
                self.__build_break(b) for b in self._breaks.get(plan_id, [])
            ),
            shift_detection=ShiftDetectionConfig(
                arrive_from=minutes("shift_arrive_from"),
                arrive_to=minutes("shift_arrive_to"),
                depart_from=minutes("shift_depart_from"),
                depart_to=minutes("shift_depart_to"),
                alternative_plan_ids=alternatives,
            ),
        )

    def __build_break(self, row: dict[str, Any]) -> BreakConfig:
        """
        Convert a raw breaks sheet row to a `BreakConfig`.
        """
        return BreakConfig(
            type=BreakType(_to_str(row.get("type")).lower()),
            duration=_to_minutes(row.get("duration")) or 0,
            start_time=_to_minutes(row.get("start_time")),
            end_time=_to_minutes(row.get("end_time")),
            after_work_minutes=_to_minutes(row.get("after_work_minutes")),
            auto_deduct=_to_bool(row.get("auto_deduct"), default=True),
            minutes_difference=_to_bool(row.get("minutes_difference")),
        )
