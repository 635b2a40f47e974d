#!/usr/bin/env python3
"""
TeamBridge - An open-source timestamping application

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Import general purpose libraries
import sys
import json
import logging
from typing import Optional, Sequence

# Internal libraries
import bootstrap
from common.config_parser import ConfigError
from core.calculation.serialization import bookings_from_json, result_to_dict
from core.day_plans.day_plan_loader import DayPlanLoaderException

logger = logging.getLogger("main")


def run(argv: Optional[Sequence[str]] = None) -> int:
    """
    Calculate the day described by the program arguments and print the
    result as JSON on the standard output.

    Returns:
        int: Program exit code, 0 on success. Problems with the bookings
            are part of the result and don't fail the program.
    """
    args = bootstrap.parse_args(argv)

    try:
        engine = bootstrap.app_bootstrap(args.config)

        with open(args.bookings, encoding="utf-8") as file:
            bookings = bookings_from_json(json.load(file))

        plan = engine.loader.load(args.plan)
        if plan is None:
            logger.error(f"Day plan '{args.plan}' not found.")
            return 1

        result = engine.calculator.calculate(
            bookings,
            plan,
            employee_id=args.employee,
            employee_target_minutes=args.target_minutes,
            is_absence_day=args.absence_day,
        )

    except (ConfigError, DayPlanLoaderException) as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        return 1
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read the bookings '{args.bookings}': {e}")
        return 1

    print(json.dumps(result_to_dict(result), indent=2))
    return 0


# Program entry
if __name__ == "__main__":
    sys.exit(run())
