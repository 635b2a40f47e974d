#!/usr/bin/env python3
"""
File: bootstrap.py
Author: Bastian Cerf
Date: 23/08/2025
Description:
    Day calculation program bootstrap. Parses the program arguments,
    configures the logging module, loads the configuration and builds
    the calculation engine with its day plans source.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import logging, logging.handlers
import argparse
from dataclasses import dataclass
from typing import Optional, Sequence

# Internal libraries
from local_config import LocalConfig, CONFIG_FILE_PATH
from core.calculation.calculator import DailyCalculator
from core.day_plans.day_plan_loader import CachedDayPlanLoader, DayPlanLoader
from core.day_plans.workbook_day_plan_loader import WorkbookDayPlanLoader

logger = logging.getLogger(__name__)


# Logging configuration
LOGGING_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class ColorFormatter(logging.Formatter):
    """
    Custom log formatter that colors only the log level name if the
    terminal supports it.
    """

    COLORS = {
        "DEBUG": "\033[94m",  # Blue
        "INFO": "\033[92m",  # Green
        "WARNING": "\033[93m",  # Yellow
        "ERROR": "\033[91m",  # Red
        "CRITICAL": "\033[41m",  # White on Red
        "RESET": "\033[0m",  # Reset color
    }

    def __init__(self):
        super().__init__(LOGGING_FORMAT)

    def format(self, record: logging.LogRecord):
        # Work on a copy, the record is shared with the file handler
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        record.levelname = f"{color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def configure_logging(level: str = "INFO", file: Optional[str] = None):
    """
    Configure the logging module.

    Logs are printed in the standard error stream. When a file is given
    they are also saved with a time rotating strategy: a new log file is
    created at midnight and they are available up to 7 days.

    Args:
        level (str): Minimal level to log.
        file (Optional[str]): Log file name, `None` to only log in the
            console.
    """
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ColorFormatter())
    handlers: list[logging.Handler] = [console_handler]

    if file:
        handlers.append(
            logging.handlers.TimedRotatingFileHandler(
                filename=file,
                when="midnight",
                interval=1,
                backupCount=7,
                encoding="utf-8",
            )
        )

    # Configure logging once for all modules
    logging.basicConfig(
        level=level,
        format=LOGGING_FORMAT,
        encoding="utf-8",
        handlers=handlers,
        force=True,
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse the program arguments.
    """
    parser = argparse.ArgumentParser(
        description="Mecacerf TeamBridge daily time calculation"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=str(CONFIG_FILE_PATH),
        help=(
            "Path to local configuration file (.ini). "
            "A default file is created if not existing."
        ),
    )
    parser.add_argument(
        "--bookings",
        type=str,
        required=True,
        help="JSON file holding the bookings of the day.",
    )
    parser.add_argument(
        "--plan",
        type=str,
        required=True,
        help="Identifier of the day plan assigned to the day.",
    )
    parser.add_argument(
        "--employee",
        type=str,
        default=None,
        help="Employee identifier, only used in the logs.",
    )
    parser.add_argument(
        "--target-minutes",
        type=int,
        default=None,
        help="Employee target minutes for plans using the employee master data.",
    )
    parser.add_argument(
        "--absence-day",
        action="store_true",
        help="The day is an absence day.",
    )
    return parser.parse_args(argv)


@dataclass(frozen=True)
class Engine:
    """
    Calculation engine ready to use.

    Attributes:
        config (LocalConfig): Loaded configuration.
        loader (DayPlanLoader): Day plans source.
        calculator (DailyCalculator): Configured calculator.
    """

    config: LocalConfig
    loader: DayPlanLoader
    calculator: DailyCalculator


def load_engine(config: LocalConfig) -> Engine:
    """
    Build the calculation engine from the configuration.

    Raises:
        DayPlanLoaderException: The day plans workbook cannot be read.
    """
    plans_conf = config.section("day_plans")
    calc_conf = config.section("calculation")

    loader = CachedDayPlanLoader(
        WorkbookDayPlanLoader(
            plans_conf["workbook"],
            plans_sheet=plans_conf["plans_sheet"],
            breaks_sheet=plans_conf["breaks_sheet"],
        )
    )

    calculator = DailyCalculator(
        plan_loader=loader,
        rounding_relative_to_plan=calc_conf["rounding_relative_to_plan"],
        max_alternatives=calc_conf["max_alternative_plans"],
    )

    return Engine(config, loader, calculator)


def app_bootstrap(config_path: Optional[str] = None) -> Engine:
    """
    Standard program bootstrap. Load the configuration, configure the
    logging module and build the engine.

    Args:
        config_path (Optional[str]): Configuration file path.

    Returns:
        Engine: Engine handle.

    Raises:
        ConfigError: The configuration cannot be loaded.
        DayPlanLoaderException: The day plans cannot be loaded.
    """
    config = LocalConfig(config_path)

    log_conf = config.section("logging")
    configure_logging(log_conf["level"], log_conf["file"])
    logger.info("... TeamBridge Day Calculation Startup ...")
    config.show_config()

    return load_engine(config)
