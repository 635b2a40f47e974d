#!/usr/bin/env python3
"""
File: day_plan_loader.py
Author: Bastian Cerf
Date: 20/09/2026
Description:
    Day plan lookup capability used by the shift detection to resolve
    alternative plans, and by the command line front-end to resolve the
    assigned plan.

    A loader returns `None` for an unknown plan and raises a
    `DayPlanLoaderException` when the plan exists but cannot be read.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

# Internal libraries
from core.calculation.model import DayPlanConfig

logger = logging.getLogger(__name__)

########################################################################
#                    Day plan loader errors declaration                #
########################################################################


class DayPlanLoaderException(Exception):
    """Base type for all exceptions related to day plan loading."""

    def __init__(self, message: str = "Unable to load the day plan."):
        super().__init__(message)


class DayPlanFormatError(DayPlanLoaderException):
    """Custom exception for malformed day plan data."""

    def __init__(self, message: str = "Malformed day plan data."):
        super().__init__(message)


########################################################################
#                        Day plan loader interface                     #
########################################################################


class DayPlanLoader(ABC):
    """
    Provide day plans by identifier.
    """

    @abstractmethod
    def load(self, plan_id: str) -> Optional[DayPlanConfig]:
        """
        Load a day plan.

        Args:
            plan_id (str): Plan identifier.

        Returns:
            Optional[DayPlanConfig]: The plan or `None` if unknown.

        Raises:
            DayPlanLoaderException: The plan exists but cannot be read.
        """
        pass

    def __contains__(self, plan_id: str) -> bool:
        """
        Raises:
            DayPlanLoaderException: The plan exists but cannot be read.
        """
        return self.load(plan_id) is not None


class MemoryDayPlanLoader(DayPlanLoader):
    """
    Loader serving plans from memory.
    """

    def __init__(self, plans: Iterable[DayPlanConfig] = ()):
        self._plans = {plan.plan_id: plan for plan in plans}

    def add(self, plan: DayPlanConfig):
        """
        Add or replace a plan.
        """
        self._plans[plan.plan_id] = plan

    def load(self, plan_id: str) -> Optional[DayPlanConfig]:
        return self._plans.get(plan_id)


class CachedDayPlanLoader(DayPlanLoader):
    """
    Memoize the plans returned by another loader. Misses are cached too,
    failures are not. Meant to live for one calculation batch.
    """

    def __init__(self, loader: DayPlanLoader):
        self._loader = loader
        self._cache: dict[str, Optional[DayPlanConfig]] = {}

    def load(self, plan_id: str) -> Optional[DayPlanConfig]:
        if plan_id not in self._cache:
            self._cache[plan_id] = self._loader.load(plan_id)
            logger.debug(f"Day plan '{plan_id}' cached.")
        return self._cache[plan_id]

    def clear(self):
        self._cache.clear()
