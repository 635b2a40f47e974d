#!/usr/bin/env python3
"""
File: local_config.py
Author: Bastian Cerf
Date: 15/08/2025
Description:
    Read, parse and validate the engine configuration file
    `local_config.ini` against its schema under
    `assets/config/local_config_schema.json`.

    The configuration is loaded once by the bootstrap and handed to the
    services that need it, the calculation engine itself never reads it.

Company: Mecacerf SA
Website: http://mecacerf.ch
Contact: info@mecacerf.ch
"""

# Standard libraries
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional

# Internal libraries
from common.config_parser import ConfigParser

logger = logging.getLogger(__name__)

# The assets folder sits next to the sources folder
ASSETS_PATH = Path(__file__).resolve().parent.parent / "assets"
SCHEMA_FILE_PATH = ASSETS_PATH / "config" / "local_config_schema.json"
CONFIG_FILE_PATH = Path("local_config.ini")


class LocalConfig:
    """
    Engine configuration data, validated against the schema.
    """

    def __init__(
        self,
        path: Optional[str | Path] = None,
        schema: str | Path = SCHEMA_FILE_PATH,
    ):
        """
        Load the configuration file, a default one is created if it
        doesn't exist.

        Args:
            path (Optional[str | Path]): Configuration file path,
                `CONFIG_FILE_PATH` by default.
            schema (str | Path): Schema file path.

        Raises:
            ConfigError: The configuration cannot be loaded.
        """
        self._config_path = Path(path) if path else CONFIG_FILE_PATH
        self._config = ConfigParser(schema, self._config_path, gen_default=True)
        self._view = self._config.get_view()

    @property
    def path(self) -> Path:
        return self._config_path

    def section(self, section: str) -> MappingProxyType[str, Any]:
        """
        Returns:
            MappingProxyType: A read-only view on a data section.
        """
        return self._view[section]

    def show_config(self):
        """
        Log the configuration in use, section by section.
        """
        logger.info(f"Using local configuration '{self._config_path}'.")
        for section, values in self._view.items():
            logger.info(f"Section [{section}] = {dict(values)}")
